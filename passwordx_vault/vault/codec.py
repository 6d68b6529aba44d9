"""
CredentialCodec — Maps decrypted credential records to wire records and back.

- ``to_wire(record)`` — encrypt each present secret field independently
- ``from_wire(wire)`` — decrypt one wire record
- ``from_wire_many(batch)`` — decrypt a batch concurrently, in input order

A field that fails to decrypt never aborts the batch. The configured
:class:`FailurePolicy` decides, for every record alike, whether the field
is replaced by a placeholder or the whole record is skipped. Either way
the counts are reported in :class:`DecodeResult`.

Security Note:
    Never log plaintext or ciphertext values. Only log credential ids,
    field names and counts.
"""
import asyncio
import logging
from typing import Optional, Union
from collections.abc import Iterable

from ..exceptions import DecryptionFailed, EncodingError
from ..models import (
    REQUIRED_FIELDS,
    SECRET_FIELDS,
    CredentialRecord,
    DecodeResult,
    EncryptedCredential,
    wire_name,
)
from .config import FailurePolicy, VaultConfig
from .crypto import decrypt_field, encrypt_field
from .kdf import DerivedKey
from .session import MasterKeySession

logger = logging.getLogger("passwordx.vault")

WireInput = Union[EncryptedCredential, dict]

# Sentinel for a field that failed under the current key.
_FAILED = object()


class CredentialCodec:
    """Encrypts and decrypts credentials with the session's master key.

    The key is read from the session at the start of every call, so a
    locked session raises :class:`KeyUnavailable` instead of producing an
    empty result.
    """

    def __init__(
        self,
        session: MasterKeySession,
        config: Optional[VaultConfig] = None,
    ):
        self._session = session
        self._config = config or session.config

    @property
    def policy(self) -> FailurePolicy:
        return self._config.failure_policy

    async def _run(self, func, *args):
        if self._config.offload_crypto:
            return await asyncio.to_thread(func, *args)
        return func(*args)

    # ------------------------------------------------------------------
    # Encryption direction
    # ------------------------------------------------------------------

    async def to_wire(self, record: CredentialRecord) -> EncryptedCredential:
        """Encrypt a record's secret fields into a wire record.

        Optional fields that are absent or empty stay absent on the wire.
        A record that still carries placeholder fields is refused, since
        saving it would replace the stored ciphertext with the placeholder.

        Raises:
            KeyUnavailable: If the session is locked.
            EncodingError: If the record has ``failed_fields``.
        """
        if record.failed_fields:
            raise EncodingError(
                f"Credential {record.id!r} has undecryptable fields "
                f"{record.failed_fields!r}; refusing to re-encrypt placeholders"
            )
        key = self._session.require()
        names = [
            name for name in SECRET_FIELDS
            if getattr(record, name) or name in REQUIRED_FIELDS
        ]
        blobs = await asyncio.gather(*(
            self._run(encrypt_field, getattr(record, name), key)
            for name in names
        ))
        values = {wire_name(name): blob for name, blob in zip(names, blobs)}
        return EncryptedCredential(
            id=record.id,
            vault_id=record.vault_id,
            category=record.category,
            favicon=record.favicon,
            **values,
        )

    # ------------------------------------------------------------------
    # Decryption direction
    # ------------------------------------------------------------------

    async def _decrypt_one(
        self, cred_id, name: str, blob: str, key: DerivedKey
    ):
        try:
            return await self._run(decrypt_field, blob, key)
        except (DecryptionFailed, EncodingError) as err:
            logger.warning(
                "Failed to decrypt field=%s of credential id=%s: %s",
                name, cred_id, type(err).__name__,
            )
            return _FAILED

    async def _decode(
        self, wire: EncryptedCredential, key: DerivedKey
    ) -> CredentialRecord:
        fields = wire.encrypted_fields()
        values = await asyncio.gather(*(
            self._decrypt_one(wire.id, name, blob, key)
            for name, blob in fields.items()
        ))
        data = wire.metadata()
        failed = []
        for name, value in zip(fields, values):
            if value is _FAILED:
                failed.append(name)
                data[name] = self._config.placeholder
            else:
                data[name] = value
        return CredentialRecord(failed_fields=failed, **data)

    async def from_wire(self, wire: WireInput) -> CredentialRecord:
        """Decrypt a single wire record.

        Under the placeholder policy, failing fields carry the placeholder
        and are listed in ``failed_fields``. Under the skip policy, the first
        failing field is raised.

        Raises:
            KeyUnavailable: If the session is locked.
            EncodingError: If the wire record is malformed.
            DecryptionFailed: Under the skip policy, if any field fails.
        """
        key = self._session.require()
        record = await self._decode(EncryptedCredential.parse(wire), key)
        if record.failed_fields and self.policy is FailurePolicy.SKIP:
            raise DecryptionFailed(
                f"Credential {record.id!r} could not be decrypted",
                field=record.failed_fields[0],
            )
        return record

    async def from_wire_many(self, batch: Iterable[WireInput]) -> DecodeResult:
        """Decrypt a batch of wire records concurrently.

        Output order matches input order whatever the completion order.

        Raises:
            KeyUnavailable: If the session is locked.
            EncodingError: If a wire record is malformed.
        """
        key = self._session.require()
        wires = [EncryptedCredential.parse(item) for item in batch]
        records = await asyncio.gather(*(
            self._decode(wire, key) for wire in wires
        ))
        result = DecodeResult()
        for record in records:
            if not record.failed_fields:
                result.credentials.append(record)
                continue
            if self.policy is FailurePolicy.SKIP:
                result.skipped += 1
                continue
            result.failed += 1
            result.failed_fields += len(record.failed_fields)
            result.credentials.append(record)
        logger.info(
            "Decoded %d credential(s), %d failed, %d skipped (policy=%s)",
            len(result.credentials), result.failed, result.skipped,
            self.policy.value,
        )
        return result
