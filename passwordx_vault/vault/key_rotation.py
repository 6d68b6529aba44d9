"""
Vault Key Rotation — Re-encryption of credentials on master password change.

Every secret field of every record is decrypted with the old derived key and
encrypted again, with a fresh nonce, under the new one. Records are processed
in configurable batches. With ``offload`` the field crypto of a batch runs
concurrently in worker threads; otherwise it runs inline, one record after
another.

A record with any field that fails under the old key is left out of the
output and counted in ``errors``: re-encrypting a placeholder would destroy
the original ciphertext for good.

Security Note:
    Plaintext exists in memory only during re-encryption of each record.
    Never log plaintext or ciphertext values.
"""
import asyncio
import logging
from typing import Optional
from collections.abc import Iterable

from ..exceptions import DecryptionFailed, EncodingError
from ..models import EncryptedCredential, wire_name
from .crypto import decrypt_field, encrypt_field
from .kdf import DerivedKey, derive_key_async
from .session import MasterKeySession

logger = logging.getLogger("passwordx.vault")


async def _rekey_one(
    wire: EncryptedCredential,
    old_key: DerivedKey,
    new_key: DerivedKey,
    offload: bool = False,
) -> EncryptedCredential:
    values = {}
    for name, blob in wire.encrypted_fields().items():
        if offload:
            plaintext = await asyncio.to_thread(decrypt_field, blob, old_key)
            values[wire_name(name)] = await asyncio.to_thread(
                encrypt_field, plaintext, new_key,
            )
        else:
            plaintext = decrypt_field(blob, old_key)
            values[wire_name(name)] = encrypt_field(plaintext, new_key)
    return wire.model_copy(update=values)


async def rekey_credentials(
    batch: Iterable,
    old_key: DerivedKey,
    new_key: DerivedKey,
    batch_size: int = 100,
    offload: bool = False,
) -> tuple[list[EncryptedCredential], dict]:
    """Re-encrypt wire records from ``old_key`` to ``new_key``.

    Args:
        batch: Wire records (models or mappings) encrypted under ``old_key``.
        old_key: Key derived from the current master password.
        new_key: Key derived from the new master password.
        batch_size: Number of records gathered per batch.
        offload: Run field crypto in worker threads so the records of a
            batch overlap instead of running inline.

    Returns:
        Tuple of (re-encrypted records in input order, stats dict with keys:
        total, rotated, errors).

    Raises:
        ValueError: If ``batch_size`` is not positive.
        EncodingError: If a wire record is malformed.
    """
    if batch_size < 1:
        raise ValueError("batch_size must be positive")
    wires = [EncryptedCredential.parse(item) for item in batch]
    stats = {"total": len(wires), "rotated": 0, "errors": 0}
    rotated: list[EncryptedCredential] = []

    logger.info(
        "Starting credential re-key of %d record(s) (batch_size=%d)",
        len(wires), batch_size,
    )

    for offset in range(0, len(wires), batch_size):
        chunk = wires[offset:offset + batch_size]
        logger.debug(
            "Processing batch %d (%d records)",
            (offset // batch_size) + 1, len(chunk),
        )
        results = await asyncio.gather(
            *(_rekey_one(wire, old_key, new_key, offload) for wire in chunk),
            return_exceptions=True,
        )
        for wire, result in zip(chunk, results):
            if isinstance(result, (DecryptionFailed, EncodingError)):
                logger.error(
                    "Error re-keying credential id=%s: %s",
                    wire.id, type(result).__name__,
                )
                stats["errors"] += 1
            elif isinstance(result, BaseException):
                raise result
            else:
                rotated.append(result)
                stats["rotated"] += 1

    logger.info("Credential re-key complete: %s", stats)
    return rotated, stats


async def change_master_password(
    batch: Iterable,
    old_key: DerivedKey,
    new_password: str,
    salt_b64: str,
    session: Optional[MasterKeySession] = None,
) -> tuple[DerivedKey, list[EncryptedCredential], dict]:
    """Derive a key for ``new_password`` and re-key ``batch`` under it.

    When a session is given and every record was re-keyed, the session is
    switched to the new key. On any error the session keeps the old key,
    since the server still holds records only the old key can open.
    """
    backend = old_key.backend
    offload = session.config.offload_crypto if session is not None else False
    new_key = await derive_key_async(new_password, salt_b64, backend, offload)
    rotated, stats = await rekey_credentials(batch, old_key, new_key, offload=offload)
    if session is not None and stats["errors"] == 0:
        session.set(new_key)
    return new_key, rotated, stats
