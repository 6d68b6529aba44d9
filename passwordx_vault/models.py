"""Credential models: decrypted records, wire records and batch results."""
from typing import Any, Optional, Union

import orjson
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .exceptions import EncodingError

# Fields encrypted one by one; each maps to ``<name>_encrypted`` on the wire.
SECRET_FIELDS = ("title", "url", "username", "password", "notes")
REQUIRED_FIELDS = frozenset({"title", "password"})
# Plaintext metadata carried through untouched.
METADATA_FIELDS = ("id", "vault_id", "category", "favicon")

CredentialId = Union[int, str]


def wire_name(field: str) -> str:
    return f"{field}_encrypted"


class CredentialRecord(BaseModel):
    """Decrypted view of a credential.

    Lives in memory only, for as long as the caller displays it.
    ``failed_fields`` lists the fields that hold a placeholder instead of
    their decrypted value.
    """

    id: Optional[CredentialId] = None
    vault_id: Optional[int] = None
    title: str
    url: Optional[str] = None
    username: Optional[str] = None
    password: str
    notes: Optional[str] = None
    category: Optional[str] = None
    favicon: Optional[str] = None
    failed_fields: list[str] = Field(default_factory=list)

    @property
    def intact(self) -> bool:
        return not self.failed_fields

    def __repr__(self) -> str:
        return (
            f"<CredentialRecord id={self.id!r} "
            f"failed_fields={self.failed_fields!r}>"
        )

    __str__ = __repr__


class EncryptedCredential(BaseModel):
    """Credential as exchanged with the server: every secret field is an
    independently encrypted blob, absent optional fields are omitted."""

    model_config = ConfigDict(extra="ignore")

    id: Optional[CredentialId] = None
    vault_id: Optional[int] = None
    title_encrypted: str
    url_encrypted: Optional[str] = None
    username_encrypted: Optional[str] = None
    password_encrypted: str
    notes_encrypted: Optional[str] = None
    category: Optional[str] = None
    favicon: Optional[str] = None

    def encrypted_fields(self) -> dict[str, str]:
        """Map of field name to blob, for the fields present on the wire."""
        fields = {}
        for name in SECRET_FIELDS:
            blob = getattr(self, wire_name(name))
            if blob is not None:
                fields[name] = blob
        return fields

    def metadata(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in METADATA_FIELDS}

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)

    @classmethod
    def parse(cls, data: Union["EncryptedCredential", dict]) -> "EncryptedCredential":
        """Validate a wire mapping.

        Raises:
            EncodingError: If a mandatory field is missing or a value has
                the wrong type.
        """
        if isinstance(data, cls):
            return data
        try:
            return cls.model_validate(data)
        except ValidationError as err:
            raise EncodingError(f"Malformed credential record: {err}") from err


class DecodeResult(BaseModel):
    """Outcome of decoding a batch, in input order.

    ``skipped`` counts records dropped under the skip policy; ``failed``
    counts records kept with at least one placeholder field, and
    ``failed_fields`` the placeholder fields across the batch.
    """

    credentials: list[CredentialRecord] = Field(default_factory=list)
    skipped: int = 0
    failed: int = 0
    failed_fields: int = 0

    @property
    def total(self) -> int:
        return len(self.credentials) + self.skipped


# ---------------------------------------------------------------------------
# JSON wire helpers
# ---------------------------------------------------------------------------

def to_json(wire: Union[EncryptedCredential, list[EncryptedCredential]]) -> bytes:
    """Serialize one or many wire records with orjson."""
    if isinstance(wire, list):
        return orjson.dumps([w.to_wire() for w in wire])
    return orjson.dumps(wire.to_wire())


def from_json(data: Union[bytes, str]) -> Union[EncryptedCredential, list[EncryptedCredential]]:
    """Parse one wire record, or a JSON array of them.

    Raises:
        EncodingError: If the payload is not JSON or a record is malformed.
    """
    try:
        parsed = orjson.loads(data)
    except orjson.JSONDecodeError as err:
        raise EncodingError("Credential payload is not valid JSON") from err
    if isinstance(parsed, list):
        return [EncryptedCredential.parse(item) for item in parsed]
    return EncryptedCredential.parse(parsed)
