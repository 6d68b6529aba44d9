"""Vault error kinds.

Every error raised by the vault core derives from :class:`VaultError`, so
callers can catch the whole family at once while still telling
"locked" apart from "wrong key".
"""
from typing import Optional


class VaultError(Exception):
    """Base class for vault errors."""


class InvalidSalt(VaultError, ValueError):
    """The master key salt could not be decoded from its wire encoding."""


class EncodingError(VaultError, ValueError):
    """Malformed base64 or byte layout on an input blob or wire record."""


class DecryptionFailed(VaultError):
    """AEAD tag verification failed for a field.

    This is the only signal of a wrong master password: the key derived
    from it silently differs and every field fails to authenticate.
    """

    def __init__(self, message: str = "Decryption failed", field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class KeyUnavailable(VaultError, RuntimeError):
    """A cipher operation was attempted while the session is locked."""
