"""Credential Vault — Client-side encryption of credential fields.

Security Note (Threat Model):
    The server stores only per-field ciphertext and the per-user salt.
    The derived master key and decrypted fields live in process memory
    while the session is unlocked. A memory dump of the process during
    that window exposes them; this is an accepted limitation.
"""

from .config import VaultConfig, FailurePolicy
from .kdf import DerivedKey, derive_key, derive_key_async, generate_salt
from .crypto import encrypt_field, decrypt_field
from .session import MasterKeySession
from .codec import CredentialCodec
from .key_rotation import rekey_credentials, change_master_password
from .lookup import match_url, sort_by_url, search

__all__ = [
    "VaultConfig",
    "FailurePolicy",
    "DerivedKey",
    "derive_key",
    "derive_key_async",
    "generate_salt",
    "encrypt_field",
    "decrypt_field",
    "MasterKeySession",
    "CredentialCodec",
    "rekey_credentials",
    "change_master_password",
    "match_url",
    "sort_by_url",
    "search",
]
