"""PasswordX Vault.

Zero-knowledge credential vault core: the master password is turned into a
key on the client, every credential field is encrypted before it leaves
the device, and the key only ever lives in an in-memory session.
"""
from .version import __version__
from .exceptions import (
    VaultError,
    InvalidSalt,
    EncodingError,
    DecryptionFailed,
    KeyUnavailable,
)
from .models import CredentialRecord, EncryptedCredential, DecodeResult
from .generator import CharClasses, generate_password, estimate_strength, strength_label
from .vault import (
    VaultConfig,
    FailurePolicy,
    DerivedKey,
    MasterKeySession,
    CredentialCodec,
    derive_key,
    generate_salt,
    encrypt_field,
    decrypt_field,
)

__all__ = (
    "__version__",
    "VaultError",
    "InvalidSalt",
    "EncodingError",
    "DecryptionFailed",
    "KeyUnavailable",
    "CredentialRecord",
    "EncryptedCredential",
    "DecodeResult",
    "CharClasses",
    "generate_password",
    "estimate_strength",
    "strength_label",
    "VaultConfig",
    "FailurePolicy",
    "DerivedKey",
    "MasterKeySession",
    "CredentialCodec",
    "derive_key",
    "generate_salt",
    "encrypt_field",
    "decrypt_field",
)
