"""
Vault Configuration — Cipher backend, failure policy and session settings.

Reads settings from environment variables:
    VAULT_CIPHER_BACKEND = aesgcm | chacha20
    VAULT_FAILURE_POLICY = placeholder | skip
    VAULT_PLACEHOLDER    = <text shown for undecryptable fields>
    VAULT_SESSION_TTL    = <idle seconds before the master key is dropped>
    VAULT_OFFLOAD_CRYPTO = true | false

Key derivation parameters are not configurable: every client of the same
account must derive the same key from the same master password.

Security Note:
    Never log key material. Only log backend and policy names.
"""
import os
import logging
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger("passwordx.vault")

DEFAULT_PLACEHOLDER = "[decryption failed]"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})


class FailurePolicy(str, Enum):
    """How the codec reacts to a field that fails to decrypt."""

    PLACEHOLDER = "placeholder"
    SKIP = "skip"


class VaultConfig(BaseModel):
    """Validated vault configuration."""

    cipher_backend: str = Field(default="aesgcm")
    failure_policy: FailurePolicy = Field(default=FailurePolicy.PLACEHOLDER)
    placeholder: str = Field(default=DEFAULT_PLACEHOLDER, min_length=1)
    session_ttl: Optional[int] = Field(default=None, ge=60)
    offload_crypto: bool = Field(default=False)

    @field_validator("cipher_backend")
    @classmethod
    def validate_cipher(cls, v: str) -> str:
        """Validate cipher backend is supported."""
        v = v.lower()
        if v not in ("aesgcm", "chacha20"):
            raise ValueError(f"Unsupported cipher backend: {v}")
        return v

    @classmethod
    def from_env(cls) -> "VaultConfig":
        """Create VaultConfig by loading values from environment.

        Returns:
            Populated VaultConfig instance.
        """
        values: dict = {
            "cipher_backend": os.environ.get("VAULT_CIPHER_BACKEND", "aesgcm"),
            "failure_policy": os.environ.get(
                "VAULT_FAILURE_POLICY", FailurePolicy.PLACEHOLDER.value
            ).lower(),
            "offload_crypto": os.environ.get(
                "VAULT_OFFLOAD_CRYPTO", ""
            ).lower() in _TRUE_VALUES,
        }
        placeholder = os.environ.get("VAULT_PLACEHOLDER")
        if placeholder:
            values["placeholder"] = placeholder
        ttl = os.environ.get("VAULT_SESSION_TTL")
        if ttl:
            values["session_ttl"] = int(ttl)
        config = cls(**values)
        logger.debug(
            "Vault config: backend=%s policy=%s ttl=%s offload=%s",
            config.cipher_backend, config.failure_policy.value,
            config.session_ttl, config.offload_crypto,
        )
        return config
