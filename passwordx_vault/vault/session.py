"""
MasterKeySession — In-memory, single-slot holder of the derived master key.

Provides the unlock/lock lifecycle for one running process:
- ``set(key)`` / ``unlock(password, salt)`` — hold a key, replacing any previous one
- ``get()`` — the key, or ``None`` while locked
- ``require()`` — the key, or :class:`KeyUnavailable`
- ``clear()`` / ``lock()`` — destroy the held key

The session is an explicit object handed to whatever needs the key
(the codec, key rotation); there is no module-level key.

Security Note:
    The key is never serialized, persisted, or logged. Swapping the slot is
    a single reference assignment, so a concurrent reader sees either the
    old key or no key.
"""
import time
import logging
from typing import Optional

from ..exceptions import KeyUnavailable
from .config import VaultConfig
from .kdf import DerivedKey, derive_key_async

logger = logging.getLogger("passwordx.vault")


class MasterKeySession:
    """Holds at most one :class:`DerivedKey` for the lifetime of an unlock.

    With ``session_ttl`` configured, the key is dropped once it has not been
    used for that many seconds; the next ``get()`` then reports "locked".
    """

    def __init__(self, config: Optional[VaultConfig] = None):
        self._config = config or VaultConfig()
        self._key: Optional[DerivedKey] = None
        self._last_used: float = 0.0

    @property
    def config(self) -> VaultConfig:
        return self._config

    @property
    def locked(self) -> bool:
        key = self._key
        return key is None or key.destroyed or self._expired()

    def _expired(self) -> bool:
        ttl = self._config.session_ttl
        if ttl is None:
            return False
        return (time.monotonic() - self._last_used) > ttl

    # ------------------------------------------------------------------
    # Slot operations
    # ------------------------------------------------------------------

    def set(self, key: DerivedKey) -> None:
        """Hold ``key``, destroying the previously held key if any."""
        if key.destroyed:
            raise ValueError("Cannot hold a destroyed key")
        previous = self._key
        self._last_used = time.monotonic()
        self._key = key
        if previous is not None and previous is not key:
            previous.destroy()
        logger.debug("Master key session unlocked")

    def get(self) -> Optional[DerivedKey]:
        """Return the held key, or ``None`` when locked."""
        key = self._key
        if key is None:
            return None
        if key.destroyed:
            self._key = None
            return None
        if self._expired():
            logger.info("Master key session expired after %ss idle", self._config.session_ttl)
            self.clear()
            return None
        self._last_used = time.monotonic()
        return key

    def require(self) -> DerivedKey:
        """Return the held key.

        Raises:
            KeyUnavailable: If the session is locked.
        """
        key = self.get()
        if key is None:
            raise KeyUnavailable("Vault is locked: no master key in session")
        return key

    def clear(self) -> None:
        """Drop and overwrite the held key. Safe to call when already locked."""
        key, self._key = self._key, None
        if key is not None:
            key.destroy()
            logger.debug("Master key session cleared")

    lock = clear

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def unlock(self, password: str, salt_b64: str) -> DerivedKey:
        """Derive the key from the master password and hold it.

        A wrong password is not detected here; it surfaces as
        ``DecryptionFailed`` on the first decrypt.

        Raises:
            InvalidSalt: If ``salt_b64`` cannot be decoded.
        """
        key = await derive_key_async(
            password,
            salt_b64,
            backend=self._config.cipher_backend,
            offload=self._config.offload_crypto,
        )
        self.set(key)
        return key

    async def __aenter__(self) -> "MasterKeySession":
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.clear()

    def __repr__(self) -> str:
        state = "locked" if self.locked else "unlocked"
        return f"<MasterKeySession {state}>"
