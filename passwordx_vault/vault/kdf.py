"""
Vault Key Derivation — Master password + server salt → 256-bit field key.

PBKDF2-HMAC-SHA256, 100 000 iterations, 32-byte output. The parameters are
shared with the browser clients, which derive the same key through
WebCrypto, so they are fixed constants rather than settings.

Security Note:
    Never log the master password or derived key bytes.
    A wrong master password cannot be detected here; it yields a valid
    looking key that fails authentication on the first field decrypt.
"""
import asyncio
import base64
import binascii
import hmac
import logging
import secrets

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from ..exceptions import InvalidSalt, KeyUnavailable

logger = logging.getLogger("passwordx.vault")

PBKDF2_ITERATIONS = 100_000
KEY_LENGTH = 32  # AES-256
SALT_SIZE = 32


class DerivedKey:
    """Symmetric key material held in a mutable buffer.

    The buffer is overwritten by :meth:`destroy`, after which any access to
    :attr:`material` raises :class:`KeyUnavailable`. The repr never shows
    key bytes.
    """

    __slots__ = ("_material", "backend")

    def __init__(self, material: bytes, backend: str = "aesgcm") -> None:
        if len(material) != KEY_LENGTH:
            raise ValueError(
                f"Derived key must be {KEY_LENGTH} bytes, got {len(material)}"
            )
        self._material = bytearray(material)
        self.backend = backend

    @property
    def material(self) -> bytes:
        if not self._material:
            raise KeyUnavailable("Derived key has been destroyed")
        return bytes(self._material)

    @property
    def destroyed(self) -> bool:
        return not self._material

    def destroy(self) -> None:
        """Overwrite the key buffer and release it."""
        for i in range(len(self._material)):
            self._material[i] = 0
        self._material = bytearray()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DerivedKey):
            return NotImplemented
        if self.destroyed or other.destroyed:
            return False
        return self.backend == other.backend and hmac.compare_digest(
            self._material, other._material
        )

    __hash__ = None

    def __repr__(self) -> str:
        state = "destroyed" if self.destroyed else "live"
        return f"<DerivedKey backend={self.backend} {state}>"


def decode_salt(salt_b64: str) -> bytes:
    """Decode the server-issued ``master_key_salt`` to raw bytes.

    Raises:
        InvalidSalt: If the salt is empty or not valid base64.
    """
    if not salt_b64:
        raise InvalidSalt("Master key salt is empty")
    try:
        salt = base64.b64decode(salt_b64, validate=True)
    except (binascii.Error, ValueError, TypeError) as err:
        raise InvalidSalt("Master key salt is not valid base64") from err
    if not salt:
        raise InvalidSalt("Master key salt decodes to zero bytes")
    return salt


def generate_salt() -> str:
    """Return a random 32-byte salt, base64 encoded for the user record."""
    return base64.b64encode(secrets.token_bytes(SALT_SIZE)).decode("ascii")


def derive_key(password: str, salt_b64: str, backend: str = "aesgcm") -> DerivedKey:
    """Derive the field encryption key from a master password.

    Deterministic: the same (password, salt) always yields the same key,
    which is what lets the key be re-derived on every unlock instead of
    being stored.

    Args:
        password: Master password as typed by the user.
        salt_b64: Base64 ``master_key_salt`` from the user record.
        backend: AEAD backend the key will be used with.

    Returns:
        A :class:`DerivedKey`.

    Raises:
        InvalidSalt: If ``salt_b64`` cannot be decoded.
    """
    salt = decode_salt(salt_b64)
    kdf = PBKDF2HMAC(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=salt,
        iterations=PBKDF2_ITERATIONS,
    )
    key = DerivedKey(kdf.derive(password.encode("utf-8")), backend=backend)
    logger.debug("Derived master key (backend=%s)", backend)
    return key


async def derive_key_async(
    password: str,
    salt_b64: str,
    backend: str = "aesgcm",
    offload: bool = False,
) -> DerivedKey:
    """Awaitable :func:`derive_key`.

    Runs inline unless ``offload`` is set, in which case the derivation
    runs in the default thread pool so the event loop stays responsive.
    The derivation either completes or fails; it cannot be cancelled halfway.
    """
    if offload:
        return await asyncio.to_thread(derive_key, password, salt_b64, backend)
    return derive_key(password, salt_b64, backend)
