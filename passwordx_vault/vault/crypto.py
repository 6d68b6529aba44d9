"""
Vault Crypto Core — Per-field authenticated encryption.

Each credential field is its own blob:
    base64( [nonce 12B][encrypted_payload + tag 16B] )

The nonce-first layout is shared with the browser clients (WebCrypto
AES-GCM), so it must not change.

Security Note:
    Never log plaintext or ciphertext values.
    Nonces are random 96-bit drawn per call; a static nonce is never used.
"""
import os
import base64
import binascii
import logging

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM, ChaCha20Poly1305

from ..exceptions import DecryptionFailed, EncodingError
from .kdf import DerivedKey

logger = logging.getLogger("passwordx.vault")

NONCE_SIZE = 12  # 96-bit nonce
TAG_SIZE = 16

_CIPHERS = {
    "aesgcm": AESGCM,
    "chacha20": ChaCha20Poly1305,
}


def get_cipher_cls(backend: str) -> type:
    """Return the AEAD cipher class for a backend name."""
    try:
        return _CIPHERS[backend]
    except KeyError:
        raise ValueError(f"Unsupported cipher backend: {backend}") from None


def _cipher(key: DerivedKey):
    return get_cipher_cls(key.backend)(key.material)


# ---------------------------------------------------------------------------
# Blob layout
# ---------------------------------------------------------------------------

def pack_blob(nonce: bytes, ciphertext: bytes) -> str:
    """Concatenate nonce and ciphertext+tag and base64 encode the result."""
    return base64.b64encode(nonce + ciphertext).decode("ascii")


def unpack_blob(blob: str) -> tuple[bytes, bytes]:
    """Split an encrypted field into ``(nonce, ciphertext+tag)``.

    Raises:
        EncodingError: If the blob is not base64 or is too short to hold
            a nonce and a tag.
    """
    if not isinstance(blob, str):
        raise EncodingError(
            f"Encrypted field must be a string, got {type(blob).__name__}"
        )
    try:
        raw = base64.b64decode(blob, validate=True)
    except (binascii.Error, ValueError) as err:
        raise EncodingError("Encrypted field is not valid base64") from err
    _min = NONCE_SIZE + TAG_SIZE
    if len(raw) < _min:
        raise EncodingError(
            f"Encrypted field too short: {len(raw)} bytes (minimum {_min})"
        )
    return raw[:NONCE_SIZE], raw[NONCE_SIZE:]


# ---------------------------------------------------------------------------
# Field encryption
# ---------------------------------------------------------------------------

def encrypt_field(plaintext: str, key: DerivedKey) -> str:
    """Encrypt a single credential field.

    Args:
        plaintext: Field value.
        key: Derived master key.

    Returns:
        EncryptedField string (base64 of nonce + ciphertext + tag).
    """
    cipher = _cipher(key)
    nonce = os.urandom(NONCE_SIZE)
    ct = cipher.encrypt(nonce, plaintext.encode("utf-8"), None)
    return pack_blob(nonce, ct)


def decrypt_field(blob: str, key: DerivedKey) -> str:
    """Decrypt a single credential field.

    Args:
        blob: EncryptedField string produced by :func:`encrypt_field`.
        key: Derived master key.

    Returns:
        Decrypted field value.

    Raises:
        EncodingError: If the blob layout is malformed, or the authenticated
            plaintext is not UTF-8.
        DecryptionFailed: If tag verification fails (wrong key or tampering).
    """
    nonce, ct = unpack_blob(blob)
    cipher = _cipher(key)
    try:
        data = cipher.decrypt(nonce, ct, None)
    except InvalidTag as err:
        raise DecryptionFailed(
            "Decryption failed: wrong master key or corrupted field"
        ) from err
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError as err:
        raise EncodingError("Decrypted field is not valid UTF-8") from err
