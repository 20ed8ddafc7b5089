"""
Vault Crypto Core — Key preparation and AEAD sealing of the vault blob.

The whole vault plaintext is sealed as a single blob:
    [nonce 12B][encrypted_payload + tag 16B]

Every seal draws a fresh random nonce, so an append re-seals the full merged
plaintext instead of extending the existing ciphertext.

Security Note:
    Never log plaintext, ciphertext or key material.
    Nonces are random 96-bit; collision probability negligible under normal usage.
"""
import os
import logging

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF
from cryptography.hazmat.primitives.ciphers.aead import AESGCM, ChaCha20Poly1305

from .exceptions import (
    AuthError,
    EmptyInputError,
    MalformedFileError,
    VaultKeyError,
)

logger = logging.getLogger("passvault")

NONCE_SIZE = 12  # 96-bit nonce
TAG_SIZE = 16  # 128-bit authentication tag
KEY_LENGTH = 32  # derived key length (hkdf mode)

_HKDF_INFO = b"passvault-master-key"

CIPHERS = {
    "aesgcm": AESGCM,
    "chacha20": ChaCha20Poly1305,
}

KEY_SIZES = {
    "aesgcm": (16, 24, 32),
    "chacha20": (32,),
}

KEY_MODES = ("raw", "hkdf")


# ---------------------------------------------------------------------------
# Key handling
# ---------------------------------------------------------------------------

def derive_key(seed: bytes) -> bytes:
    """Derive a 32-byte key from the master password using HKDF-SHA256.

    This is a fixed-output-length transform, not a password-hardening KDF.

    Args:
        seed: Raw master password bytes.

    Returns:
        32-byte derived key.
    """
    hkdf = HKDF(
        algorithm=hashes.SHA256(),
        length=KEY_LENGTH,
        salt=None,
        info=_HKDF_INFO,
    )
    return hkdf.derive(seed)


def validate_key(key: bytes, backend: str = "aesgcm") -> bytes:
    """Check that ``key`` has a length the cipher backend accepts.

    Raises:
        VaultKeyError: If the length is not supported.
    """
    sizes = KEY_SIZES[backend]
    if len(key) not in sizes:
        raise VaultKeyError(
            f"key must be {'/'.join(str(s) for s in sizes)} bytes "
            f"for {backend}, got {len(key)}",
            operation="key",
        )
    return key


def prepare_key(password, mode: str = "raw", backend: str = "aesgcm") -> bytes:
    """Turn a master password into a cipher key.

    ``raw`` uses the password's UTF-8 bytes directly, so the password length
    must be a supported key size. ``hkdf`` maps any non-empty password to a
    32-byte key.

    Raises:
        VaultKeyError: If the resulting key is not usable.
    """
    if isinstance(password, str):
        password = password.encode("utf-8")
    if mode not in KEY_MODES:
        raise ValueError(f"Unsupported key mode: {mode}")
    if mode == "hkdf":
        if not password:
            raise VaultKeyError("master password cannot be empty", operation="key")
        password = derive_key(password)
    return validate_key(password, backend)


def _cipher(key: bytes, backend: str):
    try:
        cipher_cls = CIPHERS[backend]
    except KeyError:
        raise ValueError(f"Unsupported cipher backend: {backend}") from None
    return cipher_cls(validate_key(key, backend))


# ---------------------------------------------------------------------------
# Seal / open
# ---------------------------------------------------------------------------

def seal(key: bytes, plaintext: bytes, backend: str = "aesgcm") -> bytes:
    """Encrypt and authenticate a plaintext blob.

    Format: [nonce 12B][encrypted_payload + tag 16B]

    Args:
        key: Raw cipher key (16/24/32 bytes for AES-GCM, 32 for ChaCha20).
        plaintext: Data to encrypt.
        backend: ``aesgcm`` or ``chacha20``.

    Returns:
        nonce-prefixed ciphertext bytes.

    Raises:
        VaultKeyError: If the key length is unsupported.
    """
    cipher = _cipher(key, backend)
    nonce = os.urandom(NONCE_SIZE)
    ct = cipher.encrypt(nonce, plaintext, None)
    return nonce + ct


def open_blob(key: bytes, blob: bytes, backend: str = "aesgcm") -> bytes:
    """Verify and decrypt a nonce-prefixed blob produced by :func:`seal`.

    Args:
        key: Raw cipher key.
        blob: Bytes in format [nonce 12B][payload+tag].
        backend: ``aesgcm`` or ``chacha20``.

    Returns:
        Decrypted plaintext bytes.

    Raises:
        EmptyInputError: If ``blob`` is empty.
        MalformedFileError: If ``blob`` is shorter than the nonce.
        AuthError: If the tag does not verify.
        VaultKeyError: If the key length is unsupported.
    """
    if not blob:
        raise EmptyInputError("cannot open an empty blob", operation="open")
    if len(blob) < NONCE_SIZE:
        raise MalformedFileError(
            f"blob too short: {len(blob)} bytes (minimum nonce {NONCE_SIZE})",
            operation="open",
        )
    cipher = _cipher(key, backend)
    nonce = blob[:NONCE_SIZE]
    ct = blob[NONCE_SIZE:]
    if len(ct) < TAG_SIZE:
        raise AuthError(
            "ciphertext shorter than authentication tag", operation="open"
        )
    try:
        return cipher.decrypt(nonce, ct, None)
    except InvalidTag:
        raise AuthError(
            "authentication failed: wrong password or corrupted vault",
            operation="open",
        ) from None
