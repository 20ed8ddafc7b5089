"""passvault — Local encrypted credential vault.

Security Note (Threat Model):
    The master password is used directly as the cipher key unless the
    ``hkdf`` key mode is configured; neither mode is a slow password hash.
    Decrypted items exist in process memory while an operation runs.
    A single process is assumed: there is no locking between writers.
"""

from .version import __version__
from .config import VaultConfig, ITEM_SEPARATOR
from .crypto import seal, open_blob, prepare_key
from .store import VaultStore
from .exceptions import (
    VaultError,
    VaultKeyError,
    EmptyInputError,
    MalformedFileError,
    AuthError,
    EmptyFileError,
    FormatError,
)

__all__ = [
    "__version__",
    "VaultStore",
    "VaultConfig",
    "ITEM_SEPARATOR",
    "seal",
    "open_blob",
    "prepare_key",
    "VaultError",
    "VaultKeyError",
    "EmptyInputError",
    "MalformedFileError",
    "AuthError",
    "EmptyFileError",
    "FormatError",
]
