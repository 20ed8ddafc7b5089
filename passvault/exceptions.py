"""
Vault Errors — Exception taxonomy for the codec and the store.

Every error carries the operation that failed and, when known, the vault
path involved. Filesystem errors are never wrapped: ``OSError`` and its
subclasses reach the caller unchanged.
"""
from typing import Optional, Union
from pathlib import Path


class VaultError(Exception):
    """Base class for all vault errors."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        path: Optional[Union[str, Path]] = None,
    ):
        self.message = message
        self.operation = operation
        self.path = path
        super().__init__(message)

    def __str__(self) -> str:
        parts = []
        if self.operation:
            parts.append(self.operation)
        if self.path:
            parts.append(str(self.path))
        if parts:
            return f"{': '.join(parts)}: {self.message}"
        return self.message


class VaultKeyError(VaultError, ValueError):
    """Master key length is not supported by the configured cipher."""


class EmptyInputError(VaultError, ValueError):
    """A zero-length blob was handed to the codec."""


class MalformedFileError(VaultError, ValueError):
    """Blob is non-empty but too short to hold a nonce."""


class AuthError(VaultError):
    """Authentication tag did not verify: wrong password or corrupted vault."""


class EmptyFileError(VaultError):
    """Vault file exists but holds no secrets yet."""


class FormatError(VaultError, ValueError):
    """A vault item is not valid JSON."""
