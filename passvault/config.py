"""
Vault Configuration — File locations and cipher settings.

Reads optional overrides from environment variables:
    PASSVAULT_HOME = <directory holding the vault and backup, default ~/.passvault>
    PASSVAULT_VAULT_FILE = <vault file path>
    PASSVAULT_BACKUP_FILE = <backup file path>
    PASSVAULT_EXPORT_FILE = <export file path, default ./passvault_export.json>
    PASSVAULT_CIPHER_BACKEND = aesgcm | chacha20
    PASSVAULT_KEY_MODE = raw | hkdf

Security Note:
    The master password is never part of the configuration.
"""
import os
import logging
from pathlib import Path

from pydantic import BaseModel, Field, field_validator, model_validator

logger = logging.getLogger("passvault")

VAULT_DIRNAME = ".passvault"
VAULT_FILENAME = "vault.bin"
BACKUP_FILENAME = "vault.bin.bak"
EXPORT_FILENAME = "passvault_export.json"

# ASCII record separator: raw control characters never appear in valid JSON
# text, so it cannot collide with the contents of an item.
ITEM_SEPARATOR = "\x1e"

_JSON_TOKEN_CHARS = set(' \t\r\n{}[]:,"')


def default_vault_dir() -> Path:
    """Return the directory that holds the vault and backup files."""
    return Path(os.environ.get("PASSVAULT_HOME") or Path.home() / VAULT_DIRNAME)


class VaultConfig(BaseModel):
    """Validated vault configuration."""

    vault_path: Path = Field(
        default_factory=lambda: default_vault_dir() / VAULT_FILENAME
    )
    backup_path: Path = Field(
        default_factory=lambda: default_vault_dir() / BACKUP_FILENAME
    )
    export_path: Path = Field(default_factory=lambda: Path(EXPORT_FILENAME))
    separator: str = Field(default=ITEM_SEPARATOR)
    cipher_backend: str = Field(default="aesgcm")
    key_mode: str = Field(default="raw")

    model_config = {"frozen": True}

    @field_validator("vault_path", "backup_path", "export_path")
    @classmethod
    def expand_path(cls, v: Path) -> Path:
        """Expand ``~`` in configured paths."""
        return v.expanduser()

    @field_validator("cipher_backend")
    @classmethod
    def validate_cipher(cls, v: str) -> str:
        """Validate cipher backend is supported."""
        v = v.lower()
        if v not in ("aesgcm", "chacha20"):
            raise ValueError(f"Unsupported cipher backend: {v}")
        return v

    @field_validator("key_mode")
    @classmethod
    def validate_key_mode(cls, v: str) -> str:
        """Validate key mode is supported."""
        v = v.lower()
        if v not in ("raw", "hkdf"):
            raise ValueError(f"Unsupported key mode: {v}")
        return v

    @field_validator("separator")
    @classmethod
    def validate_separator(cls, v: str) -> str:
        """Reject separators made only of JSON whitespace or punctuation."""
        if not v:
            raise ValueError("Item separator cannot be empty")
        if set(v) <= _JSON_TOKEN_CHARS:
            raise ValueError(
                f"Item separator {v!r} would collide with JSON item content"
            )
        return v

    @model_validator(mode="after")
    def validate_distinct_paths(self) -> "VaultConfig":
        """Ensure backup and export never overwrite the vault of record."""
        for name in ("backup_path", "export_path"):
            if getattr(self, name) == self.vault_path:
                raise ValueError(
                    f"{name} must differ from vault_path ({self.vault_path})"
                )
        return self

    @classmethod
    def from_env(cls, **overrides) -> "VaultConfig":
        """Create VaultConfig from PASSVAULT_* environment variables.

        Keyword overrides that are not None take precedence.

        Returns:
            Populated VaultConfig instance.
        """
        values = {}
        env_map = {
            "vault_path": "PASSVAULT_VAULT_FILE",
            "backup_path": "PASSVAULT_BACKUP_FILE",
            "export_path": "PASSVAULT_EXPORT_FILE",
            "cipher_backend": "PASSVAULT_CIPHER_BACKEND",
            "key_mode": "PASSVAULT_KEY_MODE",
        }
        for field, env_name in env_map.items():
            raw = os.environ.get(env_name)
            if raw:
                values[field] = raw
        values.update({k: v for k, v in overrides.items() if v is not None})
        config = cls(**values)
        logger.debug(
            "Vault config: vault=%s backup=%s cipher=%s key_mode=%s",
            config.vault_path, config.backup_path,
            config.cipher_backend, config.key_mode,
        )
        return config
