"""
VaultStore — Encrypted file of JSON secret items bound to a master password.

Provides the public API of the vault:
- ``clear()`` — truncate the vault to the empty state
- ``write(text, append)`` — replace the vault contents or prepend an item
- ``read()`` — decrypt and return the whole plaintext
- ``export()`` — write every item as an indented JSON array
- ``backup()`` — copy the raw encrypted file aside (best-effort)

Security Note:
    Never log plaintext, ciphertext or the master password. Only log paths,
    operations and sizes.
"""
import os
import shutil
import logging
from pathlib import Path
from typing import Optional, Union

import orjson

from .config import VaultConfig
from .crypto import open_blob, prepare_key, seal
from .exceptions import EmptyFileError, FormatError, VaultError

logger = logging.getLogger("passvault")

_FILE_MODE = 0o600


def _open_private(path: Path):
    """Open ``path`` for truncate-then-write, owner read/write only on create."""
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, _FILE_MODE)
    return os.fdopen(fd, "wb")


def _split_items(plaintext: str, separator: str) -> list[str]:
    """Split a decrypted vault plaintext into its items, newest first."""
    return plaintext.split(separator)


def _reindent(item: str, indent: str = "  ") -> str:
    """Re-indent JSON text without re-encoding any of its tokens.

    Whitespace outside strings is replaced by newlines and ``indent`` per
    nesting level; strings, numbers and literals are copied as written.
    Empty objects and arrays stay compact. ``item`` must already be valid JSON.
    """
    out = []
    depth = 0
    in_string = False
    escaped = False
    opened = False
    for ch in item:
        if in_string:
            out.append(ch)
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch in " \t\r\n":
            continue
        if opened and ch not in "]}":
            opened = False
            depth += 1
            out.append("\n" + indent * depth)
        if ch == '"':
            in_string = True
            out.append(ch)
        elif ch in "{[":
            out.append(ch)
            opened = True
        elif ch in "]}":
            if opened:
                opened = False
            else:
                depth -= 1
                out.append("\n" + indent * depth)
            out.append(ch)
        elif ch == ",":
            out.append(",\n" + indent * depth)
        elif ch == ":":
            out.append(": ")
        else:
            out.append(ch)
    return "".join(out)


class VaultStore:
    """Single-file encrypted vault.

    The file holds either nothing (no secrets yet) or exactly
    ``nonce || ciphertext`` of the separator-joined items. Every write
    re-seals the whole plaintext with a fresh nonce and replaces the file
    contents.
    """

    def __init__(
        self,
        master_key: Union[str, bytes],
        config: Optional[VaultConfig] = None,
    ):
        self._config = config or VaultConfig()
        self._key = prepare_key(
            master_key,
            mode=self._config.key_mode,
            backend=self._config.cipher_backend,
        )

    @property
    def config(self) -> VaultConfig:
        return self._config

    @property
    def path(self) -> Path:
        return self._config.vault_path

    def __repr__(self) -> str:
        return f"<VaultStore path={self.path} cipher={self._config.cipher_backend}>"

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _read_raw(self) -> bytes:
        with open(self.path, "rb") as fh:
            return fh.read()

    def _decrypt(self, blob: bytes, operation: str) -> str:
        """Open ``blob`` with the store key, tagging errors with context."""
        try:
            plaintext = open_blob(self._key, blob, self._config.cipher_backend)
        except VaultError as err:
            err.operation = operation
            err.path = self.path
            raise
        return plaintext.decode("utf-8")

    def _seal_to_file(self, plaintext: str) -> None:
        blob = seal(
            self._key, plaintext.encode("utf-8"), self._config.cipher_backend
        )
        with _open_private(self.path) as fh:
            fh.write(blob)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def clear(self) -> None:
        """Truncate the vault file to zero bytes, creating it if absent."""
        with _open_private(self.path):
            pass
        logger.info("Vault cleared: %s", self.path)

    def write(self, text: str, append: bool = False) -> None:
        """Seal ``text`` into the vault.

        With ``append`` set and a non-empty vault, the current plaintext is
        decrypted first and ``text`` is placed in front of it. A decrypt
        failure aborts before the file is touched.

        Args:
            text: Item (or whole plaintext) to store.
            append: Prepend ``text`` to the existing items instead of replacing them.

        Raises:
            AuthError: If the existing vault does not open with this key.
            MalformedFileError: If the existing vault is truncated below a nonce.
            FormatError: If ``text`` contains the item separator.
        """
        if self._config.separator in text:
            raise FormatError(
                "item contains the item separator",
                operation="append" if append else "write",
                path=self.path,
            )
        final_text = text
        if append:
            try:
                existing = self._read_raw()
            except FileNotFoundError:
                existing = b""
            if existing:
                old_text = self._decrypt(existing, "append")
                final_text = text + self._config.separator + old_text
        self._seal_to_file(final_text)
        logger.debug(
            "Vault write: path=%s append=%s chars=%d",
            self.path, append, len(final_text),
        )

    def read(self) -> str:
        """Decrypt and return the whole vault plaintext.

        Raises:
            EmptyFileError: If the vault file is empty.
            AuthError: If the tag does not verify.
            MalformedFileError: If the file is shorter than a nonce.
        """
        blob = self._read_raw()
        if not blob:
            raise EmptyFileError(
                "vault has no secrets yet", operation="read", path=self.path
            )
        return self._decrypt(blob, "read")

    def items(self) -> list[str]:
        """Return the stored items, most recently appended first."""
        return _split_items(self.read(), self._config.separator)

    def export(self) -> Path:
        """Write all items as a pretty-printed JSON array to the export path.

        Every item is validated before the export file is opened, so an
        invalid item leaves no export behind. Items are re-indented from
        their stored text, so numbers and strings are exported as written.

        Returns:
            Path of the written export file.

        Raises:
            FormatError: If any item is not valid JSON.
        """
        export_path = self._config.export_path
        rendered = []
        for index, item in enumerate(self.items()):
            try:
                orjson.loads(item)
            except orjson.JSONDecodeError as err:
                raise FormatError(
                    f"item {index} of {self.path} is not valid JSON: {err}",
                    operation="export",
                    path=export_path,
                ) from err
            rendered.append(_reindent(item))
        with _open_private(export_path) as fh:
            fh.write(("[" + ",".join(rendered) + "]").encode("utf-8"))
        logger.info("Vault exported: %d item(s) to %s", len(rendered), export_path)
        return export_path

    def backup(self) -> bool:
        """Copy the raw encrypted vault file to the backup path.

        Best-effort: failures are logged and swallowed.

        Returns:
            True if the backup was written, False otherwise.
        """
        backup_path = self._config.backup_path
        try:
            backup_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "rb") as src, _open_private(backup_path) as dst:
                shutil.copyfileobj(src, dst)
        except OSError as err:
            logger.error(
                "Vault backup failed: %s -> %s: %s", self.path, backup_path, err,
            )
            return False
        logger.info("Vault backed up to %s", backup_path)
        return True
