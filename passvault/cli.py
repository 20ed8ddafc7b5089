"""
Command-line front end for the vault.

Collects the master password, builds a :class:`VaultStore` and runs one
operation. Mutating operations are followed by a best-effort backup.
"""
import argparse
import getpass
import logging
import os
import sys
from typing import Optional

from pydantic import ValidationError

from .config import VaultConfig
from .exceptions import (
    AuthError,
    EmptyFileError,
    FormatError,
    VaultError,
    VaultKeyError,
)
from .store import VaultStore
from .version import __version__

logger = logging.getLogger("passvault")

PASSWORD_ENV = "PASSVAULT_MASTER_PASSWORD"


def get_master_password() -> str:
    password = os.environ.get(PASSWORD_ENV)
    if password is not None:
        return password
    return getpass.getpass("Master password: ")


def _item_text(value: str) -> str:
    if value == "-":
        return sys.stdin.read().strip()
    return value


def cmd_clear(store: VaultStore, args: argparse.Namespace) -> int:
    store.clear()
    store.backup()
    print(f"Cleared {store.path}")
    return 0


def cmd_add(store: VaultStore, args: argparse.Namespace) -> int:
    store.write(_item_text(args.item), append=True)
    store.backup()
    print(f"Added item to {store.path}")
    return 0


def cmd_set(store: VaultStore, args: argparse.Namespace) -> int:
    store.write(_item_text(args.item), append=False)
    store.backup()
    print(f"Replaced contents of {store.path}")
    return 0


def cmd_show(store: VaultStore, args: argparse.Namespace) -> int:
    for item in store.items():
        print(item)
    return 0


def cmd_export(store: VaultStore, args: argparse.Namespace) -> int:
    path = store.export()
    print(f"Exported to {path}")
    return 0


def cmd_backup(store: VaultStore, args: argparse.Namespace) -> int:
    if store.backup():
        print(f"Backup written to {store.config.backup_path}")
        return 0
    return 1


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="passvault", description="Local encrypted credential vault"
    )
    ap.add_argument("--version", action="version", version=__version__)
    ap.add_argument("--vault", help="vault file path")
    ap.add_argument("--backup", help="backup file path")
    ap.add_argument("--export", dest="export_file", help="export file path")
    ap.add_argument("--cipher", choices=["aesgcm", "chacha20"])
    ap.add_argument("--key-mode", choices=["raw", "hkdf"])
    ap.add_argument("-v", "--verbose", action="store_true")
    sub = ap.add_subparsers(dest="cmd", required=True)

    sub.add_parser("clear", help="remove every item").set_defaults(func=cmd_clear)

    p = sub.add_parser("add", help="prepend a JSON item ('-' reads stdin)")
    p.add_argument("item")
    p.set_defaults(func=cmd_add)

    p = sub.add_parser("set", help="replace the vault contents ('-' reads stdin)")
    p.add_argument("item")
    p.set_defaults(func=cmd_set)

    sub.add_parser("show", help="print items, newest first").set_defaults(func=cmd_show)
    sub.add_parser("export", help="write items as a JSON array").set_defaults(func=cmd_export)
    sub.add_parser("backup", help="copy the encrypted file aside").set_defaults(func=cmd_backup)
    return ap


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        config = VaultConfig.from_env(
            vault_path=args.vault,
            backup_path=args.backup,
            export_path=args.export_file,
            cipher_backend=args.cipher,
            key_mode=args.key_mode,
        )
        store = VaultStore(get_master_password(), config)
    except (ValidationError, VaultKeyError) as err:
        print(f"configuration error: {err}", file=sys.stderr)
        return 2

    try:
        return args.func(store, args)
    except EmptyFileError:
        print("vault is empty")
        return 0
    except AuthError:
        print("wrong password or corrupted vault", file=sys.stderr)
        return 1
    except FormatError as err:
        print(f"{args.cmd} failed: {err}", file=sys.stderr)
        return 1
    except (VaultError, OSError) as err:
        logger.debug("operation %s failed", args.cmd, exc_info=True)
        print(f"error: {err}", file=sys.stderr)
        return 1
