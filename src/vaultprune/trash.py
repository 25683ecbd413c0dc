# Physical removal of files and folders for vaultprune.
# Every strategy either completes or raises; callers decide what a failure means.

from __future__ import annotations

import errno
import shutil
from pathlib import Path
from typing import Optional

from send2trash import send2trash

from vaultprune.cascade import SYSTEM_NOISE_FILES
from vaultprune.models import TrashStrategy

LOCAL_TRASH_DIR = ".trash"

# Windows sharing and lock violations.
_BUSY_WINERRORS = (32, 33)
_BUSY_ERRNOS = (errno.EBUSY, errno.ETXTBSY)

_ACTIONS = {
    TrashStrategy.system: "trash-system",
    TrashStrategy.local: "trash-local",
    TrashStrategy.permanent: "delete",
}


def journal_action(strategy: TrashStrategy) -> str:
    return _ACTIONS[strategy]


def trash_or_delete(path: Path, strategy: TrashStrategy, vault_root: Path) -> Optional[Path]:
    # Remove path according to strategy.
    # Returns the new location for local trash moves, otherwise None.
    if strategy is TrashStrategy.permanent:
        _delete_permanently(path)
        return None

    if strategy is TrashStrategy.system:
        send2trash(str(path))
        return None

    return _move_to_local_trash(path, vault_root)


def is_busy_error(exc: BaseException) -> bool:
    # Recognise "file in use by another program" failures.
    if isinstance(exc, OSError):
        if exc.errno in _BUSY_ERRNOS:
            return True
        if getattr(exc, "winerror", None) in _BUSY_WINERRORS:
            return True
    return "busy" in str(exc).lower()


def _move_to_local_trash(path: Path, vault_root: Path) -> Path:
    trash_dir = vault_root / LOCAL_TRASH_DIR
    trash_dir.mkdir(parents=True, exist_ok=True)

    # Flat layout; name collisions get a numeric suffix.
    dest = trash_dir / path.name
    counter = 2
    while dest.exists():
        dest = trash_dir / f"{path.stem}_{counter}{path.suffix}"
        counter += 1

    shutil.move(str(path), str(dest))
    return dest


def _delete_permanently(path: Path) -> None:
    if not path.is_dir():
        path.unlink()
        return

    # Only noise files are cleared; a folder with real content fails on rmdir.
    for child in path.iterdir():
        if child.name in SYSTEM_NOISE_FILES and child.is_file():
            child.unlink()
    path.rmdir()
