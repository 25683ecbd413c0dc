# Deletion journal and undo support for vaultprune.
# This module owns all persistence related to deletion history.
#
# The journal is append-only CSV to keep undo simple, auditable,
# and resilient to partial failures.

from __future__ import annotations

import csv
import shutil
from datetime import datetime
from pathlib import Path
from typing import Optional

from rich.console import Console

DEFAULT_LOG_NAME = ".vaultprune-log.csv"

RESTORABLE_ACTION = "trash-local"

console = Console()


def log_path_for(vault_root: Path) -> Path:
    return vault_root / DEFAULT_LOG_NAME


class DeletionLog:
    # Append-only CSV writer for deletions.
    # Each successful deletion must be logged immediately.
    def __init__(self, path: Path):
        self.path = path
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._fh = self.path.open("a", newline="", encoding="utf-8")
        self._writer = csv.writer(self._fh)

    def write_deletion(self, action: str, original: Path, trashed: Optional[Path]) -> None:
        # Timestamp is ISO-8601 for human readability and sortability.
        ts = datetime.now().isoformat(timespec="seconds")
        self._writer.writerow([ts, action, str(original), str(trashed) if trashed else ""])
        self._fh.flush()

    def close(self) -> None:
        self._fh.close()


def undo_from_log(log_path: Path, dry_run: bool, yes: bool) -> int:
    # Move locally trashed entries back, newest first.
    # Reverse order restores outer folders before the files inside them.
    # Returns the number of entries restored.
    if not log_path.exists():
        raise FileNotFoundError(f"Undo log not found: {log_path}")

    rows = []
    with log_path.open("r", newline="", encoding="utf-8") as fh:
        for row in csv.reader(fh):
            if len(row) != 4:
                continue
            rows.append(row)

    restored = 0
    for _ts, action, original_str, trashed_str in reversed(rows):
        original = Path(original_str)

        if action != RESTORABLE_ACTION or not trashed_str:
            console.print(f"Not restorable ({action}): {original}")
            continue

        trashed = Path(trashed_str)

        # Missing entries are skipped silently to keep undo robust.
        if not trashed.exists():
            console.print(f"Missing, skipping undo: {trashed}")
            continue

        # Conflicts are never overwritten automatically.
        if original.exists():
            console.print(f"Conflict, skipping undo: {original}")
            continue

        if dry_run:
            console.print(f"DRY RUN UNDO: {trashed} -> {original}")
            continue

        if not yes:
            response = console.input(
                f"Restore?\n  {trashed}\n-> {original}\n[y/N]: "
            )
            if response.strip().lower() not in ("y", "yes"):
                console.print(f"Skipping undo: {trashed}")
                continue

        original.parent.mkdir(parents=True, exist_ok=True)
        shutil.move(str(trashed), str(original))
        console.print(f"Restored: {original}")
        restored += 1

    return restored
