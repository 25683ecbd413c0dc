# Cascade folder planning for vaultprune.
# Given an attachment about to be removed, work out which ancestor folders
# would be left empty and may go with it.
#
# This module reads the vault snapshot only and never deletes anything.

from __future__ import annotations

from typing import List

from vaultprune.models import Settings
from vaultprune.vault import FileNode, FolderNode

# Files operating systems drop into folders on their own.
# They never keep a folder alive.
SYSTEM_NOISE_FILES = frozenset({".DS_Store", "Thumbs.db", "Desktop.ini"})


def parse_stop_folders(raw: str) -> List[str]:
    # Comma-separated barrier names; blanks are dropped, matching is exact.
    return [name.strip() for name in raw.split(",") if name.strip()]


def plan_cascade(target: FileNode, settings: Settings) -> List[FolderNode]:
    # Return the folders to delete after target, innermost first.
    if not settings.enable_cascade:
        return []

    stop_names = parse_stop_folders(settings.stop_folders)
    plan: List[FolderNode] = []
    ignored = {target.path}
    folder = target.parent

    while folder is not None and not folder.is_root():
        if folder.name in stop_names:
            break

        remaining = [
            child for child in folder.children
            if child.name not in SYSTEM_NOISE_FILES and child.path not in ignored
        ]
        if remaining:
            break

        plan.append(folder)
        ignored.add(folder.path)
        folder = folder.parent

    return plan
