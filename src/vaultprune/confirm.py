# Confirmation gate for cascading deletes.
# decide() is pure policy; prompt_cascade_choice() is the interactive surface
# shown when the policy asks for confirmation.

from __future__ import annotations

from typing import Sequence

from rich.console import Console
from rich.markup import escape

from vaultprune.models import Choice, Decision, Settings
from vaultprune.vault import FolderNode

_ANSWERS = {
    "a": Choice.all,
    "all": Choice.all,
    "f": Choice.file_only,
    "file": Choice.file_only,
    "file-only": Choice.file_only,
}


def decide(plan: Sequence[FolderNode], settings: Settings) -> Decision:
    # Map plan size and settings onto one of three outcomes.
    if not settings.enable_cascade or not plan:
        return Decision.file_only
    if not settings.enable_warning:
        return Decision.proceed_silently
    if len(plan) < settings.warning_threshold:
        return Decision.proceed_silently
    return Decision.proceed_with_confirmation


def display_order(plan: Sequence[FolderNode]) -> list:
    # Plans are innermost first; people read trees from the top down.
    return [folder.path for folder in reversed(plan)]


def prompt_cascade_choice(plan: Sequence[FolderNode], console: Console) -> Choice:
    # Ask how far the deletion may go.
    # Default is conservative: anything unrecognised cancels.
    console.print("[bold yellow]Cascade delete confirmation[/bold yellow]")
    console.print(
        f"Deleting the attachment will also delete {len(plan)} empty folder(s):"
    )
    for path in display_order(plan):
        console.print(f"  - {escape(path)}")

    response = console.input("(a)ll / (f)ile only / (C)ancel: ")
    return _ANSWERS.get(response.strip().lower(), Choice.cancel)
