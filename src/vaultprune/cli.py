# Command-line interface definition for vaultprune.
# This file is responsible only for argument parsing, validation,
# and dispatch into core application logic.
#
# No filesystem mutation or business logic should live here.

from __future__ import annotations

from enum import Enum
from pathlib import Path as FSPath
from typing import Sequence

import typer
from rich.console import Console
from rich.table import Table

from vaultprune import __version__
from vaultprune.cascade import plan_cascade
from vaultprune.confirm import decide, display_order, prompt_cascade_choice
from vaultprune.core import DeletionOrchestrator
from vaultprune.editor import Document
from vaultprune.journal import DeletionLog, log_path_for, undo_from_log
from vaultprune.models import Choice, Outcome, Position, Settings
from vaultprune.references import count_references, referencing_counts
from vaultprune.settings import load_settings, settings_path, update_setting
from vaultprune.vault import FileNode, Vault

app = typer.Typer(
    add_completion=False,
    help="Delete linked attachments from a Markdown vault and prune the folders they leave empty.",
)
config_app = typer.Typer(help="Show or change the vault's vaultprune settings.")
app.add_typer(config_app, name="config")

console = Console()


def _version_callback(value: bool) -> None:
    if value:
        console.print(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(
    version: bool = typer.Option(
        False, "--version",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    pass


def _vault_root(vault: FSPath) -> FSPath:
    if not vault.is_dir():
        raise typer.BadParameter(f"Vault directory not found: {vault}")
    return vault.resolve()


def _vault_relative(root: FSPath, path: FSPath) -> str:
    # Accept either a path relative to the vault or one on the filesystem.
    for candidate in (root / path, path):
        if candidate.is_file():
            try:
                return candidate.resolve().relative_to(root).as_posix()
            except ValueError:
                break
    raise typer.BadParameter(f"Not a file inside the vault: {path}")


def _scanned_file(snapshot: Vault, root: FSPath, target: FSPath) -> FileNode:
    rel = _vault_relative(root, target)
    node = snapshot.get_file(rel)
    if node is None:
        # Resolved outside the scanned tree, e.g. through a symlinked folder.
        raise typer.BadParameter(f"Not a file in the scanned vault: {rel}")
    return node


def _load_settings(root: FSPath) -> Settings:
    try:
        return load_settings(settings_path(root))
    except ValueError as exc:
        raise typer.BadParameter(f"Invalid settings file: {exc}")


def _confirmer(yes: bool, file_only: bool):
    # --yes and --file-only pre-answer the cascade prompt.
    def confirm(plan: Sequence) -> Choice:
        if yes:
            return Choice.all
        if file_only:
            return Choice.file_only
        return prompt_cascade_choice(plan, console)

    return confirm


@app.command(help="Delete the attachment linked at a position in a note.")
def delete(
    note: FSPath = typer.Argument(..., help="Note containing the link."),
    line: int = typer.Option(..., "--line", min=1, help="Line of the link (1-based)."),
    col: int = typer.Option(
        1, "--col", min=1,
        help="Column inside the link (1-based). Defaults to the start of the line.",
    ),
    vault: FSPath = typer.Option(FSPath("."), "--vault", help="Vault root directory."),
    yes: bool = typer.Option(
        False, "--yes",
        help="Delete the whole folder cascade without asking.",
        rich_help_panel="Safety & UX",
    ),
    file_only: bool = typer.Option(
        False, "--file-only",
        help="When asked, delete only the attachment and keep its folders.",
        rich_help_panel="Safety & UX",
    ),
):
    if yes and file_only:
        raise typer.BadParameter("--yes and --file-only are mutually exclusive")

    root = _vault_root(vault)
    note_rel = _vault_relative(root, note)

    document = Document.load(root / note_rel)
    if line > document.line_count():
        raise typer.BadParameter(
            f"--line {line} is past the end of {note_rel} ({document.line_count()} lines)"
        )

    settings = _load_settings(root)
    log = DeletionLog(log_path_for(root))
    try:
        orchestrator = DeletionOrchestrator(
            root,
            settings,
            confirm=_confirmer(yes, file_only),
            log=log,
        )
        result = orchestrator.request_delete(note_rel, Position(line=line - 1, ch=col - 1))
    finally:
        log.close()

    if result.outcome in (Outcome.busy, Outcome.failed):
        raise typer.Exit(code=1)


@app.command(help="Show which notes link to an attachment.")
def refs(
    target: FSPath = typer.Argument(..., help="Attachment path, relative to the vault."),
    vault: FSPath = typer.Option(FSPath("."), "--vault", help="Vault root directory."),
):
    root = _vault_root(vault)
    snapshot = Vault.scan(root)
    node = _scanned_file(snapshot, root, target)

    index = snapshot.resolved_links()
    summary = count_references(node.path, index)

    table = Table(title=node.path)
    table.add_column("Note")
    table.add_column("Links", justify="right")
    for source, count in referencing_counts(node.path, index).items():
        table.add_row(source, str(count))

    console.print(table)
    console.print(f"Total: {summary.total_count} link(s) in {summary.file_count} note(s)")


@app.command("plan", help="Preview the folders a deletion would cascade through.")
def plan_command(
    target: FSPath = typer.Argument(..., help="Attachment path, relative to the vault."),
    vault: FSPath = typer.Option(FSPath("."), "--vault", help="Vault root directory."),
):
    root = _vault_root(vault)
    settings = _load_settings(root)
    snapshot = Vault.scan(root)
    node = _scanned_file(snapshot, root, target)

    folders = plan_cascade(node, settings)
    if folders:
        console.print(f"{len(folders)} folder(s) would be removed:")
        for path in display_order(folders):
            console.print(f"  - {path}")
    else:
        console.print("No folders would be removed.")
    console.print(f"Decision: {decide(folders, settings).value}")


@app.command(help="Restore attachments and folders moved to the vault's .trash.")
def undo(
    vault: FSPath = typer.Option(FSPath("."), "--vault", help="Vault root directory."),
    dry_run: bool = typer.Option(
        False, "--dry-run",
        help="Preview restores without making changes.",
        rich_help_panel="Safety & UX",
    ),
    yes: bool = typer.Option(
        False, "--yes",
        help="Skip all confirmation prompts.",
        rich_help_panel="Safety & UX",
    ),
):
    root = _vault_root(vault)
    try:
        restored = undo_from_log(log_path_for(root), dry_run=dry_run, yes=yes)
    except FileNotFoundError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1)
    console.print(f"Restored: {restored}")


@config_app.command("show", help="Print the effective settings.")
def config_show(
    vault: FSPath = typer.Option(FSPath("."), "--vault", help="Vault root directory."),
):
    root = _vault_root(vault)
    settings = _load_settings(root)

    table = Table(title=str(settings_path(root)))
    table.add_column("Setting")
    table.add_column("Value")
    table.add_row("enable_cascade", str(settings.enable_cascade).lower())
    table.add_row("stop_folders", settings.stop_folders)
    table.add_row("enable_warning", str(settings.enable_warning).lower())
    table.add_row("warning_threshold", str(settings.warning_threshold))
    table.add_row("trash_strategy", settings.trash_strategy.value)
    console.print(table)


@config_app.command("set", help="Change one setting and save it.")
def config_set(
    key: str = typer.Argument(..., help="Setting name, e.g. warning_threshold."),
    value: str = typer.Argument(..., help="New value."),
    vault: FSPath = typer.Option(FSPath("."), "--vault", help="Vault root directory."),
):
    root = _vault_root(vault)
    name = key.replace("-", "_")
    try:
        settings = update_setting(settings_path(root), name, value)
    except KeyError:
        raise typer.BadParameter(f"Unknown setting: {key}")
    except ValueError as exc:
        raise typer.BadParameter(str(exc))

    shown = getattr(settings, name)
    if isinstance(shown, Enum):
        shown = shown.value
    console.print(f"{name} = {shown}")


if __name__ == "__main__":
    app()
