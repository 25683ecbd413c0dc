# Core orchestration logic for vaultprune.
# This file sequences link lookup, reference counting, cascade planning,
# confirmation and the physical deletion of an attachment.
#
# It intentionally contains no CLI parsing and no low-level filesystem logic.

from __future__ import annotations

import threading
from pathlib import Path
from typing import Callable, List, Optional, Sequence

from rich.console import Console
from rich.markup import escape

from vaultprune.cascade import plan_cascade
from vaultprune.confirm import decide, prompt_cascade_choice
from vaultprune.editor import Document
from vaultprune.journal import DeletionLog
from vaultprune.links import locate_link
from vaultprune.models import (
    AttachmentRef,
    Choice,
    Decision,
    DeletionResult,
    Outcome,
    Position,
    ReferenceSummary,
    Settings,
    TrashStrategy,
)
from vaultprune.references import count_references
from vaultprune.trash import is_busy_error, journal_action, trash_or_delete
from vaultprune.vault import FileNode, FolderNode, Vault

console = Console()
_err = Console(stderr=True)

Notifier = Callable[[str], None]
Confirmer = Callable[[Sequence[FolderNode]], Choice]
Deleter = Callable[[Path, TrashStrategy, Path], Optional[Path]]

MSG_NO_LINK = "No link under the cursor."
MSG_BUSY = "File is in use by another program. Close it and try again."
MSG_FAILED = "Delete failed. See the error output for details."
MSG_LINK_MOVED = "Link text moved; remove it by hand: {link}"


def notify_console(message: str) -> None:
    # Link text may contain square brackets; print it verbatim.
    console.print(message, markup=False, highlight=False)


def _confirm_on_console(plan: Sequence[FolderNode]) -> Choice:
    return prompt_cascade_choice(plan, console)


class DeletionOrchestrator:
    """Delete the attachment behind a link and cascade through emptied folders.

    At most one deletion executes at a time. The lock covers the execution
    phase only: physical delete, link removal and folder cascade. Lookup,
    planning and the confirmation prompt run unlocked, so the plan shown to
    the user is not recomputed after they answer.
    """

    def __init__(
        self,
        vault_root: Path,
        settings: Settings,
        notify: Notifier = notify_console,
        confirm: Confirmer = _confirm_on_console,
        deleter: Deleter = trash_or_delete,
        log: Optional[DeletionLog] = None,
    ):
        self.vault_root = Path(vault_root)
        self.settings = settings
        self._notify = notify
        self._confirm = confirm
        self._deleter = deleter
        self._log = log
        self._lock = threading.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    def request_delete(self, note_path: str, cursor: Position) -> DeletionResult:
        # Entry point. Never raises; every failure becomes a notification.
        if self._lock.locked():
            return DeletionResult(outcome=Outcome.dropped)

        try:
            return self._process(note_path, cursor)
        except Exception as exc:
            return self._failure(exc)

    def _process(self, note_path: str, cursor: Position) -> DeletionResult:
        vault = Vault.scan(self.vault_root)
        note = vault.abspath(note_path)
        line_text = Document.load(note).line(cursor.line)

        ref = locate_link(line_text, cursor)
        if ref is None:
            self._notify(MSG_NO_LINK)
            return DeletionResult(outcome=Outcome.no_link)
        link = line_text[ref.start.ch:ref.end.ch]

        target = vault.resolve_link(ref.link_text, note_path)
        if target is None:
            # Dangling link: drop the text, nothing to delete.
            self._strip(note, ref, link)
            message = f"Attachment not found: {ref.link_text}"
            self._notify(message)
            return DeletionResult(outcome=Outcome.link_not_found, message=message)

        summary = count_references(target.path, vault.resolved_links())
        if summary.total_count > 1:
            self._strip(note, ref, link)
            message = _multi_reference_message(summary, note_path)
            self._notify(message)
            return DeletionResult(
                outcome=Outcome.multiply_referenced,
                message=message,
                target=target.path,
            )

        plan = plan_cascade(target, self.settings)
        decision = decide(plan, self.settings)

        if decision is Decision.file_only:
            return self._execute(vault, note, ref, link, target, plan, delete_folders=False)
        if decision is Decision.proceed_silently:
            return self._execute(vault, note, ref, link, target, plan, delete_folders=True)

        choice = self._confirm(plan)
        if choice is Choice.all:
            return self._execute(vault, note, ref, link, target, plan, delete_folders=True)
        if choice is Choice.file_only:
            return self._execute(vault, note, ref, link, target, plan, delete_folders=False)
        return DeletionResult(outcome=Outcome.cancelled, target=target.path)

    def _execute(
        self,
        vault: Vault,
        note: Path,
        ref: AttachmentRef,
        link: str,
        target: FileNode,
        plan: List[FolderNode],
        delete_folders: bool,
    ) -> DeletionResult:
        if not self._lock.acquire(blocking=False):
            return DeletionResult(outcome=Outcome.dropped)

        deleted: List[str] = []
        try:
            # A locked file raises here, before the note is touched.
            self._remove(vault.abspath(target.path))

            self._strip(note, ref, link)

            if delete_folders and plan:
                for folder in plan:
                    path = vault.abspath(folder.path)
                    # Folders that vanished since planning are skipped.
                    if not path.is_dir():
                        continue
                    self._remove(path)
                    deleted.append(folder.path)

            if deleted:
                names = "\n".join(path.rsplit("/", 1)[-1] for path in deleted)
                message = f"Deleted attachment and {len(deleted)} empty folder(s):\n{names}"
                self._notify(message)
                return DeletionResult(
                    outcome=Outcome.deleted_with_folders,
                    message=message,
                    target=target.path,
                    folders=deleted,
                )

            message = f"Deleted attachment: {target.name}"
            self._notify(message)
            return DeletionResult(outcome=Outcome.deleted, message=message, target=target.path)
        except Exception as exc:
            return self._failure(exc, target=target.path, folders=deleted)
        finally:
            self._lock.release()

    def _remove(self, path: Path) -> None:
        strategy = self.settings.trash_strategy
        trashed = self._deleter(path, strategy, self.vault_root)
        if self._log is None:
            return
        # The deletion already happened; a journal error must not stop the run.
        try:
            self._log.write_deletion(journal_action(strategy), path, trashed)
        except Exception as exc:
            _err.print(f"[red]vaultprune: journal error:[/red] {escape(repr(exc))}")

    def _strip(self, note: Path, ref: AttachmentRef, link: str) -> None:
        # Re-read the note so edits made while the prompt was open survive.
        document = Document.load(note)
        try:
            current = document.line(ref.start.line)[ref.start.ch:ref.end.ch]
        except IndexError:
            current = None
        if current != link:
            self._notify(MSG_LINK_MOVED.format(link=link))
            return
        document.remove_range(ref.start, ref.end)
        document.save()

    def _failure(
        self,
        exc: Exception,
        target: Optional[str] = None,
        folders: Optional[List[str]] = None,
    ) -> DeletionResult:
        _err.print(f"[red]vaultprune: delete error:[/red] {escape(repr(exc))}")
        if is_busy_error(exc):
            self._notify(MSG_BUSY)
            return DeletionResult(
                outcome=Outcome.busy, message=MSG_BUSY, target=target, folders=folders or []
            )
        self._notify(MSG_FAILED)
        return DeletionResult(
            outcome=Outcome.failed, message=MSG_FAILED, target=target, folders=folders or []
        )


def _multi_reference_message(summary: ReferenceSummary, note_path: str) -> str:
    if summary.file_count == 1 and note_path in summary.files:
        return (
            f"This note still links the file elsewhere ({summary.total_count} references); "
            "only the current link was removed."
        )
    return (
        f"File is referenced in several places ({summary.total_count} references); "
        "only the current link was removed."
    )
