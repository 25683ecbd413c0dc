# Shared data models for vaultprune.
# Lives in its own module to avoid circular imports between cli, core and
# the planning modules.

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class TrashStrategy(str, Enum):
    system = "system"
    local = "local"
    permanent = "permanent"


class Decision(str, Enum):
    # Outcome of the confirmation gate for a computed cascade plan.
    file_only = "file-only"
    proceed_silently = "proceed-silently"
    proceed_with_confirmation = "proceed-with-confirmation"


class Choice(str, Enum):
    # Answers the cascade confirmation prompt can return.
    cancel = "cancel"
    file_only = "file-only"
    all = "all"


class Outcome(str, Enum):
    no_link = "no-link"
    link_not_found = "link-not-found"
    multiply_referenced = "multiply-referenced"
    cancelled = "cancelled"
    deleted = "deleted"
    deleted_with_folders = "deleted-with-folders"
    busy = "busy"
    failed = "failed"
    dropped = "dropped"


@dataclass(frozen=True)
class Position:
    # Zero-based line and character offset inside a document.
    line: int
    ch: int


@dataclass(frozen=True)
class AttachmentRef:
    link_text: str
    start: Position
    end: Position


@dataclass(frozen=True)
class ReferenceSummary:
    total_count: int
    file_count: int
    files: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class Settings:
    enable_cascade: bool = True
    stop_folders: str = "assets"
    enable_warning: bool = True
    warning_threshold: int = 3
    trash_strategy: TrashStrategy = TrashStrategy.system


@dataclass(frozen=True)
class DeletionResult:
    outcome: Outcome
    message: str = ""
    target: Optional[str] = None
    folders: List[str] = field(default_factory=list)
