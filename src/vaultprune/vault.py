# Vault snapshot, link resolution and the resolved-link index for vaultprune.
# This module centralizes all path discovery logic so every command sees the
# vault the same way.
#
# No deletion or mutation is allowed here. A Vault is a read-only snapshot;
# take a fresh one whenever the disk may have changed.

from __future__ import annotations

import os
import posixpath
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Union

from rich.console import Console

from vaultprune.links import iter_link_targets, strip_subpath

_err = Console(stderr=True)

DOCUMENT_SUFFIX = ".md"


@dataclass(eq=False)
class FileNode:
    path: str
    name: str
    parent: Optional["FolderNode"] = field(default=None, repr=False)


@dataclass(eq=False)
class FolderNode:
    # Vault-relative POSIX path; the root folder has path "".
    path: str
    name: str
    parent: Optional["FolderNode"] = field(default=None, repr=False)
    children: List[Node] = field(default_factory=list, repr=False)

    def is_root(self) -> bool:
        return self.parent is None


Node = Union[FileNode, FolderNode]


def _is_hidden(path: str) -> bool:
    # Anything below a dot-folder (.trash, .obsidian, .git) is outside the corpus.
    return any(part.startswith(".") for part in path.split("/"))


def _normalize(path: str) -> Optional[str]:
    # Collapse "./" and "../" segments; reject paths escaping the vault.
    norm = posixpath.normpath(path)
    if norm in (".", "..") or norm.startswith("../"):
        return None
    return norm


class Vault:
    def __init__(self, root_path: Path, root: FolderNode):
        self.root_path = root_path
        self.root = root
        self._nodes: Dict[str, Node] = {}
        self._by_name: Dict[str, List[FileNode]] = defaultdict(list)
        self._index(root)

    @classmethod
    def scan(cls, root_path: Path) -> "Vault":
        # Build a complete snapshot of the directory tree under root_path.
        root_path = Path(root_path)
        if not root_path.is_dir():
            raise NotADirectoryError(f"Vault not found: {root_path}")
        root = FolderNode(path="", name="")
        _populate(root, root_path)
        return cls(root_path, root)

    def _index(self, folder: FolderNode) -> None:
        self._nodes[folder.path] = folder
        for child in folder.children:
            if isinstance(child, FolderNode):
                self._index(child)
                continue
            self._nodes[child.path] = child
            if not _is_hidden(child.path):
                self._by_name[child.name.lower()].append(child)

    def get(self, path: str) -> Optional[Node]:
        return self._nodes.get(path)

    def get_file(self, path: str) -> Optional[FileNode]:
        node = self._nodes.get(path)
        return node if isinstance(node, FileNode) else None

    def iter_files(self) -> Iterator[FileNode]:
        for node in self._nodes.values():
            if isinstance(node, FileNode):
                yield node

    def iter_documents(self) -> Iterator[FileNode]:
        # Markdown notes that take part in the link corpus.
        for node in self.iter_files():
            if node.name.endswith(DOCUMENT_SUFFIX) and not _is_hidden(node.path):
                yield node

    def abspath(self, path: str) -> Path:
        return self.root_path.joinpath(*path.split("/")) if path else self.root_path

    def relpath(self, path: Path) -> Optional[str]:
        # Map a filesystem path back to its vault-relative form, or None if outside.
        try:
            rel = Path(path).resolve().relative_to(self.root_path.resolve())
        except ValueError:
            return None
        return rel.as_posix() if rel.parts else ""

    def resolve_link(self, link_text: str, context_path: str) -> Optional[FileNode]:
        """Resolve a link as written in the note at context_path.

        Lookup order:
        - relative to the note's folder, then relative to the vault root
        - otherwise the file whose path ends with the link path, shortest path
          first (case-insensitive)

        A link without an extension prefers "<link>.md" over a bare file.
        """
        linkpath = strip_subpath(link_text)
        if not linkpath:
            return None

        bases = [posixpath.dirname(context_path), ""]
        if linkpath.startswith("/"):
            linkpath = linkpath.lstrip("/")
            bases = [""]

        candidates = [linkpath]
        if not posixpath.splitext(linkpath)[1]:
            candidates.insert(0, linkpath + DOCUMENT_SUFFIX)

        for candidate in candidates:
            for base in bases:
                path = _normalize(posixpath.join(base, candidate))
                if path is None:
                    continue
                node = self.get_file(path)
                if node is not None:
                    return node

        for candidate in candidates:
            path = _normalize(candidate)
            if path is None:
                continue
            wanted = path.lower()
            matches = [
                f for f in self._by_name.get(posixpath.basename(wanted), [])
                if f.path.lower() == wanted or f.path.lower().endswith("/" + wanted)
            ]
            if matches:
                return min(matches, key=lambda f: (f.path.count("/"), f.path))

        return None

    def read_document(self, doc: FileNode) -> str:
        return self.abspath(doc.path).read_text(encoding="utf-8", errors="replace")

    def resolved_links(self) -> Dict[str, Dict[str, int]]:
        # Map every note to {target path: occurrence count}.
        # Always rebuilt from disk; never cached between requests.
        index: Dict[str, Dict[str, int]] = {}
        for doc in self.iter_documents():
            try:
                text = self.read_document(doc)
            except OSError as exc:
                _err.print(f"[dim]vaultprune: cannot read {doc.path}: {exc}[/dim]")
                continue

            counts: Counter = Counter()
            for raw in iter_link_targets(text):
                target = self.resolve_link(raw, doc.path)
                if target is not None:
                    counts[target.path] += 1
            index[doc.path] = dict(counts)
        return index


def _populate(folder: FolderNode, fs_path: Path) -> None:
    # Depth-first scan; children keep a stable, name-sorted order.
    # Symlinked directories are recorded as plain entries and never followed.
    with os.scandir(fs_path) as it:
        entries = sorted(it, key=lambda e: e.name)

    for entry in entries:
        child_path = f"{folder.path}/{entry.name}" if folder.path else entry.name
        if entry.is_dir(follow_symlinks=False):
            sub = FolderNode(path=child_path, name=entry.name, parent=folder)
            folder.children.append(sub)
            _populate(sub, Path(entry.path))
        else:
            folder.children.append(FileNode(path=child_path, name=entry.name, parent=folder))
