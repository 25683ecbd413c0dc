# In-place text editing of a single note for vaultprune.
# Positions are (line, ch) pairs, zero-based, the way an editor cursor reports them.
# Lines are split on "\n" only; a trailing "\r" belongs to the line ending.

from __future__ import annotations

from pathlib import Path
from typing import List

from vaultprune.models import Position


class Document:
    def __init__(self, path: Path, text: str):
        self.path = path
        self._text = text

    @classmethod
    def load(cls, path: Path) -> "Document":
        # newline="" keeps "\r\n" intact so saving never rewrites line endings.
        with path.open("r", encoding="utf-8", newline="") as fh:
            return cls(path, fh.read())

    @property
    def text(self) -> str:
        return self._text

    def _raw_lines(self) -> List[str]:
        return self._text.split("\n")

    def line_count(self) -> int:
        return len(self._raw_lines())

    def line(self, index: int) -> str:
        lines = self._raw_lines()
        if not 0 <= index < len(lines):
            raise IndexError(f"Line {index} out of range for {self.path}")
        return _content(lines[index])

    def offset(self, pos: Position) -> int:
        # Convert a position into an absolute character offset.
        lines = self._raw_lines()
        if not 0 <= pos.line < len(lines):
            raise IndexError(f"Line {pos.line} out of range for {self.path}")
        if not 0 <= pos.ch <= len(_content(lines[pos.line])):
            raise IndexError(f"Column {pos.ch} out of range on line {pos.line}")
        return sum(len(line) + 1 for line in lines[:pos.line]) + pos.ch

    def remove_range(self, start: Position, end: Position) -> str:
        # Cut the text between start and end and return what was removed.
        lo = self.offset(start)
        hi = self.offset(end)
        if hi < lo:
            raise ValueError(f"Range end precedes start: {start} > {end}")
        removed = self._text[lo:hi]
        self._text = self._text[:lo] + self._text[hi:]
        return removed

    def save(self) -> None:
        with self.path.open("w", encoding="utf-8", newline="") as fh:
            fh.write(self._text)


def _content(raw_line: str) -> str:
    return raw_line[:-1] if raw_line.endswith("\r") else raw_line
