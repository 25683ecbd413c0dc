# Link parsing for vaultprune.
# This module is pure logic and must remain side-effect free.
#
# Two link families are recognised, always in this priority order:
#   wiki:     [[target]] / [[target|alias]], optionally embedded with "!"
#   markdown: [label](target), optionally embedded with "!"

from __future__ import annotations

import re
from typing import Iterator, Optional
from urllib.parse import unquote

from vaultprune.models import AttachmentRef, Position

WIKI_LINK_RE = re.compile(r"!?\[\[(.*?)(?:\|.*?)?\]\]")
# Labels exclude "]" and newlines so one match never spans two links.
MARKDOWN_LINK_RE = re.compile(r"!?\[[^\]\n]*\]\((.*?)\)")


def locate_link(line_text: str, cursor: Position) -> Optional[AttachmentRef]:
    # Return the first link whose span contains the cursor, or None.
    # Both span ends are inclusive so a cursor resting just after "]]" still hits.
    for match in WIKI_LINK_RE.finditer(line_text):
        if match.start() <= cursor.ch <= match.end():
            return _ref(match.group(1), cursor.line, match)

    for match in MARKDOWN_LINK_RE.finditer(line_text):
        if match.start() <= cursor.ch <= match.end():
            return _ref(unquote(match.group(1)), cursor.line, match)

    return None


def iter_link_targets(text: str) -> Iterator[str]:
    # Yield the raw target of every link in a document.
    # Markdown targets are percent-decoded, matching locate_link.
    for match in WIKI_LINK_RE.finditer(text):
        yield match.group(1)
    for match in MARKDOWN_LINK_RE.finditer(text):
        yield unquote(match.group(1))


def strip_subpath(link_text: str) -> str:
    # Drop "#heading" / "#^block" suffixes; they never change the target file.
    return link_text.split("#", 1)[0].strip()


def _ref(link_text: str, line: int, match: re.Match) -> AttachmentRef:
    return AttachmentRef(
        link_text=link_text,
        start=Position(line=line, ch=match.start()),
        end=Position(line=line, ch=match.end()),
    )
