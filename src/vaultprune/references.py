# Reference counting for vaultprune.
# Pure function over a resolved-link index; the caller builds the index fresh
# for every request.

from __future__ import annotations

from typing import Dict, Mapping

from vaultprune.models import ReferenceSummary


def count_references(
    target_path: str,
    resolved_links: Mapping[str, Mapping[str, int]],
) -> ReferenceSummary:
    # Sum the occurrences of target_path over every source note that links it.
    total = 0
    files = []
    for source_path, links in resolved_links.items():
        count = links.get(target_path)
        if count is None:
            continue
        total += count
        files.append(source_path)

    return ReferenceSummary(total_count=total, file_count=len(files), files=files)


def referencing_counts(
    target_path: str,
    resolved_links: Mapping[str, Mapping[str, int]],
) -> Dict[str, int]:
    # Per-note occurrence counts, used by the refs command for display.
    return {
        source: links[target_path]
        for source, links in resolved_links.items()
        if target_path in links
    }
