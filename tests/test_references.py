# Unit tests for vaultprune.references.

from __future__ import annotations

from vaultprune.references import count_references, referencing_counts
from vaultprune.vault import Vault


def test_single_reference() -> None:
    index = {"a.md": {"img.png": 1}, "b.md": {}}
    summary = count_references("img.png", index)
    assert summary.total_count == 1
    assert summary.file_count == 1
    assert summary.files == ["a.md"]


def test_same_note_embedding_twice() -> None:
    summary = count_references("img.png", {"a.md": {"img.png": 2}})
    assert (summary.total_count, summary.file_count) == (2, 1)


def test_several_notes() -> None:
    index = {"a.md": {"img.png": 2}, "b.md": {"img.png": 1, "x.png": 4}, "c.md": {"x.png": 1}}
    summary = count_references("img.png", index)
    assert (summary.total_count, summary.file_count) == (3, 2)
    assert referencing_counts("img.png", index) == {"a.md": 2, "b.md": 1}


def test_unreferenced_target() -> None:
    summary = count_references("img.png", {"a.md": {}})
    assert (summary.total_count, summary.file_count, summary.files) == (0, 0, [])


def test_counts_follow_the_vault_on_disk(make_vault) -> None:
    root = make_vault({"a.md": "![[img.png]]", "img.png": "x"})
    assert count_references("img.png", Vault.scan(root).resolved_links()).total_count == 1

    # Edits between requests are always picked up.
    (root / "b.md").write_text("[pic](img.png)", encoding="utf-8")
    summary = count_references("img.png", Vault.scan(root).resolved_links())
    assert (summary.total_count, summary.file_count) == (2, 2)
