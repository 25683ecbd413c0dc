# Unit tests for vaultprune.vault.
# These tests validate the tree snapshot, link resolution and the link index.

from __future__ import annotations

import pytest

from vaultprune.vault import FileNode, FolderNode, Vault


def test_scan_builds_tree_with_back_links(make_vault) -> None:
    root = make_vault({"A/B/photo.png": "x", "A/index.md": ""})
    vault = Vault.scan(root)

    photo = vault.get_file("A/B/photo.png")
    assert isinstance(photo, FileNode)
    assert photo.parent.path == "A/B"
    assert photo.parent.parent.path == "A"
    assert photo.parent.parent.parent is vault.root
    assert vault.root.is_root()
    assert not photo.parent.is_root()
    assert [c.name for c in vault.get("A").children] == ["B", "index.md"]


def test_scan_rejects_missing_directory(tmp_path) -> None:
    with pytest.raises(NotADirectoryError):
        Vault.scan(tmp_path / "nope")


def test_resolve_link_by_name_anywhere(make_vault) -> None:
    root = make_vault({"notes/trip.md": "", "assets/2024/photo.png": "x"})
    vault = Vault.scan(root)
    assert vault.resolve_link("photo.png", "notes/trip.md").path == "assets/2024/photo.png"


def test_resolve_link_relative_to_note_first(make_vault) -> None:
    root = make_vault({
        "notes/trip.md": "",
        "notes/img/a.png": "near",
        "img/a.png": "far",
    })
    vault = Vault.scan(root)
    assert vault.resolve_link("img/a.png", "notes/trip.md").path == "notes/img/a.png"
    assert vault.resolve_link("./img/a.png", "notes/trip.md").path == "notes/img/a.png"
    assert vault.resolve_link("/img/a.png", "notes/trip.md").path == "img/a.png"


def test_resolve_link_prefers_markdown_for_bare_names(make_vault) -> None:
    root = make_vault({"other.md": "", "other": "bare", "notes/trip.md": ""})
    vault = Vault.scan(root)
    assert vault.resolve_link("other", "notes/trip.md").path == "other.md"
    assert vault.resolve_link("other#Heading", "notes/trip.md").path == "other.md"


def test_resolve_link_shortest_path_wins(make_vault) -> None:
    root = make_vault({"a/b/x.png": "", "a/x.png": "", "n.md": ""})
    vault = Vault.scan(root)
    assert vault.resolve_link("x.png", "n.md").path == "a/x.png"


def test_resolve_link_ignores_case_in_name_lookup(make_vault) -> None:
    root = make_vault({"assets/photo.png": "x", "n.md": ""})
    vault = Vault.scan(root)
    assert vault.resolve_link("Photo.PNG", "n.md").path == "assets/photo.png"


def test_resolve_link_skips_hidden_folders_and_escapes(make_vault) -> None:
    root = make_vault({".trash/gone.png": "x", "notes/trip.md": ""})
    vault = Vault.scan(root)
    assert vault.resolve_link("gone.png", "notes/trip.md") is None
    assert vault.resolve_link("../../outside.png", "notes/trip.md") is None
    assert vault.resolve_link("", "notes/trip.md") is None


def test_resolved_links_counts_every_occurrence(make_vault) -> None:
    root = make_vault({
        "notes/trip.md": "![[photo.png]] and again ![[photo.png|small]]\n[map](map.pdf)",
        "notes/empty.md": "no links here",
        "assets/photo.png": "x",
        "assets/map.pdf": "x",
        ".obsidian/ignored.md": "![[photo.png]]",
    })
    index = Vault.scan(root).resolved_links()
    assert index == {
        "notes/empty.md": {},
        "notes/trip.md": {"assets/photo.png": 2, "assets/map.pdf": 1},
    }


def test_iter_documents_only_visible_markdown(make_vault) -> None:
    root = make_vault({"a.md": "", "b.png": "", ".obsidian/c.md": "", "d/e.md": ""})
    docs = sorted(d.path for d in Vault.scan(root).iter_documents())
    assert docs == ["a.md", "d/e.md"]


def test_abspath_and_relpath_round_trip(make_vault) -> None:
    root = make_vault({"A/b.png": ""})
    vault = Vault.scan(root)
    assert vault.abspath("A/b.png") == root / "A" / "b.png"
    assert vault.abspath("") == root
    assert vault.relpath(root / "A" / "b.png") == "A/b.png"
    assert vault.relpath(root.parent) is None
    assert isinstance(vault.get("A"), FolderNode)
