# Command-line tests for vaultprune.cli.
# The CLI is exercised end to end against throwaway vaults.

from __future__ import annotations

import errno
import json

from typer.testing import CliRunner

from vaultprune import __version__
from vaultprune.cli import app
from vaultprune.vault import Vault

runner = CliRunner()

FILES = {
    "notes/trip.md": "Trip\n![[photo.png]]\n",
    "A/index.md": "",
    "A/B/C/photo.png": "x",
}


def test_version() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_config_set_and_show(make_vault) -> None:
    root = make_vault(FILES)

    result = runner.invoke(app, ["config", "set", "warning-threshold", "0", "--vault", str(root)])
    assert result.exit_code == 0
    assert "warning_threshold = 1" in result.output

    result = runner.invoke(app, ["config", "set", "trash_strategy", "local", "--vault", str(root)])
    assert result.exit_code == 0
    assert "trash_strategy = local" in result.output

    stored = json.loads((root / ".vaultprune.json").read_text(encoding="utf-8"))
    assert stored["warning_threshold"] == 1
    assert stored["trash_strategy"] == "local"

    result = runner.invoke(app, ["config", "show", "--vault", str(root)])
    assert result.exit_code == 0
    assert "local" in result.output


def test_config_set_rejects_unknown_key(make_vault) -> None:
    root = make_vault(FILES)
    result = runner.invoke(app, ["config", "set", "colour", "red", "--vault", str(root)])
    assert result.exit_code != 0


def test_plan_previews_without_deleting(make_vault) -> None:
    root = make_vault(FILES)
    result = runner.invoke(app, ["plan", "A/B/C/photo.png", "--vault", str(root)])

    assert result.exit_code == 0
    assert "2 folder(s) would be removed" in result.output
    assert "Decision: proceed-silently" in result.output
    assert (root / "A" / "B" / "C" / "photo.png").exists()


def test_refs_counts_links(make_vault) -> None:
    root = make_vault(FILES)
    result = runner.invoke(app, ["refs", "A/B/C/photo.png", "--vault", str(root)])

    assert result.exit_code == 0
    assert "Total: 1 link(s) in 1 note(s)" in result.output


def test_delete_then_undo(make_vault) -> None:
    root = make_vault(FILES)
    runner.invoke(app, ["config", "set", "trash_strategy", "local", "--vault", str(root)])
    runner.invoke(app, ["config", "set", "stop_folders", "attachments", "--vault", str(root)])

    result = runner.invoke(
        app, ["delete", "notes/trip.md", "--line", "2", "--col", "3", "--vault", str(root)]
    )
    assert result.exit_code == 0
    assert "Deleted attachment and 2 empty folder(s)" in result.output
    assert not (root / "A" / "B").exists()
    assert (root / "notes" / "trip.md").read_text(encoding="utf-8") == "Trip\n\n"
    assert (root / ".vaultprune-log.csv").exists()

    result = runner.invoke(app, ["undo", "--yes", "--vault", str(root)])
    assert result.exit_code == 0
    assert (root / "A" / "B" / "C" / "photo.png").exists()


def test_delete_busy_exits_nonzero(make_vault, monkeypatch) -> None:
    root = make_vault(FILES)

    def busy(path):
        raise OSError(errno.EBUSY, "Device or resource busy", path)

    # Default strategy is the system trash.
    monkeypatch.setattr("vaultprune.trash.send2trash", busy)

    result = runner.invoke(
        app, ["delete", "notes/trip.md", "--line", "2", "--col", "3", "--vault", str(root)]
    )
    assert result.exit_code == 1
    assert (root / "notes" / "trip.md").read_text(encoding="utf-8") == "Trip\n![[photo.png]]\n"


def test_delete_rejects_conflicting_flags(make_vault) -> None:
    root = make_vault(FILES)
    result = runner.invoke(
        app,
        ["delete", "notes/trip.md", "--line", "2", "--yes", "--file-only", "--vault", str(root)],
    )
    assert result.exit_code != 0


def test_delete_rejects_line_past_end(make_vault) -> None:
    root = make_vault(FILES)
    result = runner.invoke(app, ["delete", "notes/trip.md", "--line", "9", "--vault", str(root)])
    assert result.exit_code != 0


def test_refs_rejects_file_missing_from_scan(make_vault, monkeypatch) -> None:
    root = make_vault(FILES)
    # A file that appears after the scan is not in the snapshot.
    monkeypatch.setattr(Vault, "get_file", lambda self, path: None)

    for command in ("refs", "plan"):
        result = runner.invoke(app, [command, "A/B/C/photo.png", "--vault", str(root)])
        assert result.exit_code != 0
        assert not isinstance(result.exception, AttributeError)
