# Shared fixtures for vaultprune tests.
# Vaults are throwaway directory trees built under tmp_path.

from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict

import pytest


@pytest.fixture
def make_vault(tmp_path: Path) -> Callable[[Dict[str, str]], Path]:
    # Keys are vault-relative paths; a trailing "/" creates an empty folder.
    def _make(files: Dict[str, str]) -> Path:
        root = tmp_path / "vault"
        root.mkdir(exist_ok=True)
        for rel, content in files.items():
            path = root / rel
            if rel.endswith("/"):
                path.mkdir(parents=True, exist_ok=True)
                continue
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return root

    return _make
