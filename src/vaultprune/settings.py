# Persisted configuration for vaultprune.
# Settings live in a JSON file at the vault root. Stored values are merged
# over the defaults on load; every change is written back immediately.

from __future__ import annotations

import json
import re
from dataclasses import asdict, fields, replace
from pathlib import Path
from typing import Any, Dict

from vaultprune.models import Settings, TrashStrategy

DEFAULT_SETTINGS_NAME = ".vaultprune.json"

_TRUE = {"1", "true", "yes", "on"}
_FALSE = {"0", "false", "no", "off"}

# Leading integer, the way a lenient number parser reads "3 levels" or "2.5".
_LEADING_INT_RE = re.compile(r"^\s*([-+]?\d+)")


def settings_path(vault_root: Path) -> Path:
    return vault_root / DEFAULT_SETTINGS_NAME


def load_settings_data(path: Path) -> Dict[str, Any]:
    # Return whatever was stored, possibly partial. A missing file is empty.
    if not path.exists():
        return {}
    data = json.loads(path.read_text(encoding="utf-8") or "{}")
    if not isinstance(data, dict):
        raise ValueError(f"Settings file must hold a JSON object: {path}")
    return data


def load_settings(path: Path) -> Settings:
    # Merge stored values over defaults. Unknown keys are ignored.
    settings = Settings()
    known = {f.name for f in fields(Settings)}
    for key, value in load_settings_data(path).items():
        if key in known:
            settings = replace(settings, **{key: coerce_value(key, value)})
    return settings


def save_settings(path: Path, settings: Settings) -> None:
    data = asdict(settings)
    data["trash_strategy"] = settings.trash_strategy.value
    path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")


def update_setting(path: Path, key: str, raw: Any) -> Settings:
    # Apply one change and persist it.
    known = {f.name for f in fields(Settings)}
    if key not in known:
        raise KeyError(key)
    settings = replace(load_settings(path), **{key: coerce_value(key, raw)})
    save_settings(path, settings)
    return settings


def coerce_value(key: str, value: Any) -> Any:
    # Turn stored JSON or command-line text into the field's type.
    if key in ("enable_cascade", "enable_warning"):
        return _to_bool(value)
    if key == "warning_threshold":
        return _to_threshold(value)
    if key == "trash_strategy":
        return TrashStrategy(str(value).strip().lower())
    return str(value)


def _to_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise ValueError(f"Not a boolean: {value!r}")


def _to_threshold(value: Any) -> int:
    # Unparsable or non-positive thresholds fall back to 1.
    if isinstance(value, bool):
        return 1
    match = _LEADING_INT_RE.match(str(value))
    if not match:
        return 1
    num = int(match.group(1))
    return num if num >= 1 else 1
