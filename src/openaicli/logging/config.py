"""Persisted logging preferences (``~/.openaicli/logging.json``)."""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

_LEVEL_KEY = "log_level"


def _config_path(config_file: Optional[os.PathLike[str] | str] = None) -> Path:
    """Return the logging preferences path, honoring ``OPENAICLI_LOG_CONFIG``."""

    if config_file is not None:
        return Path(config_file)
    raw = (os.environ.get("OPENAICLI_LOG_CONFIG") or "").strip()
    if raw:
        return Path(raw).expanduser()
    base = (os.environ.get("OPENAICLI_CONFIG_DIR") or "").strip()
    root = Path(base).expanduser() if base else Path.home() / ".openaicli"
    return root / "logging.json"


def _read(path: Path) -> Dict[str, Any]:
    # An unreadable preferences file falls back to defaults; it never blocks startup.
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError):
        return {}
    return data if isinstance(data, dict) else {}


def level_from_name(level: str | int) -> int:
    """Resolve ``"DEBUG"``/``10`` style values to a numeric level.

    Raises
    ------
    ValueError
        If the value is not a known logging level.
    """

    if isinstance(level, int):
        return level
    candidate = logging.getLevelName(str(level).strip().upper())
    if isinstance(candidate, int):
        return candidate
    raise ValueError(f"Unknown logging level: {level!r}")


def load_log_level(config_file: Optional[os.PathLike[str] | str] = None) -> Optional[int]:
    """Return the saved level, or ``None`` when nothing usable is stored."""

    value = _read(_config_path(config_file)).get(_LEVEL_KEY)
    if value is None:
        return None
    try:
        return level_from_name(value)
    except ValueError:
        return None


def save_log_level(
    level: str | int,
    config_file: Optional[os.PathLike[str] | str] = None,
) -> Path:
    """Persist ``level`` and return the preferences path."""

    numeric = level_from_name(level)
    path = _config_path(config_file)
    data = _read(path)
    data[_LEVEL_KEY] = logging.getLevelName(numeric)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as handle:
        json.dump(data, handle, indent=2, sort_keys=True)
        handle.write("\n")
    return path


__all__ = ["level_from_name", "load_log_level", "save_log_level"]
