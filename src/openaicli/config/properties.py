"""Reader for ``key=value`` properties files (``config.properties``/``secret.properties``)."""

from __future__ import annotations

from pathlib import Path

from openaicli.errors import ConfigurationError


def parse_properties_text(text: str) -> dict[str, str]:
    """Parse properties-style lines into a dict.

    Supports ``key=value`` and ``key: value`` separators, ``#`` and ``!``
    comment lines and blank lines. Keys and values are stripped; later
    duplicates win.
    """

    parsed: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line[0] in "#!":
            continue

        positions = [pos for pos in (line.find("="), line.find(":")) if pos >= 0]
        if not positions:
            continue
        split_at = min(positions)

        key = line[:split_at].strip()
        if not key:
            continue
        parsed[key] = line[split_at + 1 :].strip()

    return parsed


def load_properties(path: str | Path, *, required: bool = False) -> dict[str, str]:
    """Load a properties file; a missing optional file yields an empty dict."""

    resolved = Path(path).expanduser()
    if not resolved.exists():
        if required:
            raise ConfigurationError(f"Configuration file does not exist: {resolved}")
        return {}
    try:
        text = resolved.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Could not read configuration file {resolved}: {exc}") from exc
    return parse_properties_text(text)
