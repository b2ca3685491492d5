"""Loading of ``KEY=value`` env files passed with ``--env-file``.

Lets the API key and other ``OPENAI_*``/``OPENAICLI_*`` variables live in a
file instead of the shell profile.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import Path
import os


def extract_env_files(argv: Sequence[str]) -> tuple[list[str], list[str]]:
    """Pull ``--env-file`` arguments out of argv.

    Both ``--env-file path`` and ``--env-file=path`` are accepted anywhere
    on the command line; the returned argv no longer contains them.
    """

    env_files: list[str] = []
    remaining: list[str] = []

    tokens = iter(argv)
    for token in tokens:
        if token == "--env-file":
            value = next(tokens, None)
            if value is None:
                raise SystemExit("--env-file requires a file path")
            env_files.append(value)
        elif token.startswith("--env-file="):
            env_files.append(token.split("=", 1)[1])
        else:
            remaining.append(token)

    return env_files, remaining


def _strip_inline_comment(value: str) -> str:
    """Drop a trailing `` # ...`` comment that sits outside quotes."""

    quote: str | None = None
    for idx, ch in enumerate(value):
        if ch in {"'", '"'}:
            if quote is None:
                quote = ch
            elif quote == ch:
                quote = None
        elif ch == "#" and quote is None and (idx == 0 or value[idx - 1].isspace()):
            return value[:idx].rstrip()
    return value.rstrip()


def parse_env_file_text(text: str) -> dict[str, str]:
    parsed: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        line = line.removeprefix("export ").lstrip()

        key, sep, raw_value = line.partition("=")
        key = key.strip()
        if not sep or not key:
            continue

        value = raw_value.strip()
        if len(value) >= 2 and value[0] in {"'", '"'} and value[-1] == value[0]:
            value = value[1:-1]
        else:
            value = _strip_inline_comment(value)
        parsed[key] = value

    return parsed


def load_env_files(paths: Iterable[str | Path], *, override: bool = True) -> dict[str, str]:
    """Load env files into ``os.environ`` in order; later files win."""

    merged: dict[str, str] = {}
    for path in paths:
        resolved = Path(path).expanduser()
        if not resolved.exists():
            raise SystemExit(f"--env-file does not exist: {resolved}")
        parsed = parse_env_file_text(resolved.read_text(encoding="utf-8"))
        for key, value in parsed.items():
            if override or key not in os.environ:
                os.environ[key] = value
        merged.update(parsed)
    return merged
