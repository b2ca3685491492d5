"""Detection and extraction of fenced code blocks in message text.

A block is a triple-backtick opener, an optional language tag (letters and
digits, no separator), arbitrary text and a triple-backtick closer. The body
is matched greedily, so the first opener pairs with the *last* closer in
the text: a message holding several fenced blocks yields one blob spanning
all of them.
"""

from __future__ import annotations

import re
from typing import Iterator

_FENCE_RE = re.compile(r"```([A-Za-z0-9]+)?(.*)```", re.DOTALL)


def _clean(block: str) -> str:
    return block.replace("\\n", "\n").replace('\\"', '"').strip()


def has_code(text: str) -> bool:
    return _FENCE_RE.search(text or "") is not None


def extract_language_tag(text: str) -> str:
    """Return the tag following the first opener, or ``""``."""

    match = _FENCE_RE.search(text or "")
    if match is None:
        return ""
    return match.group(1) or ""


def extract_blocks(text: str) -> Iterator[str]:
    """Yield the cleaned code of every fenced region found in ``text``.

    Each call rescans ``text`` from the start.
    """

    for match in _FENCE_RE.finditer(text or ""):
        yield _clean(match.group(2))
