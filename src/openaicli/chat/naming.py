"""Timestamp based names for archived history files and extracted code files.

Patterns use the date letters of the ``openaicli.filename.dateFormat``
setting (``yyyy-MM-ddHH:mm:ss`` by default):

====  ==========================================
``y`` year (``yy`` gives two digits)
``M`` month (``MMM`` abbreviated name, ``MMMM`` full name)
``d`` day of month
``H`` hour 0-23
``h`` hour 1-12
``m`` minute
``s`` second
``S`` fraction of second, one digit per letter
``a`` AM/PM marker
``E`` weekday name (``EEEE`` for the full name)
====  ==========================================

Text inside single quotes is copied literally (``''`` is a quote). A pattern
containing ``%`` is passed to :meth:`datetime.strftime` unchanged.
"""

from __future__ import annotations

from datetime import datetime
from typing import Callable

from openaicli.errors import ConfigurationError

DEFAULT_DATE_FORMAT = "yyyy-MM-ddHH:mm:ss"

_Part = Callable[[datetime], str]


def _year(dt: datetime, width: int) -> str:
    if width == 2:
        return f"{dt.year % 100:02d}"
    return f"{dt.year:0{width}d}"


def _month(dt: datetime, width: int) -> str:
    if width >= 4:
        return dt.strftime("%B")
    if width == 3:
        return dt.strftime("%b")
    return f"{dt.month:0{width}d}"


def _fraction(dt: datetime, width: int) -> str:
    return f"{dt.microsecond:06d}".ljust(width, "0")[:width]


_FIELDS: dict[str, Callable[[datetime, int], str]] = {
    "y": _year,
    "u": _year,
    "M": _month,
    "d": lambda dt, width: f"{dt.day:0{width}d}",
    "H": lambda dt, width: f"{dt.hour:0{width}d}",
    "h": lambda dt, width: f"{(dt.hour % 12) or 12:0{width}d}",
    "m": lambda dt, width: f"{dt.minute:0{width}d}",
    "s": lambda dt, width: f"{dt.second:0{width}d}",
    "S": _fraction,
    "a": lambda dt, width: dt.strftime("%p"),
    "E": lambda dt, width: dt.strftime("%A" if width >= 4 else "%a"),
}


def _literal(text: str) -> _Part:
    return lambda dt: text


def _field(letter: str, width: int) -> _Part:
    render = _FIELDS[letter]
    return lambda dt: render(dt, width)


def compile_pattern(pattern: str) -> list[_Part]:
    """Split ``pattern`` into renderers.

    Raises
    ------
    ConfigurationError
        On an unknown pattern letter or an unterminated quote.
    """

    parts: list[_Part] = []
    idx = 0
    while idx < len(pattern):
        ch = pattern[idx]
        if ch == "'":
            end = idx + 1
            literal: list[str] = []
            while True:
                if end >= len(pattern):
                    raise ConfigurationError(f"Unterminated quote in date pattern {pattern!r}")
                if pattern[end] == "'":
                    if end + 1 < len(pattern) and pattern[end + 1] == "'":
                        literal.append("'")
                        end += 2
                        continue
                    break
                literal.append(pattern[end])
                end += 1
            parts.append(_literal("".join(literal) if end > idx + 1 else "'"))
            idx = end + 1
        elif ch.isascii() and ch.isalpha():
            run = idx
            while run < len(pattern) and pattern[run] == ch:
                run += 1
            if ch not in _FIELDS:
                raise ConfigurationError(f"Unknown pattern letter {ch!r} in date pattern {pattern!r}")
            parts.append(_field(ch, run - idx))
            idx = run
        else:
            parts.append(_literal(ch))
            idx += 1
    return parts


class FileNamer:
    """Build file names from a timestamp and the configured date pattern.

    Two names produced within the same clock tick are identical; callers
    overwrite rather than de-duplicate.
    """

    def __init__(self, pattern: str = DEFAULT_DATE_FORMAT) -> None:
        self.pattern = pattern
        self._parts = None if "%" in pattern else compile_pattern(pattern)

    def format(self, now: datetime) -> str:
        if self._parts is None:
            return now.strftime(self.pattern)
        return "".join(part(now) for part in self._parts)

    def history_archive_name(self, base_name: str, now: datetime | None = None) -> str:
        return f"{base_name}.{self.format(now or datetime.now())}"

    def code_file_name(self, language_tag: str, now: datetime | None = None) -> str:
        stamp = self.format(now or datetime.now())
        return f"{stamp}.{language_tag}" if language_tag else stamp
