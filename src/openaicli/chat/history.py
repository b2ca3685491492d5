"""Durable storage for the transcript and for extracted code files.

The history file is JSON Lines: one :meth:`Message.to_record` object per
line. Every save rewrites the whole file.
"""

from __future__ import annotations

import json
import os
from collections.abc import Iterable
from datetime import datetime
from pathlib import Path

from openaicli.errors import CorruptHistoryError, StorageError
from openaicli.logging import get_logger

from .models import Message
from .naming import FileNamer

logger = get_logger(__name__)


class HistoryStore:
    """Load, save and archive the persisted transcript."""

    def ensure_exists(self, path: str | Path) -> Path:
        """Return ``path``, creating an empty file when it is absent.

        Raises
        ------
        StorageError
            If the file cannot be created (missing or inaccessible parent).
        """

        path = Path(path)
        if path.exists():
            logger.debug("History file already exists: %s", path)
            return path
        try:
            path.touch(exist_ok=True)
        except OSError as exc:
            raise StorageError(f"couldn't create the history file {path}: {exc}") from exc
        logger.info("History file created: %s", path)
        return path

    def load(self, path: str | Path) -> list[Message]:
        """Decode every record of the history file.

        Raises
        ------
        StorageError
            If the file cannot be read.
        CorruptHistoryError
            If a line is not a valid message record.
        """

        path = Path(path)
        try:
            with path.open("r", encoding="utf-8") as handle:
                lines = handle.readlines()
        except UnicodeDecodeError as exc:
            raise CorruptHistoryError(f"history file {path} is not UTF-8 text: {exc}") from exc
        except OSError as exc:
            raise StorageError(f"couldn't read the history file {path}: {exc}") from exc

        messages: list[Message] = []
        for lineno, line in enumerate(lines, start=1):
            if not line.strip():
                continue
            try:
                record = json.loads(line)
            except json.JSONDecodeError as exc:
                raise CorruptHistoryError(f"{path}:{lineno}: invalid JSON ({exc.msg})") from exc
            try:
                messages.append(Message.from_record(record))
            except CorruptHistoryError as exc:
                raise CorruptHistoryError(f"{path}:{lineno}: {exc}") from exc

        logger.debug("Loaded %s message(s) from %s", len(messages), path)
        return messages

    def save(self, path: str | Path, messages: Iterable[Message]) -> None:
        """Overwrite ``path`` with one record per message.

        The content is written to a sibling temporary file first and moved
        into place, so a failed save leaves the previous file untouched.
        """

        path = Path(path)
        tmp_path = path.with_name(f".{path.name}.tmp")
        try:
            with tmp_path.open("w", encoding="utf-8") as handle:
                count = 0
                for message in messages:
                    handle.write(json.dumps(message.to_record(), ensure_ascii=False))
                    handle.write("\n")
                    count += 1
            os.replace(tmp_path, path)
        except OSError as exc:
            tmp_path.unlink(missing_ok=True)
            raise StorageError(f"couldn't write the history file {path}: {exc}") from exc
        logger.info("Saved %s message(s) to %s", count, path)

    def archive_and_reset(
        self,
        path: str | Path,
        namer: FileNamer,
        now: datetime | None = None,
    ) -> Path:
        """Rename the history file aside and start a fresh empty one.

        A failed rename is logged and otherwise ignored; the old content is
        then overwritten by the next :meth:`save`.
        """

        path = Path(path)
        archived = path.with_name(namer.history_archive_name(path.name, now))
        try:
            path.rename(archived)
        except OSError as exc:
            logger.warning("History file renaming failed (%s -> %s): %s", path, archived, exc)
        else:
            logger.info("History file archived as %s", archived)
        return self.ensure_exists(path)

    def write_code_file(self, directory: str | Path, name: str, blocks: Iterable[str]) -> Path:
        """Write each code block followed by a newline to ``directory/name``."""

        target = Path(directory) / name
        try:
            with target.open("w", encoding="utf-8") as handle:
                for block in blocks:
                    handle.write(block)
                    handle.write("\n")
        except OSError as exc:
            raise StorageError(f"couldn't write the code file {target}: {exc}") from exc
        logger.info("Code written to %s", target)
        return target
