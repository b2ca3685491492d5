"""Message value types and their persisted record schema."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from openaicli.errors import CorruptHistoryError

RECORD_SCHEMA_VERSION = 1


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


@dataclass(frozen=True)
class Message:
    """A single message in a conversation."""

    role: Role
    content: str

    @classmethod
    def user(cls, content: str) -> "Message":
        return cls(Role.USER, content)

    @classmethod
    def assistant(cls, content: str) -> "Message":
        return cls(Role.ASSISTANT, content)

    def to_payload(self) -> dict[str, str]:
        """Chat-completions wire shape (``{"role", "content"}``)."""

        return {"role": self.role.value, "content": self.content}

    def to_record(self) -> dict[str, Any]:
        """Versioned record used by the history file."""

        return {
            "schema_version": RECORD_SCHEMA_VERSION,
            "role": self.role.value,
            "content": self.content,
        }

    @classmethod
    def from_record(cls, record: Mapping[str, Any]) -> "Message":
        """Rebuild a message from :meth:`to_record` output.

        Raises
        ------
        CorruptHistoryError
            If the record is not a mapping, has an unknown schema version or
            role, or lacks a string ``content``.
        """

        if not isinstance(record, Mapping):
            raise CorruptHistoryError(f"history record must be an object, got {type(record).__name__}")

        version = record.get("schema_version")
        if version != RECORD_SCHEMA_VERSION:
            raise CorruptHistoryError(f"unsupported history schema version: {version!r}")

        try:
            role = Role(record.get("role"))
        except ValueError:
            raise CorruptHistoryError(f"unknown message role: {record.get('role')!r}") from None

        content = record.get("content")
        if not isinstance(content, str):
            raise CorruptHistoryError("history record is missing string content")

        return cls(role, content)
