"""Exception hierarchy shared by the engine, the storage layer and the CLI."""

from __future__ import annotations


class OpenAICLIError(Exception):
    """Base class for every error raised by :mod:`openaicli`."""


class ConfigurationError(OpenAICLIError):
    """Missing or invalid configuration (for example an absent API key)."""


class StorageError(OpenAICLIError, OSError):
    """A history or code file could not be created, read, written or renamed."""


class CorruptHistoryError(StorageError):
    """The persisted history could not be decoded into messages."""


class CompletionServiceError(OpenAICLIError):
    """The remote completion call failed (transport, auth, rate limit, payload)."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class EngineError(OpenAICLIError):
    """Failure of a single engine operation, surfaced to the front end."""


__all__ = [
    "OpenAICLIError",
    "ConfigurationError",
    "StorageError",
    "CorruptHistoryError",
    "CompletionServiceError",
    "EngineError",
]
