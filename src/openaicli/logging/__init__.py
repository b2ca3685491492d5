"""Logging helpers for openaicli."""

from .logging import get_configured_level, get_logger, reset_logger, set_console_prefix

__all__ = ["get_logger", "reset_logger", "get_configured_level", "set_console_prefix"]
