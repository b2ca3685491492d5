# openaicli/logging/logging.py
import os
import logging
import sys
from pathlib import Path

from .config import load_log_level

_DEFAULT_FMT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
_DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"
# Singleton record to track which loggers are already configured
_LOGGER_INITIALIZED = {}
_CONSOLE_FMT = None

def _resolve_log_dir(log_dir=None):
    if log_dir is not None:
        return Path(log_dir)
    return Path(os.environ.get("OPENAICLI_LOG_DIR", Path.home() / ".openaicli" / "logs"))

def _resolve_log_file(log_file=None, log_dir=None):
    if log_file is not None:
        return Path(log_file)
    return _resolve_log_dir(log_dir) / "openaicli.log"

def _is_console_handler(handler):
    return isinstance(handler, logging.StreamHandler) and not isinstance(handler, logging.FileHandler)

def get_logger(
    name="openaicli",
    level=None,
    log_file=None,
    log_dir=None,
    console=True,
    filemode="a",
    fmt=_DEFAULT_FMT,
    datefmt=_DEFAULT_DATEFMT,
    encoding="utf-8",
    propagate=False
):
    """
    Get or create a logger with optional configuration.
    - name: Logger name (default 'openaicli')
    - level: Logging level (default: the level saved with
      ``openaicli logging set-level``, else logging.INFO)
    - log_file: File path for logs (default: <log_dir>/openaicli.log)
    - log_dir: Directory for logs (default: ~/.openaicli/logs)
    - console: If True, logs also go to stderr
    - filemode: File mode for log file ('a' append, 'w' overwrite)
    - fmt, datefmt: Formatting for log messages
    - encoding: Encoding for file log
    - propagate: Whether to propagate to root logger (default False)
    """
    logger = logging.getLogger(name)
    if not _LOGGER_INITIALIZED.get(name, False):
        if level is None:
            level = load_log_level() or logging.INFO
        logger.setLevel(level)
        logger.propagate = propagate

        file_path = _resolve_log_file(log_file, log_dir)
        file_path.parent.mkdir(parents=True, exist_ok=True)

        fh = logging.FileHandler(file_path, mode=filemode, encoding=encoding)
        fh.setFormatter(logging.Formatter(fmt=fmt, datefmt=datefmt))
        logger.addHandler(fh)

        if console:
            ch = logging.StreamHandler(sys.stderr)
            ch.setFormatter(logging.Formatter(fmt=_CONSOLE_FMT or fmt, datefmt=datefmt))
            logger.addHandler(ch)

        _LOGGER_INITIALIZED[name] = True

    return logger


def set_console_prefix(prefix):
    """Make console log lines read ``<prefix> <message>``.

    Applies to loggers already configured by :func:`get_logger` and to
    those configured later. ``None`` restores the default format.
    """
    global _CONSOLE_FMT
    _CONSOLE_FMT = f"{prefix} %(message)s" if prefix else None
    formatter = logging.Formatter(fmt=_CONSOLE_FMT or _DEFAULT_FMT, datefmt=_DEFAULT_DATEFMT)
    for name in _LOGGER_INITIALIZED:
        for handler in logging.getLogger(name).handlers:
            if _is_console_handler(handler):
                handler.setFormatter(formatter)


def reset_logger(name=None):
    """Reset configured loggers so they can be reconfigured.

    Parameters
    ----------
    name : str, optional
        Name of the logger to reset. If omitted, all loggers tracked by
        :func:`get_logger` are reset.

    Examples
    --------
    >>> logger = get_logger("demo", level=logging.DEBUG)
    >>> reset_logger("demo")
    >>> logger = get_logger("demo", level=logging.INFO)
    """
    if name is None:
        names = list(_LOGGER_INITIALIZED.keys())
    else:
        names = [name]

    for n in names:
        logger = logging.getLogger(n)
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

    if name is None:
        _LOGGER_INITIALIZED.clear()
    else:
        _LOGGER_INITIALIZED.pop(name, None)


def get_configured_level(name="openaicli"):
    """Return the configured logging level name for ``name``."""

    level = logging.getLogger(name).getEffectiveLevel()
    return logging.getLevelName(level)
