"""``openaicli history`` subcommands: inspect or archive the persisted transcript."""

from __future__ import annotations

from collections.abc import Sequence

from rich.console import Console
from rich.table import Table

from openaicli.chat.history import HistoryStore
from openaicli.chat.models import Message, Role
from openaicli.chat.naming import FileNamer
from openaicli.config import load_settings
from openaicli.errors import OpenAICLIError
from openaicli.logging import get_logger


def _add_config_arguments(parser) -> None:
    parser.add_argument("--config", default=None, help="config.properties path")
    parser.add_argument("--secrets", default=None, help="secret.properties path")
    parser.add_argument(
        "--file",
        default=None,
        help="History file (default: openaicli.filename.history, else ./history)",
    )


def register_subcommands(subparsers):
    """Attach ``show`` and ``wipe`` to ``subparsers``.

    Examples
    --------
    >>> import argparse
    >>> parser = argparse.ArgumentParser(prog="openaicli history")
    >>> subparsers = parser.add_subparsers(dest="subcommand", required=True)
    >>> register_subcommands(subparsers)
    >>> args = parser.parse_args(["show", "--file", "history", "--limit", "4"])
    >>> (args.subcommand, args.file, args.limit)
    ('show', 'history', 4)
    """

    show_parser = subparsers.add_parser("show", help="Print the persisted transcript")
    _add_config_arguments(show_parser)
    show_parser.add_argument("--limit", type=int, default=None, help="Only show the last N messages")

    wipe_parser = subparsers.add_parser("wipe", help="Archive the history file and start a fresh one")
    _add_config_arguments(wipe_parser)
    wipe_parser.add_argument(
        "--date-format",
        default=None,
        help="Pattern for the archive suffix (default: openaicli.filename.dateFormat)",
    )


def dispatch(args) -> int:
    logger = get_logger(__name__)
    store = HistoryStore()

    try:
        settings = load_settings(
            config_file=args.config,
            secrets_file=args.secrets,
            overrides={
                "history_file": args.file,
                "date_format": getattr(args, "date_format", None),
            },
            require_credentials=False,
        )
        path = settings.history_file

        if args.subcommand == "show":
            if not path.exists():
                logger.error("History file does not exist: %s", path)
                return 1
            messages = store.load(path)
            if args.limit is not None:
                messages = messages[-args.limit:] if args.limit > 0 else []
            _render_transcript(messages, title=str(path))
        elif args.subcommand == "wipe":
            store.archive_and_reset(path, FileNamer(settings.date_format))
        else:
            logger.error("No handler for history subcommand: %s", args.subcommand)
            return 1
    except OpenAICLIError as exc:
        logger.error("%s", exc)
        return 1
    return 0


def _render_transcript(
    messages: Sequence[Message],
    title: str,
    console: Console | None = None,
) -> None:
    """Pretty-print ``messages`` using ``rich``."""

    if console is None:
        console = Console()

    table = Table(title=title, show_lines=True)
    table.add_column("#", justify="right", style="bright_black")
    table.add_column("Role", style="bold cyan")
    table.add_column("Content")

    if not messages:
        table.add_row("", "[dim]-[/dim]", "[dim]No messages[/dim]")

    for index, message in enumerate(messages, start=1):
        role = "You" if message.role is Role.USER else "ChatGPT"
        table.add_row(str(index), role, message.content)

    console.print(table)
