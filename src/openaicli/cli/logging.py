"""``openaicli logging`` subcommands."""

from openaicli.logging import get_configured_level, get_logger, reset_logger
from openaicli.logging.config import level_from_name, save_log_level
from openaicli.logging.logging import _resolve_log_file


def register_subcommands(subparsers):
    """Register logging subcommands on ``subparsers``."""

    set_level_parser = subparsers.add_parser(
        "set-level", help="Persist the logging level used at startup"
    )
    set_level_parser.add_argument(
        "level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level to use",
    )

    subparsers.add_parser("show-path", help="Show the log file location")
    subparsers.add_parser("show-level", help="Show the configured logging level")


def dispatch(args):
    """Execute the logging command named by ``args.subcommand``."""

    if args.subcommand == "set-level":
        path = save_log_level(args.level)
        reset_logger()
        get_logger(level=level_from_name(args.level), console=False)
        print(f"Logging level {args.level.upper()} saved to {path}")
    elif args.subcommand == "show-path":
        print(_resolve_log_file().resolve())
    elif args.subcommand == "show-level":
        print(get_configured_level())
    else:
        get_logger(__name__).error("No handler for subcommand: %s", args.subcommand)
