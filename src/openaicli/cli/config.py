"""``openaicli config`` subcommands."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from openaicli.config import default_contract, load_settings
from openaicli.errors import ConfigurationError
from openaicli.logging import get_logger


def register_subcommands(subparsers):
    show_parser = subparsers.add_parser("show", help="Show the resolved settings (API key redacted)")
    show_parser.add_argument("--config", default=None, help="config.properties path")
    show_parser.add_argument("--secrets", default=None, help="secret.properties path")

    subparsers.add_parser("keys", help="List the recognised configuration keys")


def dispatch(args) -> int:
    logger = get_logger(__name__)
    console = Console()

    if args.subcommand == "show":
        try:
            settings = load_settings(config_file=args.config, secrets_file=args.secrets)
        except ConfigurationError as exc:
            logger.error("%s", exc)
            return 2
        table = Table(title="openaicli settings")
        table.add_column("Key", style="bold cyan")
        table.add_column("Value", style="green")
        for key, value in settings.redacted().items():
            table.add_row(key, str(value))
        console.print(table)
    elif args.subcommand == "keys":
        table = Table(title="openaicli configuration keys", show_lines=True)
        table.add_column("Key", style="bold cyan")
        table.add_column("Environment", style="magenta")
        table.add_column("Default", style="bright_black")
        table.add_column("Description")
        for spec in default_contract():
            table.add_row(spec.key, spec.env, "(required)" if spec.required else str(spec.default), spec.description)
        console.print(table)
    else:
        logger.error("No handler for config subcommand: %s", args.subcommand)
        return 1
    return 0
