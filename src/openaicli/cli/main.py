# openaicli/cli/main.py
import argparse
import sys

from openaicli.cli import chat, code, config, history, logging as logging_cli
from openaicli.cli.env import extract_env_files, load_env_files
from openaicli.logging import get_logger


def build_parser():
    parser = argparse.ArgumentParser(
        prog="openaicli",
        description="Chat with an OpenAI-compatible model from the terminal",
        epilog="Global option: --env-file PATH (repeatable) loads KEY=value files first.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    chat_parser = subparsers.add_parser("chat", help="Start an interactive session")
    chat.register_arguments(chat_parser)

    history_parser = subparsers.add_parser("history", help="Inspect or archive the saved transcript")
    history_subparsers = history_parser.add_subparsers(dest="subcommand", required=True)
    history.register_subcommands(history_subparsers)

    code_parser = subparsers.add_parser("code", help="Code block utilities")
    code_subparsers = code_parser.add_subparsers(dest="subcommand", required=True)
    code.register_subcommands(code_subparsers)

    config_parser = subparsers.add_parser("config", help="Configuration utilities")
    config_subparsers = config_parser.add_subparsers(dest="subcommand", required=True)
    config.register_subcommands(config_subparsers)

    logging_parser = subparsers.add_parser("logging", help="Logging utilities")
    logging_subparsers = logging_parser.add_subparsers(dest="subcommand", required=True)
    logging_cli.register_subcommands(logging_subparsers)

    return parser


def main(argv=None):
    env_files, remaining = extract_env_files(sys.argv[1:] if argv is None else argv)
    if env_files:
        load_env_files(env_files)

    args = build_parser().parse_args(remaining)
    get_logger()

    handlers = {
        "chat": chat.dispatch,
        "history": history.dispatch,
        "code": code.dispatch,
        "config": config.dispatch,
        "logging": logging_cli.dispatch,
    }
    status = handlers[args.command](args)
    if status:
        sys.exit(status)


if __name__ == "__main__":
    main()
