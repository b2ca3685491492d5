"""Interactive terminal front end (``openaicli chat``).

Reads one line per turn, prints the reply as ``ChatGPT: <content>`` and
stops on ``QUIT`` (or end of input). Engine failures are reported and the
loop keeps going; the user retries by typing again.
"""

from __future__ import annotations

import sys
from typing import Callable, TextIO

from openaicli.chat.engine import Continue, ConversationEngine, Stopped
from openaicli.config import load_settings
from openaicli.errors import ConfigurationError, EngineError, StorageError
from openaicli.logging import get_logger, set_console_prefix

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_STORAGE = 1
EXIT_CONFIG = 2


def register_arguments(parser) -> None:
    parser.add_argument("--config", default=None, help="config.properties path (default: ~/.openaicli/config.properties)")
    parser.add_argument("--secrets", default=None, help="secret.properties path (default: ~/.openaicli/secret.properties)")
    parser.add_argument("--model", default=None, help="Model identifier (overrides openai.model)")
    parser.add_argument("--max-tokens", type=int, default=None, help="Token budget per reply (overrides openai.maxTokens)")
    parser.add_argument("--history-file", default=None, help="History file path (overrides openaicli.filename.history)")
    parser.add_argument(
        "--no-code-files",
        action="store_true",
        help="Do not write code blocks from replies to files.",
    )
    parser.add_argument(
        "--no-log-history",
        action="store_true",
        help="Do not record turns in the transcript.",
    )
    parser.add_argument(
        "--no-send-history",
        action="store_true",
        help="Send only the current message to the model.",
    )
    parser.add_argument(
        "--toggle",
        action="append",
        default=[],
        metavar="OPTION",
        help="Flip a named option at startup (e.g. disableSendingChatGPTHistory). Repeatable.",
    )


def build_engine(args) -> ConversationEngine:
    """Resolve settings from ``args`` and build a ready engine.

    Raises
    ------
    ConfigurationError
        On missing or invalid configuration.
    StorageError
        If the history file cannot be created or decoded.
    """

    overrides = {
        "model": args.model,
        "max_tokens": args.max_tokens,
        "history_file": args.history_file,
    }
    settings = load_settings(config_file=args.config, secrets_file=args.secrets, overrides=overrides)
    set_console_prefix(settings.header)

    engine = ConversationEngine.from_settings(settings)
    if args.no_code_files:
        engine.set_option("disableOutputCodeToFile", True)
    if args.no_log_history:
        engine.set_option("disableLoggingChatGPTHistory", True)
    if args.no_send_history:
        engine.set_option("disableSendingChatGPTHistory", True)
    for name in args.toggle:
        engine.flip_option(name)
    return engine


TOGGLE_COMMAND = ":toggle"


def _toggle(engine: ConversationEngine, argument: str, out: TextIO, err: TextIO) -> None:
    """Flip the option named by ``argument``, or list the options when it is empty."""

    if not argument:
        for name, value in engine.options.as_dict().items():
            print(f"{name} = {str(value).lower()}", file=out)
        return
    try:
        value = engine.flip_option(argument)
    except ConfigurationError as exc:
        print(f"Oooops, {exc}", file=err)
        return
    print(f"{argument} = {str(value).lower()}", file=out)


def _quit(engine: ConversationEngine, err: TextIO) -> int:
    try:
        engine.submit("QUIT")
    except EngineError as exc:
        print(f"Oooops, {exc}", file=err)
        return EXIT_STORAGE
    return EXIT_OK


def run_repl(
    engine: ConversationEngine,
    *,
    read_line: Callable[[str], str] = input,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> int:
    """Drive ``engine`` until it stops; return the process exit code.

    ``:toggle NAME`` flips a session option and ``:toggle`` lists them.
    End of input and Ctrl-C, at the prompt or while waiting for a reply,
    end the session like ``QUIT``.
    """

    out = out or sys.stdout
    err = err or sys.stderr

    while True:
        try:
            line = read_line("You: ")
        except (EOFError, KeyboardInterrupt):
            print(file=out)
            return _quit(engine, err)

        head, _, argument = line.strip().partition(" ")
        if head.lower() == TOGGLE_COMMAND:
            _toggle(engine, argument.strip(), out, err)
            continue

        try:
            result = engine.submit(line)
        except KeyboardInterrupt:
            print(file=out)
            return _quit(engine, err)
        except EngineError as exc:
            print(f"Oooops, {exc}", file=err)
            continue

        if isinstance(result, Stopped):
            return EXIT_OK
        if isinstance(result, Continue) and result.message is not None:
            print(f"ChatGPT: {result.message.content}", file=out)


def dispatch(args) -> int:
    try:
        engine = build_engine(args)
    except ConfigurationError as exc:
        logger.error("couldn't start up the CLI: %s", exc)
        return EXIT_CONFIG
    except StorageError as exc:
        logger.error("couldn't read the history file: %s", exc)
        return EXIT_STORAGE
    return run_repl(engine)
