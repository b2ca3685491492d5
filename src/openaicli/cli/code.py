"""``openaicli code`` subcommands: run the code block extractor on a file."""

from __future__ import annotations

import sys
from pathlib import Path

from openaicli.chat import code_blocks
from openaicli.chat.history import HistoryStore
from openaicli.chat.naming import DEFAULT_DATE_FORMAT, FileNamer
from openaicli.errors import OpenAICLIError
from openaicli.logging import get_logger


def register_subcommands(subparsers):
    extract_parser = subparsers.add_parser(
        "extract", help="Print the fenced code found in a saved reply"
    )
    extract_parser.add_argument("file", nargs="?", default="-", help="Input file, or '-' for stdin (default)")
    extract_parser.add_argument("--write", action="store_true", help="Also write the code to a timestamped file")
    extract_parser.add_argument("--output-dir", default=".", help="Directory for --write (default: .)")
    extract_parser.add_argument("--date-format", default=DEFAULT_DATE_FORMAT, help="File name pattern for --write")


def _read_input(name: str) -> str:
    if name == "-":
        return sys.stdin.read()
    return Path(name).read_text(encoding="utf-8")


def dispatch(args) -> int:
    logger = get_logger(__name__)

    if args.subcommand != "extract":
        logger.error("No handler for code subcommand: %s", args.subcommand)
        return 1

    try:
        text = _read_input(args.file)
    except OSError as exc:
        logger.error("couldn't read %s: %s", args.file, exc)
        return 1

    if not code_blocks.has_code(text):
        logger.warning("No fenced code found in %s", args.file)
        return 1

    tag = code_blocks.extract_language_tag(text)
    print(f"language: {tag or '(none)'}")
    for block in code_blocks.extract_blocks(text):
        print(block)

    if args.write:
        name = FileNamer(args.date_format).code_file_name(tag)
        try:
            HistoryStore().write_code_file(args.output_dir, name, code_blocks.extract_blocks(text))
        except OpenAICLIError as exc:
            logger.error("%s", exc)
            return 1
    return 0
