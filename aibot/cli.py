"""
Command line interface.

Usage:
    aibot bot                      run the Telegram bot (long polling)
    aibot index <path-or-url>      index a local document or a document URL
    aibot ask <question...>        answer a question from indexed documents
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

from loguru import logger

from aibot import __version__
from aibot.bot_service import build_assistant
from aibot.bot_service import main as run_bot
from aibot.errors import AIBotError, ConfigurationError
from aibot.logging_config import configure_logging
from aibot.services.assistant import AnswerStatus, Assistant, IndexResult, IndexStatus
from aibot.services.chat import messages
from aibot.services.documents.classifier import is_url
from aibot.settings import (
    ASSISTANT_REQUIRED_SETTINGS,
    BOT_REQUIRED_SETTINGS,
    Settings,
    settings,
)


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all sub-commands."""
    parser = argparse.ArgumentParser(
        prog="aibot",
        description="Chat assistant that indexes documents and answers questions about them",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser(
        "bot", aliases=["aibot"], help="Run the Telegram bot (long polling)"
    )

    index_parser = subparsers.add_parser(
        "index", help="Index a local PDF/JSON/XML file or a document URL"
    )
    index_parser.add_argument("source", help="File path or http(s) URL")

    ask_parser = subparsers.add_parser(
        "ask", help="Answer a question from the indexed documents"
    )
    ask_parser.add_argument("question", nargs="+", help="Question text")

    return parser


def _print_index_result(result: IndexResult) -> int:
    if result.status == IndexStatus.UNSUPPORTED:
        print(messages.UNSUPPORTED_FILE_MESSAGE)
        return 1
    if result.status == IndexStatus.NO_TEXT:
        print(messages.NO_TEXT_MESSAGE)
        return 1
    print(f"Indexed {result.source} as record {result.record_id}")
    return 0


async def run_index(assistant: Assistant, source: str) -> int:
    """Index one document and report the outcome."""
    if is_url(source):
        result = await assistant.index_url(source)
    else:
        path = Path(source)
        if not path.is_file():
            print(f"File not found: {source}", file=sys.stderr)
            return 1
        result = await assistant.index_path(path)
    return _print_index_result(result)


async def run_ask(assistant: Assistant, question: str) -> int:
    """Answer one question and print the answer."""
    result = await assistant.answer(question)
    if result.status == AnswerStatus.EMPTY_QUERY:
        print(messages.EMPTY_QUERY_MESSAGE)
        return 1
    if result.status == AnswerStatus.NO_MATCHES:
        print(messages.NO_MATCHES_MESSAGE)
        return 0
    print(result.answer)
    return 0


def _run_command(args: argparse.Namespace, config: Settings) -> int:
    if args.command in ("bot", "aibot"):
        asyncio.run(run_bot(config))
        return 0

    if args.command == "index":
        return asyncio.run(run_index(build_assistant(config), args.source))

    return asyncio.run(run_ask(build_assistant(config), " ".join(args.question)))


def main(argv: Optional[List[str]] = None, config: Settings = settings) -> int:
    """
    Run the CLI.

    :param argv: arguments, defaults to ``sys.argv[1:]``
    :param config: application settings
    :return: process exit code
    """
    args = build_parser().parse_args(argv)
    configure_logging()

    try:
        if args.command in ("bot", "aibot"):
            config.validate_required(BOT_REQUIRED_SETTINGS)
        else:
            config.validate_required(ASSISTANT_REQUIRED_SETTINGS)
        return _run_command(args, config)
    except ConfigurationError as e:
        logger.critical(str(e))
        return 1
    except AIBotError as e:
        logger.error(str(e))
        print(e.user_message, file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt, shutting down...")
        return 0


if __name__ == "__main__":
    sys.exit(main())
