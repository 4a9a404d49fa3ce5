"""Command-line entry point: bootstrap a dispatcher and run the conversation."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from typing import Callable, Optional, Sequence, TextIO

from dotenv import load_dotenv

from aight import __version__
from aight.config import Settings
from aight.dispatcher import Dispatcher
from aight.factory import create_llm
from aight.providers import Provider, api_key_env
from aight.ratelimit import RateLimiter
from aight.registry import ToolRegistry
from aight.retry import RetryPolicy
from aight.thread import Thread
from aight.tools import register_tools
from aight.types import Message

logger = logging.getLogger("aight")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="aight",
        description="Chat with a model that can use your files, SQLite and Python.",
    )
    parser.add_argument(
        "-p", "--prompt", action="append", default=[], metavar="TEXT",
        help="Prompt text; may be repeated. Read from stdin once exhausted.",
    )
    parser.add_argument(
        "-t", "--token",
        help="API token, or $NAME to read environment variable NAME "
             "(default: the provider's API key variable).",
    )
    parser.add_argument("-m", "--model", help="Model to use.")
    parser.add_argument(
        "--provider", choices=[p.value for p in Provider], help="Completion provider.",
    )
    parser.add_argument("-w", "--cwd", help="Working directory (default: .).")
    parser.add_argument("-s", "--system", help="System prompt for a new thread.")
    parser.add_argument("-v", "--verbose", action="store_true", help="Verbose mode.")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def resolve_token(token: Optional[str], provider: Provider) -> str:
    """Return the API token; ``$NAME`` reads environment variable NAME."""
    if token is None:
        token = "$" + api_key_env(provider)

    if not token.startswith("$"):
        return token

    value = os.environ.get(token[1:], "")
    if not value:
        raise RuntimeError(
            f"the environment variable {token[1:]} is not set. "
            "Specify the environment value or pass it via --token flag."
        )
    return value


def prompt_stdin(stream: Optional[TextIO] = None) -> str:
    """Read one non-empty line from *stream* (stdin by default). Raises EOFError at end of input."""
    stream = stream or sys.stdin
    while True:
        print()
        print("λ ", end="", flush=True)
        line = stream.readline()
        if not line:
            raise EOFError
        text = line.strip()
        if text:
            return text


def make_prompt(
    queued: Sequence[str],
    fallback: Optional[Callable[[], str]] = None,
) -> Callable[[], str]:
    """Serve the queued prompts first (echoing them), then defer to *fallback*."""
    pending = list(queued)

    def prompt() -> str:
        if not pending:
            return (fallback or prompt_stdin)()
        text = pending.pop(0)
        print(text, file=sys.stderr)
        return text

    return prompt


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(message)s",
        datefmt="%Y/%m/%d %H:%M:%S",
    )

    # API keys in .env are read through os.environ
    load_dotenv()

    try:
        settings = Settings().with_overrides(
            provider=Provider(args.provider) if args.provider else None,
            model=args.model,
            cwd=args.cwd,
        )
        cwd = os.path.abspath(settings.cwd)
        logger.debug("working directory: %s", cwd)
        os.makedirs(cwd, exist_ok=True)
        os.chdir(cwd)
        settings = settings.with_overrides(cwd=cwd)

        llm = create_llm(
            settings.provider,
            settings.resolved_model,
            api_key=resolve_token(args.token, settings.provider),
            params={"max_tokens": settings.max_tokens},
        )
        registry = register_tools(
            ToolRegistry(),
            cwd,
            interpreter=settings.python,
            exec_timeout=settings.exec_timeout,
        )
        thread = Thread.load(settings.thread_path)
        if args.system and len(thread) == 0:
            thread.append(Message.system(args.system))

        dispatcher = Dispatcher(
            llm,
            registry,
            thread,
            rate_limiter=RateLimiter(settings.rate, settings.burst),
            retry=RetryPolicy(backoff=settings.backoff),
        )
    except (OSError, RuntimeError, ValueError) as exc:
        logger.critical("%s", exc)
        return 1

    try:
        with llm:
            dispatcher.run(make_prompt(args.prompt))
    except (EOFError, KeyboardInterrupt):
        print(file=sys.stderr)
        return 0
    except OSError as exc:
        # losing the thread on disk is not something to carry on from
        logger.critical("cannot persist thread: %s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
