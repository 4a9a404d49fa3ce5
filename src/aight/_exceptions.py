"""
Exception hierarchy for aight, plus helpers that turn noisy exceptions into
the one-line messages shown to the operator and to the model.
"""

from __future__ import annotations

import logging
from typing import Final, Optional, Type

import anthropic
import openai

__all__: tuple[str, ...] = (
    "AightError",
    "PathEscapeError",
    "ArgumentDecodeError",
    "ToolNotFoundError",
    "ToolExecutionError",
    "DuplicateToolError",
    "ProviderError",
    "classify_error",
    "flatten_error",
)


class AightError(RuntimeError):
    """Base class for all errors raised by aight itself."""


class PathEscapeError(AightError):
    """A tool argument tried to leave the working directory."""


class ArgumentDecodeError(AightError):
    """A tool call payload could not be decoded into the tool's argument model."""


class ToolNotFoundError(AightError):
    """The model asked for a tool that is not registered."""

    def __init__(self, name: str) -> None:
        super().__init__("function not found")
        self.name = name


class ToolExecutionError(AightError):
    """A tool ran but reported failure (non-zero exit status and the like)."""


class DuplicateToolError(AightError):
    """The same tool name was registered twice."""


class ProviderError(AightError):
    """A completion request failed.

    Raised per failed attempt and retried by ``RetryPolicy``; it reaches the
    caller only once a bounded policy gives up.

    Attributes:
        attempts: How many requests had been issued when this one failed.
    """

    def __init__(self, message: str, attempts: int) -> None:
        super().__init__(message)
        self.attempts = attempts


RATE_LIMIT_ERRORS: Final[tuple[Type[Exception], ...]] = (
    openai.RateLimitError,
    anthropic.RateLimitError,
)

CONN_ERRORS: Final[tuple[Type[Exception], ...]] = (
    openai.APIConnectionError,
    anthropic.APIConnectionError,
    TimeoutError,
    ConnectionError,
)

API_ERRORS: Final[tuple[Type[Exception], ...]] = (
    openai.APIError,
    anthropic.APIError,
)


def classify_error(
    exc: Exception,
    logger: Optional[logging.Logger] = None,
) -> str:
    """Return a friendly, concise message for a provider SDK exception."""
    log = logger or logging.getLogger("aight.exceptions")

    if isinstance(exc, RATE_LIMIT_ERRORS):
        msg = "Rate‑limit exceeded"
    elif isinstance(exc, CONN_ERRORS):
        msg = "Connection problem – unable to reach the LLM provider"
    elif isinstance(exc, API_ERRORS):
        status = getattr(exc, "status_code", None)
        msg = f"API error ({status})" if status else "Provider reported an error"
    else:
        msg = exc.__class__.__name__

    log.debug("Classified provider exception", exc_info=exc)
    return f"{msg}: {exc}"


def flatten_error(exc: BaseException) -> str:
    """Render an exception and its explicit causes as a single line."""
    parts: list[str] = []
    current: Optional[BaseException] = exc
    while current is not None:
        text = str(current) or current.__class__.__name__
        if not parts or text not in parts[-1]:
            parts.append(text)
        current = current.__cause__
    return ": ".join(parts)
