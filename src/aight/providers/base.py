"""Base class for completion providers."""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional, Protocol, Sequence

from aight._exceptions import classify_error
from aight.types import ChatResponse, Message, ToolDefinition

__all__ = ["BaseLLM", "RequestAdapter"]


class RequestAdapter(Protocol):
    """Protocol for adapting thread messages to a provider's wire format and back."""

    def to_provider(
        self,
        messages: Sequence[Message],
        tools: Sequence[ToolDefinition],
        params: dict[str, Any],
    ) -> dict[str, Any]:
        """Build provider request kwargs."""
        ...

    def from_provider(self, raw: Any) -> ChatResponse:
        """Convert a provider response to a ChatResponse."""
        ...


class BaseLLM(ABC):
    """
    Completion capability: given the conversation and the tool catalogue,
    return either assistant text or a batch of tool calls.

    ``complete`` never raises for provider failures; it returns an error
    ``ChatResponse`` and leaves retrying to the caller.
    """

    def __init__(
        self,
        model: str,
        *,
        params: Optional[dict[str, Any]] = None,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
    ) -> None:
        """
        Args:
            model: The identifier of the LLM model to be used.
            params: Extra request parameters (``max_tokens``, ``temperature``...)
                    sent with every request.
            logger: Optional logger instance. If None, a logger named after
                    this module will be used.
            name: Optional name for this component, used in logging.
                  If None, defaults to the concrete class's name.
        """
        self.model = model
        self.params = dict(params or {})
        self.logger = logger or logging.getLogger(__name__)
        self.name = name if name is not None else self.__class__.__name__

    @property
    @abstractmethod
    def adapter(self) -> RequestAdapter:
        """Request adapter for this provider."""
        ...

    @abstractmethod
    def _chat_impl(self, request: dict[str, Any]) -> Any:
        """Send one request built by the adapter and return the raw provider response."""
        ...

    def complete(
        self,
        messages: Sequence[Message],
        tools: Sequence[ToolDefinition] = (),
    ) -> ChatResponse:
        """Request one completion, wrapping any failure into an error response."""
        try:
            request = self.adapter.to_provider(messages, tools, self.params)
            raw = self._chat_impl(request)
            return self.adapter.from_provider(raw)
        except Exception as exc:
            return self._wrap_error(exc)

    def _wrap_error(self, exc: Exception) -> ChatResponse:
        return ChatResponse(error=classify_error(exc, self.logger))

    def close(self) -> None:
        """Close the underlying HTTP client. Safe to call multiple times."""
        client = getattr(self, "_client", None)
        close = getattr(client, "close", None)
        if close:
            close()

    def __enter__(self) -> "BaseLLM":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _log(self, message: str, level: int = logging.INFO) -> None:
        self.logger.log(level, f"[{self.name}] {message}")
