"""Shared fixtures: a scripted in-memory provider and an instant rate limiter."""

from __future__ import annotations

from typing import Any, Iterable, Sequence, Union

import pytest

from aight.providers.base import BaseLLM
from aight.ratelimit import RateLimiter
from aight.types import (
    ChatResponse,
    FinishReason,
    Message,
    Role,
    TextBlock,
    ToolCallRequest,
    ToolDefinition,
)


def text_reply(text: str) -> ChatResponse:
    return ChatResponse(
        message=Message(role=Role.ASSISTANT, content=(TextBlock(text),)),
        finish_reason=FinishReason.STOP,
    )


def tool_reply(*calls: ToolCallRequest, text: str = "") -> ChatResponse:
    blocks: list[Any] = [TextBlock(text)] if text else []
    blocks.extend(calls)
    return ChatResponse(
        message=Message(role=Role.ASSISTANT, content=tuple(blocks)),
        finish_reason=FinishReason.TOOL_CALLS,
    )


class PassthroughAdapter:
    def to_provider(
        self,
        messages: Sequence[Message],
        tools: Sequence[ToolDefinition],
        params: dict[str, Any],
    ) -> dict[str, Any]:
        return {"messages": list(messages), "tools": list(tools), **params}

    def from_provider(self, raw: ChatResponse) -> ChatResponse:
        return raw


class ScriptedLLM(BaseLLM):
    """Replays a fixed script; exceptions in the script are raised as provider failures."""

    def __init__(self, script: Iterable[Union[ChatResponse, Exception]]) -> None:
        super().__init__("scripted-model")
        self.script = list(script)
        self.requests: list[dict[str, Any]] = []
        self._adapter = PassthroughAdapter()

    @property
    def adapter(self) -> PassthroughAdapter:
        return self._adapter

    def _chat_impl(self, request: dict[str, Any]) -> ChatResponse:
        self.requests.append(request)
        if not self.script:
            raise AssertionError("scripted provider ran out of responses")
        item = self.script.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


def prompts(*answers: str):
    """Prompt producer that hands out *answers* in order."""
    queue = list(answers)

    def prompt() -> str:
        if not queue:
            raise EOFError
        return queue.pop(0)

    return prompt


@pytest.fixture
def instant_limiter() -> RateLimiter:
    return RateLimiter(rate=1000.0, burst=1000, sleep=lambda _: None)
