"""
The turn-taking loop between the human, the model and the tools.

    AWAITING_INPUT -> REQUESTING -> TEXT_REPLY  -> AWAITING_INPUT
                                 -> TOOL_CALLS  -> REQUESTING

Turns are strictly sequential; the only concurrency is inside a tool-call
batch, which is joined before the next request is made.
"""

from __future__ import annotations

import logging
from enum import StrEnum
from typing import Callable, Optional

from tenacity import RetryCallState

from aight._exceptions import ProviderError
from aight.invoker import invoke_batch
from aight.providers.base import BaseLLM
from aight.ratelimit import RateLimiter
from aight.registry import ToolRegistry
from aight.retry import RetryPolicy
from aight.thread import Thread
from aight.types import (
    ChatResponse,
    FinishReason,
    Message,
    Role,
    ToolCallRequest,
    ToolCallResult,
    ToolDefinition,
)

__all__ = ["Dispatcher", "DispatcherState", "Prompt"]

Prompt = Callable[[], str]

INTERRUPTED = "tool call was interrupted before it finished; call it again if it is still needed"


class DispatcherState(StrEnum):
    AWAITING_INPUT = "awaiting_input"
    REQUESTING = "requesting"
    TEXT_REPLY = "text_reply"
    TOOL_CALLS = "tool_calls"


class Dispatcher:
    """
    Owns one conversation thread and drives it against a completion provider.

    Args:
        llm: The completion provider.
        registry: Tools offered to the model. Must be fully registered.
        thread: The conversation log; appended to, never edited.
        rate_limiter: Shared pacing for outbound requests.
        retry: What to do when a request fails. Defaults to retrying forever
               with a one second pause.
        logger: Optional logger.
    """

    def __init__(
        self,
        llm: BaseLLM,
        registry: ToolRegistry,
        thread: Thread,
        *,
        rate_limiter: RateLimiter,
        retry: Optional[RetryPolicy] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.llm = llm
        self.registry = registry
        self.thread = thread
        self.rate_limiter = rate_limiter
        self.retry = retry or RetryPolicy()
        self.logger = logger or logging.getLogger(__name__)
        self.state = DispatcherState.AWAITING_INPUT
        self._tools: list[ToolDefinition] = registry.definitions

    @property
    def tools(self) -> list[ToolDefinition]:
        return list(self._tools)

    def needs_input(self) -> bool:
        """True when the next step is asking the human rather than the model."""
        last = self.thread.last
        if last is None:
            return True
        return last.role not in (Role.USER, Role.TOOL) and not self.unanswered_calls()

    def unanswered_calls(self) -> list[ToolCallRequest]:
        """Tool calls of a trailing assistant message that has no results yet."""
        last = self.thread.last
        if last is None or last.role is not Role.ASSISTANT:
            return []
        return last.tool_calls

    def interact(self, prompt: Prompt) -> str:
        """Ask for input until something non-empty arrives, then record it."""
        self.state = DispatcherState.AWAITING_INPUT
        while True:
            text = prompt().strip()
            if text:
                break

        self.thread.append(Message.user(text))
        return text

    def complete(self) -> ChatResponse:
        """
        Request a completion for the current thread.

        Every attempt takes a rate-limiter token. Failed requests are logged
        and repeated after the policy's backoff; with an unbounded policy this
        only returns on success.

        Raises:
            ProviderError: a bounded retry policy ran out of attempts.
        """
        self.state = DispatcherState.REQUESTING
        for attempt in self.retry.retrying(before_sleep=self._log_retry):
            with attempt:
                self.rate_limiter.take()
                response = self.llm.complete(self.thread.messages, self._tools)
                if response.is_error:
                    raise ProviderError(
                        response.error, attempts=attempt.retry_state.attempt_number
                    )
        return response

    def _log_retry(self, retry_state: RetryCallState) -> None:
        self.logger.warning(
            "{%s} request error, retrying... | %s",
            self.llm.model,
            retry_state.outcome.exception(),
        )

    def handle_tool_calls(self, calls: list[ToolCallRequest]) -> list[ToolCallResult]:
        """Run a batch of tool calls and record their results as one message."""
        self.state = DispatcherState.TOOL_CALLS
        results = invoke_batch(self.registry, calls, logger=self.logger)
        self.thread.append(Message.tool_results(results))
        return results

    def abandon_tool_calls(self, calls: list[ToolCallRequest]) -> list[ToolCallResult]:
        """Answer calls whose run was interrupted with error results, without running them."""
        self.logger.warning(
            "{%s} %d tool calls were interrupted; reporting them as failed",
            self.llm.model,
            len(calls),
        )
        results = [
            ToolCallResult(id=call.id, content=INTERRUPTED, is_error=True) for call in calls
        ]
        self.thread.append(Message.tool_results(results))
        return results

    def communicate(self, prompt: Prompt) -> ChatResponse:
        """
        Take one turn: request a completion and act on it.

        A reply carrying tool calls is treated as a tool turn whatever its
        finish reason: the calls are executed and the turn ends without asking
        the human, so the next call goes straight back to the model. Any other
        reply ends with the human being prompted. Empty replies are not
        recorded.
        """
        response = self.complete()
        assert response.message is not None

        if response.finish_reason is FinishReason.LENGTH:
            self.logger.warning("{%s} reply cut off at the token limit", self.llm.model)

        if response.message.is_empty:
            self.logger.warning("{%s} empty reply, not recorded", self.llm.model)
        else:
            self.thread.append(response.message)

        calls = response.tool_calls
        if calls:
            self.handle_tool_calls(calls)
            return response

        self.state = DispatcherState.TEXT_REPLY
        self.interact(prompt)
        return response

    def run(self, prompt: Prompt, *, max_turns: Optional[int] = None) -> None:
        """
        Drive the conversation.

        A thread left with unanswered tool calls (the process stopped while
        they ran) gets error results for them first. Runs until the process is
        stopped, ``prompt`` raises (EOF, Ctrl-C) or ``max_turns`` completions
        have been handled.
        """
        pending = self.unanswered_calls()
        if pending:
            self.abandon_tool_calls(pending)
        elif self.needs_input():
            self.interact(prompt)

        turns = 0
        while max_turns is None or turns < max_turns:
            self.communicate(prompt)
            turns += 1
