"""OpenAI adapter for pure request/response transformations."""

from __future__ import annotations

from typing import Any, Sequence

from openai.types.chat import ChatCompletion

from aight.types import (
    ChatResponse,
    FinishReason,
    Message,
    Role,
    TextBlock,
    ToolCallRequest,
    ToolDefinition,
)

_FINISH_REASONS: dict[str, FinishReason] = {
    "tool_calls": FinishReason.TOOL_CALLS,
    "function_call": FinishReason.TOOL_CALLS,
    "length": FinishReason.LENGTH,
}


class OpenAIRequestAdapter:
    """Adapter for converting between the thread format and OpenAI format."""

    def to_provider(
        self,
        messages: Sequence[Message],
        tools: Sequence[ToolDefinition],
        params: dict[str, Any],
    ) -> dict[str, Any]:
        """Convert thread messages, tools and params to OpenAI request kwargs."""
        openai_messages: list[dict[str, Any]] = []
        for msg in messages:
            # One tool message per result, in batch order
            if msg.role is Role.TOOL:
                for result in msg.tool_results_list:
                    openai_messages.append(
                        {
                            "role": "tool",
                            "tool_call_id": result.id,
                            "content": result.content,
                        }
                    )
                continue

            if msg.role is Role.ASSISTANT and msg.is_empty:
                continue

            openai_msg: dict[str, Any] = {"role": msg.role.value, "content": msg.text}

            calls = msg.tool_calls
            if calls:
                openai_msg["tool_calls"] = [
                    {
                        "id": call.id,
                        "type": "function",
                        "function": {"name": call.name, "arguments": call.arguments},
                    }
                    for call in calls
                ]
                # OpenAI wants null content when only tool_calls are present
                if not openai_msg["content"]:
                    openai_msg["content"] = None

            openai_messages.append(openai_msg)

        request: dict[str, Any] = {"messages": openai_messages, **params}
        if tools:
            request["tools"] = [
                {
                    "type": "function",
                    "function": {
                        "name": tool.name,
                        "description": tool.description,
                        "parameters": tool.input_schema,
                    },
                }
                for tool in tools
            ]
        return request

    def from_provider(self, raw: ChatCompletion) -> ChatResponse:
        """Convert an OpenAI response to a ChatResponse."""
        if not raw.choices:
            return ChatResponse(error="Provider returned no choices", raw=raw)

        choice = raw.choices[0]
        message = choice.message

        blocks: list[TextBlock | ToolCallRequest] = []
        if message.content:
            blocks.append(TextBlock(message.content))

        for tc in message.tool_calls or []:
            function = getattr(tc, "function", None)
            if function is None:
                continue  # custom (non-function) tools are never advertised
            blocks.append(
                ToolCallRequest(id=tc.id, name=function.name, arguments=function.arguments or "")
            )

        return ChatResponse(
            message=Message(role=Role.ASSISTANT, content=tuple(blocks)),
            finish_reason=_FINISH_REASONS.get(choice.finish_reason or "", FinishReason.STOP),
            raw=raw,
        )
