"""Anthropic adapter for pure request/response transformations."""

from __future__ import annotations

import json
from typing import Any, Sequence

from anthropic.types import Message as AnthropicMessage

from aight.types import (
    ChatResponse,
    FinishReason,
    Message,
    Role,
    TextBlock,
    ToolCallRequest,
    ToolCallResult,
    ToolDefinition,
)

DEFAULT_MAX_TOKENS = 2000

_FINISH_REASONS: dict[str, FinishReason] = {
    "tool_use": FinishReason.TOOL_CALLS,
    "max_tokens": FinishReason.LENGTH,
}


def _decode_input(arguments: str) -> dict[str, Any]:
    # tool_use.input must be an object; anything else was never valid
    try:
        value = json.loads(arguments) if arguments else {}
    except json.JSONDecodeError:
        return {}
    return value if isinstance(value, dict) else {}


class AnthropicRequestAdapter:
    """Adapter for converting between the thread format and Anthropic format."""

    def to_provider(
        self,
        messages: Sequence[Message],
        tools: Sequence[ToolDefinition],
        params: dict[str, Any],
    ) -> dict[str, Any]:
        """Convert thread messages, tools and params to Anthropic request kwargs."""
        anthropic_messages: list[dict[str, Any]] = []
        system_parts: list[str] = []

        for msg in messages:
            # Anthropic takes the system prompt as a top-level parameter
            if msg.role is Role.SYSTEM:
                system_parts.append(msg.text)
                continue

            # the API rejects empty turns; cut-off or blank replies are left out
            if msg.is_empty:
                continue

            # Tool results travel as user messages
            if msg.role is Role.TOOL:
                anthropic_messages.append(
                    {
                        "role": "user",
                        "content": [
                            self.tool_result_block(result)
                            for result in msg.tool_results_list
                        ],
                    }
                )
                continue

            if isinstance(msg.content, str):
                anthropic_messages.append({"role": msg.role.value, "content": msg.content})
                continue

            blocks: list[dict[str, Any]] = []
            for block in msg.content:
                if isinstance(block, TextBlock):
                    if block.text.strip():
                        blocks.append({"type": "text", "text": block.text})
                elif isinstance(block, ToolCallRequest):
                    blocks.append(
                        {
                            "type": "tool_use",
                            "id": block.id,
                            "name": block.name,
                            "input": _decode_input(block.arguments),
                        }
                    )
            anthropic_messages.append({"role": msg.role.value, "content": blocks})

        base_params = dict(params)
        base_params.setdefault("max_tokens", DEFAULT_MAX_TOKENS)

        request: dict[str, Any] = {"messages": anthropic_messages, **base_params}
        if system_parts:
            request["system"] = "\n\n".join(system_parts)
        if tools:
            request["tools"] = [
                {
                    "name": tool.name,
                    "description": tool.description,
                    "input_schema": tool.input_schema,
                }
                for tool in tools
            ]
        return request

    def tool_result_block(self, result: ToolCallResult) -> dict[str, Any]:
        return {
            "type": "tool_result",
            "tool_use_id": result.id,
            "content": result.content,
            "is_error": result.is_error,
        }

    def from_provider(self, raw: AnthropicMessage) -> ChatResponse:
        """Convert an Anthropic response to a ChatResponse."""
        blocks: list[TextBlock | ToolCallRequest] = []
        for block in raw.content or []:
            if block.type == "text":
                blocks.append(TextBlock(block.text))
            elif block.type == "tool_use":
                blocks.append(
                    ToolCallRequest(
                        id=block.id,
                        name=block.name,
                        arguments=json.dumps(block.input, ensure_ascii=False),
                    )
                )

        return ChatResponse(
            message=Message(role=Role.ASSISTANT, content=tuple(blocks)),
            finish_reason=_FINISH_REASONS.get(raw.stop_reason or "", FinishReason.STOP),
            raw=raw,
        )
