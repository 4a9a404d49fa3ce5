"""Conversation types shared by the thread, the dispatcher and the adapters."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import Any, Optional, Union

from aight.types.tool import ToolCallRequest, ToolCallResult


class Role(StrEnum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"
    TOOL = "tool"


class FinishReason(StrEnum):
    """Why the provider stopped generating."""

    STOP = "stop"
    TOOL_CALLS = "tool_calls"
    LENGTH = "length"


@dataclass(frozen=True, slots=True)
class TextBlock:
    text: str

    def as_dict(self) -> dict[str, Any]:
        return {"type": "text", "text": self.text}


ContentBlock = Union[TextBlock, ToolCallRequest, ToolCallResult]


def block_from_dict(data: dict[str, Any]) -> ContentBlock:
    """Rebuild a content block from its persisted form."""
    kind = data.get("type")
    if kind == "text":
        return TextBlock(text=data["text"])
    if kind == "tool_call":
        return ToolCallRequest(
            id=data["id"], name=data["name"], arguments=data.get("arguments", "")
        )
    if kind == "tool_result":
        return ToolCallResult(
            id=data["id"],
            content=data.get("content", ""),
            is_error=bool(data.get("is_error", False)),
        )
    raise ValueError(f"Unknown content block type: {kind!r}")


@dataclass(frozen=True, slots=True)
class Message:
    """
    One entry of the conversation.

    ``content`` is either plain text or a tuple of typed blocks. A message with
    role ``TOOL`` carries only ``ToolCallResult`` blocks, each pointing at the
    request it answers.
    """

    role: Role
    content: Union[str, tuple[ContentBlock, ...]]

    def __post_init__(self) -> None:
        object.__setattr__(self, "role", Role(self.role))
        if isinstance(self.content, list):
            object.__setattr__(self, "content", tuple(self.content))
        if self.role is Role.TOOL:
            blocks = self.blocks
            if not blocks or not all(isinstance(b, ToolCallResult) for b in blocks):
                raise ValueError("tool messages must contain only tool results")

    @classmethod
    def user(cls, text: str) -> "Message":
        return cls(role=Role.USER, content=text)

    @classmethod
    def system(cls, text: str) -> "Message":
        return cls(role=Role.SYSTEM, content=text)

    @classmethod
    def tool_results(cls, results: list[ToolCallResult]) -> "Message":
        return cls(role=Role.TOOL, content=tuple(results))

    @property
    def blocks(self) -> tuple[ContentBlock, ...]:
        if isinstance(self.content, str):
            return (TextBlock(self.content),) if self.content else ()
        return self.content

    @property
    def text(self) -> str:
        """Concatenated text of all text blocks."""
        if isinstance(self.content, str):
            return self.content
        return "".join(b.text for b in self.content if isinstance(b, TextBlock))

    @property
    def tool_calls(self) -> list[ToolCallRequest]:
        return [b for b in self.blocks if isinstance(b, ToolCallRequest)]

    @property
    def tool_results_list(self) -> list[ToolCallResult]:
        return [b for b in self.blocks if isinstance(b, ToolCallResult)]

    @property
    def is_empty(self) -> bool:
        """True when there is nothing but whitespace to send back to a provider."""
        return not self.text.strip() and not any(
            isinstance(b, (ToolCallRequest, ToolCallResult)) for b in self.blocks
        )

    def as_dict(self) -> dict[str, Any]:
        if isinstance(self.content, str):
            content: Any = self.content
        else:
            content = [block.as_dict() for block in self.content]
        return {"role": self.role.value, "content": content}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Message":
        content = data.get("content", "")
        if isinstance(content, list):
            content = tuple(block_from_dict(b) for b in content)
        return cls(role=Role(data["role"]), content=content)


@dataclass
class ChatResponse:
    """Unified completion result for all providers; exactly one of message/error is set."""

    message: Optional[Message] = None
    finish_reason: FinishReason = FinishReason.STOP
    raw: Any = None
    error: Optional[str] = None

    def __post_init__(self) -> None:
        if (self.message is None) == (self.error is None):
            raise ValueError("Provide exactly one of 'message' or 'error'")

    @property
    def is_error(self) -> bool:
        return self.error is not None

    @property
    def tool_calls(self) -> list[ToolCallRequest]:
        if self.message is None:
            return []
        return self.message.tool_calls
