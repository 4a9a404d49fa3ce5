"""
Provider‑neutral dataclasses for client‑side tool use.

Everything provider‑specific lives in the adapters.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

__all__ = ["ToolCallRequest", "ToolCallResult", "ToolDefinition"]


@dataclass(frozen=True, slots=True)
class ToolDefinition:
    """What the model is told about a tool: its name, purpose and argument schema."""
    name: str
    description: str
    input_schema: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ToolCallRequest:
    """A model‑agnostic request emitted by the LLM to call a local tool."""
    id: str
    name: str
    arguments: str              # serialized JSON, decoded by the registry

    def as_dict(self) -> dict[str, Any]:
        return {
            "type": "tool_call",
            "id": self.id,
            "name": self.name,
            "arguments": self.arguments,
        }


@dataclass(frozen=True, slots=True)
class ToolCallResult:
    """Payload to send back to the LLM after the tool finished running."""
    id: str                     # must match the request id
    content: str
    is_error: bool = False

    def as_dict(self) -> dict[str, Any]:
        return {
            "type": "tool_result",
            "id": self.id,
            "content": self.content,
            "is_error": self.is_error,
        }
