"""Tool registry: argument schemas for the model and decode-and-invoke wrappers."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from aight._exceptions import ArgumentDecodeError, DuplicateToolError, ToolNotFoundError
from aight.types import ToolCallRequest, ToolDefinition

__all__ = ["ToolRegistry", "RegisteredTool", "ToolHandler", "schema_for"]

A = TypeVar("A", bound=BaseModel)
ToolHandler = Callable[[A], Any]


def schema_for(arguments: Type[BaseModel]) -> dict[str, Any]:
    """Build the JSON schema advertised to the model for *arguments*."""
    schema = arguments.model_json_schema()
    schema.pop("title", None)
    schema.setdefault("type", "object")
    schema.setdefault("properties", {})
    return schema


@dataclass(frozen=True, slots=True)
class RegisteredTool:
    definition: ToolDefinition
    arguments: Type[BaseModel]
    handler: ToolHandler

    def decode(self, payload: str) -> BaseModel:
        try:
            return self.arguments.model_validate_json(payload or "{}")
        except ValidationError as exc:
            raise ArgumentDecodeError(f"decode json of {payload}") from exc


class ToolRegistry:
    """
    Ordered catalogue of tools.

    Tools are registered once during bootstrap; the advertised order is the
    registration order.
    """

    def __init__(self, *, logger: Optional[logging.Logger] = None) -> None:
        self.logger = logger or logging.getLogger(__name__)
        self._tools: dict[str, RegisteredTool] = {}

    def register(
        self,
        name: str,
        description: str,
        arguments: Type[A],
        handler: ToolHandler,
    ) -> ToolDefinition:
        """
        Add a tool.

        Args:
            name: Unique tool name the model will call.
            description: What the tool does, shown to the model.
            arguments: Pydantic model describing the call payload.
            handler: Called with a validated ``arguments`` instance.

        Raises:
            DuplicateToolError: *name* is already registered.
        """
        if name in self._tools:
            raise DuplicateToolError(f"tool already registered: {name}")

        definition = ToolDefinition(
            name=name,
            description=description,
            input_schema=schema_for(arguments),
        )
        self._tools[name] = RegisteredTool(definition, arguments, handler)
        return definition

    @property
    def definitions(self) -> list[ToolDefinition]:
        return [tool.definition for tool in self._tools.values()]

    @property
    def names(self) -> list[str]:
        return list(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def call(self, request: ToolCallRequest) -> Any:
        """
        Decode *request* and run the bound handler.

        Raises:
            ToolNotFoundError: no tool called ``request.name``.
            ArgumentDecodeError: the payload does not fit the argument model.
            Exception: whatever the handler raises.
        """
        tool = self._tools.get(request.name)
        if tool is None:
            raise ToolNotFoundError(request.name)

        arguments = tool.decode(request.arguments)
        self.logger.info("{assistant} %s: %r", request.name, arguments)
        return tool.handler(arguments)
