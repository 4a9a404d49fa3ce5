from .chat import (
    ChatResponse,
    ContentBlock,
    FinishReason,
    Message,
    Role,
    TextBlock,
    block_from_dict,
)
from .tool import ToolCallRequest, ToolCallResult, ToolDefinition

__all__ = [
    "ChatResponse",
    "ContentBlock",
    "FinishReason",
    "Message",
    "Role",
    "TextBlock",
    "block_from_dict",
    "ToolCallRequest",
    "ToolCallResult",
    "ToolDefinition",
]
