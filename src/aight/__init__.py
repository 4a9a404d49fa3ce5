"""
aight - a conversational agent that lets a model use files, SQLite and Python
inside one working directory.
"""

__version__ = "0.1.0"

from ._exceptions import (
    AightError,
    ArgumentDecodeError,
    DuplicateToolError,
    PathEscapeError,
    ProviderError,
    ToolExecutionError,
    ToolNotFoundError,
)
from .dispatcher import Dispatcher, DispatcherState
from .factory import create_llm
from .invoker import invoke_batch
from .providers import Provider, get_api_key
from .providers.base import BaseLLM
from .ratelimit import RateLimiter
from .registry import ToolRegistry
from .retry import RetryPolicy
from .sandbox import resolve
from .thread import Thread
from .types import (
    ChatResponse,
    FinishReason,
    Message,
    Role,
    TextBlock,
    ToolCallRequest,
    ToolCallResult,
    ToolDefinition,
)

__all__ = [
    "AightError",
    "ArgumentDecodeError",
    "DuplicateToolError",
    "PathEscapeError",
    "ProviderError",
    "ToolExecutionError",
    "ToolNotFoundError",
    "Dispatcher",
    "DispatcherState",
    "create_llm",
    "invoke_batch",
    "Provider",
    "get_api_key",
    "BaseLLM",
    "RateLimiter",
    "ToolRegistry",
    "RetryPolicy",
    "resolve",
    "Thread",
    "ChatResponse",
    "FinishReason",
    "Message",
    "Role",
    "TextBlock",
    "ToolCallRequest",
    "ToolCallResult",
    "ToolDefinition",
]
