"""Pure transformation adapters for different LLM providers."""

from .anthropic import AnthropicRequestAdapter
from .openai import OpenAIRequestAdapter

__all__ = [
    "AnthropicRequestAdapter",
    "OpenAIRequestAdapter",
]
