from __future__ import annotations

import logging
from typing import Any, Type

from anthropic import Anthropic
from openai import OpenAI

from aight.providers import DEFAULT_MODELS, Provider, get_api_key
from aight.providers.anthropic import AnthropicLLM
from aight.providers.base import BaseLLM
from aight.providers.openai import OpenAILLM

# map Provider enum to its LLM implementation
_LLM_REGISTRY: dict[Provider, Type[BaseLLM]] = {
    Provider.ANTHROPIC: AnthropicLLM,
    Provider.OPENAI: OpenAILLM,
}


def create_llm(
    provider: Provider,
    model: str | None = None,
    *,
    api_key: str | None = None,
    client: Anthropic | OpenAI | None = None,
    logger: logging.Logger | None = None,
    **provider_kwargs: Any,
) -> BaseLLM:
    """
    Factory for creating any supported LLM.

    Args:
        provider: Which provider to use (ANTHROPIC, OPENAI).
        model: Model identifier; defaults to the provider's entry in DEFAULT_MODELS.
        api_key: Overrides automatic lookup; if omitted, pulled from env.
        client: Optional pre-configured ``Anthropic`` or ``OpenAI`` instance.
        logger: Optional custom logger.
        **provider_kwargs: Any extra args to pass through (params, timeout, base_url).
    """
    try:
        llm_cls = _LLM_REGISTRY[Provider(provider)]
    except (KeyError, ValueError) as exc:
        raise ValueError(f"Unsupported provider: {provider}") from exc

    model = model or DEFAULT_MODELS[Provider(provider)]

    if client is not None:  # use caller‑supplied client verbatim
        return llm_cls.from_client(model, client, logger=logger, **provider_kwargs)

    key = api_key or get_api_key(Provider(provider))
    return llm_cls(model, api_key=key, logger=logger, **provider_kwargs)
