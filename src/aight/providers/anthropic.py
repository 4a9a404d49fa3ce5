from __future__ import annotations

import logging
from typing import Any, Optional, Self

from anthropic import Anthropic
from anthropic.types import Message

from aight.adapters.anthropic import AnthropicRequestAdapter
from aight.providers.base import BaseLLM, RequestAdapter


class AnthropicLLM(BaseLLM):
    """
    Anthropic Messages API implementation.

    Use ``AnthropicLLM.from_client`` when you already have an ``Anthropic`` instance.
    """

    def __init__(
        self,
        model: str,
        *,
        api_key: str,
        timeout: float = 120.0,
        max_retries: int = 0,
        params: Optional[dict[str, Any]] = None,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
        base_url: Optional[str] = None,
    ) -> None:
        super().__init__(model=model, params=params, logger=logger, name=name)
        self._client = Anthropic(
            api_key=api_key,
            timeout=timeout,
            max_retries=max_retries,
            base_url=base_url,
        )
        self._adapter = AnthropicRequestAdapter()

    @classmethod
    def from_client(
        cls,
        model: str,
        client: Anthropic,
        *,
        params: Optional[dict[str, Any]] = None,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
    ) -> Self:
        """Wrap an existing ``Anthropic`` client."""
        if not isinstance(client, Anthropic):
            raise TypeError(
                f"AnthropicLLM.from_client expects Anthropic; got {type(client).__name__}"
            )

        self = cls.__new__(cls)  # bypass __init__
        BaseLLM.__init__(self, model=model, params=params, logger=logger, name=name)
        self._client = client
        self._adapter = AnthropicRequestAdapter()
        return self

    @property
    def adapter(self) -> RequestAdapter:
        return self._adapter

    def _chat_impl(self, request: dict[str, Any]) -> Message:
        self._log(
            f"Sending request to Anthropic model {self.model} "
            f"({len(request['messages'])} messages)",
            logging.DEBUG,
        )
        return self._client.messages.create(model=self.model, **request)
