from __future__ import annotations

import logging
from typing import Any, Optional, Self

from openai import OpenAI
from openai.types.chat import ChatCompletion

from aight.adapters.openai import OpenAIRequestAdapter
from aight.providers.base import BaseLLM, RequestAdapter


class OpenAILLM(BaseLLM):
    """
    OpenAI Chat Completions implementation.

    Use ``OpenAILLM.from_client`` when you already have an ``OpenAI`` instance.
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
        self._client = OpenAI(
            api_key=api_key,
            timeout=timeout,
            max_retries=max_retries,
            base_url=base_url,
        )
        self._adapter = OpenAIRequestAdapter()

    @classmethod
    def from_client(
        cls,
        model: str,
        client: OpenAI,
        *,
        params: Optional[dict[str, Any]] = None,
        logger: Optional[logging.Logger] = None,
        name: Optional[str] = None,
    ) -> Self:
        """Build an ``OpenAILLM`` around an already‑configured ``OpenAI`` client."""
        if not isinstance(client, OpenAI):
            raise TypeError(
                f"OpenAILLM.from_client expects OpenAI; got {type(client).__name__}"
            )

        self = cls.__new__(cls)  # bypass __init__
        BaseLLM.__init__(self, model=model, params=params, logger=logger, name=name)
        self._client = client
        self._adapter = OpenAIRequestAdapter()
        return self

    @property
    def adapter(self) -> RequestAdapter:
        return self._adapter

    def _chat_impl(self, request: dict[str, Any]) -> ChatCompletion:
        self._log(
            f"Sending request to OpenAI model {self.model} "
            f"({len(request['messages'])} messages)",
            logging.DEBUG,
        )
        return self._client.chat.completions.create(model=self.model, **request)
