"""Tests for the provider factory and the concrete LLM wrappers, without network access."""

import httpx
import pytest
from anthropic import Anthropic, APIConnectionError
from anthropic.types import Message as AnthropicMessage
from openai import OpenAI

from aight.factory import create_llm
from aight.providers import Provider, get_api_key
from aight.providers.anthropic import AnthropicLLM
from aight.providers.openai import OpenAILLM
from aight.types import FinishReason, Message, ToolDefinition

TOOLS = [ToolDefinition("fs_list", "List files", {"type": "object", "properties": {}})]


def _anthropic_reply():
    return AnthropicMessage.model_validate(
        {
            "id": "msg_1",
            "type": "message",
            "role": "assistant",
            "model": "claude-3-5-sonnet-20240620",
            "content": [{"type": "text", "text": "Hi there"}],
            "stop_reason": "end_turn",
            "stop_sequence": None,
            "usage": {"input_tokens": 3, "output_tokens": 2},
        }
    )


class TestFactory:
    def test_defaults_model_per_provider(self):
        llm = create_llm(Provider.OPENAI, api_key="sk-test")
        assert isinstance(llm, OpenAILLM)
        assert llm.model == "gpt-4o"

    def test_accepts_provider_string(self):
        llm = create_llm("anthropic", "claude-x", api_key="sk-test")
        assert isinstance(llm, AnthropicLLM)
        assert llm.model == "claude-x"

    def test_unknown_provider(self):
        with pytest.raises(ValueError, match="Unsupported provider"):
            create_llm("nope", api_key="x")

    def test_wraps_supplied_client(self):
        client = Anthropic(api_key="sk-test")
        llm = create_llm(Provider.ANTHROPIC, client=client)
        assert llm._client is client

    def test_client_type_is_checked(self):
        with pytest.raises(TypeError):
            create_llm(Provider.ANTHROPIC, client=OpenAI(api_key="sk-test"))

    def test_missing_key(self, monkeypatch):
        monkeypatch.setattr("aight.providers.load_dotenv", lambda: None)
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        with pytest.raises(RuntimeError, match="OPENAI_API_KEY missing"):
            get_api_key(Provider.OPENAI)


class TestAnthropicLLM:
    @pytest.fixture
    def client(self):
        return Anthropic(api_key="sk-test", max_retries=0)

    def test_complete_sends_model_and_params(self, client, monkeypatch):
        sent = {}

        def create(**kwargs):
            sent.update(kwargs)
            return _anthropic_reply()

        monkeypatch.setattr(client.messages, "create", create)
        llm = AnthropicLLM.from_client("claude-test", client, params={"max_tokens": 64})

        response = llm.complete([Message.system("sys"), Message.user("hello")], TOOLS)

        assert response.message.text == "Hi there"
        assert response.finish_reason is FinishReason.STOP
        assert sent["model"] == "claude-test"
        assert sent["max_tokens"] == 64
        assert sent["system"] == "sys"
        assert sent["tools"][0]["name"] == "fs_list"

    def test_failures_become_error_responses(self, client, monkeypatch):
        def create(**kwargs):
            raise APIConnectionError(request=httpx.Request("POST", "https://api.anthropic.com"))

        monkeypatch.setattr(client.messages, "create", create)
        llm = AnthropicLLM.from_client("claude-test", client)

        response = llm.complete([Message.user("hello")])

        assert response.is_error
        assert response.error.startswith("Connection problem")
        assert response.message is None

    def test_context_manager_closes_client(self, client, monkeypatch):
        closed = []
        monkeypatch.setattr(client, "close", lambda: closed.append(True))

        with AnthropicLLM.from_client("claude-test", client):
            pass

        assert closed == [True]
