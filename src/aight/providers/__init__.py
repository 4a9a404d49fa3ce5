from __future__ import annotations

import os
from enum import StrEnum
from typing import Final

from dotenv import load_dotenv


class Provider(StrEnum):
    ANTHROPIC = "anthropic"
    OPENAI = "openai"


_ENV_VARS: Final[dict[Provider, str]] = {
    Provider.ANTHROPIC: "ANTHROPIC_API_KEY",
    Provider.OPENAI: "OPENAI_API_KEY",
}

DEFAULT_MODELS: Final[dict[Provider, str]] = {
    Provider.ANTHROPIC: "claude-3-5-sonnet-20240620",
    Provider.OPENAI: "gpt-4o",
}


def api_key_env(provider: Provider) -> str:
    """Name of the environment variable holding *provider*'s API key."""
    try:
        return _ENV_VARS[provider]
    except KeyError:
        raise RuntimeError(f"No config for {provider!s}") from None


def get_api_key(provider: Provider) -> str:
    """Return the API key for *provider* or raise RuntimeError."""
    load_dotenv()
    env_var = api_key_env(provider)
    try:
        return os.environ[env_var]
    except KeyError as exc:
        raise RuntimeError(f"{env_var} missing") from exc


__all__ = ["Provider", "DEFAULT_MODELS", "api_key_env", "get_api_key"]
