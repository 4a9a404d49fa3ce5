"""Runtime settings, read from ``AIGHT_*`` environment variables and ``.env``."""

from __future__ import annotations

import os
import sys
from typing import Any, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from aight.providers import DEFAULT_MODELS, Provider
from aight.thread import DEFAULT_THREAD_FILE
from aight.tools import DEFAULT_EXEC_TIMEOUT

__all__ = ["Settings"]


class Settings(BaseSettings):
    """
    Everything the command line needs to build a dispatcher.

    Each field is read from the environment variable of the same name with
    an ``AIGHT_`` prefix (``AIGHT_RATE``, ``AIGHT_THREAD_FILE``...). Empty
    variables count as unset.
    """

    model_config = SettingsConfigDict(
        env_prefix="AIGHT_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_ignore_empty=True,
        extra="ignore",
        frozen=True,
    )

    provider: Provider = Provider.ANTHROPIC
    model: Optional[str] = None
    cwd: str = "."
    thread_file: str = DEFAULT_THREAD_FILE
    rate: float = Field(default=2.0, gt=0)          # requests per second
    burst: int = Field(default=1, ge=1)
    backoff: float = Field(default=1.0, ge=0)       # seconds between failed requests
    max_tokens: int = Field(default=2000, gt=0)
    python: str = sys.executable
    exec_timeout: float = Field(default=DEFAULT_EXEC_TIMEOUT, gt=0)

    @field_validator("provider", mode="before")
    @classmethod
    def _lower_provider(cls, value: Any) -> Any:
        return value.lower() if isinstance(value, str) else value

    @property
    def resolved_model(self) -> str:
        return self.model or DEFAULT_MODELS[self.provider]

    @property
    def thread_path(self) -> str:
        return os.path.join(self.cwd, self.thread_file)

    def with_overrides(self, **overrides: Any) -> "Settings":
        """Copy with every non-None override applied."""
        return self.model_copy(update={k: v for k, v in overrides.items() if v is not None})
