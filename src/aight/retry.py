"""Retry policy for completion requests."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    stop_never,
    wait_fixed,
)

from aight._exceptions import ProviderError

__all__ = ["RetryPolicy", "UNBOUNDED"]

UNBOUNDED: Optional[int] = None


@dataclass(frozen=True)
class RetryPolicy:
    """
    Fixed-backoff retry of failed completion requests.

    ``max_attempts=UNBOUNDED`` (the default) retries forever: an interactive
    session waits out a provider outage instead of dying mid-conversation.
    Only ``ProviderError`` is retried; anything else propagates at once.
    """

    backoff: float = 1.0
    max_attempts: Optional[int] = UNBOUNDED
    sleep: Callable[[float], None] = field(default=time.sleep, repr=False, compare=False)

    def __post_init__(self) -> None:
        if self.backoff < 0:
            raise ValueError(f"backoff must not be negative, got {self.backoff}")
        if self.max_attempts is not None and self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")

    @property
    def unbounded(self) -> bool:
        return self.max_attempts is UNBOUNDED

    def retrying(self, **kwargs: Any) -> Retrying:
        """
        A ``tenacity.Retrying`` controller for this policy.

        Extra keyword arguments (``before_sleep`` and friends) are passed
        through. Once a bounded policy runs out, the last ``ProviderError``
        is re-raised.
        """
        return Retrying(
            stop=stop_never if self.unbounded else stop_after_attempt(self.max_attempts),
            wait=wait_fixed(self.backoff),
            retry=retry_if_exception_type(ProviderError),
            sleep=self.sleep,
            reraise=True,
            **kwargs,
        )
