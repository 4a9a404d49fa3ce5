"""Run a batch of tool calls concurrently and collect one result per call."""

from __future__ import annotations

import json
import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import PurePath
from typing import Any, Optional, Sequence

from pydantic import BaseModel

from aight._exceptions import flatten_error
from aight.registry import ToolRegistry
from aight.types import ToolCallRequest, ToolCallResult

__all__ = ["invoke_batch", "serialize_result"]

_logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _Outcome:
    call: ToolCallRequest
    result: ToolCallResult
    error: Optional[BaseException] = None


def _default(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, PurePath):
        return str(value)
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def serialize_result(value: Any) -> str:
    """Encode a handler return value the way it is sent to the model."""
    return json.dumps(value, ensure_ascii=False, default=_default)


def _invoke_one(registry: ToolRegistry, call: ToolCallRequest) -> _Outcome:
    try:
        value = registry.call(call)
        content = serialize_result(value)
    except Exception as exc:
        return _Outcome(
            call=call,
            result=ToolCallResult(id=call.id, content=flatten_error(exc), is_error=True),
            error=exc,
        )
    return _Outcome(call=call, result=ToolCallResult(id=call.id, content=content))


def invoke_batch(
    registry: ToolRegistry,
    calls: Sequence[ToolCallRequest],
    *,
    logger: Optional[logging.Logger] = None,
) -> list[ToolCallResult]:
    """
    Invoke every call in *calls* at once and wait for all of them.

    Each call gets its own worker; a failing call never affects its
    siblings. Failures become ``ToolCallResult(is_error=True)`` entries
    instead of exceptions. Results come back in completion order, each
    carrying the id of the call it answers.
    """
    log = logger or _logger
    if not calls:
        return []

    outcomes: list[_Outcome] = []
    with ThreadPoolExecutor(
        max_workers=len(calls), thread_name_prefix="aight-tool"
    ) as pool:
        futures = [pool.submit(_invoke_one, registry, call) for call in calls]
        for future in as_completed(futures):
            outcomes.append(future.result())

    failures = [o for o in outcomes if o.error is not None]
    if failures:
        lines = [
            f"  call: {o.call.name}({o.call.arguments}): {o.result.content}"
            for o in failures
        ]
        log.warning(
            "%d/%d tool calls failed\n%s", len(failures), len(outcomes), "\n".join(lines)
        )

    return [o.result for o in outcomes]
