"""Append-only conversation log, persisted as one JSON document."""

from __future__ import annotations

import json
import logging
import os
import threading
from pathlib import Path
from typing import Iterable, Iterator, Optional

from aight.types import Message, Role

__all__ = ["Thread", "DEFAULT_THREAD_FILE"]

DEFAULT_THREAD_FILE = "thread.aight.json"


class Thread:
    """
    Ordered messages of one conversation.

    Messages are only ever appended. Every append happens under one lock,
    which also covers logging the message and rewriting the file, so
    concurrent producers cannot interleave.
    """

    def __init__(
        self,
        messages: Iterable[Message] = (),
        *,
        path: Optional[os.PathLike[str] | str] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.path = Path(path) if path is not None else None
        self.logger = logger or logging.getLogger(__name__)
        self._messages: list[Message] = list(messages)
        self._lock = threading.Lock()

    @classmethod
    def load(
        cls,
        path: os.PathLike[str] | str,
        *,
        logger: Optional[logging.Logger] = None,
    ) -> "Thread":
        """Read a persisted thread; a missing file gives an empty thread."""
        path = Path(path)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return cls(path=path, logger=logger)

        data = json.loads(raw) if raw.strip() else []
        if not isinstance(data, list):
            raise ValueError(f"{path}: expected a JSON list of messages")
        return cls((Message.from_dict(item) for item in data), path=path, logger=logger)

    def append(self, message: Message) -> None:
        """
        Add *message* and persist the whole thread.

        Raises:
            OSError: the thread could not be written. Callers treat this as fatal.
        """
        with self._lock:
            self._messages.append(message)
            self._save()
            self._echo(message)

    def _save(self) -> None:
        if self.path is None:
            return
        payload = json.dumps(
            [m.as_dict() for m in self._messages], ensure_ascii=False, indent=2
        )
        tmp = self.path.with_name(self.path.name + ".tmp")
        tmp.write_text(payload, encoding="utf-8")
        os.replace(tmp, self.path)

    def _echo(self, message: Message) -> None:
        if message.role is Role.USER:
            return
        if message.role is Role.TOOL:
            text = json.dumps([r.as_dict() for r in message.tool_results_list], ensure_ascii=False)
        else:
            text = message.text or json.dumps(message.as_dict()["content"], ensure_ascii=False)
        self.logger.info("{%s} %s", message.role.value, text)

    @property
    def messages(self) -> tuple[Message, ...]:
        """Snapshot of the messages appended so far."""
        with self._lock:
            return tuple(self._messages)

    @property
    def last(self) -> Optional[Message]:
        with self._lock:
            return self._messages[-1] if self._messages else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(self.messages)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(path={self.path!s}, messages={len(self)})"
