"""Browser navigation capability used by the chat form."""

from __future__ import annotations

import threading
from collections import deque
from typing import Any, Protocol


class Navigator(Protocol):
    """What the chat form may do to the browser location."""

    def push(self, path: str) -> None:
        """Navigate to ``path`` adding a history entry."""

    def replace_path(self, path: str) -> None:
        """Rewrite the current URL without adding a history entry."""

    def reload(self) -> None:
        """Force a full page reload."""


class EventNavigator:
    """Navigator that queues commands for the browser to apply.

    The web layer drains the queue into the chat's event stream, where the
    page script turns them into ``history.replaceState`` / ``location.reload``.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._events: deque[dict[str, Any]] = deque()

    def push(self, path: str) -> None:
        self._append({"type": "push", "path": path})

    def replace_path(self, path: str) -> None:
        self._append({"type": "replace_path", "path": path})

    def reload(self) -> None:
        self._append({"type": "reload"})

    def drain(self) -> list[dict[str, Any]]:
        """Remove and return every queued command, oldest first.

        Each command is returned once; a second reader of the same chat sees
        only what the first left behind.
        """
        with self._lock:
            events = list(self._events)
            self._events.clear()
        return events

    def _append(self, event: dict[str, Any]) -> None:
        with self._lock:
            self._events.append(event)
