"""Chat messages and the shared message store.

The store is the single owner of the ordered message list shown in the chat
view. Writers never mutate the list in place: they read a snapshot, build the
next list and publish it with a compare-and-set on the store version.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Any, Callable, Iterable, Sequence, Union


@dataclass(frozen=True)
class UserMessage:
    """Echo of what the user typed."""

    text: str
    kind: str = "user"

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "text": self.text}


@dataclass(frozen=True)
class SpinnerMessage:
    """Placeholder shown while the assistant is working."""

    kind: str = "spinner"

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind}


@dataclass(frozen=True)
class BotMessage:
    """Assistant response content."""

    content: str
    kind: str = "bot"

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "content": self.content}


@dataclass(frozen=True)
class ErrorMessage:
    """Shown in place of a placeholder whose submission failed."""

    text: str
    kind: str = "error"

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "text": self.text}


Display = Union[UserMessage, SpinnerMessage, BotMessage, ErrorMessage]


@dataclass(frozen=True)
class Message:
    """An entry in the chat view.

    Attributes:
        id: Client-generated identifier, unique within a list
        display: Renderable payload
    """

    id: str
    display: Display

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "display": self.display.to_dict()}


@dataclass(frozen=True)
class Snapshot:
    """Immutable view of the store at one version."""

    version: int
    messages: tuple[Message, ...]

    def index_of(self, message_id: str) -> int | None:
        """Position of ``message_id`` in this snapshot, or None."""
        for index, message in enumerate(self.messages):
            if message.id == message_id:
                return index
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": self.version,
            "messages": [m.to_dict() for m in self.messages],
        }


def _check_unique(messages: Sequence[Message]) -> None:
    seen: set[str] = set()
    for message in messages:
        if message.id in seen:
            raise ValueError(f"Duplicate message id: {message.id}")
        seen.add(message.id)


class MessageStore:
    """Versioned holder of the message list.

    Safe to read from any thread. Every successful write bumps ``version``.

    Usage:
        store = MessageStore()
        store.update(lambda messages: [*messages, Message("a1", UserMessage("milk"))])
        snapshot = store.snapshot()
    """

    def __init__(self, messages: Iterable[Message] = ()):
        initial = tuple(messages)
        _check_unique(initial)
        self._lock = threading.Lock()
        self._messages = initial
        self._version = 0

    def snapshot(self) -> Snapshot:
        with self._lock:
            return Snapshot(self._version, self._messages)

    @property
    def version(self) -> int:
        with self._lock:
            return self._version

    def __len__(self) -> int:
        with self._lock:
            return len(self._messages)

    def replace_if_current(self, expected_version: int, messages: Iterable[Message]) -> bool:
        """Publish ``messages`` if nobody wrote since ``expected_version``.

        Returns:
            True if the list was replaced, False if the snapshot was stale.

        Raises:
            ValueError: If ``messages`` contains duplicate ids.
        """
        new_messages = tuple(messages)
        _check_unique(new_messages)
        with self._lock:
            if self._version != expected_version:
                return False
            self._messages = new_messages
            self._version += 1
            return True

    def update(self, compute: Callable[[list[Message]], Iterable[Message]]) -> Snapshot:
        """Functional update against the latest snapshot.

        ``compute`` receives a fresh list copy and returns the next list. It
        is re-run if another writer got in first, so it must not have side
        effects.
        """
        while True:
            current = self.snapshot()
            new_messages = tuple(compute(list(current.messages)))
            if self.replace_if_current(current.version, new_messages):
                return Snapshot(current.version + 1, new_messages)

    def reset(self, messages: Iterable[Message] = ()) -> Snapshot:
        """Replace the whole list unconditionally."""
        return self.update(lambda _: messages)
