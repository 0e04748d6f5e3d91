"""In-process storage of saved chats."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

TITLE_MAX_LENGTH = 100


@dataclass
class Chat:
    """A saved conversation.

    Attributes:
        id: Chat identifier (also the agent thread id)
        title: First user message, truncated
        user_id: Owner, None for anonymous chats
        created_at: When the chat was first saved
        messages: Turns as {"role": ..., "content": ...} dicts
    """

    id: str
    title: str
    user_id: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    messages: list[dict] = field(default_factory=list)

    @property
    def path(self) -> str:
        return f"/list/{self.id}"

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "user_id": self.user_id,
            "created_at": self.created_at.isoformat(),
            "path": self.path,
            "messages": list(self.messages),
        }


def title_from_messages(messages: list[dict]) -> str:
    """Title for a chat: its first user message, truncated."""
    for message in messages:
        if message.get("role") == "user":
            return message.get("content", "")[:TITLE_MAX_LENGTH]
    return "New chat"


class ChatRepository:
    """Thread-safe in-memory chat store."""

    def __init__(self):
        self._lock = threading.Lock()
        self._chats: dict[str, Chat] = {}

    def get(self, chat_id: str) -> Optional[Chat]:
        with self._lock:
            return self._chats.get(chat_id)

    def exists(self, chat_id: str) -> bool:
        with self._lock:
            return chat_id in self._chats

    def save(self, chat: Chat) -> None:
        with self._lock:
            self._chats[chat.id] = chat

    def list_for_user(self, user_id: str) -> list[Chat]:
        """Chats owned by ``user_id``, newest first."""
        with self._lock:
            chats = [c for c in self._chats.values() if c.user_id == user_id]
        return sorted(chats, key=lambda c: c.created_at, reverse=True)
