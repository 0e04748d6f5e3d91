"""Conversation state shared between the chat form and the assistant."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class AIState:
    """Server-side view of one conversation.

    Attributes:
        chat_id: Conversation identifier, fixed when the chat page opens
        messages: Turns as {"role": ..., "content": ...} dicts
        user_id: Owner, None for anonymous users
    """

    chat_id: str
    messages: list[dict] = field(default_factory=list)
    user_id: Optional[str] = None
