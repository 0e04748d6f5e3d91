"""Submission service behind the chat form.

``submit_user_message`` turns a submission into one assistant response per
item and, once the chat has been saved, reports whether it was a new chat.
"""

from __future__ import annotations

import asyncio
from typing import Callable, Optional

import structlog

from smartshop.assistant.agent import discard_turns, recommend, thread_message_ids
from smartshop.assistant.repository import Chat, ChatRepository, title_from_messages
from smartshop.chat.items import split_items
from smartshop.chat.messages import BotMessage, Message, UserMessage
from smartshop.chat.service import NewConversation, SubmitFailure, SubmitResult, SubmitSuccess
from smartshop.chat.state import AIState
from smartshop.core.ids import nanoid
from smartshop.core.results import ResultCode

logger = structlog.get_logger(__name__)


class ShoppingAssistant:
    """Runs submissions through the recommendation agent.

    Usage:
        assistant = ShoppingAssistant(create_recommendation_agent(), ChatRepository())
        result = await assistant.submit_user_message(ai_state, "milk, eggs")
    """

    def __init__(
        self,
        agent,
        chats: ChatRepository,
        id_factory: Callable[[], str] = nanoid,
    ):
        self._agent = agent
        self._chats = chats
        self._new_id = id_factory

    @property
    def chats(self) -> ChatRepository:
        return self._chats

    async def submit_user_message(self, ai_state: AIState, content: str) -> SubmitResult:
        """Get a response per item in ``content``.

        Returns:
            SubmitSuccess with one BotMessage per item, or SubmitFailure with
            INVALID_SUBMISSION (nothing to add) / UNKNOWN_ERROR (model error).
        """
        items = split_items(content)
        if not items:
            return SubmitFailure(ResultCode.INVALID_SUBMISSION)

        known_ids = await thread_message_ids(self._agent, ai_state.chat_id)
        replies: list[str] = []
        try:
            for item in items:
                replies.append(await recommend(self._agent, ai_state.chat_id, item))
        except Exception:
            logger.exception(
                "assistant.recommend_failed",
                chat_id=ai_state.chat_id,
                completed=len(replies),
                items=len(items),
            )
            await self._rollback(ai_state.chat_id, known_ids)
            return SubmitFailure(ResultCode.UNKNOWN_ERROR)

        for item, reply in zip(items, replies):
            ai_state.messages.append({"role": "user", "content": item})
            ai_state.messages.append({"role": "assistant", "content": reply})

        responses = [Message(self._new_id(), BotMessage(reply)) for reply in replies]
        logger.info("assistant.responses_ready", chat_id=ai_state.chat_id, count=len(responses))

        completion = asyncio.ensure_future(self._save_chat(ai_state))
        return SubmitSuccess(responses=responses, completion=completion)

    async def _rollback(self, chat_id: str, known_ids: set[str]) -> None:
        # Agent history must match ai_state.messages, which the failed submission left untouched
        try:
            removed = await discard_turns(self._agent, chat_id, known_ids)
        except Exception:
            logger.exception("assistant.rollback_failed", chat_id=chat_id)
            return
        if removed:
            logger.info("assistant.rolled_back", chat_id=chat_id, removed=removed)

    async def _save_chat(self, ai_state: AIState) -> Optional[NewConversation]:
        existing = self._chats.get(ai_state.chat_id)
        if existing is None:
            chat = Chat(
                id=ai_state.chat_id,
                title=title_from_messages(ai_state.messages),
                user_id=ai_state.user_id,
                messages=list(ai_state.messages),
            )
        else:
            chat = Chat(
                id=existing.id,
                title=existing.title,
                user_id=existing.user_id,
                created_at=existing.created_at,
                messages=list(ai_state.messages),
            )
        self._chats.save(chat)

        if existing is None:
            logger.info("assistant.chat_created", chat_id=chat.id, user_id=chat.user_id)
            return NewConversation(chat.id)
        return None


def ui_messages_from_chat(chat_id: str, messages: list[dict]) -> list[Message]:
    """Rebuild the chat view from saved turns."""
    ui_messages = []
    for index, message in enumerate(messages):
        message_id = f"{chat_id}-{index}"
        if message.get("role") == "user":
            ui_messages.append(Message(message_id, UserMessage(message.get("content", ""))))
        elif message.get("role") == "assistant":
            ui_messages.append(Message(message_id, BotMessage(message.get("content", ""))))
    return ui_messages


def ai_state_from_chat(chat: Chat) -> AIState:
    """Conversation state for an existing chat."""
    return AIState(chat_id=chat.id, messages=list(chat.messages), user_id=chat.user_id)
