"""Shopping assistant behind the chat form.

Main components:
- agent: LangGraph recommendation agent
- repository: ChatRepository for saved chats
- actions: ShoppingAssistant.submit_user_message
"""

from smartshop.assistant.actions import ShoppingAssistant, ai_state_from_chat, ui_messages_from_chat
from smartshop.assistant.agent import (
    create_llm,
    create_recommendation_agent,
    discard_turns,
    recommend,
    thread_message_ids,
)
from smartshop.assistant.repository import Chat, ChatRepository

__all__ = [
    "ShoppingAssistant",
    "ai_state_from_chat",
    "ui_messages_from_chat",
    "create_llm",
    "create_recommendation_agent",
    "recommend",
    "thread_message_ids",
    "discard_turns",
    "Chat",
    "ChatRepository",
]
