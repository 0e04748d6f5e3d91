"""Tests for the submission service and chat repository."""

from datetime import datetime, timedelta, timezone

import pytest
from langchain_core.language_models.fake_chat_models import FakeListChatModel
from structlog.testing import capture_logs

from smartshop.assistant import (
    Chat,
    ChatRepository,
    ShoppingAssistant,
    ai_state_from_chat,
    create_recommendation_agent,
    thread_message_ids,
    ui_messages_from_chat,
)
from smartshop.chat.messages import BotMessage, Message, UserMessage
from smartshop.chat.service import NewConversation, SubmitFailure, SubmitSuccess
from smartshop.chat.state import AIState
from smartshop.core.results import ResultCode

from tests.conftest import RECOMMENDATIONS


class FlakyChatModel(FakeListChatModel):
    """Fake chat model that raises on the ``fail_on_call``-th call (0-based)."""

    fail_on_call: int = 0

    def _call(self, *args, **kwargs):
        if self.i == self.fail_on_call:
            raise RuntimeError("model unavailable")
        return super()._call(*args, **kwargs)


class TestSubmitUserMessage:
    @pytest.mark.asyncio
    async def test_one_response_per_item(self, assistant):
        ai_state = AIState(chat_id="c1", user_id="u1")

        result = await assistant.submit_user_message(ai_state, "milk, eggs")

        assert isinstance(result, SubmitSuccess)
        assert [m.display for m in result.responses] == [BotMessage(r) for r in RECOMMENDATIONS]
        assert len({m.id for m in result.responses}) == 2

    @pytest.mark.asyncio
    async def test_turns_recorded_in_ai_state(self, assistant):
        ai_state = AIState(chat_id="c1")

        await assistant.submit_user_message(ai_state, "milk, eggs")

        assert ai_state.messages == [
            {"role": "user", "content": "milk"},
            {"role": "assistant", "content": RECOMMENDATIONS[0]},
            {"role": "user", "content": "eggs"},
            {"role": "assistant", "content": RECOMMENDATIONS[1]},
        ]

    @pytest.mark.asyncio
    async def test_first_submission_creates_chat(self, assistant, chats):
        ai_state = AIState(chat_id="c1", user_id="u1")

        result = await assistant.submit_user_message(ai_state, "milk")
        signal = await result.completion

        assert signal == NewConversation("c1")
        chat = chats.get("c1")
        assert chat.title == "milk"
        assert chat.user_id == "u1"
        assert chat.path == "/list/c1"

    @pytest.mark.asyncio
    async def test_later_submissions_update_existing_chat(self, assistant, chats):
        ai_state = AIState(chat_id="c1")
        first = await assistant.submit_user_message(ai_state, "milk")
        await first.completion
        created_at = chats.get("c1").created_at

        second = await assistant.submit_user_message(ai_state, "eggs")

        assert await second.completion is None
        chat = chats.get("c1")
        assert chat.title == "milk"
        assert chat.created_at == created_at
        assert len(chat.messages) == 4

    @pytest.mark.asyncio
    async def test_blank_submission_is_invalid(self, assistant, chats):
        result = await assistant.submit_user_message(AIState(chat_id="c1"), " , ")

        assert result == SubmitFailure(ResultCode.INVALID_SUBMISSION)
        assert not chats.exists("c1")

    @pytest.mark.asyncio
    async def test_model_error_is_unknown_error(self, chats):
        model = FlakyChatModel(responses=list(RECOMMENDATIONS), fail_on_call=0)
        assistant = ShoppingAssistant(create_recommendation_agent(model), chats)
        ai_state = AIState(chat_id="c1")

        with capture_logs() as logs:
            result = await assistant.submit_user_message(ai_state, "milk")

        assert result == SubmitFailure(ResultCode.UNKNOWN_ERROR)
        assert ai_state.messages == []
        assert not chats.exists("c1")
        assert logs[0]["event"] == "assistant.recommend_failed"

    @pytest.mark.asyncio
    async def test_failure_midway_leaves_agent_history_unchanged(self, chats):
        """Items answered before the failing one are dropped from the agent
        thread so it keeps matching the conversation state."""
        model = FlakyChatModel(responses=list(RECOMMENDATIONS), fail_on_call=1)
        agent = create_recommendation_agent(model)
        assistant = ShoppingAssistant(agent, chats)
        ai_state = AIState(chat_id="c1")

        result = await assistant.submit_user_message(ai_state, "milk, eggs")

        assert result == SubmitFailure(ResultCode.UNKNOWN_ERROR)
        assert ai_state.messages == []
        assert await thread_message_ids(agent, "c1") == set()

    @pytest.mark.asyncio
    async def test_earlier_turns_survive_a_failed_submission(self, chats):
        model = FlakyChatModel(responses=list(RECOMMENDATIONS), fail_on_call=1)
        agent = create_recommendation_agent(model)
        assistant = ShoppingAssistant(agent, chats)
        ai_state = AIState(chat_id="c1")

        await assistant.submit_user_message(ai_state, "milk")
        kept = await thread_message_ids(agent, "c1")
        result = await assistant.submit_user_message(ai_state, "eggs")

        assert result == SubmitFailure(ResultCode.UNKNOWN_ERROR)
        assert len(kept) == 2
        assert await thread_message_ids(agent, "c1") == kept
        assert len(ai_state.messages) == 2


class TestChatState:
    def test_ui_messages_from_chat(self):
        messages = [
            {"role": "user", "content": "milk"},
            {"role": "assistant", "content": "Added milk."},
            {"role": "system", "content": "ignored"},
        ]

        assert ui_messages_from_chat("c1", messages) == [
            Message("c1-0", UserMessage("milk")),
            Message("c1-1", BotMessage("Added milk.")),
        ]

    def test_ai_state_from_chat_copies_messages(self):
        chat = Chat(id="c1", title="milk", user_id="u1", messages=[{"role": "user", "content": "milk"}])
        ai_state = ai_state_from_chat(chat)

        assert ai_state == AIState(chat_id="c1", messages=chat.messages, user_id="u1")
        ai_state.messages.append({"role": "user", "content": "eggs"})
        assert len(chat.messages) == 1


class TestChatRepository:
    def test_list_for_user_newest_first(self):
        repo = ChatRepository()
        now = datetime.now(timezone.utc)
        repo.save(Chat(id="old", title="a", user_id="u1", created_at=now - timedelta(days=1)))
        repo.save(Chat(id="new", title="b", user_id="u1", created_at=now))
        repo.save(Chat(id="other", title="c", user_id="u2", created_at=now))
        repo.save(Chat(id="anon", title="d"))

        assert [c.id for c in repo.list_for_user("u1")] == ["new", "old"]

    def test_title_is_truncated(self):
        from smartshop.assistant.repository import title_from_messages

        long_item = "x" * 150
        assert title_from_messages([{"role": "user", "content": long_item}]) == "x" * 100
        assert title_from_messages([]) == "New chat"
