"""Chat input controller.

Takes what the user typed, shows it immediately with a placeholder per item,
sends it to the submission service after a quiet period, then writes the
assistant's responses over the placeholders. When the service reports that
the submission started a new chat, the page is moved to the chat's URL and
reloaded so server-rendered state (chat history) is rebuilt.
"""

from __future__ import annotations

from typing import Callable, Optional

import structlog

from smartshop.chat.debounce import Debouncer
from smartshop.chat.items import split_items
from smartshop.chat.messages import (
    ErrorMessage,
    Message,
    MessageStore,
    SpinnerMessage,
    UserMessage,
)
from smartshop.chat.navigation import Navigator
from smartshop.chat.reconcile import reconcile
from smartshop.chat.service import NewConversation, SubmissionService, SubmitFailure
from smartshop.chat.state import AIState
from smartshop.core.ids import nanoid
from smartshop.core.results import ResultCode, get_message_from_code

logger = structlog.get_logger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 2.0


class PromptForm:
    """Controller behind the chat input box.

    Args:
        store: Message list shown in the chat view
        submit: Submission service
        ai_state: Conversation state; ``chat_id`` is read when navigating
        navigator: Browser navigation capability
        notify: Shows a transient error notification
        debounce_seconds: Quiet period before a submission is sent
        id_factory: Generator for message ids
    """

    def __init__(
        self,
        store: MessageStore,
        submit: SubmissionService,
        ai_state: AIState,
        navigator: Navigator,
        notify: Callable[[str], None],
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
        id_factory: Callable[[], str] = nanoid,
    ):
        self._store = store
        self._submit = submit
        self._ai_state = ai_state
        self._navigator = navigator
        self._notify = notify
        self._new_id = id_factory
        self._debounced = Debouncer(self.submit_now, debounce_seconds)
        self._closed = False

    @property
    def store(self) -> MessageStore:
        return self._store

    @property
    def closed(self) -> bool:
        return self._closed

    def on_submit(self, raw_input: str) -> bool:
        """Handle the form's submit event.

        Must run on the event loop thread. Blank input is ignored.

        Returns:
            True if a submission was scheduled.
        """
        value = raw_input.strip()
        if not value or self._closed:
            return False
        self._debounced(value)
        return True

    def new_chat(self) -> None:
        self._navigator.push("/new")

    def close(self) -> None:
        """Tear down: a pending debounced submission never fires."""
        self._closed = True
        self._debounced.close()

    async def wait_idle(self) -> None:
        """Wait for scheduled and running submissions to finish."""
        await self._debounced.wait_idle()

    async def submit_now(self, value: str) -> None:
        """Run one submission end to end, without debouncing."""
        words = split_items(value)
        if not words:
            self._notify(get_message_from_code(ResultCode.INVALID_SUBMISSION))
            return

        placeholder_ids = self._append_optimistic(words)

        result = await self._submit(value)
        if isinstance(result, SubmitFailure):
            text = get_message_from_code(result.result_code)
            logger.info(
                "chat.submit_failed",
                chat_id=self._ai_state.chat_id,
                result_code=str(result.result_code),
            )
            self._notify(text)
            self._mark_failed(placeholder_ids, text)
            return

        self._apply_responses(result.responses, placeholder_ids[-1])

        # Wait for the assistant to finish (chat saved)
        signal = await result.completion
        self._settle(signal)

    def _append_optimistic(self, words: list[str]) -> list[str]:
        entries: list[Message] = []
        for word in words:
            entries.append(Message(self._new_id(), UserMessage(word)))
            entries.append(Message(self._new_id(), SpinnerMessage()))

        self._store.update(lambda current: [*current, *entries])
        return [entry.id for entry in entries[1::2]]

    def _apply_responses(self, responses: list[Message], anchor_id: str) -> None:
        # Tail is this submission's last placeholder, wherever later appends left it
        while True:
            snapshot = self._store.snapshot()
            tail = snapshot.index_of(anchor_id)
            if tail is None:
                logger.warning(
                    "chat.reconcile_skipped",
                    chat_id=self._ai_state.chat_id,
                    reason="placeholder missing",
                )
                return
            updated = reconcile(snapshot.messages, responses, tail)
            if self._store.replace_if_current(snapshot.version, updated):
                return

    def _mark_failed(self, placeholder_ids: list[str], text: str) -> None:
        failed = set(placeholder_ids)
        self._store.update(
            lambda current: [
                Message(m.id, ErrorMessage(text)) if m.id in failed else m
                for m in current
            ]
        )

    def _settle(self, signal: Optional[NewConversation]) -> None:
        if not signal or self._closed:
            return
        path = f"list/{self._ai_state.chat_id}"
        logger.info("chat.new_conversation", chat_id=self._ai_state.chat_id, path=path)
        self._navigator.replace_path(path)
        self._navigator.reload()
