"""Background event loop and per-chat controllers for the web app.

Flask handles requests on its own threads; every chat controller lives on a
single asyncio loop running in a daemon thread. Request handlers only read
store snapshots and hand input to the loop with ``call_soon_threadsafe``.
"""

from __future__ import annotations

import asyncio
import json
import threading
import time
from collections import OrderedDict, deque
from typing import Any, Callable, Iterable, Iterator, Optional

import structlog

from smartshop.assistant.actions import ShoppingAssistant
from smartshop.chat.messages import Message, MessageStore
from smartshop.chat.navigation import EventNavigator
from smartshop.chat.prompt_form import PromptForm
from smartshop.chat.state import AIState
from smartshop.core.ids import nanoid

logger = structlog.get_logger(__name__)


class EventLoopThread:
    """One asyncio loop running forever in a daemon thread."""

    def __init__(self, name: str = "smartshop-chat-loop"):
        self.loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)
        self._start_lock = threading.Lock()

    def start(self) -> None:
        with self._start_lock:
            if not self._thread.is_alive():
                self._thread.start()

    def _run(self) -> None:
        asyncio.set_event_loop(self.loop)
        self.loop.run_forever()

    def call_soon(self, callback: Callable[..., Any], *args: Any) -> None:
        """Schedule ``callback(*args)`` on the loop from any thread."""
        self.start()
        self.loop.call_soon_threadsafe(callback, *args)

    def run(self, coro, timeout: Optional[float] = None) -> Any:
        """Run a coroutine on the loop and block for its result."""
        self.start()
        return asyncio.run_coroutine_threadsafe(coro, self.loop).result(timeout)

    def stop(self) -> None:
        if self._thread.is_alive():
            self.loop.call_soon_threadsafe(self.loop.stop)
            self._thread.join(timeout=5.0)


class ChatRuntime:
    """Controller, store and outgoing browser events for one open chat."""

    def __init__(
        self,
        ai_state: AIState,
        assistant: ShoppingAssistant,
        messages: Iterable[Message] = (),
        debounce_seconds: float = 2.0,
        id_factory: Callable[[], str] = nanoid,
    ):
        self.ai_state = ai_state
        self.store = MessageStore(messages)
        self.navigator = EventNavigator()
        self._lock = threading.Lock()
        self._notifications: deque[dict[str, Any]] = deque()

        async def submit(value: str):
            return await assistant.submit_user_message(self.ai_state, value)

        self.form = PromptForm(
            store=self.store,
            submit=submit,
            ai_state=self.ai_state,
            navigator=self.navigator,
            notify=self.notify,
            debounce_seconds=debounce_seconds,
            id_factory=id_factory,
        )

    @property
    def chat_id(self) -> str:
        return self.ai_state.chat_id

    def notify(self, text: str) -> None:
        """Queue an error toast for the browser."""
        with self._lock:
            self._notifications.append({"type": "toast", "level": "error", "message": text})

    def drain_events(self) -> list[dict[str, Any]]:
        """Toasts then navigation commands queued since the last call.

        Draining removes the events, so with several streams open on the
        same chat (two tabs) each event reaches only one of them.
        """
        with self._lock:
            events = list(self._notifications)
            self._notifications.clear()
        return events + self.navigator.drain()


class ChatRegistry:
    """Open chat runtimes keyed by chat id.

    Holds at most ``max_open`` runtimes. Opening one more evicts the least
    recently used runtime and closes its form on the loop; a page whose
    runtime was evicted gets 404 from the chat API until it is reloaded.
    """

    def __init__(
        self,
        assistant: ShoppingAssistant,
        loop_thread: EventLoopThread,
        debounce_seconds: float = 2.0,
        id_factory: Callable[[], str] = nanoid,
        max_open: int = 256,
    ):
        if max_open <= 0:
            raise ValueError("max_open must be positive")
        self._assistant = assistant
        self._loop_thread = loop_thread
        self._debounce_seconds = debounce_seconds
        self._id_factory = id_factory
        self._max_open = max_open
        self._lock = threading.Lock()
        self._runtimes: OrderedDict[str, ChatRuntime] = OrderedDict()

    def __len__(self) -> int:
        with self._lock:
            return len(self._runtimes)

    @property
    def loop_thread(self) -> EventLoopThread:
        return self._loop_thread

    def open(self, ai_state: AIState, messages: Iterable[Message] = ()) -> ChatRuntime:
        """Start a fresh runtime for the chat, closing any previous one."""
        runtime = ChatRuntime(
            ai_state,
            self._assistant,
            messages=messages,
            debounce_seconds=self._debounce_seconds,
            id_factory=self._id_factory,
        )
        with self._lock:
            closing = []
            previous = self._runtimes.pop(ai_state.chat_id, None)
            if previous is not None:
                closing.append(previous)
            self._runtimes[ai_state.chat_id] = runtime
            while len(self._runtimes) > self._max_open:
                _, evicted = self._runtimes.popitem(last=False)
                closing.append(evicted)
                logger.info("chat.evicted", chat_id=evicted.chat_id)
        for stale in closing:
            self._loop_thread.call_soon(stale.form.close)
        logger.info("chat.opened", chat_id=ai_state.chat_id, messages=len(runtime.store))
        return runtime

    def get(self, chat_id: str) -> Optional[ChatRuntime]:
        """The chat's runtime, marked as most recently used."""
        with self._lock:
            runtime = self._runtimes.get(chat_id)
            if runtime is not None:
                self._runtimes.move_to_end(chat_id)
            return runtime

    def submit(self, chat_id: str, text: str) -> bool:
        """Hand input to the chat's form on the loop.

        Returns:
            False for blank input.

        Raises:
            KeyError: If the chat is not open.
        """
        runtime = self.get(chat_id)
        if runtime is None:
            raise KeyError(chat_id)
        value = text.strip()
        if not value:
            return False
        self._loop_thread.call_soon(runtime.form.on_submit, value)
        return True

    def new_chat(self, chat_id: str) -> None:
        runtime = self.get(chat_id)
        if runtime is None:
            raise KeyError(chat_id)
        self._loop_thread.call_soon(runtime.form.new_chat)

    def close_all(self) -> None:
        with self._lock:
            runtimes = list(self._runtimes.values())
            self._runtimes.clear()
        for runtime in runtimes:
            self._loop_thread.call_soon(runtime.form.close)


def _sse(event: dict[str, Any]) -> str:
    return f"data: {json.dumps(event)}\n\n"


def stream_events(
    runtime: ChatRuntime,
    poll_interval: float = 0.5,
    keepalive_seconds: float = 15.0,
) -> Iterator[str]:
    """Server-Sent Events for one chat page.

    Event types:
        - {"type": "messages", "version": int, "messages": [...]}: store changed
        - {"type": "toast", "level": "error", "message": str}: notification
        - {"type": "push" | "replace_path", "path": str}: navigation
        - {"type": "reload"}: page must reload; the stream ends
    """
    last_version = None
    idle = 0.0
    while True:
        snapshot = runtime.store.snapshot()
        if snapshot.version != last_version:
            last_version = snapshot.version
            yield _sse({"type": "messages", **snapshot.to_dict()})
            idle = 0.0

        for event in runtime.drain_events():
            yield _sse(event)
            idle = 0.0
            if event["type"] == "reload":
                return

        if idle >= keepalive_seconds:
            # Keepalive comment to prevent proxy timeouts
            yield ": keepalive\n\n"
            idle = 0.0

        time.sleep(poll_interval)
        idle += poll_interval
