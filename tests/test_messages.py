"""Tests for message types and the versioned store."""

import pytest

from smartshop.chat.messages import (
    BotMessage,
    ErrorMessage,
    Message,
    MessageStore,
    SpinnerMessage,
    UserMessage,
)


def msg(message_id, text="x"):
    return Message(message_id, UserMessage(text))


class TestDisplays:
    def test_to_dict_kinds(self):
        assert UserMessage("milk").to_dict() == {"kind": "user", "text": "milk"}
        assert SpinnerMessage().to_dict() == {"kind": "spinner"}
        assert BotMessage("ok").to_dict() == {"kind": "bot", "content": "ok"}
        assert ErrorMessage("bad").to_dict() == {"kind": "error", "text": "bad"}

    def test_message_to_dict(self):
        assert Message("a1", SpinnerMessage()).to_dict() == {
            "id": "a1",
            "display": {"kind": "spinner"},
        }


class TestMessageStore:
    def test_starts_at_version_zero(self):
        store = MessageStore([msg("a")])
        snapshot = store.snapshot()
        assert snapshot.version == 0
        assert [m.id for m in snapshot.messages] == ["a"]
        assert len(store) == 1

    def test_duplicate_ids_rejected(self):
        with pytest.raises(ValueError):
            MessageStore([msg("a"), msg("a")])

        store = MessageStore()
        with pytest.raises(ValueError):
            store.replace_if_current(0, [msg("b"), msg("b")])
        assert store.version == 0

    def test_replace_if_current(self):
        store = MessageStore()
        assert store.replace_if_current(0, [msg("a")])
        assert store.version == 1

    def test_stale_replace_is_refused(self):
        store = MessageStore()
        store.replace_if_current(0, [msg("a")])

        assert not store.replace_if_current(0, [msg("b")])
        assert [m.id for m in store.snapshot().messages] == ["a"]

    def test_update_retries_against_latest_snapshot(self):
        """A write landing between read and replace is not lost."""
        store = MessageStore()
        calls = 0

        def compute(current):
            nonlocal calls
            calls += 1
            if calls == 1:
                # Another writer gets in first
                store.replace_if_current(store.version, [*current, msg("x")])
            return [*current, msg("y")]

        snapshot = store.update(compute)

        assert calls == 2
        assert [m.id for m in snapshot.messages] == ["x", "y"]
        assert snapshot.version == 2
        assert store.snapshot() == snapshot

    def test_reset(self):
        store = MessageStore([msg("a"), msg("b")])
        store.reset()
        assert len(store) == 0
        assert store.version == 1

    def test_snapshot_helpers(self):
        store = MessageStore([msg("a"), Message("b", SpinnerMessage())])
        snapshot = store.snapshot()
        assert snapshot.index_of("b") == 1
        assert snapshot.index_of("missing") is None
        assert snapshot.to_dict()["messages"][1] == {"id": "b", "display": {"kind": "spinner"}}
