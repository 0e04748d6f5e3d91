"""Tests for the trailing debounce."""

import asyncio

import pytest
from structlog.testing import capture_logs

from smartshop.chat.debounce import Debouncer

WAIT = 0.05


def recorder():
    calls = []

    async def callback(value):
        calls.append(value)

    return calls, callback


class TestDebouncer:
    @pytest.mark.asyncio
    async def test_burst_collapses_to_final_call(self):
        calls, callback = recorder()
        debounced = Debouncer(callback, WAIT)

        for value in ["m", "mi", "mil", "milk", "milk, eggs"]:
            debounced(value)
        assert debounced.pending

        await debounced.wait_idle()
        assert calls == ["milk, eggs"]
        assert not debounced.pending

    @pytest.mark.asyncio
    async def test_nothing_fires_inside_the_window(self):
        calls, callback = recorder()
        debounced = Debouncer(callback, WAIT)

        debounced("milk")
        await asyncio.sleep(WAIT / 5)
        assert calls == []

        await debounced.wait_idle()
        assert calls == ["milk"]

    @pytest.mark.asyncio
    async def test_calls_after_quiet_period_fire_separately(self):
        calls, callback = recorder()
        debounced = Debouncer(callback, WAIT)

        debounced("milk")
        await debounced.wait_idle()
        debounced("eggs")
        await debounced.wait_idle()

        assert calls == ["milk", "eggs"]

    @pytest.mark.asyncio
    async def test_cancel_drops_pending_call(self):
        calls, callback = recorder()
        debounced = Debouncer(callback, WAIT)

        debounced("milk")
        debounced.cancel()
        await asyncio.sleep(WAIT * 2)

        assert calls == []

    @pytest.mark.asyncio
    async def test_close_on_teardown(self):
        calls, callback = recorder()
        debounced = Debouncer(callback, WAIT)

        debounced("milk")
        debounced.close()
        await asyncio.sleep(WAIT * 2)

        assert calls == []
        assert debounced.closed
        with pytest.raises(RuntimeError):
            debounced("eggs")

    @pytest.mark.asyncio
    async def test_callback_errors_are_logged(self):
        async def boom(value):
            raise RuntimeError("service down")

        debounced = Debouncer(boom, WAIT)
        with capture_logs() as logs:
            debounced("milk")
            await debounced.wait_idle()

        assert [log["event"] for log in logs] == ["chat.debounced_call_failed"]
        assert logs[0]["log_level"] == "error"
