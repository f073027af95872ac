"""
Module: test_cancellation.py
Description: Unit tests for per-attempt timeout and cancellation.

Uses httpx.MockTransport with a slow async handler so in-flight
requests can be timed out or cancelled deterministically.
"""

import asyncio

import httpx

from ezhook.models.outcome import RequestOptions


class SlowHandler:
    """MockTransport handler that answers after a delay and tracks aborts."""

    def __init__(self, delay: float = 5.0, status_code: int = 204):
        self.delay = delay
        self.status_code = status_code
        self.calls = 0
        self.aborted = 0

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls += 1
        try:
            await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.aborted += 1
            raise
        return httpx.Response(self.status_code)


class TestTimeout:
    """timeout_ms aborts each attempt independently."""

    async def test_timeout_reports_transport_failure(self, make_engine):
        handler = SlowHandler()
        engine = make_engine({"max_retries": 0}, transport=httpx.MockTransport(handler))

        outcome = await engine.send("POST", {}, RequestOptions(timeout_ms=20))

        assert outcome.ok is False
        assert outcome.status_code == 0
        assert outcome.error_message == "Request timed out after 20ms"
        assert handler.calls == 1
        assert handler.aborted == 1

    async def test_timeout_is_per_attempt(self, make_engine, sleep_recorder):
        handler = SlowHandler()
        engine = make_engine({"max_retries": 2}, transport=httpx.MockTransport(handler))

        outcome = await engine.send("POST", {}, {"timeout_ms": 20})

        assert outcome.status_code == 0
        assert handler.calls == 3
        assert handler.aborted == 3
        assert len(sleep_recorder.delays) == 2

    async def test_fast_response_within_timeout(self, make_engine):
        handler = SlowHandler(delay=0)
        engine = make_engine(transport=httpx.MockTransport(handler))

        outcome = await engine.send("POST", {}, {"timeout_ms": 1000})

        assert outcome.ok is True
        assert handler.aborted == 0

    async def test_engine_default_timeout(self, make_engine):
        handler = SlowHandler()
        engine = make_engine(
            {"max_retries": 0},
            timeout_ms=15,
            transport=httpx.MockTransport(handler)
        )

        outcome = await engine.send("POST", {})

        assert outcome.error_message == "Request timed out after 15ms"


class TestCancellation:
    """Setting the cancel event aborts the in-flight attempt."""

    async def test_cancel_in_flight(self, make_engine):
        handler = SlowHandler()
        engine = make_engine({"max_retries": 0}, transport=httpx.MockTransport(handler))
        cancel_event = asyncio.Event()

        async def cancel_soon():
            await asyncio.sleep(0.02)
            cancel_event.set()

        canceller = asyncio.create_task(cancel_soon())
        outcome = await engine.send("POST", {}, {"cancel_event": cancel_event})
        await canceller

        assert outcome.ok is False
        assert outcome.status_code == 0
        assert outcome.error_message == "Request cancelled"
        assert handler.aborted == handler.calls

    async def test_already_cancelled_consumes_retry_budget(self, make_engine, sleep_recorder):
        handler = SlowHandler()
        engine = make_engine({"max_retries": 2}, transport=httpx.MockTransport(handler))
        cancel_event = asyncio.Event()
        cancel_event.set()

        outcome = await engine.send("POST", {}, {"cancel_event": cancel_event})

        assert outcome.status_code == 0
        assert outcome.error_message == "Request cancelled"
        assert len(sleep_recorder.delays) == 2

    async def test_cancel_beats_longer_timeout(self, make_engine):
        handler = SlowHandler()
        engine = make_engine({"max_retries": 0}, transport=httpx.MockTransport(handler))
        cancel_event = asyncio.Event()
        asyncio.get_running_loop().call_later(0.01, cancel_event.set)

        outcome = await engine.send(
            "POST",
            {},
            {"cancel_event": cancel_event, "timeout_ms": 5000}
        )

        assert outcome.error_message == "Request cancelled"

    async def test_unset_event_does_not_interfere(self, make_engine):
        handler = SlowHandler(delay=0)
        engine = make_engine(transport=httpx.MockTransport(handler))

        outcome = await engine.send("POST", {}, {"cancel_event": asyncio.Event()})

        assert outcome.ok is True


class TestConcurrentSends:
    """Retry state is per call, so one engine can serve overlapping sends."""

    async def test_overlapping_sends_keep_separate_budgets(self, make_engine):
        statuses = {"a": [500, 500, 204], "b": [204]}

        def handler(request: httpx.Request) -> httpx.Response:
            key = request.headers["x-key"]
            return httpx.Response(statuses[key].pop(0))

        engine = make_engine({"max_retries": 2}, transport=httpx.MockTransport(handler))

        first, second = await asyncio.gather(
            engine.send("POST", {}, {"headers": {"X-Key": "a"}}),
            engine.send("POST", {}, {"headers": {"X-Key": "b"}}),
        )

        assert first.ok and first.status_code == 204
        assert second.ok and second.status_code == 204
        assert statuses == {"a": [], "b": []}
