from __future__ import annotations

import asyncio
import json
import sys
from collections.abc import Iterable
from datetime import datetime, timedelta, timezone
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from pizzeria.infrastructure.messaging.order_feed_listener import (
    FEED_ROLES,
    HIGHLIGHT_ROLES,
    envelope_order_id,
    forward_feed_message,
    new_highlighter,
)

STARTED_AT = datetime(2026, 10, 19, 22, 0, tzinfo=timezone.utc)


class _FakeClock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now = self.now + timedelta(seconds=seconds)


def _event(event_type: str, order_id: str, status: str, previous: str | None = None) -> str:
    return json.dumps(
        {
            "event_id": "evt",
            "event_type": event_type,
            "occurred_at": STARTED_AT.isoformat(),
            "payload": {"orderId": order_id, "status": status, "previousStatus": previous},
        }
    )


def test_watermark_is_start_plus_grace() -> None:
    highlighter = new_highlighter(clock=_FakeClock(STARTED_AT), grace_seconds=2.0)
    assert highlighter.watermark == STARTED_AT + timedelta(seconds=2)


def test_pending_then_confirmed_is_highlighted_once() -> None:
    clock = _FakeClock(STARTED_AT)
    highlighter = new_highlighter(clock=clock, grace_seconds=2.0)

    clock.advance(1)
    assert highlighter.handle(_event("order.placed", "ord_1", "PENDING")) is False
    clock.advance(5)
    assert highlighter.handle(_event("order.status_changed", "ord_1", "CONFIRMED", "PENDING"))
    clock.advance(1)
    assert not highlighter.handle(
        _event("order.status_changed", "ord_1", "CONFIRMED", "PENDING")
    )
    assert highlighter.pending == 1


def test_replayed_events_inside_grace_are_ignored() -> None:
    clock = _FakeClock(STARTED_AT)
    highlighter = new_highlighter(clock=clock, grace_seconds=2.0)

    clock.advance(1)
    assert highlighter.handle(_event("order.placed", "ord_2", "CONFIRMED")) is False
    assert highlighter.pending == 0


def test_unrelated_messages_are_ignored() -> None:
    clock = _FakeClock(STARTED_AT)
    highlighter = new_highlighter(clock=clock, grace_seconds=0.0)
    clock.advance(1)

    assert highlighter.handle("not json") is False
    assert highlighter.handle("[1, 2]") is False
    assert highlighter.handle(_event("table.opened", "ord_3", "CONFIRMED")) is False
    assert highlighter.handle(_event("order.placed", "ord_3", "LOST")) is False
    assert not highlighter.handle(
        _event("order.status_changed", "ord_3", "PREPARING", "CONFIRMED")
    )


def test_worker_broadcasts_highlight_to_staff_roles() -> None:
    sent: list[tuple[str, frozenset[str] | None]] = []

    async def broadcast(message: str, roles: frozenset[str]) -> None:
        sent.append((message, roles))

    async def scenario() -> None:
        clock = _FakeClock(STARTED_AT)
        highlighter = new_highlighter(clock=clock, grace_seconds=2.0)
        worker = asyncio.create_task(highlighter.run_worker(broadcast))
        clock.advance(3)
        highlighter.handle(_event("order.placed", "ord_4", "CONFIRMED"))
        await asyncio.wait_for(highlighter._queue.join(), timeout=1.0)
        worker.cancel()

    asyncio.run(scenario())

    assert len(sent) == 1
    message, roles = sent[0]
    envelope = json.loads(message)
    assert roles == HIGHLIGHT_ROLES
    assert envelope["event_type"] == "order.new"
    assert envelope["payload"]["orderId"] == "ord_4"


def test_worker_keeps_running_after_broadcast_failure() -> None:
    attempts: list[str] = []

    async def broadcast(message: str, roles: frozenset[str]) -> None:
        attempts.append(json.loads(message)["payload"]["orderId"])
        if len(attempts) == 1:
            raise ConnectionError("socket gone")

    async def scenario() -> None:
        clock = _FakeClock(STARTED_AT)
        highlighter = new_highlighter(clock=clock, grace_seconds=0.0)
        worker = asyncio.create_task(highlighter.run_worker(broadcast))
        clock.advance(1)
        highlighter.handle(_event("order.placed", "ord_5", "CONFIRMED"))
        highlighter.handle(_event("order.placed", "ord_6", "CONFIRMED"))
        await asyncio.wait_for(highlighter._queue.join(), timeout=1.0)
        worker.cancel()

    asyncio.run(scenario())

    assert attempts == ["ord_5", "ord_6"]


class _RecordingSink:
    def __init__(self) -> None:
        self.sent: list[tuple[str, str | None, frozenset[str]]] = []

    async def broadcast_order_event(
        self,
        message_json_str: str,
        order_id: str | None,
        roles: Iterable[str],
    ) -> None:
        self.sent.append((message_json_str, order_id, frozenset(roles)))


def test_raw_events_are_scoped_to_their_order() -> None:
    sink = _RecordingSink()
    message = _event("order.status_changed", "ord_7", "PREPARING", "CONFIRMED")

    asyncio.run(forward_feed_message(sink, message))

    assert sink.sent == [(message, "ord_7", FEED_ROLES)]
    assert "customer" not in FEED_ROLES


def test_envelope_order_id_tolerates_foreign_messages() -> None:
    assert envelope_order_id(_event("order.placed", "ord_8", "PENDING")) == "ord_8"
    assert envelope_order_id("not json") is None
    assert envelope_order_id(json.dumps(["list"])) is None
    assert envelope_order_id(json.dumps({"event_type": "store.opened", "payload": {}})) is None
