from __future__ import annotations

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from pizzeria.domain.common.ids import OrderId
from pizzeria.domain.order.entities import OrderStatus
from pizzeria.domain.order.new_orders import FeedEventKind, NewOrderTracker, is_fresh_confirmation

STARTED_AT = datetime(2026, 10, 19, 22, 0, tzinfo=timezone.utc)
WATERMARK = STARTED_AT + timedelta(seconds=2)


def test_pending_insert_before_watermark_then_confirmation_after_is_new_once() -> None:
    tracker = NewOrderTracker(watermark=WATERMARK)
    order_id = OrderId("ord_001")

    assert not tracker.observe(
        order_id,
        FeedEventKind.INSERT,
        OrderStatus.PENDING,
        observed_at=STARTED_AT + timedelta(seconds=1),
    )
    assert tracker.observe(
        order_id,
        FeedEventKind.UPDATE,
        OrderStatus.CONFIRMED,
        observed_at=WATERMARK + timedelta(seconds=5),
        previous_status=OrderStatus.PENDING,
    )
    assert not tracker.observe(
        order_id,
        FeedEventKind.UPDATE,
        OrderStatus.CONFIRMED,
        observed_at=WATERMARK + timedelta(seconds=6),
        previous_status=OrderStatus.PENDING,
    )
    assert tracker.reported_count == 1


def test_events_at_or_before_watermark_are_ignored() -> None:
    tracker = NewOrderTracker(watermark=WATERMARK)
    assert not tracker.observe(
        OrderId("ord_002"),
        FeedEventKind.INSERT,
        OrderStatus.CONFIRMED,
        observed_at=WATERMARK,
    )
    assert tracker.reported_count == 0


def test_confirmed_insert_after_watermark_is_new() -> None:
    tracker = NewOrderTracker(watermark=WATERMARK)
    assert tracker.observe(
        OrderId("ord_003"),
        FeedEventKind.INSERT,
        OrderStatus.CONFIRMED,
        observed_at=WATERMARK + timedelta(milliseconds=1),
    )


def test_pending_orders_never_count() -> None:
    tracker = NewOrderTracker(watermark=WATERMARK)
    for offset in range(3):
        assert not tracker.observe(
            OrderId("ord_004"),
            FeedEventKind.INSERT,
            OrderStatus.PENDING,
            observed_at=WATERMARK + timedelta(seconds=offset + 1),
        )


def test_updates_only_count_when_leaving_pending() -> None:
    assert is_fresh_confirmation(FeedEventKind.UPDATE, OrderStatus.CONFIRMED, OrderStatus.PENDING)
    assert not is_fresh_confirmation(FeedEventKind.UPDATE, OrderStatus.CONFIRMED, None)
    assert not is_fresh_confirmation(
        FeedEventKind.UPDATE,
        OrderStatus.PREPARING,
        OrderStatus.CONFIRMED,
    )
    assert is_fresh_confirmation(FeedEventKind.INSERT, OrderStatus.CONFIRMED, None)


def _confirm(tracker: NewOrderTracker, order_id: str, second: int) -> bool:
    return tracker.observe(
        OrderId(order_id),
        FeedEventKind.INSERT,
        OrderStatus.CONFIRMED,
        observed_at=WATERMARK + timedelta(seconds=second),
    )


def test_reported_ids_are_capped_and_oldest_evicted_first() -> None:
    tracker = NewOrderTracker(watermark=WATERMARK, max_reported=3)
    for index in range(1, 6):
        assert _confirm(tracker, f"ord_{index:03d}", second=index)

    assert tracker.reported_count == 3
    assert not _confirm(tracker, "ord_005", second=10)
    assert not _confirm(tracker, "ord_003", second=11)
    assert _confirm(tracker, "ord_001", second=12)
    assert tracker.reported_count == 3


def test_long_running_tracker_stays_bounded() -> None:
    tracker = NewOrderTracker(watermark=WATERMARK, max_reported=100)
    for index in range(1_000):
        _confirm(tracker, f"ord_{index:05d}", second=index + 1)
    assert tracker.reported_count == 100


def test_max_reported_must_be_positive() -> None:
    with pytest.raises(ValueError):
        NewOrderTracker(watermark=WATERMARK, max_reported=0)
