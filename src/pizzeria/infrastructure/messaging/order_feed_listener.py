from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Iterable
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable, Protocol

from redis import asyncio as redis_asyncio

from pizzeria.application.mappers.event_envelope import serialize_new_order_highlight
from pizzeria.application.metrics.order_lifecycle import record_new_order_highlight
from pizzeria.application.use_cases.clock import Clock, utc_now
from pizzeria.domain.common.ids import OrderId
from pizzeria.domain.order.entities import OrderStatus
from pizzeria.domain.order.new_orders import FeedEventKind, NewOrderTracker
from pizzeria.infrastructure.messaging.redis_client import redis_url
from pizzeria.infrastructure.settings import new_order_grace_seconds

logger = logging.getLogger(__name__)

FEED_PATTERN = "events:*"
HIGHLIGHT_ROLES = frozenset({"admin", "staff"})
FEED_ROLES = frozenset({"admin", "staff", "entregador"})

_EVENT_KINDS: dict[str, FeedEventKind] = {
    "order.placed": FeedEventKind.INSERT,
    "order.status_changed": FeedEventKind.UPDATE,
}

Broadcast = Callable[[str, frozenset[str]], Awaitable[None]]


class OrderEventSink(Protocol):
    async def broadcast_order_event(
        self,
        message_json_str: str,
        order_id: str | None,
        roles: Iterable[str],
    ) -> None: ...


def _decode_value(value: bytes | str | None) -> str | None:
    if value is None:
        return None
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return value


def envelope_order_id(message: str) -> str | None:
    try:
        envelope = json.loads(message)
    except json.JSONDecodeError:
        return None
    if not isinstance(envelope, dict):
        return None
    payload = envelope.get("payload")
    if not isinstance(payload, dict) or not payload.get("orderId"):
        return None
    return str(payload["orderId"])


async def forward_feed_message(sink: OrderEventSink, message: str) -> None:
    """Raw events go to staff channels and to customers following that order."""
    await sink.broadcast_order_event(message, envelope_order_id(message), FEED_ROLES)


def _optional_status(value: Any) -> OrderStatus | None:
    if value is None:
        return None
    try:
        return OrderStatus(value)
    except ValueError:
        return None


class NewOrderHighlighter:
    """Feeds realtime order events into a tracker and queues the fresh ones.

    ``handle`` runs inside the feed callback and only enqueues; the broadcast
    of the highlight happens later in ``run_worker``.
    """

    def __init__(self, tracker: NewOrderTracker, clock: Clock = utc_now) -> None:
        self._tracker = tracker
        self._clock = clock
        self._queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue()

    @property
    def watermark(self) -> datetime:
        return self._tracker.watermark

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def handle(self, message: str) -> bool:
        try:
            envelope = json.loads(message)
        except json.JSONDecodeError:
            logger.warning("order_feed_invalid_message")
            return False
        if not isinstance(envelope, dict):
            return False

        kind = _EVENT_KINDS.get(str(envelope.get("event_type")))
        payload = envelope.get("payload")
        if kind is None or not isinstance(payload, dict):
            return False
        status = _optional_status(payload.get("status"))
        order_id = payload.get("orderId")
        if status is None or not order_id:
            return False

        is_new = self._tracker.observe(
            order_id=OrderId(str(order_id)),
            kind=kind,
            status=status,
            observed_at=self._clock(),
            previous_status=_optional_status(payload.get("previousStatus")),
        )
        if is_new:
            self._queue.put_nowait(payload)
        return is_new

    async def run_worker(self, broadcast: Broadcast) -> None:
        while True:
            payload = await self._queue.get()
            try:
                message = serialize_new_order_highlight(
                    occurred_at=self._clock(),
                    payload=payload,
                )
                await broadcast(message, HIGHLIGHT_ROLES)
                record_new_order_highlight()
                logger.info("order_new_highlighted", extra={"order_id": payload.get("orderId")})
            except Exception:
                logger.exception(
                    "order_new_highlight_failed",
                    extra={"order_id": payload.get("orderId")},
                )
            finally:
                self._queue.task_done()


def new_highlighter(
    clock: Clock = utc_now,
    grace_seconds: float | None = None,
) -> NewOrderHighlighter:
    grace = new_order_grace_seconds() if grace_seconds is None else grace_seconds
    tracker = NewOrderTracker(watermark=clock() + timedelta(seconds=grace))
    return NewOrderHighlighter(tracker=tracker, clock=clock)


async def start_order_feed(app_state: Any) -> None:
    try:
        url = redis_url()
    except RuntimeError:
        logger.warning("order_feed_not_started", extra={"reason": "REDIS_URL missing"})
        return

    backoff_seconds = 1.0
    while True:
        client: redis_asyncio.Redis | None = None
        pubsub: redis_asyncio.client.PubSub | None = None
        worker: asyncio.Task[None] | None = None
        try:
            client = redis_asyncio.from_url(url)
            pubsub = client.pubsub()
            await pubsub.psubscribe(FEED_PATTERN)
            # A fresh tracker per subscription keeps replays from counting as new.
            highlighter = new_highlighter()
            worker = asyncio.create_task(highlighter.run_worker(app_state.ws_manager.broadcast))
            logger.info(
                "order_feed_subscribed",
                extra={
                    "pattern": FEED_PATTERN,
                    "watermark": highlighter.watermark.isoformat(),
                },
            )
            backoff_seconds = 1.0

            while True:
                message = await pubsub.get_message(ignore_subscribe_messages=True, timeout=1.0)
                if message is None:
                    await asyncio.sleep(0.05)
                    continue

                channel = _decode_value(message.get("channel"))
                payload = _decode_value(message.get("data"))
                if not channel or not payload:
                    continue

                await forward_feed_message(app_state.ws_manager, payload)
                highlighter.handle(payload)
        except asyncio.CancelledError:
            logger.info("order_feed_cancelled")
            raise
        except Exception:
            logger.exception("order_feed_error", extra={"backoff_seconds": backoff_seconds})
            await asyncio.sleep(backoff_seconds)
            backoff_seconds = min(backoff_seconds * 2, 5.0)
        finally:
            if worker is not None:
                worker.cancel()
            if pubsub is not None:
                await pubsub.aclose()
            if client is not None:
                await client.aclose()

