from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from pizzeria.domain.common.ids import OrderId
from pizzeria.domain.order.entities import OrderStatus

MAX_REPORTED_ORDERS = 10_000


class FeedEventKind(str, Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"


def is_fresh_confirmation(
    kind: FeedEventKind,
    status: OrderStatus,
    previous_status: OrderStatus | None,
) -> bool:
    """True when a feed event shows an order that just became payable work.

    Orders still awaiting payment never count. An update only counts when it
    is the PENDING -> CONFIRMED step, so unrelated edits of a confirmed order
    are not replayed as new.
    """
    if status != OrderStatus.CONFIRMED:
        return False
    if kind == FeedEventKind.UPDATE:
        return previous_status == OrderStatus.PENDING
    return True


@dataclass
class NewOrderTracker:
    """Per-subscription memory of which orders were already reported as new.

    Owned by a single feed subscriber; each (re)connect starts a tracker with
    its own watermark so replayed history is ignored. Memory is bounded by
    max_reported; the oldest reported ids are evicted first.
    """

    watermark: datetime
    max_reported: int = MAX_REPORTED_ORDERS
    _reported: set[OrderId] = field(default_factory=set)
    _report_order: deque[OrderId] = field(default_factory=deque)

    def __post_init__(self) -> None:
        if self.max_reported < 1:
            raise ValueError("max_reported must be >= 1")

    def observe(
        self,
        order_id: OrderId,
        kind: FeedEventKind,
        status: OrderStatus,
        observed_at: datetime,
        previous_status: OrderStatus | None = None,
    ) -> bool:
        if observed_at <= self.watermark:
            return False
        if not is_fresh_confirmation(kind, status, previous_status):
            return False
        if order_id in self._reported:
            return False
        self._reported.add(order_id)
        self._report_order.append(order_id)
        while len(self._report_order) > self.max_reported:
            self._reported.discard(self._report_order.popleft())
        return True

    @property
    def reported_count(self) -> int:
        return len(self._reported)
