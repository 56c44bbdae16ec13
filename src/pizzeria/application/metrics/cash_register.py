from __future__ import annotations

from prometheus_client import Counter

from pizzeria.domain.cash.entities import MovementType

CASH_SHIFTS_TOTAL = Counter(
    "pizzeria_cash_shifts_total",
    "Total number of cash shifts opened and closed.",
    ["event"],
)

CASH_MOVEMENTS_TOTAL = Counter(
    "pizzeria_cash_movements_total",
    "Total number of cash movements recorded by type.",
    ["type"],
)

CASH_MOVEMENT_CENTS_TOTAL = Counter(
    "pizzeria_cash_movement_cents_total",
    "Sum of recorded cash movement amounts in cents by type.",
    ["type"],
)


def record_shift_opened() -> None:
    CASH_SHIFTS_TOTAL.labels(event="opened").inc()


def record_shift_closed() -> None:
    CASH_SHIFTS_TOTAL.labels(event="closed").inc()


def record_cash_movement(movement_type: MovementType, amount_cents: int) -> None:
    CASH_MOVEMENTS_TOTAL.labels(type=movement_type.value).inc()
    CASH_MOVEMENT_CENTS_TOTAL.labels(type=movement_type.value).inc(amount_cents)
