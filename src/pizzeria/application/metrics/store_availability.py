from __future__ import annotations

from prometheus_client import Counter

from pizzeria.domain.schedule.entities import AvailabilityVerdict

AVAILABILITY_CHECKS_TOTAL = Counter(
    "pizzeria_availability_checks_total",
    "Total number of store availability evaluations by outcome.",
    ["open", "reason"],
)

CHECKOUT_BLOCKED_TOTAL = Counter(
    "pizzeria_checkout_blocked_total",
    "Total number of checkouts refused because the store was closed.",
    ["reason"],
)


def _reason(verdict: AvailabilityVerdict) -> str:
    return verdict.reason.value if verdict.reason is not None else "none"


def record_availability_check(verdict: AvailabilityVerdict) -> None:
    AVAILABILITY_CHECKS_TOTAL.labels(
        open=str(verdict.is_open_now).lower(),
        reason=_reason(verdict),
    ).inc()


def record_checkout_blocked(verdict: AvailabilityVerdict) -> None:
    CHECKOUT_BLOCKED_TOTAL.labels(reason=_reason(verdict)).inc()
