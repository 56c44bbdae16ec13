from __future__ import annotations

from datetime import date, datetime, timedelta, timezone, tzinfo
from typing import Sequence

from pizzeria.domain.schedule.entities import (
    AvailabilityVerdict,
    ClosedReason,
    DateException,
    NextOpen,
    ResolvedSchedule,
    WeeklyHourRule,
    opening_window,
)

# America/Sao_Paulo observes no DST, so a constant offset is exact.
STORE_TIMEZONE = timezone(timedelta(hours=-3), "America/Sao_Paulo")
NEXT_OPEN_HORIZON_DAYS = 14


def weekday_index(day: date) -> int:
    """Weekday with 0=Sunday .. 6=Saturday."""
    return (day.weekday() + 1) % 7


def to_store_time(now: datetime, tz: tzinfo = STORE_TIMEZONE) -> datetime:
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    return now.astimezone(tz)


def resolve_schedule_for_date(
    day: date,
    hours: Sequence[WeeklyHourRule],
    exceptions: Sequence[DateException],
) -> ResolvedSchedule | None:
    for exception in exceptions:
        if exception.date == day:
            return ResolvedSchedule(
                is_closed=exception.is_closed,
                open_time=exception.open_time,
                close_time=exception.close_time,
            )

    day_of_week = weekday_index(day)
    for rule in hours:
        if rule.day_of_week == day_of_week:
            return ResolvedSchedule(
                is_closed=rule.is_closed,
                open_time=rule.open_time,
                close_time=rule.close_time,
            )
    return None


def find_next_open(
    today: date,
    now_minutes: int,
    hours: Sequence[WeeklyHourRule],
    exceptions: Sequence[DateException],
    horizon_days: int = NEXT_OPEN_HORIZON_DAYS,
) -> NextOpen | None:
    for offset in range(horizon_days + 1):
        day = today + timedelta(days=offset)
        schedule = resolve_schedule_for_date(day, hours, exceptions)
        if schedule is None:
            continue
        window = opening_window(schedule)
        if window is None:
            continue

        if offset == 0:
            if now_minutes < window.open_minutes:
                return NextOpen(date=day, time=window.open_time)
            if now_minutes > window.close_minutes:
                continue
            # Still inside today's window; callers only search when closed.
            return NextOpen(date=day, time=window.open_time)

        return NextOpen(date=day, time=window.open_time)

    return None


def compute_availability(
    manual_open: bool,
    hours: Sequence[WeeklyHourRule],
    exceptions: Sequence[DateException],
    now: datetime,
    tz: tzinfo = STORE_TIMEZONE,
) -> AvailabilityVerdict:
    local_now = to_store_time(now, tz)
    today = local_now.date()
    now_minutes = local_now.hour * 60 + local_now.minute

    if not manual_open:
        # The search looks at the schedule only; the manual switch still has
        # to be flipped back by an operator.
        return AvailabilityVerdict(
            is_open_now=False,
            reason=ClosedReason.MANUAL,
            next_open_at=find_next_open(today, now_minutes, hours, exceptions),
        )

    schedule = resolve_schedule_for_date(today, hours, exceptions)
    window = opening_window(schedule) if schedule is not None else None
    if window is None or not window.contains(now_minutes):
        return AvailabilityVerdict(
            is_open_now=False,
            reason=ClosedReason.OUTSIDE_HOURS,
            next_open_at=find_next_open(today, now_minutes, hours, exceptions),
        )

    return AvailabilityVerdict(is_open_now=True, closes_at=window.close_time)
