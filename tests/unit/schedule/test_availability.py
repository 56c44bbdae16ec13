from __future__ import annotations

import sys
from datetime import date, datetime, timedelta, timezone
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from pizzeria.domain.schedule.availability import (
    NEXT_OPEN_HORIZON_DAYS,
    STORE_TIMEZONE,
    compute_availability,
    find_next_open,
    resolve_schedule_for_date,
    to_store_time,
    weekday_index,
)
from pizzeria.domain.schedule.entities import (
    ClosedReason,
    DateException,
    NextOpen,
    ResolvedSchedule,
    WeeklyHourRule,
)

MONDAY = date(2026, 10, 19)


def _local(day: date, hour: int, minute: int = 0) -> datetime:
    return datetime(day.year, day.month, day.day, hour, minute, tzinfo=STORE_TIMEZONE)


def _monday_evening() -> list[WeeklyHourRule]:
    return [WeeklyHourRule(day_of_week=1, is_closed=False, open_time="18:00", close_time="23:00")]


def _full_week() -> list[WeeklyHourRule]:
    return [
        WeeklyHourRule(day_of_week=day, is_closed=False, open_time="18:00", close_time="23:00")
        for day in range(7)
    ]


def test_weekday_index_starts_on_sunday() -> None:
    assert weekday_index(date(2026, 10, 18)) == 0
    assert weekday_index(MONDAY) == 1
    assert weekday_index(date(2026, 10, 24)) == 6


def test_to_store_time_treats_naive_datetimes_as_utc() -> None:
    local = to_store_time(datetime(2026, 10, 19, 22, 0))
    assert (local.hour, local.minute) == (19, 0)
    assert local.date() == MONDAY


def test_open_inside_window_reports_closing_time() -> None:
    verdict = compute_availability(
        manual_open=True,
        hours=_monday_evening(),
        exceptions=[],
        now=_local(MONDAY, 19),
    )

    assert verdict.is_open_now is True
    assert verdict.closes_at == "23:00"
    assert verdict.reason is None
    assert verdict.next_open_at is None


def test_utc_instant_is_converted_to_store_time() -> None:
    verdict = compute_availability(
        manual_open=True,
        hours=_monday_evening(),
        exceptions=[],
        now=datetime(2026, 10, 19, 22, 0, tzinfo=timezone.utc),
    )
    assert verdict.is_open_now is True


def test_after_close_points_to_next_qualifying_day() -> None:
    verdict = compute_availability(
        manual_open=True,
        hours=_monday_evening(),
        exceptions=[],
        now=_local(MONDAY, 23, 30),
    )

    assert verdict.is_open_now is False
    assert verdict.reason == ClosedReason.OUTSIDE_HOURS
    assert verdict.closes_at is None
    assert verdict.next_open_at == NextOpen(date=MONDAY + timedelta(days=7), time="18:00")


def test_after_close_with_full_week_points_to_tomorrow() -> None:
    verdict = compute_availability(
        manual_open=True,
        hours=_full_week(),
        exceptions=[],
        now=_local(MONDAY, 23, 30),
    )
    assert verdict.next_open_at == NextOpen(date=MONDAY + timedelta(days=1), time="18:00")


def test_before_open_points_to_today() -> None:
    verdict = compute_availability(
        manual_open=True,
        hours=_monday_evening(),
        exceptions=[],
        now=_local(MONDAY, 10),
    )
    assert verdict.reason == ClosedReason.OUTSIDE_HOURS
    assert verdict.next_open_at == NextOpen(date=MONDAY, time="18:00")


@pytest.mark.parametrize(
    ("hour", "minute", "expected_open"),
    [(17, 59, False), (18, 0, True), (23, 0, True), (23, 1, False)],
)
def test_window_bounds_are_inclusive_at_minute_precision(
    hour: int,
    minute: int,
    expected_open: bool,
) -> None:
    verdict = compute_availability(
        manual_open=True,
        hours=_monday_evening(),
        exceptions=[],
        now=_local(MONDAY, hour, minute),
    )
    assert verdict.is_open_now is expected_open


def test_seconds_past_close_minute_still_count_as_open() -> None:
    now = _local(MONDAY, 23, 0).replace(second=59)
    verdict = compute_availability(True, _monday_evening(), [], now)
    assert verdict.is_open_now is True


def test_closed_exception_overrides_open_weekly_rule() -> None:
    verdict = compute_availability(
        manual_open=True,
        hours=_full_week(),
        exceptions=[DateException(date=MONDAY, is_closed=True, note="holiday")],
        now=_local(MONDAY, 19),
    )

    assert verdict.is_open_now is False
    assert verdict.reason == ClosedReason.OUTSIDE_HOURS
    assert verdict.next_open_at == NextOpen(date=MONDAY + timedelta(days=1), time="18:00")


def test_open_exception_overrides_closed_weekly_rule() -> None:
    sunday = date(2026, 10, 25)
    hours = [WeeklyHourRule(day_of_week=0, is_closed=True)]
    exceptions = [
        DateException(date=sunday, is_closed=False, open_time="10:00", close_time="14:00")
    ]

    resolved = resolve_schedule_for_date(sunday, hours, exceptions)
    verdict = compute_availability(True, hours, exceptions, _local(sunday, 12))

    assert resolved == ResolvedSchedule(is_closed=False, open_time="10:00", close_time="14:00")
    assert verdict.is_open_now is True
    assert verdict.closes_at == "14:00"


def test_manual_close_wins_over_any_schedule() -> None:
    verdict = compute_availability(
        manual_open=False,
        hours=_full_week(),
        exceptions=[],
        now=_local(MONDAY, 19),
    )

    assert verdict.is_open_now is False
    assert verdict.reason == ClosedReason.MANUAL
    assert verdict.closes_at is None


def test_manual_close_next_open_ignores_the_manual_switch() -> None:
    verdict = compute_availability(
        manual_open=False,
        hours=_full_week(),
        exceptions=[],
        now=_local(MONDAY, 10),
    )
    assert verdict.next_open_at == NextOpen(date=MONDAY, time="18:00")


def test_manual_close_without_any_schedule_has_no_next_open() -> None:
    verdict = compute_availability(False, [], [], _local(MONDAY, 19))
    assert verdict.reason == ClosedReason.MANUAL
    assert verdict.next_open_at is None


def test_day_without_rule_is_closed() -> None:
    verdict = compute_availability(True, [], [], _local(MONDAY, 19))
    assert verdict.is_open_now is False
    assert verdict.reason == ClosedReason.OUTSIDE_HOURS
    assert verdict.next_open_at is None


@pytest.mark.parametrize(
    "rule",
    [
        WeeklyHourRule(day_of_week=1, is_closed=False, open_time="23:00", close_time="02:00"),
        WeeklyHourRule(day_of_week=1, is_closed=False, open_time=None, close_time="23:00"),
        WeeklyHourRule(day_of_week=1, is_closed=False, open_time="18h", close_time="23:00"),
        WeeklyHourRule(day_of_week=1, is_closed=False, open_time="25:00", close_time="26:00"),
    ],
)
def test_unresolvable_rules_read_as_closed_without_raising(rule: WeeklyHourRule) -> None:
    verdict = compute_availability(True, [rule], [], _local(MONDAY, 23, 30))
    assert verdict.is_open_now is False
    assert verdict.next_open_at is None


def test_unresolvable_day_is_skipped_by_next_open_search() -> None:
    hours = [
        WeeklyHourRule(day_of_week=2, is_closed=False, open_time="20:00", close_time="19:00"),
        WeeklyHourRule(day_of_week=3, is_closed=False, open_time="18:00", close_time="23:00"),
    ]
    assert find_next_open(MONDAY, 0, hours, []) == NextOpen(
        date=MONDAY + timedelta(days=2),
        time="18:00",
    )


def test_stored_seconds_are_trimmed_from_times() -> None:
    hours = [
        WeeklyHourRule(day_of_week=1, is_closed=False, open_time="18:00:00", close_time="23:00:00")
    ]
    verdict = compute_availability(True, hours, [], _local(MONDAY, 19))
    assert verdict.closes_at == "23:00"


def test_next_open_is_never_beyond_the_horizon() -> None:
    far_day = MONDAY + timedelta(days=NEXT_OPEN_HORIZON_DAYS)
    beyond = MONDAY + timedelta(days=NEXT_OPEN_HORIZON_DAYS + 1)
    closed_week = [WeeklyHourRule(day_of_week=day, is_closed=True) for day in range(7)]

    def open_on(day: date) -> list[DateException]:
        return [DateException(date=day, is_closed=False, open_time="18:00", close_time="23:00")]

    assert find_next_open(MONDAY, 0, closed_week, open_on(far_day)) == NextOpen(
        date=far_day,
        time="18:00",
    )
    assert find_next_open(MONDAY, 0, closed_week, open_on(beyond)) is None


def test_next_open_is_never_in_the_past() -> None:
    for hour in range(24):
        next_open = find_next_open(MONDAY, hour * 60, _full_week(), [])
        assert next_open is not None
        assert next_open.date >= MONDAY
        if next_open.date == MONDAY:
            assert hour * 60 <= 23 * 60


def test_resolve_schedule_is_idempotent() -> None:
    hours = _full_week()
    exceptions = [DateException(date=MONDAY, is_closed=True)]
    first = resolve_schedule_for_date(MONDAY, hours, exceptions)
    second = resolve_schedule_for_date(MONDAY, hours, exceptions)
    assert first == second == ResolvedSchedule(is_closed=True, open_time=None, close_time=None)
