from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from enum import Enum

_STRICT_TIME = re.compile(r"(?:[01]\d|2[0-3]):[0-5]\d(?::[0-5]\d)?")


class ClosedReason(str, Enum):
    MANUAL = "manual"
    OUTSIDE_HOURS = "outside_hours"


@dataclass(frozen=True)
class WeeklyHourRule:
    """Recurring opening window for one weekday (0=Sunday .. 6=Saturday).

    Times are kept as stored ("HH:MM" or "HH:MM:SS"). A rule that is open but
    carries no usable window is kept as-is; the resolver treats it as
    unresolvable instead of rejecting it here.
    """

    day_of_week: int
    is_closed: bool
    open_time: str | None = None
    close_time: str | None = None

    def __post_init__(self) -> None:
        if not 0 <= self.day_of_week <= 6:
            raise ValueError("day_of_week must be between 0 (Sunday) and 6 (Saturday)")


@dataclass(frozen=True)
class DateException:
    date: date
    is_closed: bool
    open_time: str | None = None
    close_time: str | None = None
    note: str | None = None


@dataclass(frozen=True)
class ResolvedSchedule:
    is_closed: bool
    open_time: str | None
    close_time: str | None


@dataclass(frozen=True)
class OpeningWindow:
    open_time: str
    close_time: str
    open_minutes: int
    close_minutes: int

    def contains(self, minutes: int) -> bool:
        return self.open_minutes <= minutes <= self.close_minutes


@dataclass(frozen=True)
class NextOpen:
    date: date
    time: str


@dataclass(frozen=True)
class AvailabilityVerdict:
    is_open_now: bool
    reason: ClosedReason | None = None
    closes_at: str | None = None
    next_open_at: NextOpen | None = None


class InvalidScheduleError(Exception):
    def __init__(self, message: str, details: dict[str, object] | None = None) -> None:
        super().__init__(message)
        self.details = details or {}


def hhmm(value: str | None) -> str | None:
    if not value:
        return None
    return value[:5]


def minutes_from_hhmm(value: str | None) -> int | None:
    text = hhmm(value)
    if text is None or len(text) != 5 or text[2] != ":":
        return None
    hours, minutes = text[:2], text[3:]
    if not (hours.isdigit() and minutes.isdigit()):
        return None
    hour, minute = int(hours), int(minutes)
    if hour > 23 or minute > 59:
        return None
    return hour * 60 + minute


def opening_window(schedule: ResolvedSchedule) -> OpeningWindow | None:
    """Return the usable same-day window of an open schedule, if any."""
    if schedule.is_closed:
        return None
    open_minutes = minutes_from_hhmm(schedule.open_time)
    close_minutes = minutes_from_hhmm(schedule.close_time)
    if open_minutes is None or close_minutes is None:
        return None
    if open_minutes > close_minutes:
        return None
    return OpeningWindow(
        open_time=hhmm(schedule.open_time) or "",
        close_time=hhmm(schedule.close_time) or "",
        open_minutes=open_minutes,
        close_minutes=close_minutes,
    )


def validate_weekly_hours(hours: list[WeeklyHourRule]) -> None:
    seen: set[int] = set()
    for rule in hours:
        if rule.day_of_week in seen:
            raise InvalidScheduleError(
                f"duplicate rule for day_of_week={rule.day_of_week}",
                details={"dayOfWeek": rule.day_of_week},
            )
        seen.add(rule.day_of_week)
        if rule.is_closed:
            continue
        _validate_window(
            ResolvedSchedule(
                is_closed=False,
                open_time=rule.open_time,
                close_time=rule.close_time,
            ),
            details={"dayOfWeek": rule.day_of_week},
        )


def validate_exception(exception: DateException) -> None:
    if exception.is_closed:
        return
    _validate_window(
        ResolvedSchedule(
            is_closed=False,
            open_time=exception.open_time,
            close_time=exception.close_time,
        ),
        details={"date": exception.date.isoformat()},
    )


def is_valid_time(value: str | None) -> bool:
    """Strict check for stored times: the whole value is HH:MM or HH:MM:SS."""
    return value is not None and _STRICT_TIME.fullmatch(value) is not None


def _validate_window(schedule: ResolvedSchedule, details: dict[str, object]) -> None:
    if not is_valid_time(schedule.open_time):
        raise InvalidScheduleError("open_time must be HH:MM when not closed", details=details)
    if not is_valid_time(schedule.close_time):
        raise InvalidScheduleError("close_time must be HH:MM when not closed", details=details)
    if opening_window(schedule) is None:
        raise InvalidScheduleError(
            "open_time must not be after close_time (overnight hours are not supported)",
            details=details,
        )
