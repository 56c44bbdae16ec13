from __future__ import annotations

from pizzeria.application.dto.responses import (
    AvailabilityResponse,
    DateExceptionResponse,
    NextOpenResponse,
    StoreScheduleResponse,
    WeeklyHourRuleResponse,
)
from pizzeria.domain.schedule.entities import (
    AvailabilityVerdict,
    DateException,
    NextOpen,
    WeeklyHourRule,
    hhmm,
)


def to_next_open_response(next_open: NextOpen | None) -> NextOpenResponse | None:
    if next_open is None:
        return None
    return NextOpenResponse(date=next_open.date.isoformat(), time=next_open.time)


def to_availability_response(verdict: AvailabilityVerdict) -> AvailabilityResponse:
    return AvailabilityResponse(
        isOpenNow=verdict.is_open_now,
        reason=verdict.reason.value if verdict.reason is not None else None,
        closesAt=verdict.closes_at,
        nextOpenAt=to_next_open_response(verdict.next_open_at),
    )


def to_schedule_response(
    is_open: bool,
    hours: list[WeeklyHourRule],
    exceptions: list[DateException],
) -> StoreScheduleResponse:
    return StoreScheduleResponse(
        isOpen=is_open,
        hours=[
            WeeklyHourRuleResponse(
                dayOfWeek=rule.day_of_week,
                isClosed=rule.is_closed,
                openTime=hhmm(rule.open_time),
                closeTime=hhmm(rule.close_time),
            )
            for rule in sorted(hours, key=lambda rule: rule.day_of_week)
        ],
        exceptions=[
            DateExceptionResponse(
                date=exception.date.isoformat(),
                isClosed=exception.is_closed,
                openTime=hhmm(exception.open_time),
                closeTime=hhmm(exception.close_time),
                note=exception.note,
            )
            for exception in sorted(exceptions, key=lambda exception: exception.date)
        ],
    )
