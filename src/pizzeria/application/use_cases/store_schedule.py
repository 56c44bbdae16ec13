from __future__ import annotations

import logging
from datetime import date

from pizzeria.application.dto.requests import (
    DateExceptionRequest,
    ReplaceWeeklyHoursRequest,
    SetManualOpenRequest,
)
from pizzeria.application.dto.responses import StoreScheduleResponse
from pizzeria.application.mappers.availability_mapper import to_schedule_response
from pizzeria.application.ports.repositories import ScheduleRepository, SettingsRepository
from pizzeria.domain.auth.session import OrderAction, UserSession, ensure_allowed
from pizzeria.domain.schedule.entities import (
    DateException,
    WeeklyHourRule,
    validate_exception,
    validate_weekly_hours,
)

logger = logging.getLogger(__name__)


class DateExceptionNotFoundError(Exception):
    pass


class GetStoreSchedule:
    def __init__(
        self,
        schedule_repository: ScheduleRepository,
        settings_repository: SettingsRepository,
    ) -> None:
        self._schedule_repository = schedule_repository
        self._settings_repository = settings_repository

    def execute(self) -> StoreScheduleResponse:
        return to_schedule_response(
            is_open=self._settings_repository.get().is_open,
            hours=self._schedule_repository.list_weekly_hours(),
            exceptions=self._schedule_repository.list_exceptions(),
        )


class SetManualOpen:
    def __init__(
        self,
        schedule_repository: ScheduleRepository,
        settings_repository: SettingsRepository,
    ) -> None:
        self._schedule_repository = schedule_repository
        self._settings_repository = settings_repository

    def execute(
        self,
        request_dto: SetManualOpenRequest,
        session: UserSession | None,
    ) -> StoreScheduleResponse:
        ensure_allowed(session, OrderAction.MANAGE_STORE)
        settings = self._settings_repository.set_manual_open(request_dto.is_open)
        logger.info("store_manual_open_changed", extra={"is_open": settings.is_open})
        return to_schedule_response(
            is_open=settings.is_open,
            hours=self._schedule_repository.list_weekly_hours(),
            exceptions=self._schedule_repository.list_exceptions(),
        )


class ReplaceWeeklyHours:
    def __init__(
        self,
        schedule_repository: ScheduleRepository,
        settings_repository: SettingsRepository,
    ) -> None:
        self._schedule_repository = schedule_repository
        self._settings_repository = settings_repository

    def execute(
        self,
        request_dto: ReplaceWeeklyHoursRequest,
        session: UserSession | None,
    ) -> StoreScheduleResponse:
        ensure_allowed(session, OrderAction.MANAGE_STORE)
        hours = [
            WeeklyHourRule(
                day_of_week=rule.day_of_week,
                is_closed=rule.is_closed,
                open_time=rule.open_time,
                close_time=rule.close_time,
            )
            for rule in request_dto.hours
        ]
        validate_weekly_hours(hours)
        self._schedule_repository.replace_weekly_hours(hours)
        return GetStoreSchedule(
            schedule_repository=self._schedule_repository,
            settings_repository=self._settings_repository,
        ).execute()


class UpsertDateException:
    def __init__(
        self,
        schedule_repository: ScheduleRepository,
        settings_repository: SettingsRepository,
    ) -> None:
        self._schedule_repository = schedule_repository
        self._settings_repository = settings_repository

    def execute(
        self,
        day: date,
        request_dto: DateExceptionRequest,
        session: UserSession | None,
    ) -> StoreScheduleResponse:
        ensure_allowed(session, OrderAction.MANAGE_STORE)
        exception = DateException(
            date=day,
            is_closed=request_dto.is_closed,
            open_time=None if request_dto.is_closed else request_dto.open_time,
            close_time=None if request_dto.is_closed else request_dto.close_time,
            note=request_dto.note,
        )
        validate_exception(exception)
        self._schedule_repository.upsert_exception(exception)
        return GetStoreSchedule(
            schedule_repository=self._schedule_repository,
            settings_repository=self._settings_repository,
        ).execute()


class DeleteDateException:
    def __init__(
        self,
        schedule_repository: ScheduleRepository,
        settings_repository: SettingsRepository,
    ) -> None:
        self._schedule_repository = schedule_repository
        self._settings_repository = settings_repository

    def execute(self, day: date, session: UserSession | None) -> StoreScheduleResponse:
        ensure_allowed(session, OrderAction.MANAGE_STORE)
        if not self._schedule_repository.delete_exception(day):
            raise DateExceptionNotFoundError(f"no schedule exception for date={day.isoformat()}")
        return GetStoreSchedule(
            schedule_repository=self._schedule_repository,
            settings_repository=self._settings_repository,
        ).execute()
