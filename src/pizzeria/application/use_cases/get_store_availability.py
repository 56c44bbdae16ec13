from __future__ import annotations

from datetime import tzinfo

from pizzeria.application.dto.responses import AvailabilityResponse
from pizzeria.application.mappers.availability_mapper import to_availability_response
from pizzeria.application.metrics.store_availability import record_availability_check
from pizzeria.application.ports.repositories import ScheduleRepository, SettingsRepository
from pizzeria.application.use_cases.clock import Clock, utc_now
from pizzeria.domain.schedule.availability import STORE_TIMEZONE, compute_availability
from pizzeria.domain.schedule.entities import AvailabilityVerdict


class GetStoreAvailability:
    def __init__(
        self,
        schedule_repository: ScheduleRepository,
        settings_repository: SettingsRepository,
        store_timezone: tzinfo = STORE_TIMEZONE,
        clock: Clock = utc_now,
    ) -> None:
        self._schedule_repository = schedule_repository
        self._settings_repository = settings_repository
        self._store_timezone = store_timezone
        self._clock = clock

    def evaluate(self) -> AvailabilityVerdict:
        settings = self._settings_repository.get()
        verdict = compute_availability(
            manual_open=settings.is_open,
            hours=self._schedule_repository.list_weekly_hours(),
            exceptions=self._schedule_repository.list_exceptions(),
            now=self._clock(),
            tz=self._store_timezone,
        )
        record_availability_check(verdict)
        return verdict

    def execute(self) -> AvailabilityResponse:
        return to_availability_response(self.evaluate())
