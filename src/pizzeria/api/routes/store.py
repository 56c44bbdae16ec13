from __future__ import annotations

from datetime import date
from typing import Any

from fastapi import APIRouter, Depends

from pizzeria.api.dependencies import current_session
from pizzeria.application.dto.requests import (
    DateExceptionRequest,
    ReplaceWeeklyHoursRequest,
    SetManualOpenRequest,
)
from pizzeria.application.dto.responses import AvailabilityResponse, StoreScheduleResponse
from pizzeria.application.use_cases.get_store_availability import GetStoreAvailability
from pizzeria.application.use_cases.store_schedule import (
    DeleteDateException,
    GetStoreSchedule,
    ReplaceWeeklyHours,
    SetManualOpen,
    UpsertDateException,
)
from pizzeria.domain.auth.session import UserSession
from pizzeria.infrastructure.db.repositories.schedule_repo import SqlAlchemyScheduleRepository
from pizzeria.infrastructure.db.repositories.settings_repo import SqlAlchemySettingsRepository
from pizzeria.infrastructure.settings import store_timezone

router = APIRouter()


def _get_store_availability_use_case() -> GetStoreAvailability:
    return GetStoreAvailability(
        schedule_repository=SqlAlchemyScheduleRepository(),
        settings_repository=SqlAlchemySettingsRepository(),
        store_timezone=store_timezone(),
    )


def _repositories() -> dict[str, Any]:
    return {
        "schedule_repository": SqlAlchemyScheduleRepository(),
        "settings_repository": SqlAlchemySettingsRepository(),
    }


def _get_store_schedule_use_case() -> GetStoreSchedule:
    return GetStoreSchedule(**_repositories())


def _set_manual_open_use_case() -> SetManualOpen:
    return SetManualOpen(**_repositories())


def _replace_weekly_hours_use_case() -> ReplaceWeeklyHours:
    return ReplaceWeeklyHours(**_repositories())


def _upsert_date_exception_use_case() -> UpsertDateException:
    return UpsertDateException(**_repositories())


def _delete_date_exception_use_case() -> DeleteDateException:
    return DeleteDateException(**_repositories())


@router.get("/v1/store/availability", response_model=AvailabilityResponse)
def get_store_availability() -> AvailabilityResponse:
    return _get_store_availability_use_case().execute()


@router.get("/v1/store/schedule", response_model=StoreScheduleResponse)
def get_store_schedule() -> StoreScheduleResponse:
    return _get_store_schedule_use_case().execute()


@router.put("/v1/store/open", response_model=StoreScheduleResponse)
def set_manual_open(
    request_dto: SetManualOpenRequest,
    session: UserSession | None = Depends(current_session),
) -> StoreScheduleResponse:
    return _set_manual_open_use_case().execute(request_dto=request_dto, session=session)


@router.put("/v1/store/hours", response_model=StoreScheduleResponse)
def replace_weekly_hours(
    request_dto: ReplaceWeeklyHoursRequest,
    session: UserSession | None = Depends(current_session),
) -> StoreScheduleResponse:
    return _replace_weekly_hours_use_case().execute(request_dto=request_dto, session=session)


@router.put("/v1/store/exceptions/{day}", response_model=StoreScheduleResponse)
def upsert_date_exception(
    day: date,
    request_dto: DateExceptionRequest,
    session: UserSession | None = Depends(current_session),
) -> StoreScheduleResponse:
    return _upsert_date_exception_use_case().execute(
        day=day,
        request_dto=request_dto,
        session=session,
    )


@router.delete("/v1/store/exceptions/{day}", response_model=StoreScheduleResponse)
def delete_date_exception(
    day: date,
    session: UserSession | None = Depends(current_session),
) -> StoreScheduleResponse:
    return _delete_date_exception_use_case().execute(day=day, session=session)
