from __future__ import annotations

from datetime import date

from sqlalchemy import Engine, delete, select
from sqlalchemy.orm import Session

from pizzeria.application.ports.repositories import ScheduleRepository
from pizzeria.domain.schedule.entities import DateException, WeeklyHourRule
from pizzeria.infrastructure.db.models.store import StoreExceptionModel, StoreHourModel
from pizzeria.infrastructure.db.session import get_engine


class SqlAlchemyScheduleRepository(ScheduleRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def list_weekly_hours(self) -> list[WeeklyHourRule]:
        statement = select(StoreHourModel).order_by(StoreHourModel.day_of_week)
        with Session(self._engine) as session:
            models = list(session.execute(statement).scalars().all())

        rules: list[WeeklyHourRule] = []
        for model in models:
            # Rows outside 0..6 cannot resolve to any weekday.
            if not 0 <= model.day_of_week <= 6:
                continue
            rules.append(
                WeeklyHourRule(
                    day_of_week=model.day_of_week,
                    is_closed=model.is_closed,
                    open_time=model.open_time,
                    close_time=model.close_time,
                )
            )
        return rules

    def list_exceptions(self) -> list[DateException]:
        statement = select(StoreExceptionModel).order_by(StoreExceptionModel.day)
        with Session(self._engine) as session:
            models = list(session.execute(statement).scalars().all())
        return [self._exception_to_domain(model) for model in models]

    def replace_weekly_hours(self, hours: list[WeeklyHourRule]) -> None:
        with Session(self._engine) as session:
            session.execute(delete(StoreHourModel))
            session.add_all(
                StoreHourModel(
                    day_of_week=rule.day_of_week,
                    is_closed=rule.is_closed,
                    open_time=rule.open_time,
                    close_time=rule.close_time,
                )
                for rule in hours
            )
            session.commit()

    def upsert_exception(self, exception: DateException) -> None:
        with Session(self._engine) as session:
            model = session.get(StoreExceptionModel, exception.date)
            if model is None:
                model = StoreExceptionModel(day=exception.date)
                session.add(model)
            model.is_closed = exception.is_closed
            model.open_time = exception.open_time
            model.close_time = exception.close_time
            model.note = exception.note
            session.commit()

    def delete_exception(self, day: date) -> bool:
        with Session(self._engine) as session:
            result = session.execute(
                delete(StoreExceptionModel).where(StoreExceptionModel.day == day)
            )
            session.commit()
        return result.rowcount > 0

    def _exception_to_domain(self, model: StoreExceptionModel) -> DateException:
        return DateException(
            date=model.day,
            is_closed=model.is_closed,
            open_time=model.open_time,
            close_time=model.close_time,
            note=model.note,
        )
