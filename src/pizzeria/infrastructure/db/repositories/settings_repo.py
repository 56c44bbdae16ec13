from __future__ import annotations

from sqlalchemy import Engine, select
from sqlalchemy.orm import Session

from pizzeria.application.ports.repositories import SettingsRepository
from pizzeria.domain.store.entities import DEFAULT_SETTINGS, PizzeriaSettings
from pizzeria.infrastructure.db.models.store import PizzeriaSettingsModel
from pizzeria.infrastructure.db.session import get_engine


class SqlAlchemySettingsRepository(SettingsRepository):
    """Single-row settings table; the first row wins, defaults when empty."""

    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def get(self) -> PizzeriaSettings:
        with Session(self._engine) as session:
            model = self._first(session)
            if model is None:
                return DEFAULT_SETTINGS
            return self._to_domain(model)

    def set_manual_open(self, is_open: bool) -> PizzeriaSettings:
        with Session(self._engine) as session:
            model = self._first(session)
            if model is None:
                model = self._to_model(DEFAULT_SETTINGS)
                session.add(model)
            model.is_open = is_open
            session.commit()
            return self._to_domain(model)

    def _first(self, session: Session) -> PizzeriaSettingsModel | None:
        statement = select(PizzeriaSettingsModel).order_by(PizzeriaSettingsModel.id).limit(1)
        return session.execute(statement).scalar_one_or_none()

    def _to_model(self, settings: PizzeriaSettings) -> PizzeriaSettingsModel:
        return PizzeriaSettingsModel(
            name=settings.name,
            is_open=settings.is_open,
            whatsapp=settings.whatsapp,
            address=settings.address,
            pix_key=settings.pix_key,
            pix_name=settings.pix_name,
        )

    def _to_domain(self, model: PizzeriaSettingsModel) -> PizzeriaSettings:
        return PizzeriaSettings(
            name=model.name,
            is_open=model.is_open,
            whatsapp=model.whatsapp or "",
            address=model.address or "",
            pix_key=model.pix_key,
            pix_name=model.pix_name,
        )
