from __future__ import annotations

import argparse
import sys
from typing import Sequence

from sqlalchemy import Engine, inspect, select
from sqlalchemy.orm import Session

from pizzeria.domain.auth.session import Role
from pizzeria.domain.common.ids import UserId
from pizzeria.domain.schedule.entities import WeeklyHourRule, validate_weekly_hours
from pizzeria.domain.store.entities import DEFAULT_SETTINGS
from pizzeria.infrastructure.db.models.store import PizzeriaSettingsModel
from pizzeria.infrastructure.db.repositories.role_repo import SqlAlchemyRoleRepository
from pizzeria.infrastructure.db.repositories.schedule_repo import SqlAlchemyScheduleRepository
from pizzeria.infrastructure.db.session import get_engine

REQUIRED_TABLES = {"pizzeria_settings", "store_hours", "store_exceptions", "user_roles"}

# Closed on Monday, evenings otherwise.
DEFAULT_WEEKLY_HOURS = [
    WeeklyHourRule(day_of_week=0, is_closed=False, open_time="18:00", close_time="23:30"),
    WeeklyHourRule(day_of_week=1, is_closed=True),
    WeeklyHourRule(day_of_week=2, is_closed=False, open_time="18:00", close_time="23:00"),
    WeeklyHourRule(day_of_week=3, is_closed=False, open_time="18:00", close_time="23:00"),
    WeeklyHourRule(day_of_week=4, is_closed=False, open_time="18:00", close_time="23:00"),
    WeeklyHourRule(day_of_week=5, is_closed=False, open_time="18:00", close_time="23:59"),
    WeeklyHourRule(day_of_week=6, is_closed=False, open_time="18:00", close_time="23:59"),
]


def seed(engine: Engine, admin_user_id: str | None = None) -> bool:
    if not REQUIRED_TABLES.issubset(set(inspect(engine).get_table_names())):
        return False

    with Session(engine) as session:
        existing = session.execute(select(PizzeriaSettingsModel).limit(1)).scalar_one_or_none()
        if existing is None:
            session.add(
                PizzeriaSettingsModel(
                    name=DEFAULT_SETTINGS.name,
                    is_open=DEFAULT_SETTINGS.is_open,
                    whatsapp=DEFAULT_SETTINGS.whatsapp,
                    address=DEFAULT_SETTINGS.address,
                )
            )
            session.commit()

    validate_weekly_hours(DEFAULT_WEEKLY_HOURS)
    SqlAlchemyScheduleRepository(engine=engine).replace_weekly_hours(DEFAULT_WEEKLY_HOURS)

    if admin_user_id:
        SqlAlchemyRoleRepository(engine=engine).grant(UserId(admin_user_id), Role.ADMIN)
    return True


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Seed store settings and weekly hours.")
    parser.add_argument("--admin-user-id", default=None, help="Grant the admin role to a user.")
    args = parser.parse_args(argv)

    if not seed(get_engine(timeout_seconds=2.0), admin_user_id=args.admin_user_id):
        print("no schema yet")
        return 1
    print("seed complete")
    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
