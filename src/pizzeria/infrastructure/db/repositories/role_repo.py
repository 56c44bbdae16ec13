from __future__ import annotations

from sqlalchemy import Engine, select
from sqlalchemy.orm import Session

from pizzeria.application.ports.repositories import RoleRepository
from pizzeria.domain.auth.session import Role
from pizzeria.domain.common.ids import UserId
from pizzeria.infrastructure.db.models.role import UserRoleModel
from pizzeria.infrastructure.db.session import get_engine

_KNOWN_ROLES = {role.value for role in Role}


class SqlAlchemyRoleRepository(RoleRepository):
    def __init__(self, engine: Engine | None = None) -> None:
        self._engine = engine or get_engine()

    def list_roles(self, user_id: UserId) -> set[Role]:
        statement = select(UserRoleModel.role).where(UserRoleModel.user_id == str(user_id))
        with Session(self._engine) as session:
            values = list(session.execute(statement).scalars().all())
        return {Role(value) for value in values if value in _KNOWN_ROLES}

    def grant(self, user_id: UserId, role: Role) -> None:
        with Session(self._engine) as session:
            existing = session.execute(
                select(UserRoleModel).where(
                    UserRoleModel.user_id == str(user_id),
                    UserRoleModel.role == role.value,
                )
            ).scalar_one_or_none()
            if existing is None:
                session.add(UserRoleModel(user_id=str(user_id), role=role.value))
                session.commit()
