from __future__ import annotations

from pizzeria.application.ports.repositories import RoleRepository
from pizzeria.domain.auth.session import UserSession
from pizzeria.domain.common.ids import UserId


class ResolveSession:
    def __init__(self, role_repository: RoleRepository) -> None:
        self._role_repository = role_repository

    def execute(self, user_id: str | None) -> UserSession | None:
        if user_id is None or not user_id.strip():
            return None
        resolved = UserId(user_id.strip())
        return UserSession(
            user_id=resolved,
            roles=frozenset(self._role_repository.list_roles(resolved)),
        )
