from __future__ import annotations

from fastapi import Header

from pizzeria.api.middleware.request_id import get_request_id
from pizzeria.application.use_cases.context import TraceContext
from pizzeria.application.use_cases.resolve_session import ResolveSession
from pizzeria.domain.auth.session import UserSession
from pizzeria.infrastructure.db.repositories.role_repo import SqlAlchemyRoleRepository
from pizzeria.infrastructure.observability.otel import current_trace_id

USER_ID_HEADER = "X-User-Id"


def _resolve_session_use_case() -> ResolveSession:
    return ResolveSession(role_repository=SqlAlchemyRoleRepository())


def resolve_session(user_id: str | None) -> UserSession | None:
    if user_id is None or not user_id.strip():
        return None
    return _resolve_session_use_case().execute(user_id)


def current_session(
    x_user_id: str | None = Header(default=None, alias=USER_ID_HEADER),
) -> UserSession | None:
    """Identity comes from the auth gateway; roles are loaded per request."""
    return resolve_session(x_user_id)


def trace_context() -> TraceContext:
    return TraceContext(trace_id=current_trace_id(), request_id=get_request_id())
