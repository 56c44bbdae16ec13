from __future__ import annotations

from fastapi import APIRouter, Response, status

from pizzeria.infrastructure.db.session import ping_database
from pizzeria.infrastructure.messaging.redis_client import ping_redis

router = APIRouter()


@router.get("/health/live")
def live() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/health/ready")
def ready(response: Response) -> dict[str, object]:
    checks = {
        "postgres": ping_database(timeout_seconds=1.0),
        "redis": ping_redis(timeout_seconds=1.0),
    }
    if all(checks.values()):
        return {"status": "ok", "checks": checks}

    response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return {"status": "unavailable", "checks": checks}
