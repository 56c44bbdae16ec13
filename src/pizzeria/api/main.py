from __future__ import annotations

import asyncio
import logging
import os
import time
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import Counter, Histogram
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from pizzeria.api.error_handling import register_exception_handlers
from pizzeria.api.middleware.request_id import RequestIDMiddleware
from pizzeria.api.routes.cash import router as cash_router
from pizzeria.api.routes.health import router as health_router
from pizzeria.api.routes.metrics import router as metrics_router
from pizzeria.api.routes.order_actions import router as order_actions_router
from pizzeria.api.routes.orders import router as orders_router
from pizzeria.api.routes.store import router as store_router
from pizzeria.api.ws.manager import ConnectionManager
from pizzeria.api.ws.routes import router as ws_router
from pizzeria.infrastructure.messaging.order_feed_listener import start_order_feed
from pizzeria.infrastructure.observability.logging_config import configure_logging
from pizzeria.infrastructure.observability.otel import configure_otel

logger = logging.getLogger("pizzeria.api.access")

REQUEST_COUNT = Counter(
    "pizzeria_http_requests_total",
    "Total number of HTTP requests",
    ["method", "path", "status_code"],
)
REQUEST_LATENCY = Histogram(
    "pizzeria_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "path"],
)


def _cors_allow_origins() -> list[str]:
    env = os.getenv("APP_ENV", "dev").lower()

    # Dev/test: unblock everything (no credentials allowed)
    if env in {"dev", "test"}:
        return ["*"]

    # Staging/prod: restrict to explicit allowlist
    default_value = "https://pizzariaitaliana.com.br"
    raw_value = os.getenv("CORS_ALLOW_ORIGINS", default_value)
    return [origin.strip() for origin in raw_value.split(",") if origin.strip()]


def _route_path(request: Request) -> str:
    route = request.scope.get("route")
    template = getattr(route, "path", None)
    return template if isinstance(template, str) else request.url.path


class AccessLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        started = time.perf_counter()
        path = request.url.path
        method = request.method
        try:
            response = await call_next(request)
        except Exception:
            duration_ms = (time.perf_counter() - started) * 1000
            REQUEST_COUNT.labels(method=method, path=path, status_code="500").inc()
            REQUEST_LATENCY.labels(method=method, path=path).observe(duration_ms / 1000)
            logger.exception(
                "request_error",
                extra={
                    "method": method,
                    "path": path,
                    "status_code": 500,
                    "duration_ms": round(duration_ms, 2),
                },
            )
            raise

        duration_ms = (time.perf_counter() - started) * 1000
        # Route template, not the raw path.
        path = _route_path(request)
        REQUEST_COUNT.labels(method=method, path=path, status_code=str(response.status_code)).inc()
        REQUEST_LATENCY.labels(method=method, path=path).observe(duration_ms / 1000)
        logger.info(
            "request_complete",
            extra={
                "method": method,
                "path": path,
                "status_code": response.status_code,
                "duration_ms": round(duration_ms, 2),
            },
        )
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.ws_manager = ConnectionManager()
    feed_task = asyncio.create_task(start_order_feed(app.state))
    app.state.order_feed_task = feed_task
    try:
        yield
    finally:
        feed_task.cancel()
        with suppress(asyncio.CancelledError):
            await feed_task


def create_app() -> FastAPI:
    configure_logging()

    app = FastAPI(title="Pizzeria Backend", version="0.1.0", lifespan=lifespan)
    register_exception_handlers(app)
    app.include_router(health_router)
    app.include_router(metrics_router)
    app.include_router(store_router)
    app.include_router(orders_router)
    app.include_router(order_actions_router)
    app.include_router(cash_router)
    app.include_router(ws_router)

    app.add_middleware(AccessLogMiddleware)
    app.add_middleware(RequestIDMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=_cors_allow_origins(),
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-Id"],
    )

    configure_otel(app)
    return app


app = create_app()
