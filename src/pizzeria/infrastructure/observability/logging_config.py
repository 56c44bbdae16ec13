from __future__ import annotations

import json
import logging
import os
import sys
from datetime import datetime, timezone
from typing import Any

from pizzeria.api.middleware.request_id import get_request_id
from pizzeria.infrastructure.observability.otel import current_trace_ids

_LOGGING_CONFIGURED = False

_EXTRA_KEYS = (
    "method",
    "path",
    "status_code",
    "duration_ms",
    "order_id",
    "from_status",
    "to_status",
    "message_type",
    "payment_method",
    "reason",
    "is_open",
    "role",
    "pattern",
    "watermark",
    "backoff_seconds",
    "subscriptions",
    "shift_id",
    "movement_type",
    "closing_balance_cents",
    "computed_balance_cents",
)


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        trace_id, span_id = current_trace_ids()
        payload: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": get_request_id(),
            "trace_id": trace_id,
            "span_id": span_id,
        }

        for key in _EXTRA_KEYS:
            value = getattr(record, key, None)
            if value is not None:
                payload[key] = value

        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str, ensure_ascii=False)


def configure_logging() -> None:
    global _LOGGING_CONFIGURED
    if _LOGGING_CONFIGURED:
        return

    level = os.getenv("LOG_LEVEL", "INFO").upper()
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    _LOGGING_CONFIGURED = True
