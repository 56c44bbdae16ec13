from __future__ import annotations

import os
from datetime import timedelta, timezone, tzinfo

from pizzeria.domain.schedule.availability import STORE_TIMEZONE

DEFAULT_STORE_UTC_OFFSET_MINUTES = -180
DEFAULT_NEW_ORDER_GRACE_SECONDS = 2.0


def store_timezone() -> tzinfo:
    raw = os.getenv("STORE_UTC_OFFSET_MINUTES")
    if raw is None or not raw.strip():
        return STORE_TIMEZONE
    minutes = int(raw)
    if minutes == DEFAULT_STORE_UTC_OFFSET_MINUTES:
        return STORE_TIMEZONE
    return timezone(timedelta(minutes=minutes))


def new_order_grace_seconds() -> float:
    raw = os.getenv("NEW_ORDER_GRACE_SECONDS")
    if raw is None or not raw.strip():
        return DEFAULT_NEW_ORDER_GRACE_SECONDS
    return max(float(raw), 0.0)
