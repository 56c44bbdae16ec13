from __future__ import annotations

from typing import Protocol

STORE_EVENTS_CHANNEL = "events:store"


class EventPublisher(Protocol):
    def publish(self, channel: str, message: str) -> None: ...
