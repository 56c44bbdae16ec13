from __future__ import annotations

import asyncio
import logging
from collections import defaultdict
from collections.abc import Iterable

from fastapi import WebSocket

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Realtime sockets for the single store, grouped by the client's role.

    Role groups receive whatever is broadcast to their role. Sockets may also
    hold a set of order ids; order events reach them only for those orders.
    """

    def __init__(self) -> None:
        self._connections: dict[str, set[WebSocket]] = defaultdict(set)
        self._socket_to_role: dict[WebSocket, str] = {}
        self._subscriptions: dict[WebSocket, frozenset[str]] = {}
        self._lock = asyncio.Lock()

    async def register(
        self,
        websocket: WebSocket,
        role: str,
        order_ids: Iterable[str] = (),
    ) -> None:
        await websocket.accept()
        subscribed = frozenset(order_ids)
        async with self._lock:
            self._connections[role].add(websocket)
            self._socket_to_role[websocket] = role
            if subscribed:
                self._subscriptions[websocket] = subscribed
        logger.info(
            "ws_client_connected",
            extra={"role": role, "subscriptions": len(subscribed)},
        )

    async def unregister(self, websocket: WebSocket) -> None:
        async with self._lock:
            role = self._socket_to_role.pop(websocket, None)
            self._subscriptions.pop(websocket, None)
            if role is None:
                return
            sockets = self._connections.get(role)
            if sockets is not None:
                sockets.discard(websocket)
                if not sockets:
                    self._connections.pop(role, None)
        logger.info("ws_client_disconnected", extra={"role": role})

    def connection_count(self, role: str | None = None) -> int:
        if role is None:
            return len(self._socket_to_role)
        return len(self._connections.get(role, ()))

    async def broadcast(self, message_json_str: str, roles: Iterable[str]) -> None:
        async with self._lock:
            targets = {
                websocket
                for role in roles
                for websocket in self._connections.get(role, ())
            }
        await self._send(message_json_str, targets)

    async def broadcast_order_event(
        self,
        message_json_str: str,
        order_id: str | None,
        roles: Iterable[str],
    ) -> None:
        """Send to every socket of ``roles`` and to sockets following ``order_id``."""
        async with self._lock:
            targets = {
                websocket
                for role in roles
                for websocket in self._connections.get(role, ())
            }
            if order_id:
                targets.update(
                    websocket
                    for websocket, order_ids in self._subscriptions.items()
                    if order_id in order_ids
                )
        await self._send(message_json_str, targets)

    async def _send(self, message_json_str: str, targets: set[WebSocket]) -> None:
        stale: list[WebSocket] = []
        for websocket in targets:
            try:
                await websocket.send_text(message_json_str)
            except Exception:
                logger.warning("ws_send_failed", exc_info=True)
                stale.append(websocket)

        for websocket in stale:
            await self.unregister(websocket)
