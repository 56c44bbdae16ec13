from __future__ import annotations

import logging

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from fastapi.concurrency import run_in_threadpool

from pizzeria.api import dependencies
from pizzeria.api.ws.manager import ConnectionManager
from pizzeria.domain.auth.session import realtime_channel

router = APIRouter()
logger = logging.getLogger(__name__)

MAX_ORDER_SUBSCRIPTIONS = 20


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket) -> None:
    """Realtime feed; the channel is derived from the caller's resolved roles.

    ``?role=`` may narrow a staff session to one of its own roles. Customer
    sockets only receive events of the orders named by ``?orderId=``.
    """
    user_id = websocket.headers.get(dependencies.USER_ID_HEADER)
    session = await run_in_threadpool(dependencies.resolve_session, user_id)
    requested = websocket.query_params.get("role")
    role = realtime_channel(session, requested.lower() if requested else None)
    if role is None:
        logger.warning("ws_role_not_granted", extra={"role": requested})
        await websocket.close(code=1008, reason="role not granted")
        return

    order_ids = [order_id for order_id in websocket.query_params.getlist("orderId") if order_id]
    if len(order_ids) > MAX_ORDER_SUBSCRIPTIONS:
        await websocket.close(code=1008, reason="too many orderId subscriptions")
        return

    manager: ConnectionManager = websocket.app.state.ws_manager
    await manager.register(websocket=websocket, role=role, order_ids=order_ids)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        await manager.unregister(websocket)
    except Exception:
        logger.exception("ws_connection_error", extra={"role": role})
        await manager.unregister(websocket)
