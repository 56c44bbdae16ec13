from __future__ import annotations

import asyncio
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[3] / "src"))

from pizzeria.api.ws.manager import ConnectionManager


class _FakeWebSocket:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.accepted = False
        self.sent: list[str] = []

    async def accept(self) -> None:
        self.accepted = True

    async def send_text(self, message: str) -> None:
        if self.fail:
            raise RuntimeError("closed")
        self.sent.append(message)


def test_broadcast_targets_roles() -> None:
    manager = ConnectionManager()
    admin = _FakeWebSocket()
    staff = _FakeWebSocket()
    customer = _FakeWebSocket()

    async def scenario() -> None:
        await manager.register(admin, "admin")
        await manager.register(staff, "staff")
        await manager.register(customer, "customer")
        await manager.broadcast("everyone", roles={"admin", "staff", "customer"})
        await manager.broadcast("staff-only", roles={"admin", "staff"})

    asyncio.run(scenario())

    assert admin.accepted and staff.accepted and customer.accepted
    assert admin.sent == ["everyone", "staff-only"]
    assert staff.sent == ["everyone", "staff-only"]
    assert customer.sent == ["everyone"]
    assert manager.connection_count() == 3
    assert manager.connection_count("staff") == 1


def test_failed_sockets_are_dropped() -> None:
    manager = ConnectionManager()
    healthy = _FakeWebSocket()
    broken = _FakeWebSocket(fail=True)

    async def scenario() -> None:
        await manager.register(healthy, "staff")
        await manager.register(broken, "staff")
        await manager.broadcast("ping", roles={"staff"})
        await manager.unregister(broken)

    asyncio.run(scenario())

    assert healthy.sent == ["ping"]
    assert manager.connection_count("staff") == 1
    assert manager.connection_count() == 1


def test_order_events_reach_staff_and_only_customers_following_the_order() -> None:
    manager = ConnectionManager()
    staff = _FakeWebSocket()
    follower = _FakeWebSocket()
    other_customer = _FakeWebSocket()
    unsubscribed = _FakeWebSocket()

    async def scenario() -> None:
        await manager.register(staff, "staff")
        await manager.register(follower, "customer", order_ids=["ord_1"])
        await manager.register(other_customer, "customer", order_ids=["ord_2"])
        await manager.register(unsubscribed, "customer")
        await manager.broadcast_order_event("ord_1 update", "ord_1", roles={"staff"})
        await manager.broadcast_order_event("no order", None, roles={"staff"})

    asyncio.run(scenario())

    assert staff.sent == ["ord_1 update", "no order"]
    assert follower.sent == ["ord_1 update"]
    assert other_customer.sent == []
    assert unsubscribed.sent == []


def test_broadcast_without_roles_reaches_nobody() -> None:
    manager = ConnectionManager()
    customer = _FakeWebSocket()

    async def scenario() -> None:
        await manager.register(customer, "customer", order_ids=["ord_1"])
        await manager.broadcast("highlight", roles=set())

    asyncio.run(scenario())

    assert customer.sent == []


def test_unregister_drops_subscriptions() -> None:
    manager = ConnectionManager()
    customer = _FakeWebSocket()

    async def scenario() -> None:
        await manager.register(customer, "customer", order_ids=["ord_1"])
        await manager.unregister(customer)
        await manager.broadcast_order_event("late", "ord_1", roles={"staff"})

    asyncio.run(scenario())

    assert customer.sent == []
    assert manager.connection_count() == 0
