"""
Tests for the connection registry and notifier fan-out, using fake sockets.
"""

import asyncio

import pytest

from shared.config.constants import EventType
from shared.infrastructure.events import DomainEvent
from ws_gateway.connection_manager import ConnectionRegistry
from ws_gateway.notifier import Notifier


class FakeWebSocket:
    """Records what was sent; can be told to fail or hang."""

    def __init__(self, fail=False, hang=False):
        self.sent = []
        self.close_code = None
        self.fail = fail
        self.hang = hang

    async def send_json(self, message):
        if self.hang:
            await asyncio.sleep(10)
        if self.fail:
            raise RuntimeError("connection reset")
        self.sent.append(message)

    async def close(self, code=1000, reason=None):
        if self.fail:
            raise RuntimeError("connection reset")
        self.close_code = code


def _order_updated(table_id=3):
    return DomainEvent(
        event_type=EventType.ORDER_UPDATED,
        tenant_id=1,
        restaurant_id=2,
        table_id=table_id,
        payload={"order_id": 10, "status": "READY"},
    )


@pytest.fixture
def registry():
    return ConnectionRegistry()


@pytest.fixture
def notifier(registry):
    return Notifier(registry=registry, send_timeout=0.05)


class TestConnectionRegistry:
    async def test_join_is_idempotent(self, registry):
        ws = FakeWebSocket()
        assert await registry.join(ws, "restaurant:2") is True
        assert await registry.join(ws, "restaurant:2") is False
        assert await registry.members("restaurant:2") == [ws]

    async def test_leave(self, registry):
        ws = FakeWebSocket()
        await registry.join(ws, "restaurant:2")

        assert await registry.leave(ws, "restaurant:2") is True
        assert await registry.leave(ws, "restaurant:2") is False
        assert await registry.members("restaurant:2") == []

    async def test_disconnect_removes_every_membership(self, registry):
        ws, other = FakeWebSocket(), FakeWebSocket()
        await registry.join(ws, "restaurant:2")
        await registry.join(ws, "waiter:7")
        await registry.join(other, "restaurant:2")

        groups = await registry.disconnect(ws)

        assert sorted(groups) == ["restaurant:2", "waiter:7"]
        assert await registry.groups_of(ws) == set()
        assert await registry.members("restaurant:2") == [other]
        assert await registry.members("waiter:7") == []

    async def test_disconnect_unknown_socket(self, registry):
        assert await registry.disconnect(FakeWebSocket()) == []

    async def test_stats(self, registry):
        a, b = FakeWebSocket(), FakeWebSocket()
        await registry.join(a, "restaurant:2")
        await registry.join(a, "waiter:7")
        await registry.join(b, "restaurant:2")

        assert await registry.stats() == {"connections": 2, "groups": 2, "memberships": 3}

    async def test_concurrent_joins(self, registry):
        sockets = [FakeWebSocket() for _ in range(50)]
        await asyncio.gather(*(registry.join(ws, "restaurant:2") for ws in sockets))
        assert len(await registry.members("restaurant:2")) == 50

    async def test_revoke_table_sessions_keeps_active_session(self, registry):
        stale, current, other_table = FakeWebSocket(), FakeWebSocket(), FakeWebSocket()
        await registry.bind_table_session(stale, 3, 40)
        await registry.bind_table_session(current, 3, 41)
        await registry.bind_table_session(other_table, 4, 40)
        for ws in (stale, current):
            await registry.join(ws, "table:1:2:3")
        await registry.join(other_table, "table:1:2:4")

        assert await registry.revoke_table_sessions(3, keep_session_id=41) == [stale]
        assert await registry.members("table:1:2:3") == [current]
        assert await registry.members("table:1:2:4") == [other_table]
        assert await registry.groups_of(stale) == set()

    async def test_revoke_without_active_session_drops_whole_table(self, registry):
        a, b = FakeWebSocket(), FakeWebSocket()
        await registry.bind_table_session(a, 3, 40)
        await registry.bind_table_session(b, 3, 41)
        await registry.join(a, "table:1:2:3")

        assert len(await registry.revoke_table_sessions(3)) == 2
        assert await registry.members("table:1:2:3") == []
        # Bindings are gone too
        assert await registry.revoke_table_sessions(3) == []

    async def test_disconnect_forgets_table_binding(self, registry):
        ws = FakeWebSocket()
        await registry.bind_table_session(ws, 3, 40)
        await registry.disconnect(ws)
        assert await registry.revoke_table_sessions(3) == []


class TestNotifierPublish:
    async def test_delivers_to_every_target_group(self, notifier, registry):
        staff, diner, bystander = FakeWebSocket(), FakeWebSocket(), FakeWebSocket()
        await registry.join(staff, "restaurant:2")
        await registry.join(diner, "table:1:2:3")
        await registry.join(bystander, "table:1:2:4")

        sent = await notifier.publish(_order_updated())

        assert sent == 2
        assert staff.sent[0]["event"] == "order.updated"
        assert diner.sent[0]["data"]["order_id"] == 10
        assert bystander.sent == []

    async def test_no_listeners(self, notifier):
        assert await notifier.publish(_order_updated()) == 0

    async def test_failing_socket_is_dropped(self, notifier, registry):
        good, broken = FakeWebSocket(), FakeWebSocket(fail=True)
        await registry.join(good, "restaurant:2")
        await registry.join(broken, "restaurant:2")
        await registry.join(broken, "table:1:2:3")

        sent = await notifier.publish(_order_updated())

        assert sent == 1
        assert good.sent
        assert await registry.groups_of(broken) == set()
        assert await registry.members("restaurant:2") == [good]

    async def test_slow_socket_times_out_and_is_dropped(self, notifier, registry):
        slow, fast = FakeWebSocket(hang=True), FakeWebSocket()
        await registry.join(slow, "restaurant:2")
        await registry.join(fast, "restaurant:2")

        sent = await notifier.publish(_order_updated())

        assert sent == 1
        assert fast.sent
        assert await registry.members("restaurant:2") == [fast]

    async def test_unroutable_event_never_raises(self, notifier, registry):
        event = DomainEvent(
            event_type=EventType.ORDER_CREATED,
            tenant_id=1,
            restaurant_id=2,
            payload={"items": "not-a-list-of-dicts"},
        )
        assert await notifier.publish(event) == 0

    async def test_same_socket_in_two_groups_gets_both(self, notifier, registry):
        """A socket in restaurant and table groups receives the event once per group."""
        ws = FakeWebSocket()
        await registry.join(ws, "restaurant:2")
        await registry.join(ws, "table:1:2:3")

        assert await notifier.publish(_order_updated()) == 2
        assert len(ws.sent) == 2


class TestNotifierRevokeTableSessions:
    async def test_superseded_socket_is_closed_and_stops_receiving(self, notifier, registry):
        stale, current = FakeWebSocket(), FakeWebSocket()
        await registry.bind_table_session(stale, 3, 40)
        await registry.bind_table_session(current, 3, 41)
        await registry.join(stale, "table:1:2:3")
        await registry.join(current, "table:1:2:3")

        assert await notifier.revoke_table_sessions(3, 41) == 1
        assert stale.close_code == 4001
        assert current.close_code is None

        await notifier.publish(_order_updated())
        assert stale.sent == []
        assert len(current.sent) == 1

    async def test_close_failure_never_raises(self, notifier, registry):
        ws = FakeWebSocket(fail=True)
        await registry.bind_table_session(ws, 3, 40)
        await registry.join(ws, "table:1:2:3")

        assert await notifier.revoke_table_sessions(3, 41) == 1
        assert await registry.members("table:1:2:3") == []

    async def test_nothing_bound(self, notifier):
        assert await notifier.revoke_table_sessions(3, 41) == 0
