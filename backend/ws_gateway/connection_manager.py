"""
WebSocket Connection Registry.

Process-local map of subscription groups to the sockets that joined them,
plus the reverse index used to clean up on disconnect. Nothing here is
persisted: a restart forgets every membership and clients re-join.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from shared.config.logging import ws_gateway_logger as logger

if TYPE_CHECKING:
    from fastapi import WebSocket

__all__ = ["ConnectionRegistry"]


class ConnectionRegistry:
    """
    Tracks which WebSocket belongs to which groups.

    All mutations and snapshots go through one asyncio.Lock; senders take a
    snapshot with `members()` and send outside the lock so a slow client
    never blocks joins.
    """

    def __init__(self) -> None:
        self._groups: dict[str, set[WebSocket]] = {}
        self._memberships: dict[WebSocket, set[str]] = {}
        # Table sockets only: websocket -> (table_id, session_id) of its credential
        self._table_sessions: dict[WebSocket, tuple[int, int]] = {}
        self._lock = asyncio.Lock()

    async def join(self, websocket: WebSocket, group: str) -> bool:
        """
        Add websocket to group.

        Returns:
            False if it was already a member.
        """
        async with self._lock:
            members = self._groups.setdefault(group, set())
            if websocket in members:
                return False
            members.add(websocket)
            self._memberships.setdefault(websocket, set()).add(group)
        logger.debug("Joined group", group=group)
        return True

    async def leave(self, websocket: WebSocket, group: str) -> bool:
        """
        Remove websocket from group.

        Returns:
            False if it was not a member.
        """
        async with self._lock:
            members = self._groups.get(group)
            if not members or websocket not in members:
                return False
            self._discard(websocket, group)
        logger.debug("Left group", group=group)
        return True

    async def disconnect(self, websocket: WebSocket) -> list[str]:
        """
        Remove websocket from every group it joined.

        Returns:
            The groups it was removed from.
        """
        async with self._lock:
            groups = list(self._memberships.get(websocket, ()))
            for group in groups:
                self._discard(websocket, group)
            self._memberships.pop(websocket, None)
            self._table_sessions.pop(websocket, None)
        return groups

    async def bind_table_session(self, websocket: WebSocket, table_id: int, session_id: int) -> None:
        """Record the table session a table-credential socket authenticated with."""
        async with self._lock:
            self._table_sessions[websocket] = (table_id, session_id)

    async def revoke_table_sessions(
        self, table_id: int, keep_session_id: int | None = None
    ) -> list[WebSocket]:
        """
        Remove every socket bound to table_id under a session other than
        keep_session_id (all of them when keep_session_id is None).

        Returns:
            The removed sockets; the caller closes them.
        """
        async with self._lock:
            revoked = [
                websocket
                for websocket, (bound_table, session_id) in self._table_sessions.items()
                if bound_table == table_id and session_id != keep_session_id
            ]
            for websocket in revoked:
                for group in list(self._memberships.get(websocket, ())):
                    self._discard(websocket, group)
                self._memberships.pop(websocket, None)
                del self._table_sessions[websocket]
        return revoked

    async def members(self, group: str) -> list[WebSocket]:
        """Snapshot of the sockets in group (empty list if none)."""
        async with self._lock:
            return list(self._groups.get(group, ()))

    async def groups_of(self, websocket: WebSocket) -> set[str]:
        async with self._lock:
            return set(self._memberships.get(websocket, ()))

    async def stats(self) -> dict[str, Any]:
        async with self._lock:
            return {
                "connections": len(self._memberships),
                "groups": len(self._groups),
                "memberships": sum(len(m) for m in self._groups.values()),
            }

    def reset(self) -> None:
        """
        Forget every membership and start with a fresh lock.

        Only for tests, where each TestClient runs its own event loop.
        """
        self._groups = {}
        self._memberships = {}
        self._table_sessions = {}
        self._lock = asyncio.Lock()

    def _discard(self, websocket: WebSocket, group: str) -> None:
        # Caller holds the lock
        members = self._groups.get(group)
        if members is not None:
            members.discard(websocket)
            if not members:
                del self._groups[group]
        groups = self._memberships.get(websocket)
        if groups is not None:
            groups.discard(group)
            if not groups:
                del self._memberships[websocket]
