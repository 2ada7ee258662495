"""
Realtime Notifier.

Owns the connection registry and fans committed DomainEvents out to the
groups chosen by the EventRouter. Delivery is best-effort and at-most-once:
there is no backlog, and a socket that fails a send is dropped.

The module-level `notifier` is what routers schedule as a background task:

    background_tasks.add_task(notifier.publish, event)
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from shared.config.logging import ws_gateway_logger as logger
from shared.config.settings import settings
from shared.infrastructure.events import DomainEvent
from ws_gateway.components.core.constants import WSCloseCode
from ws_gateway.components.events.router import EventRouter
from ws_gateway.connection_manager import ConnectionRegistry

if TYPE_CHECKING:
    from fastapi import WebSocket


class Notifier:
    """Connection registry plus event fan-out."""

    def __init__(
        self,
        registry: ConnectionRegistry | None = None,
        router: EventRouter | None = None,
        send_timeout: float | None = None,
    ) -> None:
        self.registry = registry or ConnectionRegistry()
        self.router = router or EventRouter()
        self._send_timeout = settings.ws_send_timeout if send_timeout is None else send_timeout

    async def publish(self, event: DomainEvent) -> int:
        """
        Deliver event to every member of its target groups.

        Never raises: failures are logged and the failing socket is removed.

        Returns:
            Number of successful sends.
        """
        try:
            routed = self.router.route(event)
        except Exception as e:
            # Malformed payload; the change itself is already committed
            logger.error(
                "Event could not be routed",
                event_type=event.event_type,
                error_type=type(e).__name__,
                error=str(e),
            )
            return 0

        sent = 0
        for group, message in routed:
            for websocket in await self.registry.members(group):
                if await self.send(websocket, message):
                    sent += 1

        logger.debug(
            "Event published",
            event_type=event.event_type,
            restaurant_id=event.restaurant_id,
            groups=len(routed),
            sent=sent,
        )
        return sent

    async def revoke_table_sessions(self, table_id: int, keep_session_id: int | None = None) -> int:
        """
        Close table sockets whose credential belongs to a session that is no
        longer active on table_id, so they stop receiving its events.

        Returns:
            Number of sockets closed.
        """
        revoked = await self.registry.revoke_table_sessions(table_id, keep_session_id)
        for websocket in revoked:
            try:
                await asyncio.wait_for(
                    websocket.close(code=WSCloseCode.AUTH_FAILED, reason="Table session ended"),
                    timeout=self._send_timeout,
                )
            except Exception as e:
                # Already gone; it is out of the registry either way
                logger.debug("Closing revoked table socket failed", error=str(e))
        if revoked:
            logger.info(
                "Table sockets revoked",
                table_id=table_id,
                active_session_id=keep_session_id,
                closed=len(revoked),
            )
        return len(revoked)

    async def send(self, websocket: WebSocket, message: dict[str, Any]) -> bool:
        """Send one message; on failure drop the socket from every group."""
        try:
            await asyncio.wait_for(websocket.send_json(message), timeout=self._send_timeout)
            return True
        except asyncio.TimeoutError:
            logger.warning("WebSocket send timed out, dropping connection")
        except Exception as e:
            # Any transport error means the peer is gone
            logger.debug("WebSocket send failed, dropping connection", error=str(e))
        await self.registry.disconnect(websocket)
        return False


# Global notifier shared by the REST routers and the /ws endpoint
notifier = Notifier()
