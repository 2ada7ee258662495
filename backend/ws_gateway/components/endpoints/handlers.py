"""
WebSocket endpoint for the single /ws route.

A connection authenticates once, with either a staff JWT (`token` query
parameter) or a table credential (`table_token`), then asks to join groups:

    {"event": "join-table", "data": {"tenant_id": 1, "restaurant_id": 2, "table_id": 3}}
    {"event": "join-kitchen", "data": {"restaurant_id": 2, "station": "HOT"}}
    {"event": "join-restaurant", "data": {"restaurant_id": 2}}
    {"event": "leave", "data": {"group": "restaurant:2"}}
    {"event": "ping"}

Replies are `joined`, `left`, `pong` or `error`. Asking for a group the
credential does not cover closes the connection with 4003.
"""

from __future__ import annotations

import asyncio
import json
from typing import TYPE_CHECKING, Any, Callable

from fastapi import WebSocket, WebSocketDisconnect
from starlette.concurrency import run_in_threadpool
from starlette.websockets import WebSocketState

from shared.config.logging import audit_ws_connection, ws_gateway_logger as logger
from shared.config.settings import settings
from shared.infrastructure.events import (
    group_kitchen,
    group_restaurant,
    group_table,
    group_waiter,
)
from shared.security.auth import verify_jwt
from shared.utils.exceptions import UnauthorizedError
from ws_gateway.components.core.constants import (
    ClientEvent,
    ServerEvent,
    WSCloseCode,
    WSConstants,
)

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from ws_gateway.notifier import Notifier

ENDPOINT_NAME = "/ws"


class JoinForbidden(Exception):
    """The credential does not cover the requested group."""


class BadMessage(Exception):
    """The message is malformed; reported back to the client."""


def _int_field(data: dict[str, Any], name: str) -> int:
    # Accept camelCase too (tenantId), as sent by existing JS clients
    camel = name.split("_")[0] + "".join(p.title() for p in name.split("_")[1:])
    value = data.get(name, data.get(camel))
    if isinstance(value, bool):
        raise BadMessage(f"{name} must be a positive integer")
    try:
        value = int(value)
    except (TypeError, ValueError):
        raise BadMessage(f"{name} must be a positive integer")
    if value <= 0:
        raise BadMessage(f"{name} must be a positive integer")
    return value


class GatewayEndpoint:
    """
    Handles one /ws connection from accept to disconnect.

    Staff connections are bound to the JWT claims: they may join groups of
    their tenant's restaurants and are auto-joined to waiter:{user_id}.
    Table connections are bound to one (tenant, restaurant, table) and may
    only join that table's group.
    """

    def __init__(
        self,
        websocket: WebSocket,
        notifier: "Notifier",
        session_factory: Callable[[], "Session"],
        token: str | None = None,
        table_token: str | None = None,
        receive_timeout: float = WSConstants.WS_RECEIVE_TIMEOUT,
    ):
        self.websocket = websocket
        self.notifier = notifier
        self.session_factory = session_factory
        self.token = token
        self.table_token = table_token
        self.receive_timeout = receive_timeout

        self.claims: dict[str, Any] | None = None
        self.table: dict[str, int] | None = None

    @property
    def is_staff(self) -> bool:
        return self.claims is not None

    @property
    def identifier(self) -> str:
        if self.claims is not None:
            return f"user:{self.claims['sub']}"
        if self.table is not None:
            return f"table:{self.table['table_id']}"
        return "anonymous"

    # =========================================================================
    # Lifecycle
    # =========================================================================

    async def run(self) -> None:
        await self.websocket.accept()

        if not await self.authenticate():
            return

        if self.claims is not None:
            await self.notifier.registry.join(self.websocket, group_waiter(int(self.claims["sub"])))
        else:
            await self.notifier.registry.bind_table_session(
                self.websocket, self.table["table_id"], self.table["session_id"]
            )

        audit_ws_connection(
            "CONNECT",
            ENDPOINT_NAME,
            user_id=self.claims["sub"] if self.claims else None,
            table_id=self.table["table_id"] if self.table else None,
        )

        try:
            await self._message_loop()
        except WebSocketDisconnect:
            logger.debug("Client disconnected", identifier=self.identifier)
        finally:
            groups = await self.notifier.registry.disconnect(self.websocket)
            audit_ws_connection(
                "DISCONNECT",
                ENDPOINT_NAME,
                user_id=self.claims["sub"] if self.claims else None,
                table_id=self.table["table_id"] if self.table else None,
                groups=len(groups),
            )

    async def authenticate(self) -> bool:
        """Resolve the credential; close with 4001 when it is missing or invalid."""
        try:
            if self.token:
                self.claims = verify_jwt(self.token)
            elif self.table_token:
                ctx = await run_in_threadpool(self._validate_table_token, self.table_token)
                self.table = {
                    "tenant_id": ctx.tenant_id,
                    "restaurant_id": ctx.restaurant_id,
                    "table_id": ctx.table_id,
                    "session_id": ctx.session_id,
                }
            else:
                raise UnauthorizedError("Missing token or table_token")
        except UnauthorizedError as e:
            audit_ws_connection("AUTH_FAILED", ENDPOINT_NAME, reason=str(e.detail))
            await self.websocket.close(code=WSCloseCode.AUTH_FAILED, reason="Authentication failed")
            return False
        return True

    def _validate_table_token(self, table_token: str):
        # Local import: rest_api services import the notifier from this package
        from rest_api.services.domain import SessionService

        with self.session_factory() as db:
            return SessionService(db).validate_credential(table_token)

    async def _message_loop(self) -> None:
        while True:
            if self.websocket.application_state != WebSocketState.CONNECTED:
                # Closed by the server, e.g. its table session was replaced
                return
            try:
                raw = await asyncio.wait_for(
                    self.websocket.receive_text(), timeout=self.receive_timeout
                )
            except asyncio.TimeoutError:
                logger.info("Connection timed out (no messages)", identifier=self.identifier)
                await self.websocket.close(code=WSCloseCode.NORMAL, reason="Connection timeout")
                return

            if len(raw) > settings.ws_max_message_size:
                logger.warning("Message too big", identifier=self.identifier, size=len(raw))
                await self.websocket.close(code=WSCloseCode.MESSAGE_TOO_BIG, reason="Message too big")
                return

            try:
                await self.handle_message(raw)
            except BadMessage as e:
                await self._reply(ServerEvent.ERROR, {"error": str(e)})
            except JoinForbidden as e:
                audit_ws_connection(
                    "JOIN_DENIED",
                    ENDPOINT_NAME,
                    user_id=self.claims["sub"] if self.claims else None,
                    table_id=self.table["table_id"] if self.table else None,
                    reason=str(e),
                )
                await self.websocket.close(code=WSCloseCode.FORBIDDEN, reason="Forbidden")
                return

    # =========================================================================
    # Messages
    # =========================================================================

    async def handle_message(self, raw: str) -> None:
        try:
            message = json.loads(raw)
        except json.JSONDecodeError:
            raise BadMessage("Message must be JSON")
        if not isinstance(message, dict) or not isinstance(message.get("event"), str):
            raise BadMessage("Message must be an object with an 'event' field")

        event = message["event"]
        data = message.get("data") or {}
        if not isinstance(data, dict):
            raise BadMessage("'data' must be an object")

        if event == ClientEvent.PING:
            await self._reply(ServerEvent.PONG, {})
        elif event == ClientEvent.JOIN_TABLE:
            await self._join(self._table_group(data))
        elif event == ClientEvent.JOIN_KITCHEN:
            await self._join(self._kitchen_group(data))
        elif event == ClientEvent.JOIN_RESTAURANT:
            await self._join(group_restaurant(self._staff_restaurant(data)))
        elif event == ClientEvent.LEAVE:
            group = data.get("group")
            if not isinstance(group, str) or not group:
                raise BadMessage("group is required")
            await self.notifier.registry.leave(self.websocket, group)
            await self._reply(ServerEvent.LEFT, {"group": group})
        else:
            raise BadMessage(f"Unknown event '{event}'")

    def _table_group(self, data: dict[str, Any]) -> str:
        tenant_id = _int_field(data, "tenant_id")
        restaurant_id = _int_field(data, "restaurant_id")
        table_id = _int_field(data, "table_id")

        if self.table is not None:
            if (tenant_id, restaurant_id, table_id) != (
                self.table["tenant_id"],
                self.table["restaurant_id"],
                self.table["table_id"],
            ):
                raise JoinForbidden("table credential issued for another table")
        else:
            if tenant_id != self.claims["tenant_id"]:
                raise JoinForbidden("table belongs to another tenant")
            self._check_restaurant(restaurant_id)
        return group_table(tenant_id, restaurant_id, table_id)

    def _kitchen_group(self, data: dict[str, Any]) -> str:
        restaurant_id = self._staff_restaurant(data)
        try:
            return group_kitchen(restaurant_id, str(data.get("station") or ""))
        except ValueError as e:
            raise BadMessage(str(e))

    def _staff_restaurant(self, data: dict[str, Any]) -> int:
        restaurant_id = _int_field(data, "restaurant_id")
        if not self.is_staff:
            raise JoinForbidden("staff credential required")
        self._check_restaurant(restaurant_id)
        return restaurant_id

    def _check_restaurant(self, restaurant_id: int) -> None:
        if restaurant_id not in set(self.claims.get("restaurant_ids", [])):
            raise JoinForbidden(f"no access to restaurant {restaurant_id}")

    async def _join(self, group: str) -> None:
        await self.notifier.registry.join(self.websocket, group)
        await self._reply(ServerEvent.JOINED, {"group": group})

    async def _reply(self, event: str, data: dict[str, Any]) -> None:
        await self.websocket.send_json({"event": event, "data": data})
