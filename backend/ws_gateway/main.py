"""
WebSocket Gateway routes.

Mounted on the REST application so domain services and the notifier share
one process and one connection registry.
"""

from __future__ import annotations

from fastapi import APIRouter, Query, WebSocket

from ws_gateway.components.endpoints.handlers import GatewayEndpoint
from ws_gateway.notifier import notifier


router = APIRouter(tags=["realtime"])


@router.websocket("/ws")
async def websocket_endpoint(
    websocket: WebSocket,
    token: str | None = Query(default=None),
    table_token: str | None = Query(default=None),
):
    """
    Realtime channel for staff dashboards, kitchen screens and diners.

    Authenticate with `token` (staff JWT) or `table_token` (table credential).
    """
    endpoint = GatewayEndpoint(
        websocket,
        notifier,
        session_factory=websocket.app.state.session_factory,
        token=token,
        table_token=table_token,
    )
    await endpoint.run()


@router.get("/ws/health")
async def ws_health():
    """Registry counters; the gateway has no external dependencies to check."""
    return {
        "status": "healthy",
        "service": "ws-gateway",
        **(await notifier.registry.stats()),
    }
