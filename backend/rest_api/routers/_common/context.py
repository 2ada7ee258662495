"""
Request context helpers for routers.

- table_session_context: dependency resolving the X-Table-Token header
- staff_scope / user_id: TenantScope and user id from a staff JWT context
- schedule_events: hand a service's DomainEvents to the realtime notifier
- schedule_table_revocation: drop /ws table sockets of replaced or closed sessions
"""

from typing import Any, Iterable

from fastapi import BackgroundTasks, Depends, Header
from sqlalchemy.orm import Session

from shared.infrastructure.db import get_db
from shared.infrastructure.events import DomainEvent
from shared.utils.exceptions import UnauthorizedError
from rest_api.repositories import TenantScope
from rest_api.services.domain import SessionContext, SessionService
from ws_gateway.notifier import notifier


def table_session_context(
    x_table_token: str | None = Header(default=None, alias="X-Table-Token"),
    db: Session = Depends(get_db),
) -> SessionContext:
    """
    FastAPI dependency for diner endpoints.

    Usage:
        @router.post("/orders/create")
        def create_order(ctx: SessionContext = Depends(table_session_context)):
            ...
    """
    if not x_table_token:
        raise UnauthorizedError("Missing X-Table-Token header")
    return SessionService(db).validate_credential(x_table_token)


def staff_scope(ctx: dict[str, Any], restaurant_id: int | None = None) -> TenantScope:
    """
    Scope for a staff request: the token's tenant, optionally narrowed to one
    restaurant, limited to the restaurants the token grants.
    """
    return TenantScope(
        tenant_id=ctx["tenant_id"],
        restaurant_id=restaurant_id,
        allowed_restaurant_ids=frozenset(ctx.get("restaurant_ids", ())),
    )


def user_id(ctx: dict[str, Any]) -> int:
    return int(ctx["sub"])


def schedule_events(background_tasks: BackgroundTasks, events: Iterable[DomainEvent]) -> None:
    """Publish events after the response is sent (the transaction is already committed)."""
    for event in events:
        background_tasks.add_task(notifier.publish, event)


def schedule_table_revocation(
    background_tasks: BackgroundTasks, table_id: int, active_session_id: int | None = None
) -> None:
    """Close /ws table sockets of sessions other than active_session_id after the response."""
    background_tasks.add_task(notifier.revoke_table_sessions, table_id, active_session_id)
