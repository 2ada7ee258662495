"""
Table session router.
Opening a session is the only unauthenticated write: knowing the table triple
(printed in the QR code) is enough, so the endpoint is rate limited.
"""

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from sqlalchemy.orm import Session

from shared.config.constants import ALL_STAFF_ROLES
from shared.config.settings import settings
from shared.infrastructure.db import get_db
from shared.security.auth import current_user_context, require_roles
from shared.security.rate_limit import limiter
from shared.utils.exceptions import ForbiddenError
from shared.utils.schemas import (
    CloseSessionRequest,
    CloseSessionResponse,
    OpenSessionRequest,
    OpenSessionResponse,
    RestaurantBrief,
    TableBrief,
    TableLinkResponse,
)
from rest_api.routers._common import (
    schedule_table_revocation,
    staff_scope,
    table_session_context,
)
from rest_api.services.domain import SessionContext, SessionService


router = APIRouter(prefix="/api/session", tags=["session"])


@router.post("/open", response_model=OpenSessionResponse)
@limiter.limit(settings.session_open_rate_limit)
def open_session(
    request: Request,
    body: OpenSessionRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
) -> OpenSessionResponse:
    """
    Open a table session from a QR scan.

    Any session already active on the table is closed first, so the previous
    table credential stops working. Diner sockets opened with it are closed too.
    """
    handle = SessionService(db).open_session(body.tenant_id, body.restaurant_id, body.table_id)
    schedule_table_revocation(background_tasks, handle.table.id, handle.session_id)
    return OpenSessionResponse(
        session_id=handle.session_id,
        token=handle.token,
        expires_at=handle.expires_at,
        table=TableBrief.model_validate(handle.table),
        restaurant=RestaurantBrief.model_validate(handle.restaurant),
    )


@router.post("/close", response_model=CloseSessionResponse)
def close_session(
    body: CloseSessionRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(table_session_context),
) -> CloseSessionResponse:
    """Close the caller's own session. Requires X-Table-Token header."""
    if body.session_id != ctx.session_id:
        raise ForbiddenError("close another table session", session_id=body.session_id)
    session = SessionService(db).close_session(body.session_id, ctx.scope, ctx.table_id)
    schedule_table_revocation(background_tasks, session.table_id)
    return CloseSessionResponse(
        session_id=session.id,
        active=session.active,
        closed_at=session.closed_at,
    )


@router.get("/qr/{table_id}", response_model=TableLinkResponse)
def table_qr_link(
    table_id: int,
    db: Session = Depends(get_db),
    ctx: dict = Depends(current_user_context),
) -> TableLinkResponse:
    """URL to encode in the printed QR code of a table."""
    require_roles(ctx, ALL_STAFF_ROLES)
    table, url = SessionService(db).table_link(staff_scope(ctx), table_id)
    return TableLinkResponse(table_id=table.id, code=table.code, url=url)
