"""
Waiter call router.
Diners call a waiter with their table token; floor staff acknowledge,
complete or remove the calls.
"""

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request
from sqlalchemy.orm import Session

from shared.config.constants import ALL_STAFF_ROLES, FLOOR_ROLES
from shared.config.settings import settings
from shared.infrastructure.db import get_db
from shared.security.auth import current_user_context, require_restaurant, require_roles
from shared.security.rate_limit import limiter
from shared.utils.schemas import CreateWaiterCallRequest, UpdateStatusRequest, WaiterCallOutput
from rest_api.routers._common import schedule_events, staff_scope, table_session_context
from rest_api.services.domain import SessionContext, WaiterCallService


router = APIRouter(prefix="/api/waiter-call", tags=["waiter-call"])


@router.post("/create", response_model=WaiterCallOutput, status_code=201)
@limiter.limit(settings.waiter_call_rate_limit)
def create_waiter_call(
    request: Request,
    body: CreateWaiterCallRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(table_session_context),
) -> WaiterCallOutput:
    """
    Call a waiter to the caller's table.

    Returns 409 with the existing call_id while a PENDING call of the same
    type is still open for the table.
    """
    service = WaiterCallService(db)
    call = service.create_call(ctx.scope, ctx.table_id, body.type, body.note)
    schedule_events(background_tasks, service.events)
    return WaiterCallOutput.model_validate(call)


@router.get("/restaurant/{restaurant_id}", response_model=list[WaiterCallOutput])
def list_waiter_calls(
    restaurant_id: int,
    status: str | None = Query(
        default=None, description="Comma-separated statuses (default PENDING,ACKNOWLEDGED)"
    ),
    db: Session = Depends(get_db),
    ctx: dict = Depends(current_user_context),
) -> list[WaiterCallOutput]:
    require_roles(ctx, ALL_STAFF_ROLES)
    require_restaurant(ctx, restaurant_id)
    statuses = [s.strip() for s in status.split(",") if s.strip()] if status else None
    calls = WaiterCallService(db).list_calls(staff_scope(ctx, restaurant_id), statuses)
    return [WaiterCallOutput.model_validate(c) for c in calls]


@router.patch("/{call_id}/status", response_model=WaiterCallOutput)
def update_waiter_call_status(
    call_id: int,
    body: UpdateStatusRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    ctx: dict = Depends(current_user_context),
) -> WaiterCallOutput:
    require_roles(ctx, FLOOR_ROLES)
    service = WaiterCallService(db)
    call = service.transition_call_status(
        staff_scope(ctx), call_id, body.status, body.expected_version
    )
    schedule_events(background_tasks, service.events)
    return WaiterCallOutput.model_validate(call)


@router.delete("/{call_id}")
def delete_waiter_call(
    call_id: int,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    ctx: dict = Depends(current_user_context),
) -> dict:
    require_roles(ctx, FLOOR_ROLES)
    service = WaiterCallService(db)
    service.delete_call(staff_scope(ctx), call_id)
    schedule_events(background_tasks, service.events)
    return {"success": True, "call_id": call_id}
