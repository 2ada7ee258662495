"""
Orders router.
"""

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session

from shared.config.constants import ALL_STAFF_ROLES, Limits
from shared.infrastructure.db import get_db
from shared.security.auth import current_user_context, require_restaurant, require_roles
from shared.utils.schemas import (
    CreateOrderRequest,
    OrderItemOutput,
    OrderOutput,
    UpdateStatusRequest,
)
from rest_api.routers._common import schedule_events, staff_scope, table_session_context
from rest_api.services.domain import OrderService, SessionContext


router = APIRouter(prefix="/api/orders", tags=["orders"])


# =============================================================================
# Diner endpoints (X-Table-Token)
# =============================================================================


@router.post("/create", response_model=OrderOutput, status_code=201)
def create_order(
    body: CreateOrderRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(table_session_context),
) -> OrderOutput:
    """
    Submit the cart as a new order for the caller's table.

    Prices and VAT rates are copied from the menu at this moment; later menu
    edits never change an existing order.
    """
    service = OrderService(db)
    order = service.create_order(ctx, body.items)
    schedule_events(background_tasks, service.events)
    return OrderOutput.model_validate(order)


@router.get("/table", response_model=list[OrderOutput])
def list_table_orders(
    db: Session = Depends(get_db),
    ctx: SessionContext = Depends(table_session_context),
) -> list[OrderOutput]:
    """Orders of the caller's table that are not CLOSED, newest first."""
    orders = OrderService(db).list_table_orders(ctx)
    return [OrderOutput.model_validate(o) for o in orders]


# =============================================================================
# Staff endpoints (JWT)
# =============================================================================


@router.get("/restaurant/{restaurant_id}", response_model=list[OrderOutput])
def list_restaurant_orders(
    restaurant_id: int,
    status: str | None = Query(default=None),
    limit: int = Query(default=Limits.DEFAULT_PAGE_SIZE, ge=1, le=Limits.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    ctx: dict = Depends(current_user_context),
) -> list[OrderOutput]:
    require_roles(ctx, ALL_STAFF_ROLES)
    require_restaurant(ctx, restaurant_id)
    orders = OrderService(db).list_restaurant_orders(
        staff_scope(ctx, restaurant_id), status=status, limit=limit
    )
    return [OrderOutput.model_validate(o) for o in orders]


@router.patch("/items/{item_id}/status", response_model=OrderItemOutput)
def update_order_item_status(
    item_id: int,
    body: UpdateStatusRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    ctx: dict = Depends(current_user_context),
) -> OrderItemOutput:
    """Move a single item (e.g. one dish at the hot station) to a new status."""
    require_roles(ctx, ALL_STAFF_ROLES)
    service = OrderService(db)
    item = service.transition_order_item_status(
        staff_scope(ctx), item_id, body.status, body.expected_version
    )
    schedule_events(background_tasks, service.events)
    return OrderItemOutput.model_validate(item)


@router.patch("/{order_id}/status", response_model=OrderOutput)
def update_order_status(
    order_id: int,
    body: UpdateStatusRequest,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    ctx: dict = Depends(current_user_context),
) -> OrderOutput:
    """
    Move an order to a new status.

    Pass expected_version to reject the change when someone else updated the
    order since it was read (409).
    """
    require_roles(ctx, ALL_STAFF_ROLES)
    service = OrderService(db)
    order = service.transition_order_status(
        staff_scope(ctx), order_id, body.status, body.expected_version
    )
    schedule_events(background_tasks, service.events)
    return OrderOutput.model_validate(order)
