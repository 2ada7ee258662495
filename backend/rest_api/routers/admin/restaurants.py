"""
Restaurant and table management endpoints.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.infrastructure.db import get_db
from shared.security.auth import require_restaurant
from shared.utils.schemas import (
    ActiveFlagUpdate,
    RestaurantCreate,
    RestaurantOutput,
    TableCreate,
    TableOutput,
)
from rest_api.routers._common import staff_scope
from rest_api.routers.admin._base import require_admin, require_any_staff
from rest_api.services.domain import VenueService


router = APIRouter(tags=["admin-restaurants"])


@router.get("/restaurants", response_model=list[RestaurantOutput])
def list_restaurants(
    db: Session = Depends(get_db),
    user: dict = Depends(require_any_staff),
) -> list[RestaurantOutput]:
    restaurants = VenueService(db).list_restaurants(staff_scope(user))
    return [RestaurantOutput.model_validate(r) for r in restaurants]


@router.post("/restaurants", response_model=RestaurantOutput, status_code=201)
def create_restaurant(
    body: RestaurantCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_admin),
) -> RestaurantOutput:
    """
    Create a restaurant in the admin's tenant.

    Tokens issued before this call do not list the new restaurant; staff
    pick it up at their next login.
    """
    restaurant = VenueService(db).create_restaurant(
        staff_scope(user), body.name, body.address, body.currency
    )
    return RestaurantOutput.model_validate(restaurant)


@router.get("/restaurants/{restaurant_id}/tables", response_model=list[TableOutput])
def list_tables(
    restaurant_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_any_staff),
) -> list[TableOutput]:
    require_restaurant(user, restaurant_id)
    tables = VenueService(db).list_tables(staff_scope(user, restaurant_id))
    return [TableOutput.model_validate(t) for t in tables]


@router.post(
    "/restaurants/{restaurant_id}/tables", response_model=TableOutput, status_code=201
)
def create_table(
    restaurant_id: int,
    body: TableCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_admin),
) -> TableOutput:
    require_restaurant(user, restaurant_id)
    table = VenueService(db).create_table(staff_scope(user, restaurant_id), body.code, body.name)
    return TableOutput.model_validate(table)


@router.patch("/tables/{table_id}/status", response_model=TableOutput)
def set_table_status(
    table_id: int,
    body: ActiveFlagUpdate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_admin),
) -> TableOutput:
    """Deactivated tables reject new sessions; open sessions are left alone."""
    table = VenueService(db).set_table_active(staff_scope(user), table_id, body.is_active)
    return TableOutput.model_validate(table)
