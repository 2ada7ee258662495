"""
Public menu router.
Read-only view of a restaurant's active categories and items.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.infrastructure.db import get_db
from shared.utils.schemas import (
    MenuCategoryOutput,
    MenuCategoryWithItems,
    MenuItemOutput,
    MenuOutput,
    RestaurantBrief,
)
from rest_api.repositories import TenantScope
from rest_api.services.domain import VenueService


router = APIRouter(prefix="/api/menu", tags=["menu"])


def _public_scope(service: VenueService, restaurant_id: int) -> tuple[TenantScope, object]:
    restaurant = service.find_public_restaurant(restaurant_id)
    return TenantScope(tenant_id=restaurant.tenant_id, restaurant_id=restaurant.id), restaurant


@router.get("/{restaurant_id}", response_model=MenuOutput)
def get_menu(restaurant_id: int, db: Session = Depends(get_db)) -> MenuOutput:
    """Complete active menu grouped by category."""
    service = VenueService(db)
    scope, restaurant = _public_scope(service, restaurant_id)
    categories = [
        MenuCategoryWithItems(
            id=category.id,
            name=category.name,
            sort=category.sort,
            items=[MenuItemOutput.model_validate(item) for item in items],
        )
        for category, items in service.menu(scope)
    ]
    return MenuOutput(restaurant=RestaurantBrief.model_validate(restaurant), categories=categories)


@router.get("/{restaurant_id}/categories", response_model=list[MenuCategoryOutput])
def list_categories(restaurant_id: int, db: Session = Depends(get_db)) -> list[MenuCategoryOutput]:
    service = VenueService(db)
    scope, _ = _public_scope(service, restaurant_id)
    return [MenuCategoryOutput.model_validate(c) for c in service.list_categories(scope)]


@router.get("/{restaurant_id}/items/{category_id}", response_model=list[MenuItemOutput])
def list_items(
    restaurant_id: int, category_id: int, db: Session = Depends(get_db)
) -> list[MenuItemOutput]:
    service = VenueService(db)
    scope, _ = _public_scope(service, restaurant_id)
    return [MenuItemOutput.model_validate(i) for i in service.list_items(scope, category_id)]
