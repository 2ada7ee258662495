"""
Venue Domain Service.

Restaurants, tables and read-only menu access.
"""

from __future__ import annotations

from typing import Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from shared.config.logging import rest_api_logger as logger
from shared.infrastructure.db import safe_commit
from shared.utils.exceptions import DuplicateEntityError, NotFoundError, TableNotFoundError
from rest_api.models import MenuCategory, MenuItem, Restaurant, Table
from rest_api.repositories import (
    MenuCategoryRepository,
    MenuItemRepository,
    RestaurantRepository,
    TableRepository,
    TenantScope,
)
from rest_api.services.base_service import DomainService


class VenueService(DomainService):
    """Domain service for restaurants, tables and menus."""

    def __init__(self, db: Session):
        super().__init__(db)
        self._restaurants = RestaurantRepository(db)
        self._tables = TableRepository(db)
        self._categories = MenuCategoryRepository(db)
        self._items = MenuItemRepository(db)

    # =========================================================================
    # Restaurants
    # =========================================================================

    def get_restaurant(self, scope: TenantScope, restaurant_id: int) -> Restaurant:
        restaurant = self._restaurants.find_by_id(
            scope, restaurant_id, Restaurant.is_active.is_(True)
        )
        if restaurant is None:
            raise NotFoundError("Restaurant", restaurant_id)
        return restaurant

    def find_public_restaurant(self, restaurant_id: int) -> Restaurant:
        """
        Restaurant lookup for the public menu, where the tenant comes from the
        restaurant itself.
        """
        restaurant = self._db.get(Restaurant, restaurant_id)
        if restaurant is None or not restaurant.is_active:
            raise NotFoundError("Restaurant", restaurant_id)
        return restaurant

    def list_restaurants(self, scope: TenantScope) -> Sequence[Restaurant]:
        return self._restaurants.list_active(scope)

    def create_restaurant(
        self, scope: TenantScope, name: str, address: str | None, currency: str
    ) -> Restaurant:
        restaurant = Restaurant(
            tenant_id=scope.tenant_id,
            name=name,
            address=address,
            currency=currency.upper(),
        )
        self._restaurants.add(restaurant)
        safe_commit(self._db)
        self._db.refresh(restaurant)
        logger.info("Restaurant created", restaurant_id=restaurant.id, tenant_id=scope.tenant_id)
        return restaurant

    # =========================================================================
    # Tables
    # =========================================================================

    def list_tables(self, scope: TenantScope) -> Sequence[Table]:
        return self._tables.list_for_restaurant(scope)

    def create_table(self, scope: TenantScope, code: str, name: str) -> Table:
        """
        Raises:
            NotFoundError: Restaurant not in scope.
            DuplicateEntityError: Code already used in the restaurant.
        """
        self.get_restaurant(scope, scope.restaurant_id)

        if self._tables.find_by_code(scope, code) is not None:
            raise DuplicateEntityError("Table", code)

        table = Table(
            tenant_id=scope.tenant_id,
            restaurant_id=scope.restaurant_id,
            code=code,
            name=name,
            is_active=True,
        )
        self._tables.add(table)
        try:
            safe_commit(self._db)
        except IntegrityError:
            raise DuplicateEntityError("Table", code)
        self._db.refresh(table)
        logger.info("Table created", table_id=table.id, restaurant_id=scope.restaurant_id, code=code)
        return table

    def set_table_active(self, scope: TenantScope, table_id: int, is_active: bool) -> Table:
        table = self._tables.find_by_id(scope, table_id)
        if table is None:
            raise TableNotFoundError(table_id)
        self._require_restaurant(scope, table.restaurant_id)
        table.is_active = is_active
        safe_commit(self._db)
        self._db.refresh(table)
        logger.info("Table status changed", table_id=table_id, is_active=is_active)
        return table

    # =========================================================================
    # Menu (read-only)
    # =========================================================================

    def list_categories(self, scope: TenantScope) -> Sequence[MenuCategory]:
        return self._categories.list_active(scope)

    def list_items(self, scope: TenantScope, category_id: int | None = None) -> Sequence[MenuItem]:
        return self._items.list_active(scope, category_id)

    def menu(self, scope: TenantScope) -> list[tuple[MenuCategory, list[MenuItem]]]:
        """Active categories with their active items, in display order."""
        by_category: dict[int, list[MenuItem]] = {}
        for item in self.list_items(scope):
            by_category.setdefault(item.category_id, []).append(item)
        return [(c, by_category.get(c.id, [])) for c in self.list_categories(scope)]
