"""
Menu Repositories - Data access for menu categories and items.
"""

from typing import Sequence

from rest_api.models import MenuCategory, MenuItem
from .base import ScopedRepository, TenantScope


class MenuCategoryRepository(ScopedRepository[MenuCategory]):
    """Repository for MenuCategory entities."""

    model = MenuCategory

    def list_active(self, scope: TenantScope) -> Sequence[MenuCategory]:
        return self.find_all(
            scope,
            MenuCategory.is_active.is_(True),
            order_by=(MenuCategory.sort, MenuCategory.id),
        )


class MenuItemRepository(ScopedRepository[MenuItem]):
    """Repository for MenuItem entities."""

    model = MenuItem

    def find_active_by_ids(self, scope: TenantScope, item_ids: Sequence[int]) -> Sequence[MenuItem]:
        """Active items among item_ids that belong to the scope's restaurant."""
        return self.find_by_ids(scope, item_ids, MenuItem.is_active.is_(True))

    def list_active(
        self, scope: TenantScope, category_id: int | None = None
    ) -> Sequence[MenuItem]:
        criteria = [MenuItem.is_active.is_(True)]
        if category_id is not None:
            criteria.append(MenuItem.category_id == category_id)
        return self.find_all(scope, *criteria, order_by=(MenuItem.category_id, MenuItem.id))
