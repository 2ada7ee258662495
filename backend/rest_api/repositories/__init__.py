"""
Repository Pattern implementation.
Centralizes data access behind a mandatory tenant scope.

Usage:
    from rest_api.repositories import OrderRepository, TenantScope

    repo = OrderRepository(db)
    scope = TenantScope(tenant_id=1, restaurant_id=2)
    orders = repo.list_for_restaurant(scope, status="PENDING")
"""

from .base import ScopedRepository, TenantScope
from .menu import MenuCategoryRepository, MenuItemRepository
from .order import OrderItemRepository, OrderRepository
from .staff import RestaurantRepository, UserRepository
from .table import TableRepository, TableSessionRepository
from .waiter_call import WaiterCallRepository

__all__ = [
    # Base
    "ScopedRepository",
    "TenantScope",
    # Menu
    "MenuCategoryRepository",
    "MenuItemRepository",
    # Orders
    "OrderRepository",
    "OrderItemRepository",
    # Staff
    "RestaurantRepository",
    "UserRepository",
    # Tables
    "TableRepository",
    "TableSessionRepository",
    # Waiter calls
    "WaiterCallRepository",
]
