"""
Order Repositories - Data access for orders and order items.
Items are eager loaded with their order.
"""

from typing import Sequence

from sqlalchemy import Select
from sqlalchemy.orm import selectinload

from rest_api.models import Order, OrderItem
from shared.config.constants import Limits, OrderStatus
from .base import ScopedRepository, TenantScope


class OrderRepository(ScopedRepository[Order]):
    """
    Repository for Order entities.

    Guarantees eager loading of items.
    """

    model = Order

    def _select(self, scope: TenantScope | None) -> Select:
        return super()._select(scope).options(selectinload(Order.items))

    def list_open_for_table(self, scope: TenantScope, table_id: int) -> Sequence[Order]:
        """Orders of a table that are not CLOSED, newest first."""
        return self.find_all(
            scope,
            Order.table_id == table_id,
            Order.status != OrderStatus.CLOSED,
            order_by=(Order.created_at.desc(), Order.id.desc()),
        )

    def list_for_restaurant(
        self,
        scope: TenantScope,
        status: str | None = None,
        limit: int = Limits.DEFAULT_PAGE_SIZE,
    ) -> Sequence[Order]:
        criteria = []
        if status is not None:
            criteria.append(Order.status == status)
        return self.find_all(
            scope,
            *criteria,
            order_by=(Order.created_at.desc(), Order.id.desc()),
            limit=limit,
        )


class OrderItemRepository(ScopedRepository[OrderItem]):
    """Repository for OrderItem entities."""

    model = OrderItem
