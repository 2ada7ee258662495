"""
Order Domain Service.

Converts carts into priced orders and drives order / order item status
changes. Every change emits a DomainEvent for the realtime notifier.
"""

from __future__ import annotations

from typing import Protocol, Sequence

from sqlalchemy.orm import Session

from shared.config.constants import (
    ORDER_ITEM_TRANSITIONS,
    ORDER_TRANSITIONS,
    EventType,
    Limits,
    OrderItemStatus,
    OrderStatus,
    is_transition_allowed,
    validate_order_item_status,
    validate_order_status,
)
from shared.config.logging import orders_logger as logger
from shared.config.settings import settings
from shared.infrastructure.db import safe_commit
from shared.utils.exceptions import (
    InvalidStateError,
    InvalidTransitionError,
    MenuItemNotFoundError,
    NotFoundError,
    TableNotFoundError,
    ValidationError,
)
from rest_api.models import Order, OrderItem, Table
from rest_api.models.base import utcnow
from rest_api.repositories import (
    MenuItemRepository,
    OrderItemRepository,
    OrderRepository,
    TableRepository,
    TenantScope,
)
from rest_api.services.base_service import DomainService, iso
from rest_api.services.domain.pricing import PricedLine, compute_order_totals
from rest_api.services.domain.session_service import SessionContext


class CartLineLike(Protocol):
    menu_item_id: int
    qty: int
    notes: str | None


class OrderService(DomainService):
    """
    Domain service for Order and OrderItem operations.

    Status transitions are permissive by default (any known status may follow
    any other). With strict transitions on, the tables in
    shared.config.constants apply.
    """

    def __init__(self, db: Session, strict_transitions: bool | None = None):
        super().__init__(db)
        self._orders = OrderRepository(db)
        self._items = OrderItemRepository(db)
        self._menu = MenuItemRepository(db)
        self._tables = TableRepository(db)
        self._strict = (
            settings.strict_status_transitions if strict_transitions is None else strict_transitions
        )

    # =========================================================================
    # Creation
    # =========================================================================

    def create_order(self, ctx: SessionContext, cart_lines: Sequence[CartLineLike]) -> Order:
        """
        Price a cart and persist it as a PENDING order.

        Raises:
            ValidationError: Empty cart or a quantity below 1.
            MenuItemNotFoundError: Any item missing, inactive or from another restaurant.
        """
        if not cart_lines:
            raise ValidationError("Cart is empty", session_id=ctx.session_id)
        for line in cart_lines:
            if line.qty < Limits.MIN_QUANTITY:
                raise ValidationError(
                    "Quantity must be at least 1",
                    menu_item_id=line.menu_item_id,
                    qty=line.qty,
                )

        scope = ctx.scope
        table = self._tables.find_by_id(scope, ctx.table_id)
        if table is None:
            raise TableNotFoundError(ctx.table_id)

        # Reject the whole cart unless every requested item is orderable here
        requested_ids = {line.menu_item_id for line in cart_lines}
        menu_items = {m.id: m for m in self._menu.find_active_by_ids(scope, list(requested_ids))}
        missing = sorted(requested_ids - set(menu_items))
        if missing:
            raise MenuItemNotFoundError(missing, restaurant_id=ctx.restaurant_id)

        items: list[OrderItem] = []
        priced: list[PricedLine] = []
        for line in cart_lines:
            menu_item = menu_items[line.menu_item_id]
            priced.append(PricedLine(menu_item.price, menu_item.vat_rate, line.qty))
            items.append(
                OrderItem(
                    tenant_id=ctx.tenant_id,
                    restaurant_id=ctx.restaurant_id,
                    menu_item_id=menu_item.id,
                    name=menu_item.name,
                    station=menu_item.station,
                    qty=line.qty,
                    unit_price=menu_item.price,
                    vat_rate=menu_item.vat_rate,
                    notes=line.notes,
                    status=OrderItemStatus.PENDING,
                )
            )

        totals = compute_order_totals(priced)
        order = Order(
            tenant_id=ctx.tenant_id,
            restaurant_id=ctx.restaurant_id,
            table_id=ctx.table_id,
            table_session_id=ctx.session_id,
            status=OrderStatus.PENDING,
            subtotal=totals.subtotal,
            vat_total=totals.vat_total,
            grand_total=totals.grand_total,
            items=items,
        )
        self._orders.add(order)
        safe_commit(self._db)

        order = self._orders.find_by_id(scope, order.id, refresh=True)

        self._emit(
            EventType.ORDER_CREATED,
            ctx.tenant_id,
            ctx.restaurant_id,
            ctx.table_id,
            order_id=order.id,
            table_code=table.code,
            table_name=table.name,
            status=order.status,
            subtotal=str(order.subtotal),
            vat_total=str(order.vat_total),
            grand_total=str(order.grand_total),
            item_count=len(order.items),
            created_at=iso(order.created_at),
            items=[
                {
                    "item_id": item.id,
                    "name": item.name,
                    "qty": item.qty,
                    "notes": item.notes,
                    "station": item.station,
                }
                for item in order.items
            ],
        )

        logger.info(
            "Order created",
            order_id=order.id,
            table_id=ctx.table_id,
            session_id=ctx.session_id,
            grand_total=str(order.grand_total),
        )
        return order

    # =========================================================================
    # Reads
    # =========================================================================

    def get_order(self, scope: TenantScope, order_id: int) -> Order:
        order = self._orders.find_by_id(scope, order_id)
        if order is None:
            raise NotFoundError("Order", order_id)
        return order

    def list_table_orders(self, ctx: SessionContext) -> Sequence[Order]:
        """Orders of the caller's table that are not CLOSED, newest first."""
        return self._orders.list_open_for_table(ctx.scope, ctx.table_id)

    def list_restaurant_orders(
        self,
        scope: TenantScope,
        status: str | None = None,
        limit: int = Limits.DEFAULT_PAGE_SIZE,
    ) -> Sequence[Order]:
        if status is not None and not validate_order_status(status):
            raise InvalidStateError("order", status, OrderStatus.ALL)
        return self._orders.list_for_restaurant(scope, status=status, limit=limit)

    # =========================================================================
    # Status transitions
    # =========================================================================

    def transition_order_status(
        self,
        scope: TenantScope,
        order_id: int,
        new_status: str,
        expected_version: int | None = None,
    ) -> Order:
        """
        Move an order to new_status. CLOSED stamps closed_at; any other status clears it.

        Raises:
            InvalidStateError: new_status is not an order status.
            NotFoundError: Order not in scope.
            RestaurantAccessError: Restaurant not granted by the staff token.
            InvalidTransitionError: Strict mode and the move is not in the table.
            StaleVersionError: expected_version (or the status read) is stale.
        """
        if not validate_order_status(new_status):
            raise InvalidStateError("order", new_status, OrderStatus.ALL)

        order = self.get_order(scope, order_id)
        self._require_restaurant(scope, order.restaurant_id)
        current_status = order.status

        criteria = []
        if self._strict:
            if not is_transition_allowed(ORDER_TRANSITIONS, current_status, new_status):
                raise InvalidTransitionError("order", current_status, new_status, order_id=order_id)
            criteria.append(Order.status == current_status)

        now = utcnow()
        values = {
            "status": new_status,
            "closed_at": now if new_status == OrderStatus.CLOSED else None,
            "updated_at": now,
        }
        if not self._orders.update_versioned(scope, order_id, values, expected_version, *criteria):
            self._db.rollback()
            raise self._stale("Order", self._orders, scope, order_id)
        safe_commit(self._db)

        order = self._orders.find_by_id(scope, order_id, refresh=True)
        table = self._table_for(scope, order.table_id)

        self._emit(
            EventType.ORDER_UPDATED,
            order.tenant_id,
            order.restaurant_id,
            order.table_id,
            order_id=order.id,
            table_code=table.code if table else None,
            previous_status=current_status,
            status=order.status,
            version=order.version,
            closed_at=iso(order.closed_at),
        )

        logger.info(
            "Order status changed",
            order_id=order_id,
            from_status=current_status,
            to_status=new_status,
        )
        return order

    def transition_order_item_status(
        self,
        scope: TenantScope,
        item_id: int,
        new_status: str,
        expected_version: int | None = None,
    ) -> OrderItem:
        """
        Move one order item to new_status.

        Raises:
            InvalidStateError: new_status is not an order item status.
            NotFoundError: Item not in scope.
            RestaurantAccessError: Restaurant not granted by the staff token.
            InvalidTransitionError: Strict mode and the move is not in the table.
            StaleVersionError: expected_version (or the status read) is stale.
        """
        if not validate_order_item_status(new_status):
            raise InvalidStateError("order item", new_status, OrderItemStatus.ALL)

        item = self._items.find_by_id(scope, item_id)
        if item is None:
            raise NotFoundError("OrderItem", item_id)
        self._require_restaurant(scope, item.restaurant_id)
        current_status = item.status

        criteria = []
        if self._strict:
            if not is_transition_allowed(ORDER_ITEM_TRANSITIONS, current_status, new_status):
                raise InvalidTransitionError("order item", current_status, new_status, item_id=item_id)
            criteria.append(OrderItem.status == current_status)

        if not self._items.update_versioned(
            scope, item_id, {"status": new_status}, expected_version, *criteria
        ):
            self._db.rollback()
            raise self._stale("OrderItem", self._items, scope, item_id)
        safe_commit(self._db)

        item = self._items.find_by_id(scope, item_id, refresh=True)
        order = self._orders.find_by_id(scope, item.order_id)
        table = self._table_for(scope, order.table_id) if order else None

        self._emit(
            EventType.ORDER_ITEM_UPDATED,
            item.tenant_id,
            item.restaurant_id,
            order.table_id if order else None,
            order_id=item.order_id,
            item_id=item.id,
            item_name=item.name,
            station=item.station,
            status=item.status,
            version=item.version,
            table_code=table.code if table else None,
        )

        logger.info(
            "Order item status changed",
            item_id=item_id,
            order_id=item.order_id,
            from_status=current_status,
            to_status=new_status,
        )
        return item

    def _table_for(self, scope: TenantScope, table_id: int) -> Table | None:
        return self._tables.find_by_id(scope, table_id)
