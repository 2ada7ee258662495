"""
Event Router - decides which groups receive a DomainEvent.

Routing is a pure function of the event, so it is tested without sockets:

    router = EventRouter()
    for group, message in router.route(event):
        ...

Routing table:
- order.created: restaurant + one kitchen group per station in the order,
  each kitchen seeing only its own items
- order.updated: restaurant + table
- orderitem.updated: restaurant
- waiter.call.created: restaurant + assigned waiter (priority)
- waiter.call.updated: restaurant, + table once COMPLETED
- waiter.call.deleted: restaurant
"""

from __future__ import annotations

from typing import Any, NamedTuple

from shared.config.constants import EventType, WaiterCallStatus
from shared.config.logging import ws_gateway_logger as logger
from shared.infrastructure.events import (
    DomainEvent,
    group_kitchen,
    group_restaurant,
    group_table,
    group_waiter,
)


class RoutedMessage(NamedTuple):
    """One message for one group."""

    group: str
    message: dict[str, Any]


class EventRouter:
    """Maps domain events to (group, message) pairs."""

    def route(self, event: DomainEvent) -> list[RoutedMessage]:
        handler = {
            EventType.ORDER_CREATED: self._order_created,
            EventType.ORDER_UPDATED: self._order_updated,
            EventType.ORDER_ITEM_UPDATED: self._restaurant_only,
            EventType.WAITER_CALL_CREATED: self._waiter_call_created,
            EventType.WAITER_CALL_UPDATED: self._waiter_call_updated,
            EventType.WAITER_CALL_DELETED: self._restaurant_only,
        }.get(event.event_type)

        if handler is None:
            logger.warning("No route for event type", event_type=event.event_type)
            return []
        return handler(event)

    def _restaurant_only(self, event: DomainEvent) -> list[RoutedMessage]:
        return [RoutedMessage(group_restaurant(event.restaurant_id), event.to_message())]

    def _order_created(self, event: DomainEvent) -> list[RoutedMessage]:
        routed = self._restaurant_only(event)

        by_station: dict[str, list[dict[str, Any]]] = {}
        for item in event.payload.get("items", []):
            try:
                group = group_kitchen(event.restaurant_id, item.get("station", ""))
            except ValueError:
                logger.warning(
                    "Order item has unusable station",
                    order_id=event.payload.get("order_id"),
                    station=item.get("station"),
                )
                continue
            by_station.setdefault(group, []).append(item)

        for group, items in by_station.items():
            data = {
                **event.payload,
                "station": items[0]["station"].upper(),
                "items": items,
                "item_count": len(items),
            }
            routed.append(RoutedMessage(group, event.to_message(data)))
        return routed

    def _order_updated(self, event: DomainEvent) -> list[RoutedMessage]:
        routed = self._restaurant_only(event)
        table = self._table_group(event)
        if table:
            routed.append(RoutedMessage(table, event.to_message()))
        return routed

    def _waiter_call_created(self, event: DomainEvent) -> list[RoutedMessage]:
        routed = self._restaurant_only(event)
        waiter_id = event.payload.get("assigned_waiter_id")
        if waiter_id:
            data = {**event.payload, "priority": True}
            routed.append(RoutedMessage(group_waiter(waiter_id), event.to_message(data)))
        return routed

    def _waiter_call_updated(self, event: DomainEvent) -> list[RoutedMessage]:
        routed = self._restaurant_only(event)
        if event.payload.get("status") == WaiterCallStatus.COMPLETED:
            table = self._table_group(event)
            if table:
                routed.append(RoutedMessage(table, event.to_message()))
        return routed

    @staticmethod
    def _table_group(event: DomainEvent) -> str | None:
        if event.table_id is None:
            return None
        return group_table(event.tenant_id, event.restaurant_id, event.table_id)
