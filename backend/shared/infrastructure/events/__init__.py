"""
Domain events and subscription group naming for realtime notifications.

- domain_event.py: DomainEvent value object
- channels.py: group name builders (table, kitchen, restaurant, waiter)

Delivery lives in ws_gateway; this package only describes what happened and
who may listen.
"""

from .channels import (
    group_kitchen,
    group_restaurant,
    group_table,
    group_waiter,
    normalize_station,
)
from .domain_event import DomainEvent

__all__ = [
    "DomainEvent",
    "group_kitchen",
    "group_restaurant",
    "group_table",
    "group_waiter",
    "normalize_station",
]
