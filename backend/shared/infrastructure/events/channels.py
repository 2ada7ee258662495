"""
Subscription group naming.

A group is the unit of fan-out for realtime notifications. Names are plain
strings so they can be logged, compared and sent back to clients as-is.
"""

from __future__ import annotations

import re

_STATION_RE = re.compile(r"^[A-Z][A-Z0-9_]{0,31}$")


def _validate_positive_id(id_value: int, name: str) -> None:
    """Validate that an ID is a positive integer."""
    if isinstance(id_value, bool) or not isinstance(id_value, int) or id_value <= 0:
        raise ValueError(f"{name} must be a positive integer, got {id_value!r}")


def normalize_station(station: str) -> str:
    """Upper-case a station name and check it is usable inside a group name."""
    normalized = (station or "").strip().upper()
    if not _STATION_RE.match(normalized):
        raise ValueError(f"Invalid station name: {station!r}")
    return normalized


def group_table(tenant_id: int, restaurant_id: int, table_id: int) -> str:
    """Group for everyone watching one table (diners and staff)."""
    _validate_positive_id(tenant_id, "tenant_id")
    _validate_positive_id(restaurant_id, "restaurant_id")
    _validate_positive_id(table_id, "table_id")
    return f"table:{tenant_id}:{restaurant_id}:{table_id}"


def group_kitchen(restaurant_id: int, station: str) -> str:
    """Group for one kitchen preparation station."""
    _validate_positive_id(restaurant_id, "restaurant_id")
    return f"kitchen:{restaurant_id}:{normalize_station(station)}"


def group_restaurant(restaurant_id: int) -> str:
    """Group for restaurant-wide staff dashboards."""
    _validate_positive_id(restaurant_id, "restaurant_id")
    return f"restaurant:{restaurant_id}"


def group_waiter(user_id: int) -> str:
    """Group for direct notifications to one waiter."""
    _validate_positive_id(user_id, "user_id")
    return f"waiter:{user_id}"
