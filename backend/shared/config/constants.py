"""
Centralized constants for the backend application.
Avoid magic strings and repeated constants.

Usage:
    from shared.config.constants import Roles, OrderStatus

    if role in MANAGEMENT_ROLES:
        ...

    if status == OrderStatus.PENDING:
        ...
"""

from typing import Final


# =============================================================================
# User Roles
# =============================================================================


class Roles:
    """User role constants."""

    ADMIN: Final[str] = "ADMIN"
    CHEF: Final[str] = "CHEF"
    WAITER: Final[str] = "WAITER"
    CASHIER: Final[str] = "CASHIER"

    ALL: Final[list[str]] = [ADMIN, CHEF, WAITER, CASHIER]


# Role groups for common access patterns
MANAGEMENT_ROLES: Final[frozenset[str]] = frozenset({Roles.ADMIN})
FLOOR_ROLES: Final[frozenset[str]] = frozenset({Roles.ADMIN, Roles.WAITER, Roles.CASHIER})
ALL_STAFF_ROLES: Final[frozenset[str]] = frozenset(Roles.ALL)


# =============================================================================
# Entity Status Constants
# =============================================================================


class OrderStatus:
    """Order status constants."""

    PENDING: Final[str] = "PENDING"
    IN_PROGRESS: Final[str] = "IN_PROGRESS"
    READY: Final[str] = "READY"
    SERVED: Final[str] = "SERVED"
    CLOSED: Final[str] = "CLOSED"
    CANCELLED: Final[str] = "CANCELLED"

    ALL: Final[list[str]] = [PENDING, IN_PROGRESS, READY, SERVED, CLOSED, CANCELLED]


class OrderItemStatus:
    """Order item (kitchen line) status constants."""

    PENDING: Final[str] = "PENDING"
    FIRED: Final[str] = "FIRED"
    IN_PROGRESS: Final[str] = "IN_PROGRESS"
    READY: Final[str] = "READY"
    SERVED: Final[str] = "SERVED"

    ALL: Final[list[str]] = [PENDING, FIRED, IN_PROGRESS, READY, SERVED]


class WaiterCallType:
    """Waiter call type constants."""

    CALL_WAITER: Final[str] = "CALL_WAITER"
    REQUEST_BILL: Final[str] = "REQUEST_BILL"

    ALL: Final[list[str]] = [CALL_WAITER, REQUEST_BILL]


class WaiterCallStatus:
    """Waiter call status constants."""

    PENDING: Final[str] = "PENDING"
    ACKNOWLEDGED: Final[str] = "ACKNOWLEDGED"
    COMPLETED: Final[str] = "COMPLETED"
    CANCELLED: Final[str] = "CANCELLED"

    ALL: Final[list[str]] = [PENDING, ACKNOWLEDGED, COMPLETED, CANCELLED]
    OPEN: Final[list[str]] = [PENDING, ACKNOWLEDGED]


class Stations:
    """Kitchen preparation stations."""

    HOT: Final[str] = "HOT"
    COLD: Final[str] = "COLD"
    BAR: Final[str] = "BAR"

    DEFAULT: Final[str] = HOT


# =============================================================================
# Status Transitions
# =============================================================================

# Enforced only when settings.strict_status_transitions is enabled.
# PENDING → IN_PROGRESS → READY → SERVED → CLOSED, CANCELLED from any non-terminal state
ORDER_TRANSITIONS: Final[dict[str, list[str]]] = {
    OrderStatus.PENDING: [OrderStatus.IN_PROGRESS, OrderStatus.CANCELLED],
    OrderStatus.IN_PROGRESS: [OrderStatus.READY, OrderStatus.CANCELLED],
    OrderStatus.READY: [OrderStatus.SERVED, OrderStatus.CANCELLED],
    OrderStatus.SERVED: [OrderStatus.CLOSED, OrderStatus.CANCELLED],
    OrderStatus.CLOSED: [],  # Terminal state
    OrderStatus.CANCELLED: [],  # Terminal state
}

ORDER_ITEM_TRANSITIONS: Final[dict[str, list[str]]] = {
    OrderItemStatus.PENDING: [OrderItemStatus.FIRED],
    OrderItemStatus.FIRED: [OrderItemStatus.IN_PROGRESS],
    OrderItemStatus.IN_PROGRESS: [OrderItemStatus.READY],
    OrderItemStatus.READY: [OrderItemStatus.SERVED],
    OrderItemStatus.SERVED: [],  # Terminal state
}

WAITER_CALL_TRANSITIONS: Final[dict[str, list[str]]] = {
    WaiterCallStatus.PENDING: [WaiterCallStatus.ACKNOWLEDGED, WaiterCallStatus.CANCELLED],
    WaiterCallStatus.ACKNOWLEDGED: [WaiterCallStatus.COMPLETED, WaiterCallStatus.CANCELLED],
    WaiterCallStatus.COMPLETED: [WaiterCallStatus.CANCELLED],
    WaiterCallStatus.CANCELLED: [],  # Terminal state
}


# =============================================================================
# Validation Constants
# =============================================================================


class Limits:
    """Validation limits."""

    # Quantity limits
    MIN_QUANTITY: Final[int] = 1
    MAX_QUANTITY: Final[int] = 99

    # String lengths
    MAX_NAME_LENGTH: Final[int] = 200
    MAX_NOTES_LENGTH: Final[int] = 500

    # Pagination defaults
    DEFAULT_PAGE_SIZE: Final[int] = 50
    MAX_PAGE_SIZE: Final[int] = 200


# =============================================================================
# Event Types (for WebSocket fan-out)
# =============================================================================


class EventType:
    """Realtime event type constants."""

    ORDER_CREATED: Final[str] = "order.created"
    ORDER_UPDATED: Final[str] = "order.updated"
    ORDER_ITEM_UPDATED: Final[str] = "orderitem.updated"

    WAITER_CALL_CREATED: Final[str] = "waiter.call.created"
    WAITER_CALL_UPDATED: Final[str] = "waiter.call.updated"
    WAITER_CALL_DELETED: Final[str] = "waiter.call.deleted"

    ALL: Final[list[str]] = [
        ORDER_CREATED,
        ORDER_UPDATED,
        ORDER_ITEM_UPDATED,
        WAITER_CALL_CREATED,
        WAITER_CALL_UPDATED,
        WAITER_CALL_DELETED,
    ]


# =============================================================================
# Status Validation Functions
# =============================================================================


def validate_order_status(status: str) -> bool:
    """Validate that an order status is valid."""
    return status in OrderStatus.ALL


def validate_order_item_status(status: str) -> bool:
    """Validate that an order item status is valid."""
    return status in OrderItemStatus.ALL


def validate_waiter_call_status(status: str) -> bool:
    """Validate that a waiter call status is valid."""
    return status in WaiterCallStatus.ALL


def is_transition_allowed(
    transitions: dict[str, list[str]], current_status: str, new_status: str
) -> bool:
    """
    Check a transition against one of the tables above.

    Re-applying the current status is always accepted.
    """
    if current_status == new_status:
        return True
    return new_status in transitions.get(current_status, [])
