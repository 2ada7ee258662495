"""
Domain Services - application layer.

Services contain business logic and orchestrate operations.
They use Repositories for data access and emit domain events.

Structure:
    Router (thin controller)
        ↓
    Service (business logic)  ← YOU ARE HERE
        ↓
    Repository (data access)
        ↓
    Model (entity)

Usage:
    from rest_api.services.domain import OrderService

    service = OrderService(db)
    order = service.create_order(ctx, body.items)
"""

from .pricing import OrderTotals, PricedLine, compute_order_totals
from .session_service import SessionContext, SessionHandle, SessionService
from .order_service import OrderService
from .waiter_call_service import WaiterCallService, pick_waiter
from .staff_service import StaffService
from .venue_service import VenueService

__all__ = [
    "OrderTotals",
    "PricedLine",
    "compute_order_totals",
    "SessionContext",
    "SessionHandle",
    "SessionService",
    "OrderService",
    "WaiterCallService",
    "pick_waiter",
    "StaffService",
    "VenueService",
]
