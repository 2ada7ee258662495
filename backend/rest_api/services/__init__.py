"""
Services module for business logic.

CLEAN ARCHITECTURE:
- domain/: Application services (business logic) - USE THESE
- base_service.py: DomainService base class (DB session + collected events)

Usage:
    from rest_api.services.domain import OrderService
    service = OrderService(db)
    order = service.create_order(ctx, body.items)
"""

from .base_service import DomainService
from .domain import (
    OrderService,
    SessionService,
    StaffService,
    VenueService,
    WaiterCallService,
)

__all__ = [
    "DomainService",
    "OrderService",
    "SessionService",
    "StaffService",
    "VenueService",
    "WaiterCallService",
]
