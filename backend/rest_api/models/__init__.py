"""
SQLAlchemy ORM Models Package.

All models are organized into domain-specific modules:
- base: Base class and mixins
- tenant: Tenant, Restaurant
- user: User
- catalog: MenuCategory, MenuItem
- table: Table, TableSession
- order: Order, OrderItem
- waiter_call: WaiterCall
"""

# Base classes
from .base import Base, TimestampMixin, VersionedMixin

# Core tenant models
from .tenant import Tenant, Restaurant

# Staff
from .user import User

# Menu
from .catalog import MenuCategory, MenuItem

# Tables and sessions
from .table import Table, TableSession

# Orders
from .order import Order, OrderItem

# Waiter calls
from .waiter_call import WaiterCall

__all__ = [
    "Base",
    "TimestampMixin",
    "VersionedMixin",
    "Tenant",
    "Restaurant",
    "User",
    "MenuCategory",
    "MenuItem",
    "Table",
    "TableSession",
    "Order",
    "OrderItem",
    "WaiterCall",
]
