"""
Order routers - /api/orders/*
Diners create and read orders with a table token; staff move them through
the kitchen workflow with a JWT.
"""

from .routes import router

__all__ = ["router"]
