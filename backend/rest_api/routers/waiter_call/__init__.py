"""
Waiter call routers - /api/waiter-call/*
"""

from .routes import router

__all__ = ["router"]
