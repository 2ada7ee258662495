"""
Public menu routers - /api/menu/*
No authentication required.
"""

from .routes import router

__all__ = ["router"]
