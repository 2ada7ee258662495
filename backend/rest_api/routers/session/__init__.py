"""
Table session routers - /api/session/*
QR scan entry point, session close and QR link lookup.
"""

from .routes import router

__all__ = ["router"]
