"""
Infrastructure module: database sessions and domain events.

Provides:
- Database engine and sessions (db.py)
- Request correlation IDs (correlation.py)
- Domain events and group naming (events/)
"""

from shared.infrastructure.db import (
    build_engine,
    engine,
    SessionLocal,
    get_db,
    get_db_context,
    safe_commit,
)

__all__ = [
    "build_engine",
    "engine",
    "SessionLocal",
    "get_db",
    "get_db_context",
    "safe_commit",
]
