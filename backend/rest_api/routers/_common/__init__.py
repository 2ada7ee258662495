"""
Common dependencies shared across routers.
"""

from .context import (
    schedule_events,
    schedule_table_revocation,
    staff_scope,
    table_session_context,
    user_id,
)

__all__ = [
    "schedule_events",
    "schedule_table_revocation",
    "staff_scope",
    "table_session_context",
    "user_id",
]
