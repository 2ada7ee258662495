"""
Domain Event definition.
Immutable value object produced by domain services after a state change.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from shared.config.constants import EventType


@dataclass(frozen=True, slots=True)
class DomainEvent:
    """
    Immutable domain event.

    Services build these while handling a request; routes hand them to the
    realtime notifier once the transaction has committed.

    Attributes:
        event_type: One of EventType.ALL (e.g. "order.created")
        tenant_id: Tenant the change belongs to
        restaurant_id: Restaurant the change belongs to
        table_id: Table involved, when the change concerns one
        payload: JSON-serializable event data sent to subscribers
        timestamp: When the event occurred
    """

    event_type: str
    tenant_id: int
    restaurant_id: int
    table_id: int | None = None
    payload: dict[str, Any] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        if self.event_type not in EventType.ALL:
            raise ValueError(f"Unknown event type: {self.event_type!r}")
        if not isinstance(self.tenant_id, int) or self.tenant_id <= 0:
            raise ValueError("Event tenant_id must be a positive integer")
        if not isinstance(self.restaurant_id, int) or self.restaurant_id <= 0:
            raise ValueError("Event restaurant_id must be a positive integer")
        if self.table_id is not None and (not isinstance(self.table_id, int) or self.table_id <= 0):
            raise ValueError("Event table_id must be a positive integer or None")

    def to_message(self, data: dict[str, Any] | None = None) -> dict[str, Any]:
        """
        Build the wire message sent to WebSocket clients.

        `data` replaces the payload when a group gets a tailored view
        (kitchen stations only see their own items).
        """
        return {
            "event": self.event_type,
            "data": dict(self.payload if data is None else data),
            "ts": self.timestamp.isoformat(),
        }
