"""
Base class for domain services.

Architecture:
    Router (thin) → Service (business logic) → Repository (data access) → Model

Services commit their own unit of work and collect the DomainEvents it
produced in `events`. Routers hand those to the realtime notifier after the
service returns, so nothing is announced for a rolled-back change.

Usage:
    service = OrderService(db)
    order = service.create_order(ctx, body.items)
    schedule_events(background_tasks, service.events)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy.orm import Session

from shared.infrastructure.events import DomainEvent
from shared.utils.exceptions import AppException, NotFoundError, RestaurantAccessError, StaleVersionError

if TYPE_CHECKING:
    from rest_api.repositories import ScopedRepository, TenantScope


class DomainService:
    """Holds the DB session and the events emitted by the last operations."""

    def __init__(self, db: Session):
        self._db = db
        self.events: list[DomainEvent] = []

    def _emit(
        self,
        event_type: str,
        tenant_id: int,
        restaurant_id: int,
        table_id: int | None = None,
        /,
        **payload: Any,
    ) -> DomainEvent:
        # Positional-only so payloads may carry their own "table_id" key
        event = DomainEvent(
            event_type=event_type,
            tenant_id=tenant_id,
            restaurant_id=restaurant_id,
            table_id=table_id,
            payload=payload,
        )
        self.events.append(event)
        return event

    def _require_restaurant(self, scope: TenantScope, restaurant_id: int) -> None:
        """Reject changes to rows of a restaurant the caller's token does not grant."""
        if not scope.permits(restaurant_id):
            raise RestaurantAccessError(restaurant_id, tenant_id=scope.tenant_id)

    @staticmethod
    def _stale(
        entity: str, repository: ScopedRepository, scope: TenantScope, entity_id: int
    ) -> AppException:
        """
        Error for a rejected versioned update. Call after rolling back: the
        row is re-read so the 409 carries the version to retry with.
        """
        current = repository.find_by_id(scope, entity_id, refresh=True)
        if current is None:
            return NotFoundError(entity, entity_id)
        return StaleVersionError(entity, entity_id, current.version)


def iso(value) -> str | None:
    """ISO-8601 string for event payloads (None stays None)."""
    return value.isoformat() if value is not None else None
