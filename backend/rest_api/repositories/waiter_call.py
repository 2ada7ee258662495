"""
Waiter Call Repository - Data access for waiter calls.
"""

from typing import Sequence

from rest_api.models import WaiterCall
from shared.config.constants import WaiterCallStatus
from .base import ScopedRepository, TenantScope


class WaiterCallRepository(ScopedRepository[WaiterCall]):
    """Repository for WaiterCall entities."""

    model = WaiterCall

    def find_pending(self, scope: TenantScope, table_id: int, call_type: str) -> WaiterCall | None:
        """The PENDING call of this type for the table, if any."""
        return self._db.scalar(
            self._select(scope).where(
                WaiterCall.table_id == table_id,
                WaiterCall.type == call_type,
                WaiterCall.status == WaiterCallStatus.PENDING,
            )
        )

    def list_by_status(self, scope: TenantScope, statuses: Sequence[str]) -> Sequence[WaiterCall]:
        """Calls in any of the statuses, oldest first."""
        return self.find_all(
            scope,
            WaiterCall.status.in_(list(statuses)),
            order_by=(WaiterCall.created_at, WaiterCall.id),
        )
