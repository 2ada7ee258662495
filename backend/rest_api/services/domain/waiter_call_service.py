"""
Waiter Call Domain Service.

Creates, deduplicates, assigns and transitions waiter calls.
"""

from __future__ import annotations

import hashlib
from typing import Sequence

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from shared.config.constants import (
    WAITER_CALL_TRANSITIONS,
    EventType,
    WaiterCallStatus,
    WaiterCallType,
    is_transition_allowed,
    validate_waiter_call_status,
)
from shared.config.logging import waiter_logger as logger
from shared.config.settings import settings
from shared.infrastructure.db import safe_commit
from shared.utils.exceptions import (
    DuplicateCallError,
    InvalidStateError,
    InvalidTransitionError,
    NotFoundError,
    TableNotFoundError,
    ValidationError,
)
from rest_api.models import Table, User, WaiterCall
from rest_api.models.base import utcnow
from rest_api.repositories import (
    TableRepository,
    TenantScope,
    UserRepository,
    WaiterCallRepository,
)
from rest_api.services.base_service import DomainService, iso


def pick_waiter(call_id: int, waiters: Sequence[User]) -> User | None:
    """
    Choose a waiter for a call.

    Stateless pseudo-round-robin: the call id is hashed and reduced modulo the
    number of waiters. Over many calls each waiter gets roughly the same
    share, but consecutive calls may land on the same person.
    """
    if not waiters:
        return None
    digest = hashlib.sha256(str(call_id).encode("utf-8")).hexdigest()
    return waiters[int(digest, 16) % len(waiters)]


class WaiterCallService(DomainService):
    """
    Domain service for WaiterCall operations.

    A table may hold at most one PENDING call per type; a second request is
    reported as a conflict carrying the existing call's id.
    """

    def __init__(self, db: Session, strict_transitions: bool | None = None):
        super().__init__(db)
        self._calls = WaiterCallRepository(db)
        self._tables = TableRepository(db)
        self._users = UserRepository(db)
        self._strict = (
            settings.strict_status_transitions if strict_transitions is None else strict_transitions
        )

    def create_call(
        self,
        scope: TenantScope,
        table_id: int,
        call_type: str,
        note: str | None = None,
    ) -> WaiterCall:
        """
        Create a PENDING call and assign it to a waiter of the tenant.

        Raises:
            ValidationError: Unknown call type.
            TableNotFoundError: Table not in scope.
            DuplicateCallError: A PENDING call of this type already exists for the table.
        """
        if call_type not in WaiterCallType.ALL:
            raise ValidationError(
                f"Invalid call type '{call_type}'", call_type=call_type
            )

        table = self._tables.find_by_id(scope, table_id)
        if table is None:
            raise TableNotFoundError(table_id)

        existing = self._calls.find_pending(scope, table_id, call_type)
        if existing is not None:
            raise DuplicateCallError(existing.id, table_id=table_id, call_type=call_type)

        call = WaiterCall(
            tenant_id=table.tenant_id,
            restaurant_id=table.restaurant_id,
            table_id=table_id,
            type=call_type,
            note=note,
            status=WaiterCallStatus.PENDING,
        )
        self._calls.add(call)
        try:
            # Flush first: assignment is derived from the new id
            self._db.flush()
        except IntegrityError:
            self._db.rollback()
            existing = self._calls.find_pending(scope, table_id, call_type)
            raise DuplicateCallError(
                existing.id if existing else 0, table_id=table_id, call_type=call_type
            )

        waiter = pick_waiter(call.id, self._users.list_active_waiters(TenantScope(table.tenant_id)))
        call.assigned_waiter_id = waiter.id if waiter else None
        safe_commit(self._db)
        self._db.refresh(call)

        self._emit(
            EventType.WAITER_CALL_CREATED,
            call.tenant_id,
            call.restaurant_id,
            call.table_id,
            **self._payload(call, table),
        )

        logger.info(
            "Waiter call created",
            call_id=call.id,
            table_id=table_id,
            type=call_type,
            assigned_waiter_id=call.assigned_waiter_id,
        )
        return call

    def list_calls(
        self, scope: TenantScope, statuses: Sequence[str] | None = None
    ) -> Sequence[WaiterCall]:
        """Calls in the given statuses (default: PENDING and ACKNOWLEDGED), oldest first."""
        statuses = list(statuses) if statuses else WaiterCallStatus.OPEN
        for status in statuses:
            if not validate_waiter_call_status(status):
                raise InvalidStateError("waiter call", status, WaiterCallStatus.ALL)
        return self._calls.list_by_status(scope, statuses)

    def transition_call_status(
        self,
        scope: TenantScope,
        call_id: int,
        new_status: str,
        expected_version: int | None = None,
    ) -> WaiterCall:
        """
        Move a call to new_status. ACKNOWLEDGED stamps acknowledged_at,
        COMPLETED stamps completed_at.

        Raises:
            InvalidStateError: Unknown status.
            NotFoundError: Call not in scope.
            RestaurantAccessError: Restaurant not granted by the staff token.
            InvalidTransitionError: Strict mode and the move is not in the table.
            StaleVersionError: expected_version (or the status read) is stale.
        """
        if not validate_waiter_call_status(new_status):
            raise InvalidStateError("waiter call", new_status, WaiterCallStatus.ALL)

        call = self._calls.find_by_id(scope, call_id)
        if call is None:
            raise NotFoundError("WaiterCall", call_id)
        self._require_restaurant(scope, call.restaurant_id)
        current_status = call.status

        criteria = []
        if self._strict:
            if not is_transition_allowed(WAITER_CALL_TRANSITIONS, current_status, new_status):
                raise InvalidTransitionError("waiter call", current_status, new_status, call_id=call_id)
            criteria.append(WaiterCall.status == current_status)

        now = utcnow()
        values: dict = {"status": new_status, "updated_at": now}
        if new_status == WaiterCallStatus.ACKNOWLEDGED:
            values["acknowledged_at"] = now
        elif new_status == WaiterCallStatus.COMPLETED:
            values["completed_at"] = now

        if not self._calls.update_versioned(scope, call_id, values, expected_version, *criteria):
            self._db.rollback()
            raise self._stale("WaiterCall", self._calls, scope, call_id)
        safe_commit(self._db)

        call = self._calls.find_by_id(scope, call_id, refresh=True)
        table = self._tables.find_by_id(scope, call.table_id)

        self._emit(
            EventType.WAITER_CALL_UPDATED,
            call.tenant_id,
            call.restaurant_id,
            call.table_id,
            previous_status=current_status,
            **self._payload(call, table),
        )

        logger.info(
            "Waiter call status changed",
            call_id=call_id,
            from_status=current_status,
            to_status=new_status,
        )
        return call

    def delete_call(self, scope: TenantScope, call_id: int) -> None:
        """
        Hard-delete a call.

        Raises:
            NotFoundError: Call not in scope.
            RestaurantAccessError: Restaurant not granted by the staff token.
        """
        call = self._calls.find_by_id(scope, call_id)
        if call is None:
            raise NotFoundError("WaiterCall", call_id)
        self._require_restaurant(scope, call.restaurant_id)

        tenant_id, restaurant_id, table_id = call.tenant_id, call.restaurant_id, call.table_id
        self._calls.delete(call)
        safe_commit(self._db)

        self._emit(
            EventType.WAITER_CALL_DELETED,
            tenant_id,
            restaurant_id,
            table_id,
            call_id=call_id,
            table_id=table_id,
        )
        logger.info("Waiter call deleted", call_id=call_id, table_id=table_id)

    @staticmethod
    def _payload(call: WaiterCall, table: Table | None) -> dict:
        return {
            "call_id": call.id,
            "table_id": call.table_id,
            "table_code": table.code if table else None,
            "table_name": table.name if table else None,
            "type": call.type,
            "note": call.note,
            "status": call.status,
            "assigned_waiter_id": call.assigned_waiter_id,
            "version": call.version,
            "created_at": iso(call.created_at),
            "acknowledged_at": iso(call.acknowledged_at),
            "completed_at": iso(call.completed_at),
        }
