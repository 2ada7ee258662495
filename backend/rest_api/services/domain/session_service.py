"""
Table Session Domain Service.

Turns a QR scan into an authenticated table session and validates the
resulting table credential on every diner request.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from shared.config.logging import session_logger as logger
from shared.config.settings import settings
from shared.infrastructure.db import safe_commit
from shared.security.auth import sign_table_token, verify_table_token
from shared.utils.exceptions import (
    ConflictError,
    NotFoundError,
    TableNotFoundError,
    UnauthorizedError,
)
from rest_api.models import Restaurant, Table, TableSession
from rest_api.models.base import utcnow
from rest_api.repositories import (
    RestaurantRepository,
    TableRepository,
    TableSessionRepository,
    TenantScope,
)
from rest_api.services.base_service import DomainService


@dataclass(frozen=True, slots=True)
class SessionHandle:
    """Result of opening a session: the credential plus what it was issued for."""

    session_id: int
    token: str
    expires_at: datetime
    table: Table
    restaurant: Restaurant


@dataclass(frozen=True, slots=True)
class SessionContext:
    """Who a valid table credential speaks for."""

    tenant_id: int
    restaurant_id: int
    table_id: int
    session_id: int

    @property
    def scope(self) -> TenantScope:
        return TenantScope(tenant_id=self.tenant_id, restaurant_id=self.restaurant_id)


class SessionService(DomainService):
    """
    Domain service for TableSession operations.

    Invariant: at most one active session per table. Opening a session
    deactivates the previous one in the same transaction, and a partial
    unique index rejects whatever slips past under concurrency.
    """

    def __init__(self, db: Session):
        super().__init__(db)
        self._tables = TableRepository(db)
        self._sessions = TableSessionRepository(db)
        self._restaurants = RestaurantRepository(db)

    def open_session(self, tenant_id: int, restaurant_id: int, table_id: int) -> SessionHandle:
        """
        Open a fresh session on a table, superseding any active one.

        Raises:
            NotFoundError: Restaurant or table missing, inactive, or in another tenant.
            ConflictError: A concurrent open won the race for this table.
        """
        scope = TenantScope(tenant_id=tenant_id, restaurant_id=restaurant_id)

        restaurant = self._restaurants.find_by_id(
            scope, restaurant_id, Restaurant.is_active.is_(True)
        )
        if restaurant is None:
            raise NotFoundError("Restaurant", restaurant_id, tenant_id=tenant_id)

        # Lock the table row so concurrent opens on it serialize
        table = self._tables.find_active(scope, table_id, for_update=True)
        if table is None:
            raise TableNotFoundError(table_id, tenant_id=tenant_id, restaurant_id=restaurant_id)

        now = utcnow()
        try:
            superseded = self._sessions.deactivate_for_table(scope, table_id, now)
            session = TableSession(
                tenant_id=tenant_id,
                restaurant_id=restaurant_id,
                table_id=table_id,
                session_token=str(uuid.uuid4()),
                active=True,
                opened_at=now,
            )
            self._sessions.add(session)
            self._db.flush()
            safe_commit(self._db)
        except IntegrityError:
            self._db.rollback()
            raise ConflictError(
                "Another session was opened for this table at the same time",
                table_id=table_id,
            )

        token, expires_at = sign_table_token(
            tenant_id=tenant_id,
            restaurant_id=restaurant_id,
            table_id=table_id,
            session_id=session.id,
            session_token=session.session_token,
        )

        logger.info(
            "Table session opened",
            session_id=session.id,
            table_id=table_id,
            restaurant_id=restaurant_id,
            superseded=superseded,
        )

        return SessionHandle(
            session_id=session.id,
            token=token,
            expires_at=expires_at,
            table=table,
            restaurant=restaurant,
        )

    def validate_credential(self, token: str) -> SessionContext:
        """
        Resolve a table credential to its session context.

        Raises:
            UnauthorizedError: Bad signature, expired, or the session is no longer active.
        """
        claims = verify_table_token(token)
        scope = TenantScope(tenant_id=claims["tenant_id"], restaurant_id=claims["restaurant_id"])

        session = self._sessions.find_active_by_token(scope, claims["session_id"], claims["jti"])
        if session is None or session.table_id != claims["table_id"]:
            raise UnauthorizedError(
                "Table session is no longer active",
                session_id=claims["session_id"],
            )

        return SessionContext(
            tenant_id=session.tenant_id,
            restaurant_id=session.restaurant_id,
            table_id=session.table_id,
            session_id=session.id,
        )

    def close_session(
        self, session_id: int, scope: TenantScope, table_id: int | None = None
    ) -> TableSession:
        """
        Close a session. Idempotent: closing an inactive session changes nothing.

        Raises:
            NotFoundError: Session not in scope (or not on table_id when given).
        """
        session = self._sessions.find_by_id(scope, session_id)
        if session is None or (table_id is not None and session.table_id != table_id):
            raise NotFoundError("TableSession", session_id)

        if session.active:
            session.active = False
            session.closed_at = utcnow()
            safe_commit(self._db)
            self._db.refresh(session)
            logger.info("Table session closed", session_id=session_id, table_id=session.table_id)

        return session

    def table_link(self, scope: TenantScope, table_id: int) -> tuple[Table, str]:
        """
        URL encoded in a table's QR code.

        Raises:
            NotFoundError: Table not in scope.
        """
        table = self._tables.find_by_id(scope, table_id)
        if table is None:
            raise TableNotFoundError(table_id)
        base = settings.frontend_url.rstrip("/")
        url = f"{base}/menu/{table.tenant_id}/{table.restaurant_id}/{table.id}"
        return table, url
