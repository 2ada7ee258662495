"""
Table Repositories - Data access for tables and table sessions.
"""

from datetime import datetime
from typing import Sequence

from sqlalchemy import update

from rest_api.models import Table, TableSession
from .base import ScopedRepository, TenantScope


class TableRepository(ScopedRepository[Table]):
    """Repository for Table entities."""

    model = Table

    def find_active(
        self, scope: TenantScope, table_id: int, for_update: bool = False
    ) -> Table | None:
        """Active table inside the scope, optionally row-locked."""
        return self.find_by_id(
            scope, table_id, Table.is_active.is_(True), for_update=for_update
        )

    def find_by_code(self, scope: TenantScope, code: str) -> Table | None:
        return self._db.scalar(self._select(scope).where(Table.code == code))

    def list_for_restaurant(self, scope: TenantScope) -> Sequence[Table]:
        return self.find_all(scope, order_by=(Table.code,))


class TableSessionRepository(ScopedRepository[TableSession]):
    """Repository for TableSession entities."""

    model = TableSession

    def deactivate_for_table(
        self, scope: TenantScope, table_id: int, closed_at: datetime
    ) -> int:
        """Mark every active session of the table inactive. Returns rows touched."""
        stmt = (
            update(TableSession)
            .where(
                TableSession.table_id == table_id,
                TableSession.active.is_(True),
                *self._scope_criteria(scope),
            )
            .values(active=False, closed_at=closed_at)
            .execution_options(synchronize_session=False)
        )
        return self._db.execute(stmt).rowcount

    def find_active_by_token(
        self, scope: TenantScope, session_id: int, session_token: str
    ) -> TableSession | None:
        """The session a credential points at, if it is still active."""
        return self.find_by_id(
            scope,
            session_id,
            TableSession.session_token == session_token,
            TableSession.active.is_(True),
        )
