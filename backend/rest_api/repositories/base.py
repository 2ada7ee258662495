"""
Base Repository implementation.
Provides common data access patterns with mandatory tenant isolation.

Every query goes through a TenantScope. Restaurant-scoped models are also
filtered by restaurant when the scope names one. Rows outside the scope are
indistinguishable from missing rows.
"""

from dataclasses import dataclass
from typing import Any, ClassVar, Generic, Sequence, TypeVar

from sqlalchemy import Select, select, update
from sqlalchemy.orm import Session

from shared.config.constants import Limits
from shared.utils.exceptions import ScopeRequiredError


ModelT = TypeVar("ModelT")


@dataclass(frozen=True, slots=True)
class TenantScope:
    """
    Tenant (and optionally restaurant) a call is allowed to touch.

    Built from the caller's credential: the staff JWT or the table credential.
    A staff scope also carries the restaurants its token grants; services
    check rows they are about to change against it (403, not 404).
    """

    tenant_id: int
    restaurant_id: int | None = None
    # None: no restriction beyond the tenant
    allowed_restaurant_ids: frozenset[int] | None = None

    def for_restaurant(self, restaurant_id: int) -> "TenantScope":
        """Narrow a tenant-wide scope to one restaurant."""
        return TenantScope(self.tenant_id, restaurant_id, self.allowed_restaurant_ids)

    def permits(self, restaurant_id: int) -> bool:
        return self.allowed_restaurant_ids is None or restaurant_id in self.allowed_restaurant_ids


class ScopedRepository(Generic[ModelT]):
    """
    Base repository for tenant-owned models.

    Subclasses set `model` and add entity-specific finders built on
    `_select(scope)`.
    """

    model: ClassVar[type]

    def __init__(self, db: Session):
        self._db = db

    # -------------------------------------------------------------------------
    # Scope
    # -------------------------------------------------------------------------

    def _scope_criteria(self, scope: TenantScope | None) -> list[Any]:
        if scope is None or not isinstance(scope, TenantScope) or not scope.tenant_id:
            raise ScopeRequiredError(self.model.__name__)

        criteria = [self.model.tenant_id == scope.tenant_id]
        if scope.restaurant_id is not None and hasattr(self.model, "restaurant_id"):
            criteria.append(self.model.restaurant_id == scope.restaurant_id)
        return criteria

    def _select(self, scope: TenantScope | None) -> Select:
        """Base SELECT restricted to the scope."""
        return select(self.model).where(*self._scope_criteria(scope))

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def find_by_id(
        self,
        scope: TenantScope,
        entity_id: int,
        *criteria: Any,
        for_update: bool = False,
        refresh: bool = False,
    ) -> ModelT | None:
        """
        Find one entity by ID inside the scope.

        Args:
            for_update: Lock the row (SELECT ... FOR UPDATE where supported)
            refresh: Overwrite already-loaded attributes with database values
        """
        query = self._select(scope).where(self.model.id == entity_id, *criteria)
        if for_update:
            query = query.with_for_update()
        if refresh:
            query = query.execution_options(populate_existing=True)
        return self._db.scalar(query)

    def find_by_ids(
        self,
        scope: TenantScope,
        entity_ids: Sequence[int],
        *criteria: Any,
    ) -> Sequence[ModelT]:
        """Find entities by IDs (order not guaranteed)."""
        if not entity_ids:
            return []
        query = self._select(scope).where(self.model.id.in_(list(entity_ids)), *criteria)
        return self._db.scalars(query).all()

    def find_all(
        self,
        scope: TenantScope,
        *criteria: Any,
        order_by: Sequence[Any] = (),
        limit: int | None = None,
    ) -> Sequence[ModelT]:
        """Find all entities matching the extra criteria."""
        query = self._select(scope).where(*criteria)
        if order_by:
            query = query.order_by(*order_by)
        if limit is not None:
            query = query.limit(min(max(1, limit), Limits.MAX_PAGE_SIZE))
        return self._db.scalars(query).all()

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def add(self, entity: ModelT) -> ModelT:
        self._db.add(entity)
        return entity

    def update_versioned(
        self,
        scope: TenantScope,
        entity_id: int,
        values: dict[str, Any],
        expected_version: int | None = None,
        *criteria: Any,
    ) -> bool:
        """
        Conditional UPDATE that bumps `version`.

        When expected_version is given the row is only updated if its version
        still matches; extra criteria (e.g. the status the caller read) apply
        the same way. Returns False when no row was updated.
        """
        stmt = update(self.model).where(
            self.model.id == entity_id, *self._scope_criteria(scope), *criteria
        )
        if expected_version is not None:
            stmt = stmt.where(self.model.version == expected_version)
        stmt = stmt.values(**values, version=self.model.version + 1).execution_options(
            synchronize_session=False
        )
        result = self._db.execute(stmt)
        return result.rowcount == 1

    def delete(self, entity: ModelT) -> None:
        self._db.delete(entity)
