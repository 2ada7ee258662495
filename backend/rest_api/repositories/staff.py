"""
Staff Repositories - Data access for users and restaurants.
Both are tenant-wide: a restaurant in the scope does not narrow them.
"""

from typing import Sequence

from rest_api.models import Restaurant, User
from shared.config.constants import Roles
from .base import ScopedRepository, TenantScope


class UserRepository(ScopedRepository[User]):
    """Repository for User entities."""

    model = User

    def list_active_waiters(self, scope: TenantScope) -> Sequence[User]:
        """Active WAITER users of the tenant ordered by id (stable for assignment)."""
        return self.find_all(
            scope,
            User.role == Roles.WAITER,
            User.is_active.is_(True),
            order_by=(User.id,),
        )

    def list_all(self, scope: TenantScope) -> Sequence[User]:
        return self.find_all(scope, order_by=(User.id,))


class RestaurantRepository(ScopedRepository[Restaurant]):
    """Repository for Restaurant entities."""

    model = Restaurant

    def list_active(self, scope: TenantScope) -> Sequence[Restaurant]:
        return self.find_all(scope, Restaurant.is_active.is_(True), order_by=(Restaurant.id,))

    def ids_for_tenant(self, scope: TenantScope) -> list[int]:
        return [r.id for r in self.list_active(scope)]
