"""
Shared dependencies for admin routers.
"""

from fastapi import Depends

from shared.config.constants import ALL_STAFF_ROLES, MANAGEMENT_ROLES
from shared.security.auth import current_user_context as current_user, require_roles


def require_admin(user: dict = Depends(current_user)) -> dict:
    """Dependency that requires ADMIN role."""
    require_roles(user, MANAGEMENT_ROLES)
    return user


def require_any_staff(user: dict = Depends(current_user)) -> dict:
    """Dependency that accepts any staff role."""
    require_roles(user, ALL_STAFF_ROLES)
    return user
