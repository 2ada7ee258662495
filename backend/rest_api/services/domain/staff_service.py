"""
Staff Domain Service.

Login, registration, password changes and user activation for staff accounts.
"""

from __future__ import annotations

from typing import Sequence

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from shared.config.constants import Roles
from shared.config.logging import auth_logger as logger, audit_auth_event
from shared.infrastructure.db import safe_commit
from shared.security.password import hash_password, verify_password
from shared.utils.exceptions import (
    DuplicateEntityError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from rest_api.models import User
from rest_api.repositories import RestaurantRepository, TenantScope, UserRepository
from rest_api.services.base_service import DomainService


class StaffService(DomainService):
    """Domain service for staff accounts."""

    def __init__(self, db: Session):
        super().__init__(db)
        self._users = UserRepository(db)
        self._restaurants = RestaurantRepository(db)

    def authenticate(
        self, email: str, password: str, ip_address: str | None = None
    ) -> tuple[User, list[int]]:
        """
        Check credentials and return the user with the restaurants it may act on.

        Login is the only unscoped lookup: the tenant is not known until the
        user is found.

        Raises:
            UnauthorizedError: Unknown email, inactive user or wrong password.
        """
        user = self._db.scalar(select(User).where(User.email == email.lower()))

        if user is None or not user.is_active:
            audit_auth_event("LOGIN", email=email, success=False, reason="unknown or inactive user", ip_address=ip_address)
            raise UnauthorizedError("Invalid email or password")

        if not verify_password(password, user.password_hash):
            audit_auth_event("LOGIN", user_id=user.id, email=email, success=False, reason="bad password", ip_address=ip_address)
            raise UnauthorizedError("Invalid email or password")

        restaurant_ids = self._restaurants.ids_for_tenant(TenantScope(user.tenant_id))
        audit_auth_event("LOGIN", user_id=user.id, email=email, success=True, ip_address=ip_address)
        return user, restaurant_ids

    def restaurant_ids(self, user: User) -> list[int]:
        return self._restaurants.ids_for_tenant(TenantScope(user.tenant_id))

    def get_user(self, scope: TenantScope, user_id: int) -> User:
        user = self._users.find_by_id(scope, user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    def register_user(
        self, scope: TenantScope, name: str, email: str, password: str, role: str
    ) -> User:
        """
        Create a staff account in the caller's tenant.

        Raises:
            ValidationError: Unknown role.
            DuplicateEntityError: Email already registered (in any tenant).
        """
        if role not in Roles.ALL:
            raise ValidationError(f"Invalid role '{role}'", role=role)

        email = email.lower()
        if self._db.scalar(select(User.id).where(User.email == email)) is not None:
            raise DuplicateEntityError("User", email)

        user = User(
            tenant_id=scope.tenant_id,
            name=name,
            email=email,
            password_hash=hash_password(password),
            role=role,
            is_active=True,
        )
        self._users.add(user)
        try:
            safe_commit(self._db)
        except IntegrityError:
            raise DuplicateEntityError("User", email)
        self._db.refresh(user)

        audit_auth_event("REGISTER", user_id=user.id, email=email, success=True, role=role)
        return user

    def change_password(
        self, scope: TenantScope, user_id: int, current_password: str, new_password: str
    ) -> None:
        """
        Raises:
            UnauthorizedError: current_password does not match.
        """
        user = self.get_user(scope, user_id)
        if not verify_password(current_password, user.password_hash):
            audit_auth_event("PASSWORD_CHANGE", user_id=user_id, success=False, reason="bad password")
            raise UnauthorizedError("Current password is incorrect")

        user.password_hash = hash_password(new_password)
        safe_commit(self._db)
        audit_auth_event("PASSWORD_CHANGE", user_id=user_id, success=True)

    def list_users(self, scope: TenantScope) -> Sequence[User]:
        return self._users.list_all(scope)

    def set_user_active(self, scope: TenantScope, user_id: int, is_active: bool) -> User:
        user = self.get_user(scope, user_id)
        user.is_active = is_active
        safe_commit(self._db)
        self._db.refresh(user)
        logger.info("User status changed", user_id=user_id, is_active=is_active)
        return user
