"""
Authentication router.
Handles staff login, registration and password changes.
"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from shared.config.constants import MANAGEMENT_ROLES
from shared.config.settings import settings
from shared.infrastructure.db import get_db
from shared.security.auth import current_user_context, require_roles, sign_staff_token
from shared.security.rate_limit import limiter
from shared.utils.schemas import (
    ChangePasswordRequest,
    LoginRequest,
    LoginResponse,
    RegisterUserRequest,
    UserInfo,
    UserOutput,
)
from rest_api.models import User
from rest_api.routers._common import staff_scope, user_id
from rest_api.services.domain import StaffService


router = APIRouter(prefix="/api/auth", tags=["auth"])


def _user_info(user: User, restaurant_ids: list[int]) -> UserInfo:
    return UserInfo(
        id=user.id,
        name=user.name,
        email=user.email,
        tenant_id=user.tenant_id,
        role=user.role,
        restaurant_ids=restaurant_ids,
    )


@router.post("/login", response_model=LoginResponse)
@limiter.limit(settings.login_rate_limit)
def login(request: Request, body: LoginRequest, db: Session = Depends(get_db)) -> LoginResponse:
    """
    Authenticate a staff member and return an access token.

    The access token contains:
    - sub: user ID
    - tenant_id: tenant of the user
    - restaurant_ids: active restaurants of the tenant
    - role: the user's role
    - email: user's email
    """
    client_ip = request.client.host if request.client else None
    user, restaurant_ids = StaffService(db).authenticate(
        body.email, body.password, ip_address=client_ip
    )

    access_token = sign_staff_token(
        user_id=user.id,
        tenant_id=user.tenant_id,
        role=user.role,
        restaurant_ids=restaurant_ids,
        email=user.email,
    )

    return LoginResponse(
        access_token=access_token,
        expires_in=settings.jwt_staff_token_expire_days * 24 * 60 * 60,
        user=_user_info(user, restaurant_ids),
    )


@router.get("/me", response_model=UserInfo)
def me(
    db: Session = Depends(get_db),
    ctx: dict = Depends(current_user_context),
) -> UserInfo:
    """Current staff member, read fresh from the database."""
    service = StaffService(db)
    user = service.get_user(staff_scope(ctx), user_id(ctx))
    return _user_info(user, service.restaurant_ids(user))


@router.post("/register", response_model=UserOutput, status_code=201)
def register(
    body: RegisterUserRequest,
    db: Session = Depends(get_db),
    ctx: dict = Depends(current_user_context),
) -> UserOutput:
    """Create a staff account in the admin's tenant. Requires ADMIN role."""
    require_roles(ctx, MANAGEMENT_ROLES)
    user = StaffService(db).register_user(
        staff_scope(ctx),
        name=body.name,
        email=body.email,
        password=body.password,
        role=body.role,
    )
    return UserOutput.model_validate(user)


@router.post("/change-password")
def change_password(
    body: ChangePasswordRequest,
    db: Session = Depends(get_db),
    ctx: dict = Depends(current_user_context),
) -> dict:
    StaffService(db).change_password(
        staff_scope(ctx), user_id(ctx), body.current_password, body.new_password
    )
    return {"success": True}
