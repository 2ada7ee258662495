"""
Authentication and authorization utilities.
Handles JWT access tokens for staff and JWT table credentials for diners.

Both credentials are HS256 JWTs signed with separate secrets, issuers and
audiences, so a table credential can never be replayed as a staff token.
"""

from __future__ import annotations

import time
import uuid
from datetime import datetime, timezone
from typing import Any

import jwt
from fastapi import Header

from shared.config.settings import (
    JWT_SECRET,
    JWT_ISSUER,
    JWT_AUDIENCE,
    TABLE_TOKEN_SECRET,
    settings,
)
from shared.config.logging import get_logger
from shared.utils.exceptions import (
    InsufficientRoleError,
    RestaurantAccessError,
    UnauthorizedError,
)

logger = get_logger(__name__)


# =============================================================================
# JWT Functions (for staff authentication)
# =============================================================================


def sign_jwt(payload: dict[str, Any], ttl_seconds: int | None = None) -> str:
    """
    Sign a staff access token with the given payload.

    Args:
        payload: Claims to include (sub, tenant_id, role, restaurant_ids, email).
        ttl_seconds: Token lifetime in seconds. Defaults to JWT_STAFF_TOKEN_EXPIRE_DAYS.

    Returns:
        Signed JWT token string.
    """
    if ttl_seconds is None:
        ttl_seconds = settings.jwt_staff_token_expire_days * 24 * 60 * 60

    now = int(time.time())
    data = {
        **payload,
        "iss": JWT_ISSUER,
        "aud": JWT_AUDIENCE,
        "iat": now,
        "exp": now + ttl_seconds,
        "type": "access",
        "jti": str(uuid.uuid4()),
    }
    return jwt.encode(data, JWT_SECRET, algorithm="HS256")


def sign_staff_token(
    user_id: int,
    tenant_id: int,
    role: str,
    restaurant_ids: list[int],
    email: str | None = None,
) -> str:
    """Create the access token returned by login."""
    return sign_jwt(
        {
            "sub": str(user_id),
            "tenant_id": tenant_id,
            "role": role,
            "restaurant_ids": list(restaurant_ids),
            "email": email,
        }
    )


def verify_jwt(token: str) -> dict[str, Any]:
    """
    Verify and decode a staff JWT.

    Returns:
        Decoded token claims.

    Raises:
        UnauthorizedError: If the token is invalid, expired or malformed.
    """
    try:
        payload = jwt.decode(
            token,
            JWT_SECRET,
            algorithms=["HS256"],
            audience=JWT_AUDIENCE,
            issuer=JWT_ISSUER,
        )
    except jwt.ExpiredSignatureError:
        raise UnauthorizedError("Token has expired")
    except jwt.InvalidTokenError as e:
        # Log the real reason, return a generic message
        logger.warning("JWT validation failed", error=str(e))
        raise UnauthorizedError("Invalid token")

    if payload.get("type") != "access":
        raise UnauthorizedError("Invalid token: invalid type claim")

    try:
        int(payload["sub"])
    except (KeyError, ValueError, TypeError):
        raise UnauthorizedError("Invalid token: malformed subject claim")

    if not isinstance(payload.get("tenant_id"), int):
        raise UnauthorizedError("Invalid token: malformed tenant_id claim")

    if "role" not in payload:
        raise UnauthorizedError("Invalid token: missing role claim")

    return payload


def get_bearer_token(authorization: str | None) -> str:
    """
    Extract bearer token from Authorization header.

    Raises:
        UnauthorizedError: If header is missing or malformed.
    """
    if not authorization:
        raise UnauthorizedError("Missing Authorization header")
    if not authorization.startswith("Bearer "):
        raise UnauthorizedError(
            "Invalid Authorization header format. Expected: Bearer <token>"
        )
    return authorization.split(" ", 1)[1].strip()


def current_user_context(
    authorization: str | None = Header(default=None, alias="Authorization"),
) -> dict[str, Any]:
    """
    FastAPI dependency to get the current staff context from JWT.

    Usage:
        @router.get("/protected")
        def protected_endpoint(ctx = Depends(current_user_context)):
            user_id = int(ctx["sub"])
            tenant_id = ctx["tenant_id"]

    Returns:
        Dict with: sub (user_id), tenant_id, role, restaurant_ids, email
    """
    token = get_bearer_token(authorization)
    return verify_jwt(token)


def require_roles(ctx: dict[str, Any], allowed: list[str] | frozenset[str]) -> None:
    """
    Verify that the user holds one of the allowed roles.

    Raises:
        InsufficientRoleError: If user lacks required role.
    """
    if ctx.get("role") not in allowed:
        raise InsufficientRoleError(sorted(allowed), user_id=ctx.get("sub"))


def require_restaurant(ctx: dict[str, Any], restaurant_id: int) -> None:
    """
    Verify that the user has access to the specified restaurant.

    Raises:
        RestaurantAccessError: If the restaurant is not in the token's restaurant_ids.
    """
    if restaurant_id not in set(ctx.get("restaurant_ids", [])):
        raise RestaurantAccessError(restaurant_id, user_id=ctx.get("sub"))


# =============================================================================
# Table Credential Functions (for diner authentication)
# =============================================================================


def sign_table_token(
    tenant_id: int,
    restaurant_id: int,
    table_id: int,
    session_id: int,
    session_token: str,
    ttl_seconds: int | None = None,
) -> tuple[str, datetime]:
    """
    Create the table credential issued when a session is opened.

    The session's own token is embedded as the `jti` claim, which ties the
    credential to exactly one TableSession row.

    Returns:
        (token, expires_at)
    """
    if ttl_seconds is None:
        ttl_seconds = settings.table_token_expire_minutes * 60
    now = int(time.time())
    expires_at = now + ttl_seconds
    payload = {
        "tenant_id": tenant_id,
        "restaurant_id": restaurant_id,
        "table_id": table_id,
        "session_id": session_id,
        "jti": session_token,
        "type": "table",  # Distinguish from staff JWT
        "iss": settings.table_token_issuer,
        "aud": settings.table_token_audience,
        "iat": now,
        "exp": expires_at,
    }
    token = jwt.encode(payload, TABLE_TOKEN_SECRET, algorithm="HS256")
    return token, datetime.fromtimestamp(expires_at, tz=timezone.utc)


def verify_table_token(token: str) -> dict[str, Any]:
    """
    Verify the signature and claims of a table credential.

    This does not check whether the session is still active; that needs the
    database and is done by SessionService.validate_credential.

    Returns:
        Dict with: tenant_id, restaurant_id, table_id, session_id, jti

    Raises:
        UnauthorizedError: If token is invalid or expired.
    """
    try:
        payload = jwt.decode(
            token,
            TABLE_TOKEN_SECRET,
            algorithms=["HS256"],
            audience=settings.table_token_audience,
            issuer=settings.table_token_issuer,
        )
    except jwt.ExpiredSignatureError:
        raise UnauthorizedError("Table token has expired")
    except jwt.InvalidTokenError as e:
        logger.warning("Table token validation failed", error=str(e))
        raise UnauthorizedError("Invalid table token")

    if payload.get("type") != "table":
        raise UnauthorizedError("Invalid token type")

    try:
        return {
            "tenant_id": int(payload["tenant_id"]),
            "restaurant_id": int(payload["restaurant_id"]),
            "table_id": int(payload["table_id"]),
            "session_id": int(payload["session_id"]),
            "jti": str(payload["jti"]),
        }
    except (KeyError, ValueError, TypeError):
        raise UnauthorizedError("Invalid table token: malformed claims")
