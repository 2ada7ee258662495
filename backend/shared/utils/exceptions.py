"""
HTTP errors raised by services and dependencies.

Each class fixes a status code and logs itself on construction. The handlers
in rest_api.main render them as `{"error": detail, **payload}`, so `payload`
is how an error adds machine-readable fields (missing item ids, the id of a
duplicate call, the version a client should retry with).
"""

from typing import Any

from fastapi import HTTPException, status

from shared.config.logging import get_logger

logger = get_logger(__name__)


class AppException(HTTPException):
    def __init__(
        self,
        status_code: int,
        detail: str,
        log_level: str = "warning",
        headers: dict[str, str] | None = None,
        payload: dict[str, Any] | None = None,
        **log_context: Any,
    ):
        getattr(logger, log_level, logger.warning)(detail, status_code=status_code, **log_context)
        self.payload = payload or {}
        super().__init__(status_code=status_code, detail=detail, headers=headers)


# --- 400 --------------------------------------------------------------------


class ValidationError(AppException):
    """Malformed input: empty cart, quantity out of range, unknown role."""

    def __init__(self, detail: str, **log_context: Any):
        super().__init__(status.HTTP_400_BAD_REQUEST, detail, **log_context)


class InvalidStateError(ValidationError):
    """A status string outside the entity's status set."""

    def __init__(self, entity: str, requested_state: str, valid_states: list[str] | None = None, **log_context: Any):
        detail = f"Invalid {entity} status '{requested_state}'"
        if valid_states:
            detail += f", expected one of: {', '.join(valid_states)}"
        super().__init__(detail, entity=entity, requested_state=requested_state, **log_context)


class InvalidTransitionError(ValidationError):
    """Only raised when strict status transitions are enabled."""

    def __init__(self, entity: str, from_status: str, to_status: str, **log_context: Any):
        super().__init__(
            f"Invalid transition from '{from_status}' to '{to_status}' for {entity}",
            entity=entity,
            from_status=from_status,
            to_status=to_status,
            **log_context,
        )


# --- 401 / 403 --------------------------------------------------------------


class UnauthorizedError(AppException):
    def __init__(self, detail: str = "Authentication required", **log_context: Any):
        super().__init__(status.HTTP_401_UNAUTHORIZED, detail, log_level="info", **log_context)


class ForbiddenError(AppException):
    """
    Authenticated but not allowed.

        raise ForbiddenError("close another table's session")  # "Not allowed to close ..."
    """

    def __init__(self, action: str | None = None, **log_context: Any):
        detail = f"Not allowed to {action}" if action else "Access denied"
        super().__init__(status.HTTP_403_FORBIDDEN, detail, action=action, **log_context)


class RestaurantAccessError(ForbiddenError):
    def __init__(self, restaurant_id: int | None = None, **log_context: Any):
        super().__init__("access this restaurant", restaurant_id=restaurant_id, **log_context)


class InsufficientRoleError(ForbiddenError):
    def __init__(self, required_roles: list[str], **log_context: Any):
        super().__init__(
            f"perform this action (requires role: {', '.join(required_roles)})",
            required_roles=required_roles,
            **log_context,
        )


# --- 404 --------------------------------------------------------------------


class NotFoundError(AppException):
    """
    Missing entity. Rows that belong to another tenant or restaurant raise
    this too, so existence never leaks across tenants.
    """

    def __init__(self, entity: str, entity_id: int | str | None = None, **log_context: Any):
        detail = f"{entity} with ID {entity_id} not found" if entity_id is not None else f"{entity} not found"
        super().__init__(
            status.HTTP_404_NOT_FOUND, detail, entity=entity, entity_id=entity_id, **log_context
        )


class TableNotFoundError(NotFoundError):
    def __init__(self, table_id: int | None = None, **log_context: Any):
        super().__init__("Table", table_id, **log_context)


class MenuItemNotFoundError(AppException):
    """A cart references items that are missing or unavailable; nothing is created."""

    def __init__(self, missing_ids: list[int], **log_context: Any):
        super().__init__(
            status.HTTP_404_NOT_FOUND,
            "Menu items not available: " + ", ".join(str(i) for i in missing_ids),
            payload={"missing_menu_item_ids": missing_ids},
            entity="MenuItem",
            **log_context,
        )


# --- 409 --------------------------------------------------------------------


class ConflictError(AppException):
    def __init__(self, detail: str, payload: dict[str, Any] | None = None, **log_context: Any):
        super().__init__(status.HTTP_409_CONFLICT, detail, payload=payload, **log_context)


class DuplicateEntityError(ConflictError):
    def __init__(self, entity: str, identifier: str | None = None, **log_context: Any):
        detail = f"{entity} with identifier '{identifier}' already exists" if identifier else f"{entity} already exists"
        super().__init__(detail, entity=entity, identifier=identifier, **log_context)


class DuplicateCallError(ConflictError):
    def __init__(self, call_id: int, **log_context: Any):
        super().__init__(
            "A pending call of this type already exists for this table",
            payload={"call_id": call_id},
            **log_context,
        )


class StaleVersionError(ConflictError):
    """`expected_version` did not match; the payload carries the current version."""

    def __init__(self, entity: str, entity_id: int, expected_version: int, **log_context: Any):
        super().__init__(
            f"{entity} {entity_id} was modified concurrently",
            payload={"expected_version": expected_version},
            entity=entity,
            entity_id=entity_id,
            **log_context,
        )


# --- 500 --------------------------------------------------------------------


class InternalError(AppException):
    def __init__(self, detail: str = "Internal server error", **log_context: Any):
        super().__init__(status.HTTP_500_INTERNAL_SERVER_ERROR, detail, log_level="error", **log_context)


class ScopeRequiredError(InternalError):
    """A tenant-scoped repository was queried without a tenant."""

    def __init__(self, model: str, **log_context: Any):
        super().__init__(f"Tenant scope required to query {model}", model=model, **log_context)
