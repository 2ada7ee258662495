"""
Staff management endpoints.

Thin router that delegates to StaffService.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from shared.infrastructure.db import get_db
from shared.utils.exceptions import ValidationError
from shared.utils.schemas import ActiveFlagUpdate, UserOutput
from rest_api.routers._common import staff_scope, user_id
from rest_api.routers.admin._base import require_admin
from rest_api.services.domain import StaffService


router = APIRouter(tags=["admin-staff"])


@router.get("/users", response_model=list[UserOutput])
def list_users(
    db: Session = Depends(get_db),
    user: dict = Depends(require_admin),
) -> list[UserOutput]:
    return [UserOutput.model_validate(u) for u in StaffService(db).list_users(staff_scope(user))]


@router.patch("/users/{target_id}/status", response_model=UserOutput)
def set_user_status(
    target_id: int,
    body: ActiveFlagUpdate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_admin),
) -> UserOutput:
    """
    Activate or deactivate a staff account. Deactivated users cannot log in;
    tokens already issued stay valid until they expire.
    """
    if target_id == user_id(user) and not body.is_active:
        raise ValidationError("Cannot deactivate your own account")
    updated = StaffService(db).set_user_active(staff_scope(user), target_id, body.is_active)
    return UserOutput.model_validate(updated)
