"""
Public-profile visibility endpoints (mounted under /employees)
"""
from typing import List
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from ems.core.deps import get_db, require_admin
from ems.models.audit_log import AuditAction, AuditTarget
from ems.models.user_account import UserAccount
from ems.models.visibility import VisibilityField
from ems.schemas.visibility import VisibilityUpdate, VisibilityOut
from ems.services.audit_service import record_audit_safely
from ems.services.employee_service import get_employee
from ems.services.visibility_service import get_visibility, set_visibility

router = APIRouter()


@router.get("/{employee_id}/visibility", response_model=List[VisibilityOut])
async def get_visibility_endpoint(
    employee_id: int,
    db: Session = Depends(get_db),
    current_user: UserAccount = Depends(require_admin),
):
    """
    Flags for every public field key (ADMIN_RH only)

    Keys without a stored row are reported as private.
    """
    get_employee(db, employee_id)
    stored = {row.field_key: row.is_public for row in get_visibility(db, employee_id)}
    return [
        VisibilityOut(employee_id=employee_id, field_key=field, is_public=stored.get(field.value, False))
        for field in VisibilityField
    ]


@router.put("/{employee_id}/visibility/{field_key}", response_model=VisibilityOut)
async def set_visibility_endpoint(
    employee_id: int,
    field_key: VisibilityField,
    payload: VisibilityUpdate,
    db: Session = Depends(get_db),
    current_user: UserAccount = Depends(require_admin),
):
    """Show or hide one field on the public profile (ADMIN_RH only)"""
    get_employee(db, employee_id)
    previous = {row.field_key: row.is_public for row in get_visibility(db, employee_id)}

    row = set_visibility(db, employee_id, field_key, payload.is_public)

    record_audit_safely(
        db,
        actor_id=current_user.id,
        action=AuditAction.VISIBILITY_UPDATED,
        target_type=AuditTarget.EMPLOYEE,
        target_id=employee_id,
        details={
            "field_key": field_key.value,
            "old": previous.get(field_key.value, False),
            "new": payload.is_public,
        },
    )
    return row
