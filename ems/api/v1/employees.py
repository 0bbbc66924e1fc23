"""
Employee endpoints

HR admins manage records; an employee reads and edits their own profile
through /me.
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from ems.core.deps import get_db, get_current_user, require_admin
from ems.models.user_account import UserAccount
from ems.schemas.employee import (
    EmployeeCreate,
    EmployeeUpdate,
    EmployeeSelfUpdate,
    EmployeeOut,
    SelfUpdateOut,
)
from ems.services.employee_service import (
    create_employee,
    get_employee,
    get_employee_for_account,
    update_employee,
    deactivate_employee,
    self_update_profile,
)

router = APIRouter()


@router.post("", response_model=EmployeeOut, status_code=201)
async def create_employee_endpoint(
    employee_data: EmployeeCreate,
    db: Session = Depends(get_db),
    current_user: UserAccount = Depends(require_admin)
):
    """Create a new employee (ADMIN_RH only)"""
    return create_employee(db, employee_data, current_user.id)


@router.get("/me", response_model=EmployeeOut)
async def get_me_endpoint(
    db: Session = Depends(get_db),
    current_user: UserAccount = Depends(get_current_user),
):
    """Profile of the employee behind the current account"""
    return get_employee_for_account(db, current_user)


@router.patch("/me", response_model=SelfUpdateOut)
async def update_me_endpoint(
    payload: EmployeeSelfUpdate,
    db: Session = Depends(get_db),
    current_user: UserAccount = Depends(get_current_user),
):
    """
    Direct edit of the caller's own self-managed fields

    When a badge-visible field changes, HR admins get a "QR refresh required"
    notification (at most one unread per admin and employee).
    """
    result = self_update_profile(db, current_user.employee_id, current_user.id, payload)
    return SelfUpdateOut(
        employee=EmployeeOut.model_validate(result.employee),
        changed_fields=result.changed_fields,
        qr_refresh_notified=result.qr_refresh.notified_count if result.qr_refresh else 0,
        qr_refresh_deduped=result.qr_refresh.deduped_count if result.qr_refresh else 0,
    )


@router.get("/{employee_id}", response_model=EmployeeOut)
async def get_employee_endpoint(
    employee_id: int,
    db: Session = Depends(get_db),
    current_user: UserAccount = Depends(get_current_user)
):
    """Get an employee (ADMIN_RH, or the employee themselves)"""
    if not current_user.is_admin and current_user.employee_id != employee_id:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only view your own profile"
        )
    return get_employee(db, employee_id)


@router.patch("/{employee_id}", response_model=EmployeeOut)
async def update_employee_endpoint(
    employee_id: int,
    employee_data: EmployeeUpdate,
    db: Session = Depends(get_db),
    current_user: UserAccount = Depends(require_admin)
):
    """Partial update of an employee record (ADMIN_RH only)"""
    return update_employee(db, employee_id, employee_data, current_user.id)


@router.post("/{employee_id}/deactivate", response_model=EmployeeOut)
async def deactivate_employee_endpoint(
    employee_id: int,
    db: Session = Depends(get_db),
    current_user: UserAccount = Depends(require_admin)
):
    """Deactivate an employee and revoke their public QR link (ADMIN_RH only)"""
    return deactivate_employee(db, employee_id, current_user.id)
