"""
QR token endpoints (mounted under /employees)
"""
from typing import Optional
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from ems.core.deps import get_db, get_current_user, require_admin
from ems.models.qr_token import QRToken, TokenStatus
from ems.models.user_account import UserAccount
from ems.schemas.token import QRTokenOut, QRTokenRevokeOut
from ems.services.employee_service import get_employee
from ems.services.token_service import (
    get_current,
    regenerate_for_admin,
    revoke_for_admin,
    public_profile_url,
)

router = APIRouter()


def _token_out(token: Optional[QRToken]) -> Optional[QRTokenOut]:
    if token is None:
        return None
    out = QRTokenOut.model_validate(token)
    if token.status == TokenStatus.ACTIVE.value:
        out.public_url = public_profile_url(token)
    return out


@router.get("/me/qr", response_model=Optional[QRTokenOut])
async def get_my_qr_endpoint(
    db: Session = Depends(get_db),
    current_user: UserAccount = Depends(get_current_user),
):
    """Current QR token of the caller's own profile (null if never issued)"""
    return _token_out(get_current(db, current_user.employee_id))


@router.get("/{employee_id}/qr", response_model=Optional[QRTokenOut])
async def get_qr_endpoint(
    employee_id: int,
    db: Session = Depends(get_db),
    current_user: UserAccount = Depends(require_admin),
):
    """Current QR token of an employee (ADMIN_RH only)"""
    get_employee(db, employee_id)
    return _token_out(get_current(db, employee_id))


@router.post("/{employee_id}/qr/regenerate", response_model=QRTokenOut, status_code=201)
async def regenerate_qr_endpoint(
    employee_id: int,
    db: Session = Depends(get_db),
    current_user: UserAccount = Depends(require_admin),
):
    """
    Issue a new public token, revoking the previous one (ADMIN_RH only)

    Also marks the admin's pending "QR refresh required" notifications for
    this employee as read.
    """
    token = regenerate_for_admin(db, employee_id, current_user.id)
    return _token_out(token)


@router.post("/{employee_id}/qr/revoke", response_model=QRTokenRevokeOut)
async def revoke_qr_endpoint(
    employee_id: int,
    db: Session = Depends(get_db),
    current_user: UserAccount = Depends(require_admin),
):
    """Revoke the active token, if any (ADMIN_RH only, idempotent)"""
    token = revoke_for_admin(db, employee_id, current_user.id)
    return QRTokenRevokeOut(revoked=token is not None, token=_token_out(token))
