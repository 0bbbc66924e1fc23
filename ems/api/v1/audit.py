"""
Audit log endpoints (ADMIN_RH only)
"""
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from ems.core.deps import get_db, require_admin
from ems.models.audit_log import AuditAction, AuditTarget
from ems.models.user_account import UserAccount
from ems.schemas.audit_log import AuditLogOut, AuditLogListResponse
from ems.services.audit_service import list_audit_logs

router = APIRouter()


@router.get("", response_model=AuditLogListResponse)
async def list_audit_logs_endpoint(
    action: Optional[AuditAction] = Query(None),
    target_type: Optional[AuditTarget] = Query(None),
    target_id: Optional[int] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: UserAccount = Depends(require_admin),
):
    """Audit trail, newest first"""
    items, total = list_audit_logs(
        db,
        action=action,
        target_type=target_type.value if target_type else None,
        target_id=target_id,
        page=page,
        page_size=page_size,
    )
    return AuditLogListResponse(
        items=[AuditLogOut.model_validate(item) for item in items],
        total=total,
        page=page,
        page_size=page_size,
    )
