"""
Modification request endpoints
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from ems.core.deps import get_db, get_current_user, require_admin
from ems.models.modification_request import RequestStatus, DecisionOutcome
from ems.models.user_account import UserAccount
from ems.schemas.modification_request import (
    RequestSubmit,
    RequestDecision,
    ModificationRequestOut,
    RequestListResponse,
    PendingCountOut,
)
from ems.services.request_service import (
    submit_request,
    decide_request,
    list_requests_for_admin,
    list_my_requests,
    count_pending_requests,
)

router = APIRouter()


@router.post("", response_model=ModificationRequestOut, status_code=201)
async def submit_request_endpoint(
    payload: RequestSubmit,
    db: Session = Depends(get_db),
    current_user: UserAccount = Depends(get_current_user),
):
    """Ask HR to change a field of the caller's own profile"""
    return submit_request(
        db,
        employee_id=current_user.employee_id,
        requester_id=current_user.id,
        target_field=payload.target_field,
        requested_value=payload.requested_value,
        note=payload.note,
    )


@router.get("/my", response_model=List[ModificationRequestOut])
async def list_my_requests_endpoint(
    db: Session = Depends(get_db),
    current_user: UserAccount = Depends(get_current_user),
):
    """The caller's own requests, newest first"""
    return list_my_requests(db, current_user.employee_id)


@router.get("/pending/count", response_model=PendingCountOut)
async def pending_count_endpoint(
    db: Session = Depends(get_db),
    current_user: UserAccount = Depends(require_admin),
):
    """Number of PENDING requests (ADMIN_RH only)"""
    return PendingCountOut(pending=count_pending_requests(db))


@router.get("", response_model=RequestListResponse)
async def list_requests_endpoint(
    status: Optional[RequestStatus] = Query(None),
    employee_id: Optional[int] = Query(None),
    department_id: Optional[int] = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user: UserAccount = Depends(require_admin),
):
    """List requests with filters, newest first (ADMIN_RH only)"""
    items, total = list_requests_for_admin(
        db,
        status=status,
        employee_id=employee_id,
        department_id=department_id,
        page=page,
        page_size=page_size,
    )
    return RequestListResponse(
        items=[ModificationRequestOut.model_validate(item) for item in items],
        total=total,
        page=page,
        page_size=page_size,
    )


@router.post("/{request_id}/approve", response_model=ModificationRequestOut)
async def approve_request_endpoint(
    request_id: int,
    payload: Optional[RequestDecision] = None,
    db: Session = Depends(get_db),
    current_user: UserAccount = Depends(require_admin),
):
    """Approve a PENDING request and apply the requested value (ADMIN_RH only)"""
    return decide_request(
        db,
        request_id,
        reviewer_id=current_user.id,
        outcome=DecisionOutcome.APPROVE,
        comment=payload.comment if payload else None,
    )


@router.post("/{request_id}/reject", response_model=ModificationRequestOut)
async def reject_request_endpoint(
    request_id: int,
    payload: Optional[RequestDecision] = None,
    db: Session = Depends(get_db),
    current_user: UserAccount = Depends(require_admin),
):
    """Reject a PENDING request; the comment is sent to the employee as the reason (ADMIN_RH only)"""
    return decide_request(
        db,
        request_id,
        reviewer_id=current_user.id,
        outcome=DecisionOutcome.REJECT,
        comment=payload.comment if payload else None,
    )
