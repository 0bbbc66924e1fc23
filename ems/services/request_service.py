"""
Modification request service - the employee -> HR approval workflow

PENDING -> APPROVED | REJECTED, one shot, never reopened. A decision runs
these steps strictly in order, each committed on its own:

1. status flip (conditional on the row still being PENDING)
2. on approval, write requested_value into the employee field
3. resolve the employee's linked account
4. notify that account
5. write the audit entry

Steps 1-2 are the source of truth and propagate errors. Steps 3-5 are
best-effort fan-out: failures are logged and never change the reported
outcome.

Known write skew: the snapshot in previous_value is taken at submission and
approval writes requested_value without checking whether the live field has
drifted since. A later direct edit can therefore be overwritten; the audit
trail (old/new values on both paths) is what reconciles it.
"""
import logging
from typing import List, Optional, Tuple, Union

from sqlalchemy.orm import Session

from ems.core.exceptions import InvalidStateError, NotFoundError, ValidationError
from ems.db.session import commit_or_raise
from ems.models.audit_log import AuditAction, AuditTarget
from ems.models.employee import Employee
from ems.models.modification_request import (
    ModificationRequest,
    RequestStatus,
    RequestField,
    DecisionOutcome,
    REQUEST_FIELD_LABELS,
    TERMINAL_REQUEST_STATUSES,
)
from ems.models.notification import (
    NotificationReason,
    REQUEST_APPROVED_TITLE,
    REQUEST_REJECTED_TITLE,
    EMPLOYEE_PROFILE_LINK,
)
from ems.services.account_service import resolve_linked_account
from ems.services.audit_service import record_audit_safely
from ems.services.employee_service import (
    get_employee,
    get_employee_field_value,
    set_employee_field,
)
from ems.services.notification_service import notify
from ems.utils.datetime_utils import now_utc

logger = logging.getLogger(__name__)


def _parse_field(target_field: Union[RequestField, str]) -> RequestField:
    try:
        return RequestField(target_field)
    except ValueError:
        allowed = ", ".join(f.value for f in RequestField)
        raise ValidationError(f"Unknown target field '{target_field}'. Allowed: {allowed}")


def _parse_outcome(outcome: Union[DecisionOutcome, str]) -> DecisionOutcome:
    try:
        return DecisionOutcome(outcome)
    except ValueError:
        raise ValidationError(f"Unknown decision outcome '{outcome}'")


def _normalize_optional(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def get_request(db: Session, request_id: int) -> ModificationRequest:
    request = db.query(ModificationRequest).filter(ModificationRequest.id == request_id).first()
    if not request:
        raise NotFoundError("Modification request not found")
    return request


def submit_request(
    db: Session,
    employee_id: int,
    requester_id: Optional[int],
    target_field: Union[RequestField, str],
    requested_value: Optional[str],
    note: Optional[str] = None,
) -> ModificationRequest:
    """
    Store a PENDING change request for an employee field.

    The previous value is snapshotted from the live record now and is what
    the reviewing admin sees, even if the field changes before the decision.
    No notification is sent; admins find pending work through the pending
    count.

    Raises:
        ValidationError: unknown field, empty value, or value equal to the current one
        NotFoundError: employee does not exist
        InvalidStateError: employee is deactivated
    """
    field = _parse_field(target_field)

    value = (requested_value or "").strip()
    if not value:
        raise ValidationError("Requested value cannot be empty")

    employee = get_employee(db, employee_id)
    if not employee.active:
        raise InvalidStateError("Cannot submit a request for an inactive employee")

    current_value = get_employee_field_value(employee, field.value)
    if value == (current_value or ""):
        raise ValidationError("Requested value must differ from the current value")

    request = ModificationRequest(
        employee_id=employee_id,
        requester_id=requester_id,
        target_field=field.value,
        previous_value=current_value,
        requested_value=value,
        note=_normalize_optional(note),
        status=RequestStatus.PENDING.value,
    )
    db.add(request)
    commit_or_raise(db, "modification request insert")
    db.refresh(request)

    logger.info(
        "Request %s submitted for employee %s field=%s", request.id, employee_id, field.value
    )

    record_audit_safely(
        db,
        actor_id=requester_id,
        action=AuditAction.REQUEST_SUBMITTED,
        target_type=AuditTarget.MODIFICATION_REQUEST,
        target_id=request.id,
        details={
            "employee_id": employee_id,
            "target_field": field.value,
            "previous_value": current_value,
            "requested_value": value,
        },
    )
    return request


def _notify_requester(db: Session, request: ModificationRequest, outcome: DecisionOutcome) -> Optional[int]:
    """Best-effort decision notification; returns the recipient account id if one was notified"""
    try:
        account = resolve_linked_account(db, request.employee_id)
    except Exception:
        logger.exception("Failed to resolve recipient account for request %s", request.id)
        db.rollback()
        return None

    if account is None:
        logger.info("Employee %s has no linked account; decision not notified", request.employee_id)
        return None

    label = REQUEST_FIELD_LABELS[RequestField(request.target_field)]
    if outcome == DecisionOutcome.APPROVE:
        title = REQUEST_APPROVED_TITLE
        body = f"Your request for {label} has been approved."
    else:
        title = REQUEST_REJECTED_TITLE
        body = f"Your request for {label} was rejected."
        if request.decision_comment:
            body += f" Reason: {request.decision_comment}"

    try:
        notify(
            db,
            recipient_id=account.id,
            title=title,
            body=body,
            link=EMPLOYEE_PROFILE_LINK,
            reason=NotificationReason.REQUEST_DECIDED,
            subject_employee_id=request.employee_id,
        )
    except Exception:
        logger.exception("Unable to notify account %s for request %s", account.id, request.id)
        db.rollback()
        return None
    return account.id


def decide_request(
    db: Session,
    request_id: int,
    reviewer_id: int,
    outcome: Union[DecisionOutcome, str],
    comment: Optional[str] = None,
) -> ModificationRequest:
    """
    Approve or reject a PENDING request.

    A rejection comment is recommended but not required here; a stricter
    policy belongs to the caller.

    Raises:
        ValidationError: unknown outcome
        NotFoundError: request does not exist
        InvalidStateError: request is not PENDING (the row is left unchanged)
    """
    decision = _parse_outcome(outcome)
    request = get_request(db, request_id)

    if RequestStatus(request.status) in TERMINAL_REQUEST_STATUSES:
        raise InvalidStateError(f"Request already processed (status {request.status})")

    new_status = RequestStatus.APPROVED if decision == DecisionOutcome.APPROVE else RequestStatus.REJECTED
    decided_at = now_utc()
    comment = _normalize_optional(comment)

    # 1. Status flip, guarded on PENDING so concurrent decisions cannot both win
    updated = (
        db.query(ModificationRequest)
        .filter(
            ModificationRequest.id == request_id,
            ModificationRequest.status == RequestStatus.PENDING.value,
        )
        .update(
            {
                "status": new_status.value,
                "reviewer_id": reviewer_id,
                "decided_at": decided_at,
                "decision_comment": comment,
                "updated_at": decided_at,
            },
            synchronize_session=False,
        )
    )
    commit_or_raise(db, "request decision")
    if updated == 0:
        raise InvalidStateError("Request already processed")
    db.refresh(request)

    # 2. Apply the requested value verbatim, regardless of drift since submission
    if decision == DecisionOutcome.APPROVE:
        employee = get_employee(db, request.employee_id)
        set_employee_field(employee, request.target_field, request.requested_value)
        commit_or_raise(db, "employee field update")

    logger.info("Request %s %s by account %s", request.id, new_status.value, reviewer_id)

    # 3-4. Resolve account and notify
    recipient_id = _notify_requester(db, request, decision)

    # 5. Audit
    record_audit_safely(
        db,
        actor_id=reviewer_id,
        action=AuditAction.REQUEST_APPROVED if decision == DecisionOutcome.APPROVE else AuditAction.REQUEST_REJECTED,
        target_type=AuditTarget.MODIFICATION_REQUEST,
        target_id=request.id,
        details={
            "employee_id": request.employee_id,
            "target_field": request.target_field,
            "previous_value": request.previous_value,
            "requested_value": request.requested_value,
            "decision_comment": comment,
            "notified_account_id": recipient_id,
        },
    )
    return request


def list_requests_for_admin(
    db: Session,
    status: Optional[RequestStatus] = None,
    employee_id: Optional[int] = None,
    department_id: Optional[int] = None,
    page: int = 1,
    page_size: int = 20,
) -> Tuple[List[ModificationRequest], int]:
    """Newest first. Returns (items, total)."""
    query = db.query(ModificationRequest)

    if status is not None:
        query = query.filter(ModificationRequest.status == RequestStatus(status).value)
    if employee_id is not None:
        query = query.filter(ModificationRequest.employee_id == employee_id)
    if department_id is not None:
        query = query.join(Employee, Employee.id == ModificationRequest.employee_id).filter(
            Employee.department_id == department_id
        )

    total = query.count()
    items = (
        query.order_by(ModificationRequest.created_at.desc(), ModificationRequest.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return items, total


def list_my_requests(db: Session, employee_id: int) -> List[ModificationRequest]:
    return (
        db.query(ModificationRequest)
        .filter(ModificationRequest.employee_id == employee_id)
        .order_by(ModificationRequest.created_at.desc(), ModificationRequest.id.desc())
        .all()
    )


def count_pending_requests(db: Session) -> int:
    """Pending-count badge for admins"""
    return (
        db.query(ModificationRequest)
        .filter(ModificationRequest.status == RequestStatus.PENDING.value)
        .count()
    )
