"""
Tests for the modification request workflow (service level)
"""
import pytest
from sqlalchemy.orm import Session

from ems.core.exceptions import ConflictError, InvalidStateError, NotFoundError, ValidationError
from ems.models.audit_log import AuditLog, AuditAction
from ems.models.modification_request import (
    ModificationRequest,
    RequestStatus,
    RequestField,
    DecisionOutcome,
    TERMINAL_REQUEST_STATUSES,
)
from ems.models.notification import Notification, REQUEST_APPROVED_TITLE, REQUEST_REJECTED_TITLE
from ems.services import audit_service
from ems.services.account_service import resolve_linked_account
from ems.services.request_service import submit_request, decide_request, count_pending_requests, list_requests_for_admin


def test_submit_snapshots_previous_value(db: Session, employee, employee_account):
    request = submit_request(db, employee.id, employee_account.id, "poste", "  Lead Developer ")

    assert request.status == RequestStatus.PENDING.value
    assert request.target_field == RequestField.POSTE.value
    assert request.previous_value == "Developer"
    assert request.requested_value == "Lead Developer"
    # Submission alone sends nothing
    assert db.query(Notification).count() == 0
    assert db.query(AuditLog).filter(AuditLog.action == AuditAction.REQUEST_SUBMITTED.value).count() == 1


@pytest.mark.parametrize(
    "field, value",
    [
        ("salary", "1000000"),
        ("poste", "   "),
        ("poste", "Developer"),
    ],
)
def test_submit_rejects_invalid_input(db: Session, employee, employee_account, field, value):
    with pytest.raises(ValidationError):
        submit_request(db, employee.id, employee_account.id, field, value)
    assert db.query(ModificationRequest).count() == 0


def test_submit_for_inactive_employee(db: Session, make_employee):
    inactive = make_employee(active=False)

    with pytest.raises(InvalidStateError):
        submit_request(db, inactive.id, None, "poste", "Manager")


def test_submit_for_unknown_employee(db: Session):
    with pytest.raises(NotFoundError):
        submit_request(db, 4242, None, "poste", "Manager")


def test_approve_applies_value_and_notifies(db: Session, employee, employee_account, admin_account):
    request = submit_request(db, employee.id, employee_account.id, "telephone", "0711111111")

    decided = decide_request(db, request.id, admin_account.id, DecisionOutcome.APPROVE)

    assert decided.status == RequestStatus.APPROVED.value
    assert decided.reviewer_id == admin_account.id
    assert decided.decided_at is not None
    db.refresh(employee)
    assert employee.phone == "0711111111"
    assert employee.active is True

    notification = db.query(Notification).filter(Notification.recipient_id == employee_account.id).one()
    assert notification.title == REQUEST_APPROVED_TITLE
    assert notification.body == "Your request for Telephone has been approved."

    audit = db.query(AuditLog).filter(AuditLog.action == AuditAction.REQUEST_APPROVED.value).one()
    assert audit.actor_id == admin_account.id
    assert audit.details["previous_value"] == "0600000000"
    assert audit.details["requested_value"] == "0711111111"


def test_rejection_scenario(db: Session, employee, employee_account, admin_account):
    """Reject with a reason: status REJECTED, field untouched, reason forwarded"""
    request = submit_request(db, employee.id, employee_account.id, "poste", "CTO")

    decided = decide_request(db, request.id, admin_account.id, "REJECT", comment="Not aligned with org chart")

    assert decided.status == RequestStatus.REJECTED.value
    assert decided.decision_comment == "Not aligned with org chart"
    db.refresh(employee)
    assert employee.job_title == "Developer"

    notification = db.query(Notification).filter(Notification.recipient_id == employee_account.id).one()
    assert notification.title == REQUEST_REJECTED_TITLE
    assert notification.body == "Your request for Poste was rejected. Reason: Not aligned with org chart"
    assert db.query(AuditLog).filter(AuditLog.action == AuditAction.REQUEST_REJECTED.value).count() == 1


@pytest.mark.parametrize("first", [DecisionOutcome.APPROVE, DecisionOutcome.REJECT])
@pytest.mark.parametrize("second", [DecisionOutcome.APPROVE, DecisionOutcome.REJECT])
def test_decided_request_is_terminal(db: Session, employee, employee_account, admin_account, first, second):
    request = submit_request(db, employee.id, employee_account.id, "email", "new@company.com")
    decide_request(db, request.id, admin_account.id, first, comment="first")
    assert RequestStatus(request.status) in TERMINAL_REQUEST_STATUSES
    snapshot = (request.status, request.decided_at, request.decision_comment)

    with pytest.raises(InvalidStateError, match="already processed"):
        decide_request(db, request.id, admin_account.id, second, comment="second")

    db.refresh(request)
    assert (request.status, request.decided_at, request.decision_comment) == snapshot


def test_approval_applies_verbatim_despite_drift(db: Session, employee, employee_account, admin_account):
    request = submit_request(db, employee.id, employee_account.id, "poste", "Architect")

    # Field changes directly between submission and decision
    employee.job_title = "Team Lead"
    db.commit()

    decide_request(db, request.id, admin_account.id, DecisionOutcome.APPROVE)

    db.refresh(employee)
    db.refresh(request)
    assert employee.job_title == "Architect"
    assert request.previous_value == "Developer"


def test_approve_name_fields(db: Session, employee, employee_account, admin_account):
    request = submit_request(db, employee.id, employee_account.id, RequestField.NOM, "Bernard")

    decide_request(db, request.id, admin_account.id, DecisionOutcome.APPROVE)

    db.refresh(employee)
    assert employee.last_name == "Bernard"


def test_decide_unknown_request(db: Session, admin_account):
    with pytest.raises(NotFoundError):
        decide_request(db, 777, admin_account.id, DecisionOutcome.APPROVE)


def test_decide_with_invalid_outcome(db: Session, employee, employee_account, admin_account):
    request = submit_request(db, employee.id, employee_account.id, "poste", "QA")

    with pytest.raises(ValidationError):
        decide_request(db, request.id, admin_account.id, "MAYBE")
    db.refresh(request)
    assert request.status == RequestStatus.PENDING.value


def test_decision_without_linked_account_succeeds(db: Session, employee, admin_account):
    request = submit_request(db, employee.id, None, "poste", "Analyst")

    decided = decide_request(db, request.id, admin_account.id, DecisionOutcome.APPROVE)

    assert decided.status == RequestStatus.APPROVED.value
    assert db.query(Notification).count() == 0
    audit = db.query(AuditLog).filter(AuditLog.action == AuditAction.REQUEST_APPROVED.value).one()
    assert audit.details["notified_account_id"] is None


def test_duplicate_linked_accounts_is_a_conflict(db: Session, employee, employee_account, make_account):
    make_account(employee, "alice.second@login.com")

    with pytest.raises(ConflictError):
        resolve_linked_account(db, employee.id)


def test_decision_survives_duplicate_linked_accounts(db: Session, employee, employee_account, admin_account, make_account):
    request = submit_request(db, employee.id, employee_account.id, "poste", "Analyst")
    make_account(employee, "alice.second@login.com")

    decided = decide_request(db, request.id, admin_account.id, DecisionOutcome.APPROVE)

    assert decided.status == RequestStatus.APPROVED.value
    db.refresh(employee)
    assert employee.job_title == "Analyst"
    assert db.query(Notification).count() == 0


def test_decision_survives_audit_failure(db: Session, employee, employee_account, admin_account, monkeypatch):
    request = submit_request(db, employee.id, employee_account.id, "poste", "Analyst")

    def broken_log_audit(*args, **kwargs):
        raise RuntimeError("audit store down")

    monkeypatch.setattr(audit_service, "log_audit", broken_log_audit)

    decided = decide_request(db, request.id, admin_account.id, DecisionOutcome.APPROVE)

    assert decided.status == RequestStatus.APPROVED.value
    db.refresh(employee)
    assert employee.job_title == "Analyst"
    assert db.query(Notification).filter(Notification.recipient_id == employee_account.id).count() == 1


def test_pending_count_and_admin_listing(db: Session, make_employee, make_account, admin_account):
    first = make_employee()
    second = make_employee()
    first_account = make_account(first, "first@login.com")
    second_account = make_account(second, "second@login.com")

    r1 = submit_request(db, first.id, first_account.id, "poste", "A")
    submit_request(db, first.id, first_account.id, "telephone", "0700000001")
    submit_request(db, second.id, second_account.id, "poste", "B")
    assert count_pending_requests(db) == 3

    decide_request(db, r1.id, admin_account.id, DecisionOutcome.REJECT)
    assert count_pending_requests(db) == 2

    items, total = list_requests_for_admin(db, status=RequestStatus.PENDING, employee_id=first.id)
    assert total == 1
    assert items[0].target_field == "telephone"

    items, total = list_requests_for_admin(db, page=1, page_size=2)
    assert total == 3
    assert len(items) == 2
