"""
Tests for the QR token lifecycle (single active token per employee)
"""
from datetime import timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from ems.core.config import settings
from ems.core.exceptions import ConflictError, DependencyError, NotFoundError, PreconditionError
from ems.db.base import Base
from ems.models import Department, Employee
from ems.models.audit_log import AuditLog, AuditAction
from ems.models.qr_token import QRToken, TokenStatus
from ems.services import token_service
from ems.utils.datetime_utils import now_utc


def _active_count(db: Session, employee_id: int) -> int:
    return (
        db.query(QRToken)
        .filter(QRToken.employee_id == employee_id, QRToken.status == TokenStatus.ACTIVE.value)
        .count()
    )


def test_generate_creates_active_token(db: Session, employee):
    token = token_service.generate_or_regenerate(db, employee.id)

    assert token.status == TokenStatus.ACTIVE.value
    assert token.employee_id == employee.id
    assert len(token.token) == token_service.TOKEN_BYTES * 2
    assert token.expires_at is None


def test_at_most_one_active_token_over_sequence(db: Session, employee):
    """generate, regenerate x2, revoke, generate: never more than one ACTIVE"""
    first = token_service.generate_or_regenerate(db, employee.id)
    assert _active_count(db, employee.id) == 1

    second = token_service.generate_or_regenerate(db, employee.id)
    assert _active_count(db, employee.id) == 1
    db.refresh(first)
    assert first.status == TokenStatus.REVOKED.value
    assert second.token != first.token

    token_service.generate_or_regenerate(db, employee.id)
    assert _active_count(db, employee.id) == 1

    token_service.revoke(db, employee.id)
    assert _active_count(db, employee.id) == 0

    latest = token_service.generate_or_regenerate(db, employee.id)
    assert _active_count(db, employee.id) == 1
    assert db.query(QRToken).filter(QRToken.employee_id == employee.id).count() == 4
    assert token_service.get_current(db, employee.id).id == latest.id


def test_revoke_is_idempotent(db: Session, employee):
    token = token_service.generate_or_regenerate(db, employee.id)

    revoked = token_service.revoke(db, employee.id)
    assert revoked.id == token.id
    assert revoked.status == TokenStatus.REVOKED.value

    assert token_service.revoke(db, employee.id) is None


def test_get_current_falls_back_to_latest_revoked(db: Session, employee):
    assert token_service.get_current(db, employee.id) is None

    token = token_service.generate_or_regenerate(db, employee.id)
    token_service.revoke(db, employee.id)

    current = token_service.get_current(db, employee.id)
    assert current.id == token.id
    assert current.status == TokenStatus.REVOKED.value


def test_generate_for_inactive_employee_fails(db: Session, make_employee):
    inactive = make_employee(active=False)

    with pytest.raises(PreconditionError):
        token_service.generate_or_regenerate(db, inactive.id)
    assert db.query(QRToken).count() == 0


def test_generate_for_unknown_employee_fails(db: Session):
    with pytest.raises(NotFoundError):
        token_service.generate_or_regenerate(db, 9999)


def test_store_rejects_second_active_token(db: Session, employee):
    """The partial unique index keeps a second ACTIVE row out of the table"""
    token_service.generate_or_regenerate(db, employee.id)

    db.add(QRToken(employee_id=employee.id, token="dup-b", status=TokenStatus.ACTIVE.value))
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()

    assert _active_count(db, employee.id) == 1


@pytest.fixture
def file_sessions(tmp_path):
    """Two independent sessions on a file-backed SQLite database"""
    file_engine = create_engine(
        f"sqlite:///{tmp_path / 'ems.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=file_engine)
    FileSession = sessionmaker(autocommit=False, autoflush=False, bind=file_engine)

    session_a = FileSession()
    session_b = FileSession()
    try:
        yield FileSession, session_a, session_b
    finally:
        session_a.close()
        session_b.close()
        file_engine.dispose()


def _seed_employee(session: Session) -> int:
    dept = Department(name="Engineering", code="ENG", active=True)
    session.add(dept)
    session.flush()
    employee = Employee(
        department_id=dept.id,
        matricule="EMP001",
        last_name="Martin",
        first_name="Alice",
        job_title="Developer",
        email="alice@company.com",
        phone="0600000000",
        active=True,
    )
    session.add(employee)
    session.commit()
    return employee.id


def test_regenerate_revokes_token_inserted_by_another_session(file_sessions, monkeypatch):
    FileSession, session_a, session_b = file_sessions
    employee_id = _seed_employee(session_a)
    first = token_service.generate_or_regenerate(session_a, employee_id)

    # Session B regenerates after A has read the current token but before A revokes
    original_query = token_service._active_tokens_query
    calls = {"a": 0}

    def interleaved_query(session, emp_id):
        if session is session_a:
            calls["a"] += 1
            if calls["a"] == 2:
                token_service.generate_or_regenerate(session_b, emp_id)
        return original_query(session, emp_id)

    monkeypatch.setattr(token_service, "_active_tokens_query", interleaved_query)

    token_a = token_service.generate_or_regenerate(session_a, employee_id)

    check = FileSession()
    try:
        active = (
            check.query(QRToken)
            .filter(QRToken.employee_id == employee_id, QRToken.status == TokenStatus.ACTIVE.value)
            .all()
        )
        assert [t.id for t in active] == [token_a.id]
        assert check.query(QRToken).filter(QRToken.employee_id == employee_id).count() == 3
        assert check.get(QRToken, first.id).status == TokenStatus.REVOKED.value
    finally:
        check.close()


def test_concurrent_insert_maps_to_conflict(file_sessions, monkeypatch):
    FileSession, session_a, session_b = file_sessions
    employee_id = _seed_employee(session_a)

    # Session B completes a full regenerate between A's revoke and A's insert
    original_value = token_service.create_token_value
    state = {"interleaved": False}

    def interleaved_value():
        if not state["interleaved"]:
            state["interleaved"] = True
            token_service.generate_or_regenerate(session_b, employee_id)
        return original_value()

    monkeypatch.setattr(token_service, "create_token_value", interleaved_value)

    with pytest.raises(ConflictError):
        token_service.generate_or_regenerate(session_a, employee_id)

    check = FileSession()
    try:
        active_count = (
            check.query(QRToken)
            .filter(QRToken.employee_id == employee_id, QRToken.status == TokenStatus.ACTIVE.value)
            .count()
        )
        assert active_count == 1
    finally:
        check.close()


def test_token_ttl_sets_expiry(db: Session, employee, monkeypatch):
    monkeypatch.setattr(settings, "QR_TOKEN_TTL_DAYS", 30)

    before = now_utc()
    token = token_service.generate_or_regenerate(db, employee.id)

    assert token.expires_at is not None
    assert not token_service.is_expired(token)
    token.expires_at = before - timedelta(seconds=1)
    assert token_service.is_expired(token)


def test_store_failure_raises_dependency_error(db: Session, employee, monkeypatch):
    def failing_commit():
        raise SQLAlchemyError("disk I/O error")

    monkeypatch.setattr(db, "commit", failing_commit)

    with pytest.raises(DependencyError) as exc_info:
        token_service.generate_or_regenerate(db, employee.id)
    assert exc_info.value.retryable is True


def test_revoke_for_admin_audits_only_when_something_was_revoked(db: Session, employee, admin_account):
    assert token_service.revoke_for_admin(db, employee.id, admin_account.id) is None
    assert db.query(AuditLog).filter(AuditLog.action == AuditAction.QR_REVOKED.value).count() == 0

    token_service.generate_or_regenerate(db, employee.id)
    revoked = token_service.revoke_for_admin(db, employee.id, admin_account.id)

    assert revoked is not None
    entry = db.query(AuditLog).filter(AuditLog.action == AuditAction.QR_REVOKED.value).one()
    assert entry.actor_id == admin_account.id
    assert entry.target_id == revoked.id


def test_qr_endpoints(client, employee, employee_account, admin_headers, employee_headers):
    response = client.get(f"/api/v1/employees/{employee.id}/qr", headers=admin_headers)
    assert response.status_code == 200
    assert response.json() is None

    response = client.post(f"/api/v1/employees/{employee.id}/qr/regenerate", headers=admin_headers)
    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "ACTIVE"
    assert data["public_url"].endswith("/" + data["token"])

    response = client.get("/api/v1/employees/me/qr", headers=employee_headers)
    assert response.status_code == 200
    assert response.json()["id"] == data["id"]

    response = client.post(f"/api/v1/employees/{employee.id}/qr/revoke", headers=admin_headers)
    assert response.status_code == 200
    body = response.json()
    assert body["revoked"] is True
    assert body["token"]["status"] == "REVOKED"
    assert body["token"]["public_url"] is None

    response = client.post(f"/api/v1/employees/{employee.id}/qr/revoke", headers=admin_headers)
    assert response.json() == {"revoked": False, "token": None}


def test_qr_regenerate_requires_admin(client, employee, employee_headers):
    response = client.post(f"/api/v1/employees/{employee.id}/qr/regenerate", headers=employee_headers)
    assert response.status_code == 403


def test_qr_regenerate_inactive_employee_conflict(client, make_employee, admin_headers):
    inactive = make_employee(active=False)

    response = client.post(f"/api/v1/employees/{inactive.id}/qr/regenerate", headers=admin_headers)

    assert response.status_code == 409
    assert response.json()["code"] == "PRECONDITION_FAILED"
