"""
QR token service - lifecycle of an employee's public profile link

State per employee: none -> ACTIVE -> REVOKED -> ACTIVE -> ...
Invariant: at most one ACTIVE token per employee. "Current" is always
re-derived from the table, never held in memory, so concurrent admin
sessions and restarts cannot desynchronize it. Regenerate revokes first and
inserts second: a brief window with no active token is acceptable, two
active tokens is not.
"""
import logging
import secrets
from datetime import timedelta
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ems.core.config import settings
from ems.core.exceptions import ConflictError, NotFoundError, PreconditionError
from ems.db.session import commit_or_raise
from ems.models.audit_log import AuditAction, AuditTarget
from ems.models.employee import Employee
from ems.models.qr_token import QRToken, TokenStatus
from ems.services.audit_service import record_audit_safely
from ems.services.notification_service import mark_qr_refresh_consumed
from ems.utils.datetime_utils import now_utc, ensure_utc

logger = logging.getLogger(__name__)

TOKEN_BYTES = 16


def create_token_value() -> str:
    """Unguessable bearer value; it is the only credential protecting the public URL"""
    return secrets.token_hex(TOKEN_BYTES)


def _newest_first(query):
    return query.order_by(QRToken.created_at.desc(), QRToken.id.desc())


def _active_tokens_query(db: Session, employee_id: int):
    return db.query(QRToken).filter(
        QRToken.employee_id == employee_id,
        QRToken.status == TokenStatus.ACTIVE.value,
    )


def _revoke_active(db: Session, employee_id: int) -> Optional[QRToken]:
    """Flip every ACTIVE row of the employee to REVOKED; returns the newest one flipped"""
    newest = _newest_first(_active_tokens_query(db, employee_id)).first()

    # One statement filtered on status, so rows inserted by another session
    # before this commit are revoked too.
    flipped = _active_tokens_query(db, employee_id).update(
        {"status": TokenStatus.REVOKED.value, "updated_at": now_utc()},
        synchronize_session=False,
    )
    if flipped > 1:
        logger.error(
            "Employee %s had %s ACTIVE QR tokens; revoking all of them",
            employee_id, flipped,
        )
    commit_or_raise(db, "QR token revoke")

    if not flipped or newest is None:
        return None
    db.refresh(newest)
    return newest


def generate_or_regenerate(db: Session, employee_id: int) -> QRToken:
    """
    Issue a new ACTIVE token for the employee, revoking the previous one.

    Raises:
        NotFoundError: employee does not exist
        PreconditionError: employee is deactivated
    """
    employee = db.query(Employee).filter(Employee.id == employee_id).first()
    if not employee:
        raise NotFoundError(f"Employee with id {employee_id} not found")
    if not employee.active:
        raise PreconditionError("Inactive employees cannot hold a public QR link")

    # Step 1: revoke whatever is currently active
    _revoke_active(db, employee_id)

    # Step 2: insert the new active token
    issued_at = now_utc()
    expires_at = None
    if settings.QR_TOKEN_TTL_DAYS:
        expires_at = issued_at + timedelta(days=settings.QR_TOKEN_TTL_DAYS)

    token = QRToken(
        employee_id=employee_id,
        token=create_token_value(),
        status=TokenStatus.ACTIVE.value,
        expires_at=expires_at,
        created_at=issued_at,
        updated_at=issued_at,
    )
    db.add(token)
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        logger.error("Concurrent QR token insert for employee %s: %s", employee_id, exc)
        raise ConflictError(
            f"Employee {employee_id} already has an ACTIVE QR token; please retry"
        ) from exc
    commit_or_raise(db, "QR token insert")
    db.refresh(token)
    logger.info("Issued QR token %s for employee %s", token.id, employee_id)
    return token


def revoke(db: Session, employee_id: int) -> Optional[QRToken]:
    """Revoke the active token, if any. Returns it, or None when nothing was active."""
    return _revoke_active(db, employee_id)


def get_current(db: Session, employee_id: int) -> Optional[QRToken]:
    """
    Newest ACTIVE token; otherwise the newest token of any status so the UI
    can show the last known state; None if the employee never had one.
    """
    active = _newest_first(_active_tokens_query(db, employee_id)).first()
    if active is not None:
        return active
    return _newest_first(
        db.query(QRToken).filter(QRToken.employee_id == employee_id)
    ).first()


def is_expired(token: QRToken) -> bool:
    if token.expires_at is None:
        return False
    return ensure_utc(token.expires_at) <= now_utc()


def public_profile_url(token: QRToken) -> str:
    return f"{settings.PUBLIC_PROFILE_BASE_URL.rstrip('/')}/{token.token}"


def regenerate_for_admin(db: Session, employee_id: int, admin_id: int) -> QRToken:
    """
    Admin regenerate: issue the token, then close the QR-refresh loop.

    Consuming the admin's pending "QR refresh required" notifications and the
    QR_REGENERATED audit entry are best-effort.
    """
    previous = get_current(db, employee_id)
    previous_id = previous.id if previous is not None and previous.status == TokenStatus.ACTIVE.value else None

    token = generate_or_regenerate(db, employee_id)

    consumed = 0
    try:
        consumed = mark_qr_refresh_consumed(db, employee_id, admin_id)
    except Exception:
        logger.exception("Failed to consume QR refresh notifications for employee %s", employee_id)
        db.rollback()

    record_audit_safely(
        db,
        actor_id=admin_id,
        action=AuditAction.QR_REGENERATED,
        target_type=AuditTarget.QR_TOKEN,
        target_id=token.id,
        details={
            "employee_id": employee_id,
            "revoked_token_id": previous_id,
            "expires_at": token.expires_at,
            "refresh_notifications_consumed": consumed,
        },
    )
    return token


def revoke_for_admin(db: Session, employee_id: int, admin_id: int) -> Optional[QRToken]:
    """Admin revoke with a best-effort QR_REVOKED audit entry (only when something was revoked)"""
    employee = db.query(Employee).filter(Employee.id == employee_id).first()
    if not employee:
        raise NotFoundError(f"Employee with id {employee_id} not found")

    token = revoke(db, employee_id)
    if token is not None:
        record_audit_safely(
            db,
            actor_id=admin_id,
            action=AuditAction.QR_REVOKED,
            target_type=AuditTarget.QR_TOKEN,
            target_id=token.id,
            details={"employee_id": employee_id},
        )
    return token
