"""
Notification service - inbox writes, QR-refresh fan-out with deduplication

Notifications are polled by the client; nothing here pushes. The QR-refresh
path guarantees at most one *unread* "QR refresh required" item per
(admin, employee) pair, however many times the employee edits badge fields
before an admin regenerates the token.
"""
import logging
from typing import Iterable, List, NamedTuple, Optional

from sqlalchemy.orm import Session

from ems.core.exceptions import NotFoundError, ValidationError
from ems.db.session import commit_or_raise
from ems.models.audit_log import AuditAction, AuditTarget
from ems.models.employee import Employee, SELF_MANAGED_FIELDS
from ems.models.notification import (
    Notification,
    NotificationReason,
    QR_REFRESH_NOTIFICATION_TITLE,
    qr_refresh_link,
)
from ems.services.account_service import list_admin_account_ids
from ems.services.audit_service import record_audit_safely
from ems.utils.datetime_utils import now_utc

logger = logging.getLogger(__name__)


class QrRefreshResult(NamedTuple):
    notified_count: int
    deduped_count: int


def notify(
    db: Session,
    recipient_id: int,
    title: str,
    body: str,
    link: Optional[str] = None,
    reason: Optional[NotificationReason] = None,
    subject_employee_id: Optional[int] = None,
) -> Notification:
    """
    Insert one notification unconditionally.

    Used for one-off messages such as request decisions, where every call is
    a distinct event and duplicates are acceptable.
    """
    notification = Notification(
        recipient_id=recipient_id,
        title=title,
        body=body,
        link=link,
        is_read=False,
        reason=reason.value if reason is not None else None,
        subject_employee_id=subject_employee_id,
    )
    db.add(notification)
    commit_or_raise(db, "notification insert")
    db.refresh(notification)
    return notification


def sanitize_changed_fields(changed_fields: Iterable[str]) -> List[str]:
    """Keep badge-visible field keys only, deduplicated, in first-seen order"""
    result: List[str] = []
    for item in changed_fields or []:
        if not isinstance(item, str):
            continue
        key = item.strip()
        if key in SELF_MANAGED_FIELDS and key not in result:
            result.append(key)
    return result


def _build_qr_refresh_body(employee: Employee, changed_fields: List[str]) -> str:
    return (
        f"{employee.full_name} ({employee.matricule}) updated: "
        f"{', '.join(changed_fields)}. Please regenerate the QR code."
    )


def notify_qr_refresh_required(
    db: Session,
    employee_id: int,
    changed_fields: Iterable[str],
    actor_id: Optional[int] = None,
) -> QrRefreshResult:
    """
    Tell every HR admin that an employee's badge rendering is stale.

    For each admin, an unread QR-refresh notification for the same employee
    suppresses the new one (counted as deduped). Matching uses the structured
    reason code and subject employee id; the title and link keep their fixed
    values for clients that display them.

    Raises:
        ValidationError: no badge-visible field in changed_fields
        NotFoundError: employee does not exist
    """
    fields = sanitize_changed_fields(changed_fields)
    if not fields:
        raise ValidationError("changed_fields must include at least one badge-visible field")

    employee = db.query(Employee).filter(Employee.id == employee_id).first()
    if not employee:
        raise NotFoundError(f"Employee with id {employee_id} not found")

    admin_ids = list_admin_account_ids(db)
    if not admin_ids:
        logger.warning("No HR admin account to notify about QR refresh for employee %s", employee_id)
        return QrRefreshResult(notified_count=0, deduped_count=0)

    existing_rows = (
        db.query(Notification.recipient_id)
        .filter(
            Notification.recipient_id.in_(admin_ids),
            Notification.reason == NotificationReason.QR_REFRESH_REQUIRED.value,
            Notification.subject_employee_id == employee_id,
            Notification.is_read == False,  # noqa: E712
        )
        .all()
    )
    already_notified = {recipient_id for (recipient_id,) in existing_rows}

    link = qr_refresh_link(employee_id)
    body = _build_qr_refresh_body(employee, fields)
    to_notify = [admin_id for admin_id in admin_ids if admin_id not in already_notified]

    for admin_id in to_notify:
        db.add(Notification(
            recipient_id=admin_id,
            title=QR_REFRESH_NOTIFICATION_TITLE,
            body=body,
            link=link,
            is_read=False,
            reason=NotificationReason.QR_REFRESH_REQUIRED.value,
            subject_employee_id=employee_id,
        ))
    if to_notify:
        commit_or_raise(db, "QR refresh notification insert")

    result = QrRefreshResult(
        notified_count=len(to_notify),
        deduped_count=len(admin_ids) - len(to_notify),
    )
    logger.info(
        "QR refresh required for employee %s: notified=%s deduped=%s",
        employee_id, result.notified_count, result.deduped_count,
    )

    record_audit_safely(
        db,
        actor_id=actor_id,
        action=AuditAction.QR_REFRESH_REQUIRED_CREATED,
        target_type=AuditTarget.EMPLOYEE,
        target_id=employee_id,
        details={
            "changed_fields": fields,
            "admins_notified": result.notified_count,
            "deduped": result.deduped_count,
        },
    )
    return result


def mark_qr_refresh_consumed(db: Session, employee_id: int, admin_id: int) -> int:
    """
    Mark the admin's unread QR-refresh notifications for an employee as read.

    Called once the admin has regenerated the token. Returns the number of
    notifications flipped; a later notify_qr_refresh_required creates a fresh
    unread item again.
    """
    count = (
        db.query(Notification)
        .filter(
            Notification.recipient_id == admin_id,
            Notification.reason == NotificationReason.QR_REFRESH_REQUIRED.value,
            Notification.subject_employee_id == employee_id,
            Notification.is_read == False,  # noqa: E712
        )
        .update({"is_read": True, "updated_at": now_utc()}, synchronize_session=False)
    )
    commit_or_raise(db, "QR refresh notification consume")
    return count


def mark_read(db: Session, notification_id: int, recipient_id: int) -> Notification:
    """Mark one of the recipient's own notifications as read (idempotent)"""
    notification = (
        db.query(Notification)
        .filter(
            Notification.id == notification_id,
            Notification.recipient_id == recipient_id,
        )
        .first()
    )
    if not notification:
        raise NotFoundError("Notification not found")

    if not notification.is_read:
        notification.is_read = True
        commit_or_raise(db, "notification update")
        db.refresh(notification)
    return notification


def mark_all_read(db: Session, recipient_id: int) -> int:
    """Mark every unread notification of the recipient as read; returns the count"""
    count = (
        db.query(Notification)
        .filter(
            Notification.recipient_id == recipient_id,
            Notification.is_read == False,  # noqa: E712
        )
        .update({"is_read": True, "updated_at": now_utc()}, synchronize_session=False)
    )
    commit_or_raise(db, "notification bulk update")
    return count


def list_notifications(
    db: Session,
    recipient_id: int,
    unread_only: bool = False,
    limit: int = 100,
) -> List[Notification]:
    query = db.query(Notification).filter(Notification.recipient_id == recipient_id)
    if unread_only:
        query = query.filter(Notification.is_read == False)  # noqa: E712
    return (
        query.order_by(Notification.created_at.desc(), Notification.id.desc())
        .limit(limit)
        .all()
    )


def count_unread(db: Session, recipient_id: int) -> int:
    return (
        db.query(Notification)
        .filter(
            Notification.recipient_id == recipient_id,
            Notification.is_read == False,  # noqa: E712
        )
        .count()
    )
