"""
Audit logging service
"""
import logging
from typing import Optional, Dict, Any, List, Tuple, Union

from sqlalchemy.orm import Session

from ems.models.audit_log import AuditLog, AuditAction, AuditTarget
from ems.utils.datetime_utils import now_utc
from ems.utils.enums import enum_to_str
from ems.utils.json_serializer import sanitize_for_json

logger = logging.getLogger(__name__)


def log_audit(
    db: Session,
    actor_id: Optional[int],
    action: AuditAction,
    target_type: Union[AuditTarget, str],
    target_id: Optional[int] = None,
    details: Optional[Dict[str, Any]] = None
) -> AuditLog:
    """
    Create an audit log entry

    Args:
        db: Database session
        actor_id: ID of the user account performing the action (None for system actions)
        action: Closed audit action tag
        target_type: Kind of entity affected (employee, modification_request, qr_token)
        target_id: ID of the affected entity (optional)
        details: Old/new values and ids needed to reconstruct what changed

    Returns:
        Created AuditLog instance
    """
    if not isinstance(action, AuditAction):
        # Raises ValueError for tags outside the closed set
        action = AuditAction(action)

    audit_log = AuditLog(
        actor_id=actor_id,
        action=action.value,
        target_type=enum_to_str(target_type),
        target_id=target_id,
        details=sanitize_for_json(details or {}),
        created_at=now_utc()
    )
    db.add(audit_log)
    db.commit()
    db.refresh(audit_log)
    return audit_log


def record_audit_safely(
    db: Session,
    actor_id: Optional[int],
    action: AuditAction,
    target_type: Union[AuditTarget, str],
    target_id: Optional[int] = None,
    details: Optional[Dict[str, Any]] = None
) -> Optional[AuditLog]:
    """
    Write an audit entry without ever failing the calling operation.

    Workflows call this after their primary write has been committed. Any
    failure is logged and the session rolled back; the caller's reported
    outcome does not change.
    """
    try:
        return log_audit(db, actor_id, action, target_type, target_id, details)
    except Exception:
        logger.exception(
            "Failed to write audit log action=%s target=%s:%s",
            enum_to_str(action), enum_to_str(target_type), target_id,
        )
        db.rollback()
        return None


def list_audit_logs(
    db: Session,
    action: Optional[AuditAction] = None,
    target_type: Optional[str] = None,
    target_id: Optional[int] = None,
    page: int = 1,
    page_size: int = 20,
) -> Tuple[List[AuditLog], int]:
    """List audit entries, newest first. Returns (items, total)."""
    query = db.query(AuditLog)

    if action is not None:
        query = query.filter(AuditLog.action == enum_to_str(action))
    if target_type is not None:
        query = query.filter(AuditLog.target_type == target_type)
    if target_id is not None:
        query = query.filter(AuditLog.target_id == target_id)

    total = query.count()
    items = (
        query.order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
        .offset((page - 1) * page_size)
        .limit(page_size)
        .all()
    )
    return items, total
