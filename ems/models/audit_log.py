"""
Audit log model
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON
import enum
from ems.db.base import Base


class AuditAction(str, enum.Enum):
    EMPLOYEE_CREATED = "EMPLOYEE_CREATED"
    EMPLOYEE_UPDATED = "EMPLOYEE_UPDATED"
    EMPLOYEE_DEACTIVATED = "EMPLOYEE_DEACTIVATED"
    EMPLOYEE_SELF_UPDATED = "EMPLOYEE_SELF_UPDATED"
    REQUEST_SUBMITTED = "REQUEST_SUBMITTED"
    REQUEST_APPROVED = "REQUEST_APPROVED"
    REQUEST_REJECTED = "REQUEST_REJECTED"
    QR_REGENERATED = "QR_REGENERATED"
    QR_REVOKED = "QR_REVOKED"
    VISIBILITY_UPDATED = "VISIBILITY_UPDATED"
    QR_REFRESH_REQUIRED_CREATED = "QR_REFRESH_REQUIRED_CREATED"


class AuditTarget(str, enum.Enum):
    EMPLOYEE = "employee"
    MODIFICATION_REQUEST = "modification_request"
    QR_TOKEN = "qr_token"


class AuditLog(Base):
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    action = Column(String, nullable=False, index=True)
    actor_id = Column(Integer, ForeignKey("user_accounts.id"), nullable=True)
    target_type = Column(String, nullable=False)
    target_id = Column(Integer, nullable=True)
    details = Column(JSON, nullable=True)  # old/new values, ids
    # Set explicitly by the recorder; no server default (append-only, never updated)
    created_at = Column(DateTime(timezone=True), nullable=False)
