"""
Notification inbox model
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Index, Text, text
import enum
from ems.db.base import Base
from ems.utils.datetime_utils import now_utc


class NotificationReason(str, enum.Enum):
    """Correlation codes for system-generated notifications"""
    REQUEST_DECIDED = "REQUEST_DECIDED"
    QR_REFRESH_REQUIRED = "QR_REFRESH_REQUIRED"


QR_REFRESH_NOTIFICATION_TITLE = "QR refresh required"
REQUEST_APPROVED_TITLE = "Modification request approved"
REQUEST_REJECTED_TITLE = "Modification request rejected"
EMPLOYEE_PROFILE_LINK = "/employee/profile"


def qr_refresh_link(employee_id: int) -> str:
    """Admin link shown on a QR-refresh notification"""
    return f"/admin/employees/{employee_id}#qr"


class Notification(Base):
    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True, index=True)
    recipient_id = Column(Integer, ForeignKey("user_accounts.id"), nullable=False, index=True)
    title = Column(String, nullable=False)
    body = Column(Text, nullable=False)
    link = Column(String, nullable=True)
    is_read = Column(Boolean, default=False, nullable=False)
    # Structured dedup key; NULL for plain one-off messages
    reason = Column(String, nullable=True)
    subject_employee_id = Column(Integer, ForeignKey("employees.id"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc, server_default=text("CURRENT_TIMESTAMP"), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=now_utc,
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=now_utc,
        nullable=False,
    )

    __table_args__ = (
        Index("ix_notifications_dedup", "recipient_id", "reason", "subject_employee_id", "is_read"),
    )
