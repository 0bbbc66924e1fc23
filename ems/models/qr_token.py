"""
Public QR access token model
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Index, text
from sqlalchemy.orm import relationship
import enum
from ems.db.base import Base
from ems.utils.datetime_utils import now_utc


class TokenStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    REVOKED = "REVOKED"


class QRToken(Base):
    __tablename__ = "qr_tokens"
    __table_args__ = (
        # At most one ACTIVE token per employee, enforced by the store
        Index(
            "uq_qr_tokens_one_active",
            "employee_id",
            unique=True,
            sqlite_where=text("status = 'ACTIVE'"),
            postgresql_where=text("status = 'ACTIVE'"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    token = Column(String, unique=True, nullable=False, index=True)
    status = Column(String, default=TokenStatus.ACTIVE.value, nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=True)  # NULL = no time expiry
    created_at = Column(DateTime(timezone=True), default=now_utc, server_default=text("CURRENT_TIMESTAMP"), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=now_utc,
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=now_utc,
        nullable=False,
    )

    employee = relationship("Employee", backref="qr_tokens")
