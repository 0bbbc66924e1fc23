"""
Modification request model
"""
from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Text, text
from sqlalchemy.orm import relationship
import enum
from ems.db.base import Base
from ems.utils.datetime_utils import now_utc


class RequestStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class RequestField(str, enum.Enum):
    """Employee fields an employee may ask HR to change"""
    POSTE = "poste"
    EMAIL = "email"
    TELEPHONE = "telephone"
    PHOTO_URL = "photo_url"
    NOM = "nom"
    PRENOM = "prenom"


class DecisionOutcome(str, enum.Enum):
    APPROVE = "APPROVE"
    REJECT = "REJECT"


REQUEST_FIELD_LABELS = {
    RequestField.POSTE: "Poste",
    RequestField.EMAIL: "Email",
    RequestField.TELEPHONE: "Telephone",
    RequestField.PHOTO_URL: "Photo URL",
    RequestField.NOM: "Nom",
    RequestField.PRENOM: "Prenom",
}

# Approve/reject are final
TERMINAL_REQUEST_STATUSES = frozenset({
    RequestStatus.APPROVED,
    RequestStatus.REJECTED,
})


class ModificationRequest(Base):
    __tablename__ = "modification_requests"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    requester_id = Column(Integer, ForeignKey("user_accounts.id"), nullable=True)
    target_field = Column(String, nullable=False)
    previous_value = Column(Text, nullable=True)  # snapshot taken at submission
    requested_value = Column(Text, nullable=False)
    note = Column(Text, nullable=True)
    status = Column(String, default=RequestStatus.PENDING.value, nullable=False, index=True)
    reviewer_id = Column(Integer, ForeignKey("user_accounts.id"), nullable=True)
    decided_at = Column(DateTime(timezone=True), nullable=True)
    decision_comment = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), default=now_utc, server_default=text("CURRENT_TIMESTAMP"), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=now_utc,
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=now_utc,
        nullable=False,
    )

    employee = relationship("Employee", backref="modification_requests")
    requester = relationship("UserAccount", foreign_keys=[requester_id])
    reviewer = relationship("UserAccount", foreign_keys=[reviewer_id])
