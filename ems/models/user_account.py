"""
User account model (login identity linked to an employee)
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, text
from sqlalchemy.orm import relationship
import enum
from ems.db.base import Base
from ems.utils.datetime_utils import now_utc


class AccountRole(str, enum.Enum):
    ADMIN_RH = "ADMIN_RH"
    EMPLOYE = "EMPLOYE"


class UserAccount(Base):
    __tablename__ = "user_accounts"

    id = Column(Integer, primary_key=True, index=True)
    # Not unique at the DB level: a second account for one employee is
    # reported as a data-integrity error by resolve_linked_account.
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    email = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=True)
    role = Column(String, default=AccountRole.EMPLOYE.value, nullable=False)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=now_utc, server_default=text("CURRENT_TIMESTAMP"), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=now_utc,
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=now_utc,
        nullable=False,
    )

    employee = relationship("Employee", backref="accounts")

    @property
    def is_admin(self) -> bool:
        return self.role == AccountRole.ADMIN_RH.value
