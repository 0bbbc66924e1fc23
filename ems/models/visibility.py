"""
Per-field public visibility model
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, UniqueConstraint, text
import enum
from ems.db.base import Base
from ems.utils.datetime_utils import now_utc


class VisibilityField(str, enum.Enum):
    """Fields that may appear on the public QR profile"""
    NOM = "nom"
    PRENOM = "prenom"
    POSTE = "poste"
    EMAIL = "email"
    TELEPHONE = "telephone"
    PHOTO_URL = "photo_url"
    DEPARTEMENT = "departement"
    MATRICULE = "matricule"


class EmployeeVisibility(Base):
    __tablename__ = "employee_visibility"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False, index=True)
    field_key = Column(String, nullable=False)
    is_public = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), default=now_utc, server_default=text("CURRENT_TIMESTAMP"), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=now_utc,
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=now_utc,
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("employee_id", "field_key", name="uq_employee_visibility_employee_field"),
    )
