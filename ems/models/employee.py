"""
Employee model
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, text
from sqlalchemy.orm import relationship
from ems.db.base import Base
from ems.utils.datetime_utils import now_utc


# Public field keys -> Employee attribute. The keys are shared with the
# front-end and the visibility table, so they stay in French.
EMPLOYEE_FIELD_ATTRS = {
    "matricule": "matricule",
    "nom": "last_name",
    "prenom": "first_name",
    "poste": "job_title",
    "email": "email",
    "telephone": "phone",
    "photo_url": "photo_url",
}

# Fields the employee edits directly. All of them are rendered on the public
# badge, so a change to any of them leaves a printed QR profile stale.
SELF_MANAGED_FIELDS = frozenset({"poste", "email", "telephone", "photo_url"})


class Employee(Base):
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, index=True)
    department_id = Column(Integer, ForeignKey("departments.id"), nullable=False)
    matricule = Column(String, unique=True, nullable=False, index=True)

    # HR-managed identity fields
    last_name = Column(String, nullable=False)
    first_name = Column(String, nullable=False)

    # Self-managed fields (employee may edit directly)
    job_title = Column(String, nullable=True)
    email = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    photo_url = Column(String, nullable=True)

    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=now_utc, server_default=text("CURRENT_TIMESTAMP"), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=now_utc,
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=now_utc,
        nullable=False,
    )

    department = relationship("Department", backref="employees")

    @property
    def full_name(self) -> str:
        return f"{self.last_name} {self.first_name}".strip()
