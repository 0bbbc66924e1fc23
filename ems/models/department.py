"""
Department model
"""
from sqlalchemy import Column, Integer, String, Boolean, DateTime, text
from ems.db.base import Base
from ems.utils.datetime_utils import now_utc


class Department(Base):
    __tablename__ = "departments"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False, index=True)
    code = Column(String, unique=True, nullable=True)
    description = Column(String, nullable=True)
    active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), default=now_utc, server_default=text("CURRENT_TIMESTAMP"), nullable=False)
    updated_at = Column(
        DateTime(timezone=True),
        default=now_utc,
        server_default=text("CURRENT_TIMESTAMP"),
        onupdate=now_utc,
        nullable=False,
    )
