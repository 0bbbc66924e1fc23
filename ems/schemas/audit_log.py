"""
Audit log schemas
"""
from datetime import datetime
from typing import Optional, List, Any, Dict
from pydantic import BaseModel, field_serializer, ConfigDict
from ems.utils.datetime_utils import iso_8601_utc


class AuditLogOut(BaseModel):
    id: int
    action: str
    actor_id: Optional[int]
    target_type: str
    target_id: Optional[int]
    details: Optional[Dict[str, Any]]
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created_at", when_used="always")
    def _ser_datetime(self, dt):
        return iso_8601_utc(dt)


class AuditLogListResponse(BaseModel):
    items: List[AuditLogOut]
    total: int
    page: int
    page_size: int
