"""
Notification schemas
"""
from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, field_serializer, ConfigDict
from ems.utils.datetime_utils import iso_8601_utc


class NotificationOut(BaseModel):
    id: int
    recipient_id: int
    title: str
    body: str
    link: Optional[str]
    is_read: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created_at", "updated_at", when_used="always")
    def _ser_datetime(self, dt):
        return iso_8601_utc(dt)


class NotificationListResponse(BaseModel):
    items: List[NotificationOut]
    total: int


class UnreadCountOut(BaseModel):
    unread: int


class MarkAllReadOut(BaseModel):
    updated: int
