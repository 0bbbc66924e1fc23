"""
Modification request schemas
"""
from datetime import datetime
from typing import Optional, List
from pydantic import BaseModel, Field, field_serializer, ConfigDict
from ems.utils.datetime_utils import iso_8601_utc
from ems.models.modification_request import RequestField, RequestStatus


class RequestSubmit(BaseModel):
    """Schema for submitting a change request on the caller's own profile"""
    target_field: RequestField = Field(..., description="Employee field to change")
    requested_value: str = Field(..., description="New value")
    note: Optional[str] = Field(None, description="Optional note for HR")


class RequestDecision(BaseModel):
    """Schema for approve/reject"""
    comment: Optional[str] = Field(None, description="Decision comment (the rejection reason)")


class ModificationRequestOut(BaseModel):
    """Schema for modification request output"""
    id: int
    employee_id: int
    requester_id: Optional[int]
    target_field: RequestField
    previous_value: Optional[str]
    requested_value: str
    note: Optional[str]
    status: RequestStatus
    reviewer_id: Optional[int]
    decided_at: Optional[datetime]
    decision_comment: Optional[str]
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("decided_at", "created_at", "updated_at", when_used="always")
    def _ser_datetime(self, dt):
        return iso_8601_utc(dt)


class RequestListResponse(BaseModel):
    """Schema for paginated request list"""
    items: List[ModificationRequestOut]
    total: int
    page: int = 1
    page_size: int = 20


class PendingCountOut(BaseModel):
    pending: int
