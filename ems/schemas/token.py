"""
QR token schemas
"""
from datetime import datetime
from typing import Optional
from pydantic import BaseModel, field_serializer, ConfigDict
from ems.utils.datetime_utils import iso_8601_utc
from ems.models.qr_token import TokenStatus


class QRTokenOut(BaseModel):
    """Schema for QR token output. public_url is filled by the endpoint."""
    id: int
    employee_id: int
    token: str
    status: TokenStatus
    expires_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime
    public_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("expires_at", "created_at", "updated_at", when_used="always")
    def _ser_datetime(self, dt):
        return iso_8601_utc(dt)


class QRTokenRevokeOut(BaseModel):
    """Revoke result; token is null when nothing was active"""
    revoked: bool
    token: Optional[QRTokenOut] = None
