"""
Authentication schemas
"""
from pydantic import BaseModel, ConfigDict


class LoginRequest(BaseModel):
    """Schema for login request"""
    email: str
    password: str


class TokenResponse(BaseModel):
    """Schema for token response"""
    access_token: str
    token_type: str = "bearer"


class AccountOut(BaseModel):
    """Current account"""
    id: int
    employee_id: int
    email: str
    role: str
    active: bool

    model_config = ConfigDict(from_attributes=True)
