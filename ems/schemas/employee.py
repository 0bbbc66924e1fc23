"""
Employee schemas
"""
from datetime import datetime
from typing import List, Optional
from pydantic import BaseModel, EmailStr, Field, HttpUrl, TypeAdapter, field_validator, field_serializer, ConfigDict
from ems.utils.datetime_utils import iso_8601_utc

_email_adapter = TypeAdapter(EmailStr)
_url_adapter = TypeAdapter(HttpUrl)


def _check_contact_email(v: Optional[str]) -> Optional[str]:
    # Empty clears the field
    if v is None or not v.strip():
        return v
    v = v.strip()
    try:
        _email_adapter.validate_python(v)
    except ValueError:
        raise ValueError("Please enter a valid email address")
    return v


def _check_photo_url(v: Optional[str]) -> Optional[str]:
    if v is None or not v.strip():
        return v
    v = v.strip()
    try:
        _url_adapter.validate_python(v)
    except ValueError:
        raise ValueError("Please enter a valid URL")
    return v


class EmployeeCreate(BaseModel):
    """Schema for creating an employee (HR admin)"""
    department_id: int = Field(..., description="Department ID (required)")
    matricule: str = Field(..., min_length=1, description="Badge id (unique)")
    last_name: str = Field(..., min_length=1, description="Nom")
    first_name: str = Field(..., min_length=1, description="Prenom")
    job_title: Optional[str] = Field(None, description="Poste")
    email: Optional[str] = Field(None, description="Contact email")
    phone: Optional[str] = Field(None, description="Telephone")
    photo_url: Optional[str] = Field(None, description="Photo URL")
    account_email: Optional[str] = Field(None, description="Login email; creates a linked EMPLOYE account when set")
    password: Optional[str] = Field(None, min_length=6, max_length=72, description="Initial password for the linked account")

    @field_validator("matricule", "last_name", "first_name")
    @classmethod
    def strip_required(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Field cannot be empty")
        return v

    @field_validator("email")
    @classmethod
    def check_email(cls, v: Optional[str]) -> Optional[str]:
        return _check_contact_email(v)

    @field_validator("photo_url")
    @classmethod
    def check_photo_url(cls, v: Optional[str]) -> Optional[str]:
        return _check_photo_url(v)


class EmployeeUpdate(BaseModel):
    """
    Schema for an HR partial update.

    There is no `active` field: deactivation has its own endpoint and an
    update can never reactivate an employee.
    """
    department_id: Optional[int] = Field(None, description="Department ID")
    matricule: Optional[str] = Field(None, description="Badge id")
    last_name: Optional[str] = Field(None, description="Nom")
    first_name: Optional[str] = Field(None, description="Prenom")
    job_title: Optional[str] = Field(None, description="Poste")
    email: Optional[str] = Field(None, description="Contact email")
    phone: Optional[str] = Field(None, description="Telephone")
    photo_url: Optional[str] = Field(None, description="Photo URL")

    @field_validator("email")
    @classmethod
    def check_email(cls, v: Optional[str]) -> Optional[str]:
        return _check_contact_email(v)

    @field_validator("photo_url")
    @classmethod
    def check_photo_url(cls, v: Optional[str]) -> Optional[str]:
        return _check_photo_url(v)


class EmployeeSelfUpdate(BaseModel):
    """Fields an employee may edit directly on their own profile"""
    job_title: Optional[str] = Field(None, description="Poste")
    email: Optional[str] = Field(None, description="Contact email")
    phone: Optional[str] = Field(None, description="Telephone")
    photo_url: Optional[str] = Field(None, description="Photo URL")

    @field_validator("email")
    @classmethod
    def check_email(cls, v: Optional[str]) -> Optional[str]:
        return _check_contact_email(v)

    @field_validator("photo_url")
    @classmethod
    def check_photo_url(cls, v: Optional[str]) -> Optional[str]:
        return _check_photo_url(v)


class EmployeeOut(BaseModel):
    """Schema for employee output"""
    id: int
    department_id: int
    matricule: str
    last_name: str
    first_name: str
    job_title: Optional[str]
    email: Optional[str]
    phone: Optional[str]
    photo_url: Optional[str]
    active: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_serializer("created_at", "updated_at", when_used="always")
    def _ser_datetime(self, dt):
        return iso_8601_utc(dt)


class SelfUpdateOut(BaseModel):
    """Result of a direct profile edit"""
    employee: EmployeeOut
    changed_fields: List[str]
    qr_refresh_notified: int = 0
    qr_refresh_deduped: int = 0
