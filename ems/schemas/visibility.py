"""
Visibility schemas
"""
from pydantic import BaseModel, ConfigDict
from ems.models.visibility import VisibilityField


class VisibilityUpdate(BaseModel):
    is_public: bool


class VisibilityOut(BaseModel):
    employee_id: int
    field_key: VisibilityField
    is_public: bool

    model_config = ConfigDict(from_attributes=True)
