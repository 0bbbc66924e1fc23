"""
Public profile service - what a scanned QR code shows

Unauthenticated. Only fields whose visibility row is public are returned;
anything without a row stays hidden.
"""
import logging
from typing import Dict, NamedTuple, Optional

from sqlalchemy.orm import Session

from ems.models.employee import Employee, EMPLOYEE_FIELD_ATTRS
from ems.models.qr_token import QRToken, TokenStatus
from ems.models.visibility import VisibilityField
from ems.services.token_service import is_expired
from ems.services.visibility_service import public_field_keys

logger = logging.getLogger(__name__)

PROFILE_ACTIVE = "ACTIVE"
PROFILE_EXPIRED = "EXPIRED"


class PublicProfile(NamedTuple):
    status: str
    fields: Dict[str, Optional[str]]


def _field_value(employee: Employee, key: str) -> Optional[str]:
    if key == VisibilityField.DEPARTEMENT.value:
        return employee.department.name if employee.department is not None else None
    return getattr(employee, EMPLOYEE_FIELD_ATTRS[key])


def render_public_profile(db: Session, token_value: str) -> Optional[PublicProfile]:
    """
    Resolve a public token to the employee's visible fields.

    Returns None for an empty, unknown or revoked token and for a deactivated
    employee; the caller answers all of them with the same not-found. An
    expired token yields status EXPIRED and no fields.
    """
    token_value = (token_value or "").strip()
    if not token_value:
        return None

    token = db.query(QRToken).filter(QRToken.token == token_value).first()
    if token is None or token.status != TokenStatus.ACTIVE.value:
        return None

    employee = db.query(Employee).filter(Employee.id == token.employee_id).first()
    if employee is None or not employee.active:
        return None

    if is_expired(token):
        return PublicProfile(status=PROFILE_EXPIRED, fields={})

    visible = public_field_keys(db, employee.id)
    fields = {
        field.value: _field_value(employee, field.value)
        for field in VisibilityField
        if field.value in visible
    }
    return PublicProfile(status=PROFILE_ACTIVE, fields=fields)
