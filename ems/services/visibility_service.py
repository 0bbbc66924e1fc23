"""
Visibility service - per-field public/private flags for the QR profile

A missing row means the field is private. Unknown keys are rejected by the
caller (the API binds field_key to VisibilityField) before reaching here, and
the caller writes the VISIBILITY_UPDATED audit entry.
"""
from typing import List, Set

from sqlalchemy.orm import Session

from ems.db.session import commit_or_raise
from ems.models.visibility import EmployeeVisibility, VisibilityField


def get_visibility(db: Session, employee_id: int) -> List[EmployeeVisibility]:
    """Existing visibility rows for an employee; absent keys are private"""
    return (
        db.query(EmployeeVisibility)
        .filter(EmployeeVisibility.employee_id == employee_id)
        .order_by(EmployeeVisibility.field_key)
        .all()
    )


def set_visibility(
    db: Session,
    employee_id: int,
    field_key: VisibilityField,
    is_public: bool,
) -> EmployeeVisibility:
    """
    Upsert the flag for (employee_id, field_key). Idempotent.

    Returns:
        The stored row
    """
    key = VisibilityField(field_key).value
    row = (
        db.query(EmployeeVisibility)
        .filter(
            EmployeeVisibility.employee_id == employee_id,
            EmployeeVisibility.field_key == key,
        )
        .first()
    )
    if row is None:
        row = EmployeeVisibility(employee_id=employee_id, field_key=key, is_public=is_public)
        db.add(row)
    else:
        row.is_public = is_public

    commit_or_raise(db, "visibility upsert")
    db.refresh(row)
    return row


def public_field_keys(db: Session, employee_id: int) -> Set[str]:
    """Field keys explicitly marked public (fail-closed: everything else is hidden)"""
    rows = (
        db.query(EmployeeVisibility.field_key)
        .filter(
            EmployeeVisibility.employee_id == employee_id,
            EmployeeVisibility.is_public == True,  # noqa: E712
        )
        .all()
    )
    return {field_key for (field_key,) in rows}
