"""
Employee service - the employee-record collaborator and the direct-edit path

Direct edits of self-managed fields raise the QR refresh signal: every HR
admin gets (at most one unread) "QR refresh required" notification, because
the fields are rendered on the public badge. The token itself is never
regenerated automatically.
"""
import logging
from typing import Dict, List, NamedTuple, Optional

from sqlalchemy.orm import Session

from ems.core.exceptions import InvalidStateError, NotFoundError, ValidationError
from ems.core.security import hash_password, validate_password
from ems.db.session import commit_or_raise
from ems.models.audit_log import AuditAction, AuditTarget
from ems.models.department import Department
from ems.models.employee import Employee, EMPLOYEE_FIELD_ATTRS, SELF_MANAGED_FIELDS
from ems.models.user_account import UserAccount, AccountRole
from ems.schemas.employee import EmployeeCreate, EmployeeUpdate, EmployeeSelfUpdate
from ems.services.audit_service import record_audit_safely
from ems.services.notification_service import QrRefreshResult, notify_qr_refresh_required
from ems.services import token_service

logger = logging.getLogger(__name__)

FIELD_KEYS_BY_ATTR = {attr: key for key, attr in EMPLOYEE_FIELD_ATTRS.items()}


class SelfUpdateResult(NamedTuple):
    employee: Employee
    changed_fields: List[str]
    qr_refresh: Optional[QrRefreshResult]


def get_employee(db: Session, employee_id: int) -> Employee:
    employee = db.query(Employee).filter(Employee.id == employee_id).first()
    if not employee:
        raise NotFoundError(f"Employee with id {employee_id} not found")
    return employee


def get_employee_field_value(employee: Employee, field_key: str) -> Optional[str]:
    """Live value of a public field key (nom, poste, telephone, ...)"""
    attr = EMPLOYEE_FIELD_ATTRS.get(field_key)
    if attr is None:
        raise ValidationError(f"Unknown employee field '{field_key}'")
    return getattr(employee, attr)


def set_employee_field(employee: Employee, field_key: str, value: Optional[str]) -> None:
    """Write one field by its public key. Never touches `active`."""
    attr = EMPLOYEE_FIELD_ATTRS.get(field_key)
    if attr is None:
        raise ValidationError(f"Unknown employee field '{field_key}'")
    setattr(employee, attr, value)


def _normalize_optional(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _validate_department(db: Session, department_id: int) -> Department:
    department = db.query(Department).filter(Department.id == department_id).first()
    if not department:
        raise ValidationError(f"Department with id {department_id} not found")
    if not department.active:
        raise ValidationError(f"Department with id {department_id} is inactive")
    return department


def _ensure_matricule_free(db: Session, matricule: str, exclude_employee_id: Optional[int] = None) -> None:
    query = db.query(Employee).filter(Employee.matricule == matricule)
    if exclude_employee_id is not None:
        query = query.filter(Employee.id != exclude_employee_id)
    if query.first():
        raise ValidationError(f"Employee with matricule '{matricule}' already exists")


def create_employee(db: Session, employee_data: EmployeeCreate, actor_id: Optional[int]) -> Employee:
    """
    Create an employee, and a linked EMPLOYE account when account_email is given.

    Raises:
        ValidationError: duplicate matricule/login, unknown or inactive department, bad password
    """
    _ensure_matricule_free(db, employee_data.matricule)
    _validate_department(db, employee_data.department_id)

    account_email = _normalize_optional(employee_data.account_email)
    password_hash = None
    if account_email:
        account_email = account_email.lower()
        if db.query(UserAccount).filter(UserAccount.email == account_email).first():
            raise ValidationError(f"An account with login '{account_email}' already exists")
        if employee_data.password:
            try:
                password_hash = hash_password(validate_password(employee_data.password))
            except ValueError as e:
                raise ValidationError(str(e))

    employee = Employee(
        department_id=employee_data.department_id,
        matricule=employee_data.matricule,
        last_name=employee_data.last_name,
        first_name=employee_data.first_name,
        job_title=_normalize_optional(employee_data.job_title),
        email=_normalize_optional(employee_data.email),
        phone=_normalize_optional(employee_data.phone),
        photo_url=_normalize_optional(employee_data.photo_url),
        active=True,
    )
    db.add(employee)
    commit_or_raise(db, "employee insert")
    db.refresh(employee)

    if account_email:
        db.add(UserAccount(
            employee_id=employee.id,
            email=account_email,
            password_hash=password_hash,
            role=AccountRole.EMPLOYE.value,
            active=True,
        ))
        commit_or_raise(db, "account insert")

    record_audit_safely(
        db,
        actor_id=actor_id,
        action=AuditAction.EMPLOYEE_CREATED,
        target_type=AuditTarget.EMPLOYEE,
        target_id=employee.id,
        details={
            "matricule": employee.matricule,
            "nom": employee.last_name,
            "prenom": employee.first_name,
            "department_id": employee.department_id,
            "account_email": account_email,
        },
    )
    return employee


def update_employee(
    db: Session,
    employee_id: int,
    employee_data: EmployeeUpdate,
    actor_id: Optional[int],
) -> Employee:
    """
    HR partial update. Only fields present in the payload are written; the
    active flag is never part of an update.
    """
    employee = get_employee(db, employee_id)
    update_data = employee_data.model_dump(exclude_unset=True)

    if "department_id" in update_data and update_data["department_id"] is not None:
        _validate_department(db, update_data["department_id"])
    if update_data.get("matricule") is not None:
        update_data["matricule"] = update_data["matricule"].strip()
        _ensure_matricule_free(db, update_data["matricule"], exclude_employee_id=employee_id)

    changes: Dict[str, Dict[str, Optional[str]]] = {}
    for attr, value in update_data.items():
        if attr in ("last_name", "first_name", "matricule", "department_id"):
            if value is None or (isinstance(value, str) and not value.strip()):
                raise ValidationError(f"{attr} cannot be empty")
            if isinstance(value, str):
                value = value.strip()
        else:
            value = _normalize_optional(value)

        old = getattr(employee, attr)
        if old != value:
            changes[attr] = {"old": old, "new": value}
            setattr(employee, attr, value)

    if not changes:
        return employee

    commit_or_raise(db, "employee update")
    db.refresh(employee)

    record_audit_safely(
        db,
        actor_id=actor_id,
        action=AuditAction.EMPLOYEE_UPDATED,
        target_type=AuditTarget.EMPLOYEE,
        target_id=employee.id,
        details={"changes": changes},
    )
    return employee


def deactivate_employee(db: Session, employee_id: int, actor_id: Optional[int]) -> Employee:
    """
    Soft-deactivate an employee and revoke their public QR link.

    The revoke runs even when the employee was already inactive, so a link
    left behind by an earlier partial failure is cleaned up by retrying.
    """
    employee = get_employee(db, employee_id)
    was_active = employee.active

    if was_active:
        employee.active = False
        commit_or_raise(db, "employee deactivation")

    revoked = token_service.revoke(db, employee_id)

    if was_active:
        record_audit_safely(
            db,
            actor_id=actor_id,
            action=AuditAction.EMPLOYEE_DEACTIVATED,
            target_type=AuditTarget.EMPLOYEE,
            target_id=employee_id,
            details={"revoked_token_id": revoked.id if revoked is not None else None},
        )
    db.refresh(employee)
    return employee


def self_update_profile(
    db: Session,
    employee_id: int,
    actor_id: Optional[int],
    payload: EmployeeSelfUpdate,
) -> SelfUpdateResult:
    """
    Direct edit of the employee's self-managed fields.

    Only fields whose value actually changes are written. When any of them
    changed, admins are told the badge rendering is stale; that signal is
    best-effort and never fails the edit.

    Raises:
        NotFoundError: employee does not exist
        InvalidStateError: employee is deactivated
    """
    employee = get_employee(db, employee_id)
    if not employee.active:
        raise InvalidStateError("Inactive employees cannot edit their profile")

    changes: Dict[str, Dict[str, Optional[str]]] = {}
    for attr, value in payload.model_dump(exclude_unset=True).items():
        field_key = FIELD_KEYS_BY_ATTR[attr]
        if field_key not in SELF_MANAGED_FIELDS:
            raise ValidationError(f"Field '{field_key}' requires a modification request")
        new_value = _normalize_optional(value)
        old_value = getattr(employee, attr)
        if new_value != old_value:
            changes[field_key] = {"old": old_value, "new": new_value}
            setattr(employee, attr, new_value)

    changed_fields = list(changes.keys())
    if not changed_fields:
        return SelfUpdateResult(employee=employee, changed_fields=[], qr_refresh=None)

    commit_or_raise(db, "employee self update")
    db.refresh(employee)

    record_audit_safely(
        db,
        actor_id=actor_id,
        action=AuditAction.EMPLOYEE_SELF_UPDATED,
        target_type=AuditTarget.EMPLOYEE,
        target_id=employee_id,
        details={"fields": changed_fields, "changes": changes},
    )

    qr_refresh = None
    badge_fields = [key for key in changed_fields if key in SELF_MANAGED_FIELDS]
    if badge_fields:
        try:
            qr_refresh = notify_qr_refresh_required(db, employee_id, badge_fields, actor_id=actor_id)
        except Exception:
            logger.exception("QR refresh signal failed for employee %s", employee_id)
            db.rollback()

    db.refresh(employee)
    return SelfUpdateResult(employee=employee, changed_fields=changed_fields, qr_refresh=qr_refresh)


def get_employee_for_account(db: Session, account: UserAccount) -> Employee:
    """Employee record behind a login account"""
    return get_employee(db, account.employee_id)
