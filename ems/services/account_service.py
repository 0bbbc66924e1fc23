"""
Account service - lookups on user accounts (the identity collaborator)
"""
import logging
from typing import List, Optional

from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import MultipleResultsFound

from ems.core.exceptions import ConflictError
from ems.core.security import verify_password
from ems.models.employee import Employee
from ems.models.user_account import UserAccount, AccountRole

logger = logging.getLogger(__name__)


def resolve_linked_account(db: Session, employee_id: int) -> Optional[UserAccount]:
    """
    Return the login account linked to an employee, or None if there is none.

    Raises:
        ConflictError: more than one account maps to the employee
    """
    try:
        return (
            db.query(UserAccount)
            .filter(UserAccount.employee_id == employee_id)
            .one_or_none()
        )
    except MultipleResultsFound:
        logger.error("Multiple user accounts found for employee_id=%s", employee_id)
        raise ConflictError(
            f"Data integrity issue: duplicate account mapping for employee {employee_id}"
        )


def list_admin_account_ids(db: Session) -> List[int]:
    """IDs of active HR admin accounts whose employee record is active, in a stable order"""
    rows = (
        db.query(UserAccount.id)
        .join(Employee, Employee.id == UserAccount.employee_id)
        .filter(
            UserAccount.role == AccountRole.ADMIN_RH.value,
            UserAccount.active == True,  # noqa: E712
            Employee.active == True,  # noqa: E712
        )
        .order_by(UserAccount.id)
        .all()
    )
    return [account_id for (account_id,) in rows]


def authenticate(db: Session, email: str, password: str) -> Optional[UserAccount]:
    """Return the account for valid credentials, None otherwise"""
    account = (
        db.query(UserAccount)
        .filter(UserAccount.email == email.strip().lower())
        .first()
    )
    if account is None or account.password_hash is None:
        return None
    if not verify_password(password, account.password_hash):
        return None
    return account
