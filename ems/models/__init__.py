"""
Database models
"""
from ems.models.department import Department
from ems.models.employee import Employee, EMPLOYEE_FIELD_ATTRS, SELF_MANAGED_FIELDS
from ems.models.user_account import UserAccount, AccountRole
from ems.models.modification_request import (
    ModificationRequest,
    RequestStatus,
    RequestField,
    DecisionOutcome,
    REQUEST_FIELD_LABELS,
    TERMINAL_REQUEST_STATUSES,
)
from ems.models.qr_token import QRToken, TokenStatus
from ems.models.visibility import EmployeeVisibility, VisibilityField
from ems.models.notification import Notification, NotificationReason
from ems.models.audit_log import AuditLog, AuditAction, AuditTarget

__all__ = [
    "Department",
    "Employee",
    "EMPLOYEE_FIELD_ATTRS",
    "SELF_MANAGED_FIELDS",
    "UserAccount",
    "AccountRole",
    "ModificationRequest",
    "RequestStatus",
    "RequestField",
    "DecisionOutcome",
    "REQUEST_FIELD_LABELS",
    "TERMINAL_REQUEST_STATUSES",
    "QRToken",
    "TokenStatus",
    "EmployeeVisibility",
    "VisibilityField",
    "Notification",
    "NotificationReason",
    "AuditLog",
    "AuditAction",
    "AuditTarget",
]
