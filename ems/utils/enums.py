"""Utility functions for handling enum/string values safely."""
from enum import Enum


def enum_to_str(v):
    """
    Safely convert enum or string value to string.

    SQLAlchemy String columns hold the raw value while callers often pass the
    enum member; both normalize to the same string here.

    Examples:
        >>> enum_to_str(AccountRole.ADMIN_RH)
        'ADMIN_RH'
        >>> enum_to_str('ADMIN_RH')
        'ADMIN_RH'
        >>> enum_to_str(None)
        None
    """
    if v is None:
        return None
    if isinstance(v, Enum):
        return v.value
    return str(v)
