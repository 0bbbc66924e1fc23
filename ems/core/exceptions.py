"""
Domain exceptions raised by the service layer.

Services raise these instead of HTTPException so that the workflows can be
called from scripts and tests without FastAPI; `ems.core.errors` maps them to
the standard JSON error envelope.
"""
from fastapi import status


class EMSError(Exception):
    """Base class for all domain errors"""

    status_code: int = status.HTTP_400_BAD_REQUEST
    code: str = "EMS_ERROR"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail


class ValidationError(EMSError):
    """Malformed or empty input, or a value outside an enumerated set"""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "VALIDATION_ERROR"


class NotFoundError(EMSError):
    """Referenced request, employee, token or notification is absent"""

    status_code = status.HTTP_404_NOT_FOUND
    code = "NOT_FOUND"


class InvalidStateError(EMSError):
    """Transition not allowed from the current state (e.g. re-deciding a request)"""

    status_code = status.HTTP_409_CONFLICT
    code = "INVALID_STATE"


class PreconditionError(InvalidStateError):
    """Operation requires a state the target is not in (e.g. an active employee)"""

    code = "PRECONDITION_FAILED"


class ConflictError(EMSError):
    """A uniqueness invariant in the store is broken or was hit by a concurrent write"""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "DATA_INTEGRITY"


class DependencyError(EMSError):
    """The persistence collaborator failed; the caller may retry"""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "DEPENDENCY_FAILURE"
    retryable = True
