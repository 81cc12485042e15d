"""
Error taxonomy for the candidate workflow.

Every failure the engine surfaces is a ``WorkflowError`` carrying a stable
code, a caller-facing message, a retryable flag and optional details. The HTTP
layer maps the codes to status codes; nothing else inspects message text.
"""

from enum import Enum
from typing import Any, Optional


class ErrorCode(str, Enum):
    """Structured error codes for workflow failures."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    ILLEGAL_TRANSITION = "ILLEGAL_TRANSITION"
    COLLABORATOR_FAILURE = "COLLABORATOR_FAILURE"
    NOTIFICATION_FAILURE = "NOTIFICATION_FAILURE"
    NOT_FOUND = "NOT_FOUND"
    FORBIDDEN = "FORBIDDEN"


class WorkflowError(Exception):
    """Base exception for workflow errors with structured error information."""

    code: ErrorCode = ErrorCode.VALIDATION_ERROR

    def __init__(
        self,
        message: str,
        retryable: bool = False,
        details: Optional[dict[str, Any]] = None,
    ):
        self.message = message
        self.retryable = retryable
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        """Convert error to the API error envelope."""
        return {
            "error": {
                "code": self.code.value,
                "message": self.message,
                "retryable": self.retryable,
                "details": self.details,
            }
        }


class WorkflowValidationError(WorkflowError):
    """Malformed or missing required input. Nothing was mutated."""

    code = ErrorCode.VALIDATION_ERROR

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, details={"field": field} if field else {})
        self.field = field


class IllegalTransition(WorkflowError):
    """Event is not valid from the candidate's current state. Nothing was mutated."""

    code = ErrorCode.ILLEGAL_TRANSITION

    def __init__(
        self,
        message: str,
        current_status: Optional[str] = None,
        event: Optional[str] = None,
    ):
        details = {}
        if current_status is not None:
            details["current_status"] = current_status
        if event is not None:
            details["event"] = event
        super().__init__(message, details=details)


class ConcurrentModification(IllegalTransition):
    """Compare-and-set lost against a concurrent writer."""


class CollaboratorFailure(WorkflowError):
    """An external collaborator (scorer, storage, calendar, extractor) failed."""

    code = ErrorCode.COLLABORATOR_FAILURE

    def __init__(self, message: str, retryable: bool = True, collaborator: Optional[str] = None):
        super().__init__(
            message,
            retryable=retryable,
            details={"collaborator": collaborator} if collaborator else {},
        )


class NotificationFailure(WorkflowError):
    """A notification could not be delivered. Never unwinds committed state."""

    code = ErrorCode.NOTIFICATION_FAILURE

    def __init__(self, message: str):
        super().__init__(message, retryable=True)


class RecordNotFound(WorkflowError):
    """A job or candidate does not exist."""

    code = ErrorCode.NOT_FOUND

    def __init__(self, resource: str, identifier: str):
        super().__init__(
            f"{resource} not found",
            details={"resource": resource, "id": identifier},
        )


class PermissionDenied(WorkflowError):
    """Caller is not the owning recruiter."""

    code = ErrorCode.FORBIDDEN

    def __init__(self, message: str = "You don't have permission to modify this resource"):
        super().__init__(message)
