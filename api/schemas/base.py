"""Base Pydantic schemas with CamelCase conversion."""

from typing import Any

from pydantic import BaseModel, ConfigDict
from humps import camelize


def to_camel(string: str) -> str:
    """Convert snake_case to camelCase."""
    return camelize(string)


class CamelModel(BaseModel):
    """
    Base model that converts snake_case fields to camelCase in JSON responses.

    Requests are accepted in either form.

    Usage:
        class MyResponse(CamelModel):
            assignment_details: str  # JSON: assignmentDetails
            is_open: bool            # JSON: isOpen
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class ErrorDetail(CamelModel):
    """Error detail for API error responses."""

    code: str
    message: str
    retryable: bool = False
    details: dict[str, Any] = {}


class ErrorResponse(CamelModel):
    """Standard error response format."""

    error: ErrorDetail


ERROR_RESPONSES = {
    403: {"model": ErrorResponse, "description": "Caller does not own the job"},
    404: {"model": ErrorResponse, "description": "Job or candidate not found"},
    409: {"model": ErrorResponse, "description": "Event not valid from the current status"},
    422: {"model": ErrorResponse, "description": "Missing or invalid input"},
    502: {"model": ErrorResponse, "description": "External collaborator failed"},
}
