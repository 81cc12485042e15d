"""Pydantic schemas for API request/response validation.

All schemas use CamelCase for JSON field names (via alias_generator).
"""

from .base import CamelModel, ErrorResponse, ERROR_RESPONSES
from .candidates import (
    CandidateResponse,
    ApproveRequest,
    RejectRequest,
    ReconcileResponse,
    ResumeUrlResponse,
    ApplicationResponse,
    AssignmentPageResponse,
    AssignmentSubmitResponse,
)
from .jobs import (
    FormConfigSchema,
    JobCreate,
    JobStatusUpdate,
    JobResponse,
    JobDetailResponse,
    PublicJobResponse,
    ResponsibilitiesRequest,
    ResponsibilitiesResponse,
)
from .scheduling import (
    BusyIntervalResponse,
    CalendarStatusResponse,
    BookingPageResponse,
    BookSlotRequest,
    BookSlotResponse,
)
from .settings import SettingsUpdate, SettingsStatusResponse

__all__ = [
    "CamelModel",
    "ErrorResponse",
    "ERROR_RESPONSES",
    "CandidateResponse",
    "ApproveRequest",
    "RejectRequest",
    "ReconcileResponse",
    "ResumeUrlResponse",
    "ApplicationResponse",
    "AssignmentPageResponse",
    "AssignmentSubmitResponse",
    "FormConfigSchema",
    "JobCreate",
    "JobStatusUpdate",
    "JobResponse",
    "JobDetailResponse",
    "PublicJobResponse",
    "ResponsibilitiesRequest",
    "ResponsibilitiesResponse",
    "BusyIntervalResponse",
    "CalendarStatusResponse",
    "BookingPageResponse",
    "BookSlotRequest",
    "BookSlotResponse",
    "SettingsUpdate",
    "SettingsStatusResponse",
]
