"""Pydantic schemas for candidate endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from pipeline.models import CandidateRecord
from pipeline.status import (
    InterviewStatus,
    PipelineStatus,
    allowed_events,
    interview_status_label,
    status_label,
)

from .base import CamelModel


class CandidateResponse(CamelModel):
    """Candidate as the owning recruiter sees it."""

    id: str
    job_id: str
    name: str
    email: str
    resume_url: Optional[str] = None
    portfolio_url: Optional[str] = None
    notice_period: Optional[str] = None
    current_org: Optional[str] = None
    years_of_experience: Optional[str] = None
    screening_score: Optional[int] = None
    screening_reason: Optional[str] = None
    screening_mode: Optional[str] = None
    status: PipelineStatus
    status_label: str
    interview_status: Optional[InterviewStatus] = None
    interview_status_label: str
    proposed_slots: Optional[list[datetime]] = None
    interview_date: Optional[datetime] = None
    meeting_link: Optional[str] = None
    assignment_submission: Optional[str] = None
    allowed_events: list[str] = []
    created_at: Optional[datetime] = None

    @classmethod
    def from_record(cls, record: CandidateRecord) -> "CandidateResponse":
        return cls(
            **record.model_dump(exclude={"version"}),
            status_label=status_label(record.status),
            interview_status_label=interview_status_label(record.interview_status),
            allowed_events=[event.value for event in allowed_events(record.status)],
        )


class ApproveRequest(CamelModel):
    """Approval carries the interview slots offered to the candidate."""

    slots: list[datetime] = Field(default_factory=list)


class RejectRequest(CamelModel):
    reason: Optional[str] = None


class ReconcileResponse(CamelModel):
    found: bool
    message: Optional[str] = None
    candidate: CandidateResponse


class ResumeUrlResponse(CamelModel):
    url: str
    expires_in: int


class ApplicationResponse(CamelModel):
    """Acknowledgement returned to an applicant."""

    candidate_id: str
    message: str = "Application submitted successfully"


class AssignmentPageResponse(CamelModel):
    candidate_name: str
    job_title: str
    assignment_details: str
    status: PipelineStatus
    can_submit: bool


class AssignmentSubmitResponse(CamelModel):
    status: PipelineStatus
    message: str = "Assignment submitted successfully"
