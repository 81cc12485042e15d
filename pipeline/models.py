"""Domain records passed between the engine and its collaborators.

Records are immutable snapshots read from the store. The engine never mutates
a record in place; it computes a patch and writes it with compare-and-set.
"""

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, field_validator

from pipeline.status import InterviewStatus, PipelineStatus


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normalize a datetime to UTC. Naive values are taken to be UTC already."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def serialize_slots(slots: Optional[list[datetime]]) -> Optional[str]:
    """Encode proposed slots for storage as a JSON list of ISO timestamps."""
    if slots is None:
        return None
    return json.dumps([ensure_utc(slot).isoformat() for slot in slots])


def parse_slots(raw: Any) -> Optional[list[datetime]]:
    """Decode proposed slots from storage."""
    if raw is None or raw == "":
        return None
    items = json.loads(raw) if isinstance(raw, str) else raw
    return [
        ensure_utc(item if isinstance(item, datetime) else datetime.fromisoformat(item))
        for item in items
    ]


class FormConfigRecord(BaseModel):
    """Which optional fields a job's application form collects."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    include_resume: bool = False
    include_portfolio: bool = False
    include_notice_period: bool = False
    include_current_org: bool = False
    include_years_experience: bool = False


@dataclass(frozen=True)
class JobContext:
    """What the scorer needs to know about a job."""

    title: str
    description: str
    responsibilities: str = ""
    keywords: str = ""
    owner_id: Optional[str] = None

    def keyword_list(self) -> list[str]:
        return [k.strip() for k in self.keywords.split(",") if k.strip()]


class JobRecord(BaseModel):
    """Snapshot of a job posting."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str
    user_id: str
    title: str
    description: str
    responsibilities: Optional[str] = None
    keywords: Optional[str] = None
    assignment_details: Optional[str] = None
    is_open: bool = True
    created_at: Optional[datetime] = None
    form_config: FormConfigRecord = FormConfigRecord()

    @field_validator("form_config", mode="before")
    @classmethod
    def default_form_config(cls, v: Any) -> Any:
        return v if v is not None else FormConfigRecord()

    def context(self) -> JobContext:
        return JobContext(
            title=self.title,
            description=self.description,
            responsibilities=self.responsibilities or "",
            keywords=self.keywords or "",
            owner_id=self.user_id,
        )


class CandidateRecord(BaseModel):
    """Snapshot of a candidate's workflow state."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

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
    interview_status: Optional[InterviewStatus] = None
    proposed_slots: Optional[list[datetime]] = None
    interview_date: Optional[datetime] = None
    meeting_link: Optional[str] = None
    assignment_submission: Optional[str] = None
    version: int = 1
    created_at: Optional[datetime] = None

    @field_validator("proposed_slots", mode="before")
    @classmethod
    def decode_slots(cls, v: Any) -> Optional[list[datetime]]:
        return parse_slots(v)

    @field_validator("interview_date", mode="after")
    @classmethod
    def normalize_interview_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(v)

    @property
    def first_name(self) -> str:
        return self.name.split()[0] if self.name else "there"


class ApplicationSubmission(BaseModel):
    """Fields of a public application form. Blank strings become None."""

    name: Optional[str] = None
    email: Optional[str] = None
    portfolio_url: Optional[str] = None
    notice_period: Optional[str] = None
    current_org: Optional[str] = None
    years_of_experience: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v


@dataclass(frozen=True)
class UploadedDocument:
    """A file received from a form post."""

    filename: str
    content: bytes
    content_type: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.content

    @property
    def is_pdf(self) -> bool:
        if self.content_type:
            return self.content_type == "application/pdf"
        return self.filename.lower().endswith(".pdf")
