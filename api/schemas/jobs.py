"""Pydantic schemas for job endpoints."""

from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import CamelModel
from .candidates import CandidateResponse


class FormConfigSchema(CamelModel):
    """Optional fields collected by a job's application form."""

    include_resume: bool = False
    include_portfolio: bool = False
    include_notice_period: bool = False
    include_current_org: bool = False
    include_years_experience: bool = False


class JobCreate(CamelModel):
    """Schema for creating a job."""

    title: str = Field(min_length=2, max_length=255)
    description: str = Field(min_length=10)
    responsibilities: Optional[str] = None
    keywords: Optional[str] = None
    assignment_details: Optional[str] = None
    form_config: FormConfigSchema = FormConfigSchema()


class JobStatusUpdate(CamelModel):
    is_open: bool


class JobResponse(CamelModel):
    """Job as its owner sees it."""

    id: str
    title: str
    description: str
    responsibilities: Optional[str] = None
    keywords: Optional[str] = None
    assignment_details: Optional[str] = None
    is_open: bool
    created_at: Optional[datetime] = None
    form_config: FormConfigSchema
    candidate_count: Optional[int] = None


class JobDetailResponse(JobResponse):
    """Job with its candidates, newest first."""

    candidates: list[CandidateResponse] = []


class PublicJobResponse(CamelModel):
    """What the public application form needs to render."""

    id: str
    title: str
    description: str
    responsibilities: Optional[str] = None
    is_open: bool
    form_config: FormConfigSchema


class ResponsibilitiesRequest(CamelModel):
    title: str = Field(min_length=2, max_length=255)


class ResponsibilitiesResponse(CamelModel):
    responsibilities: str
