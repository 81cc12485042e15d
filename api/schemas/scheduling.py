"""Pydantic schemas for calendar and booking endpoints."""

from datetime import datetime
from typing import Optional

from pipeline.status import InterviewStatus

from .base import CamelModel


class BusyIntervalResponse(CamelModel):
    start: datetime
    end: datetime


class CalendarStatusResponse(CamelModel):
    connected: bool


class BookingPageResponse(CamelModel):
    """What the public booking page shows the candidate."""

    first_name: str
    job_title: str
    interview_status: Optional[InterviewStatus] = None
    proposed_slots: list[datetime] = []
    interview_date: Optional[datetime] = None
    meeting_link: Optional[str] = None


class BookSlotRequest(CamelModel):
    slot: datetime


class BookSlotResponse(CamelModel):
    interview_status: InterviewStatus
    interview_date: datetime
    meeting_link: Optional[str] = None
