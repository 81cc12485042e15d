"""
Interview scheduling on top of approval.

Approving a candidate and proposing interview slots are one transition: the
recruiter picks up to ``MAX_PROPOSED_SLOTS`` times, the candidate becomes
``APPROVED`` with ``INVITE_SENT`` and receives a booking link. The candidate
then books exactly one of the offered slots, which creates the calendar event
on the recruiter's calendar. A recruiter can also reconcile a booking made
directly in their calendar.

    None --propose_slots--> INVITE_SENT --book_slot / reconcile--> SCHEDULED
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Protocol

import structlog

from pipeline.dispatcher import Notification, NotificationKind, SideEffectDispatcher
from pipeline.errors import CollaboratorFailure, IllegalTransition, WorkflowValidationError
from pipeline.guards import (
    commit_transition,
    require_event,
    require_invite_pending,
    require_owner,
)
from pipeline.links import LinkBuilder
from pipeline.models import CandidateRecord, JobRecord, ensure_utc
from pipeline.repository import AuditLog, CandidateRepository, JobRepository
from pipeline.status import InterviewStatus, PipelineEvent, PipelineStatus

logger = structlog.get_logger()

MAX_PROPOSED_SLOTS = 3
INTERVIEW_DURATION = timedelta(minutes=45)
RECONCILE_LOOKBACK = timedelta(days=1)

NO_BOOKING_MESSAGE = "No booking found yet. Please ensure the candidate uses the email on their application."


@dataclass(frozen=True)
class BusyInterval:
    start: datetime
    end: datetime


@dataclass(frozen=True)
class EventRequest:
    """A calendar event to create on the recruiter's calendar."""

    summary: str
    description: str
    start: datetime
    end: datetime
    attendee_email: str
    with_conference: bool = True


@dataclass(frozen=True)
class CreatedEvent:
    event_id: str
    meeting_link: Optional[str] = None


@dataclass(frozen=True)
class CalendarEvent:
    event_id: str
    start: datetime
    attendee_emails: tuple[str, ...] = ()
    meeting_link: Optional[str] = None


class CalendarProvider(Protocol):
    async def list_busy(self, owner_id: str, start: datetime, end: datetime) -> list[BusyInterval]:
        ...

    async def create_event(self, owner_id: str, request: EventRequest) -> CreatedEvent:
        ...

    async def find_events(self, owner_id: str, attendee_email: str, time_min: datetime) -> list[CalendarEvent]:
        ...

    async def delete_event(self, owner_id: str, event_id: str) -> None:
        ...


@dataclass(frozen=True)
class ReconcileResult:
    found: bool
    candidate: CandidateRecord
    message: Optional[str] = None


def normalize_slots(slots: list[datetime]) -> list[datetime]:
    """Validate a slot proposal and return it in UTC, order preserved.

    Raises:
        WorkflowValidationError: no slots, more than the cap, or duplicates
    """
    if not slots:
        raise WorkflowValidationError("At least one interview slot is required", field="slots")
    if len(slots) > MAX_PROPOSED_SLOTS:
        raise WorkflowValidationError(
            f"At most {MAX_PROPOSED_SLOTS} interview slots can be proposed",
            field="slots",
        )
    normalized = [ensure_utc(slot) for slot in slots]
    if len(set(normalized)) != len(normalized):
        raise WorkflowValidationError("Proposed slots must be distinct", field="slots")
    return normalized


def build_event_request(candidate: CandidateRecord, job: JobRecord, slot: datetime, frontend_url: str) -> EventRequest:
    return EventRequest(
        summary=f"Interview: {candidate.name} (for {job.title})",
        description=(
            f"Interview for {job.title}.\n\n"
            f"Candidate: {candidate.name}\n"
            f"Email: {candidate.email}\n\n"
            f"View details: {frontend_url}/dashboard"
        ),
        start=slot,
        end=slot + INTERVIEW_DURATION,
        attendee_email=candidate.email,
    )


class SchedulingCoordinator:
    """Runs the propose / book / reconcile protocol for approved candidates."""

    def __init__(
        self,
        candidates: CandidateRepository,
        jobs: JobRepository,
        calendar: CalendarProvider,
        dispatcher: SideEffectDispatcher,
        audit: AuditLog,
        links: LinkBuilder,
    ):
        self.candidates = candidates
        self.jobs = jobs
        self.calendar = calendar
        self.dispatcher = dispatcher
        self.audit = audit
        self.links = links

    async def propose_slots(
        self,
        candidate_id: str,
        actor_id: str,
        slots: list[datetime],
    ) -> CandidateRecord:
        """Approve the candidate and offer interview slots.

        Only the owning recruiter may call this, and only while approval is a
        valid transition. No calendar event is created here.

        Raises:
            PermissionDenied: actor does not own the job
            WorkflowValidationError: empty, duplicate or more than three slots
            IllegalTransition: candidate cannot be approved from its status
        """
        candidate = self.candidates.get_candidate(candidate_id)
        job = self.jobs.get_job(candidate.job_id)
        require_owner(job, actor_id)
        proposed = normalize_slots(slots)

        updated = commit_transition(
            self.candidates,
            candidate,
            {
                "status": PipelineStatus.APPROVED,
                "interview_status": InterviewStatus.INVITE_SENT,
                "proposed_slots": proposed,
            },
            require_event(PipelineEvent.APPROVE),
            PipelineEvent.APPROVE.value,
        )

        self.audit.record_activity(
            "candidate_approved",
            candidate_id=candidate.id,
            job_id=job.id,
            actor_id=actor_id,
            details={
                "from_status": candidate.status.value,
                "to_status": updated.status.value,
                "proposed_slots": [slot.isoformat() for slot in proposed],
            },
        )
        logger.info(
            "Interview slots proposed",
            candidate_id=candidate.id,
            slots=len(proposed),
            from_status=candidate.status.value,
        )

        await self.dispatcher.dispatch([
            Notification(
                kind=NotificationKind.APPROVAL_INVITE,
                candidate_id=updated.id,
                to_email=updated.email,
                candidate_name=updated.name,
                job_title=job.title,
                link=self.links.booking_link(updated.id),
            )
        ])
        return updated

    async def book_slot(self, candidate_id: str, chosen_slot: datetime) -> CandidateRecord:
        """Book one of the proposed slots for the candidate.

        The calendar event is created first; if that fails nothing is written.
        If the write then loses to a concurrent booking, the event is deleted.

        Raises:
            IllegalTransition: no pending invite, slot not offered, or lost a race
            CollaboratorFailure: calendar event could not be created
        """
        slot = ensure_utc(chosen_slot)
        candidate = self.candidates.get_candidate(candidate_id)
        precondition = require_invite_pending(slot)
        precondition(candidate)

        job = self.jobs.get_job(candidate.job_id)
        event = await self.calendar.create_event(
            job.user_id,
            build_event_request(candidate, job, slot, self.links.base_url),
        )

        try:
            updated = commit_transition(
                self.candidates,
                candidate,
                {
                    "interview_status": InterviewStatus.SCHEDULED,
                    "interview_date": slot,
                    "meeting_link": event.meeting_link,
                    "proposed_slots": None,
                },
                precondition,
                "book_slot",
            )
        except IllegalTransition:
            logger.warning(
                "Booking lost to a concurrent write, cancelling calendar event",
                candidate_id=candidate.id,
                event_id=event.event_id,
            )
            await self._cancel_event(job.user_id, event.event_id)
            raise

        self.audit.record_activity(
            "interview_scheduled",
            candidate_id=candidate.id,
            job_id=job.id,
            details={"interview_date": slot.isoformat(), "event_id": event.event_id},
        )
        logger.info(
            "Interview booked",
            candidate_id=candidate.id,
            interview_date=slot.isoformat(),
            event_id=event.event_id,
        )
        return updated

    async def _cancel_event(self, owner_id: str, event_id: str) -> None:
        try:
            await self.calendar.delete_event(owner_id, event_id)
        except CollaboratorFailure as e:
            logger.error(
                "Failed to cancel calendar event for lost booking",
                owner_id=owner_id,
                event_id=event_id,
                error=e.message,
            )

    async def reconcile_booking(self, candidate_id: str, actor_id: str) -> ReconcileResult:
        """Pick up a booking the candidate made directly on the recruiter's calendar.

        Looks back ``RECONCILE_LOOKBACK`` for an event with the candidate as
        attendee and, if found, schedules the candidate at its start time.
        """
        candidate = self.candidates.get_candidate(candidate_id)
        job = self.jobs.get_job(candidate.job_id)
        require_owner(job, actor_id)
        precondition = require_invite_pending()
        precondition(candidate)

        time_min = datetime.now(timezone.utc) - RECONCILE_LOOKBACK
        events = await self.calendar.find_events(job.user_id, candidate.email, time_min)
        email = candidate.email.lower()
        match = next(
            (e for e in events if not e.attendee_emails or email in (a.lower() for a in e.attendee_emails)),
            None,
        )
        if match is None:
            logger.info("No calendar booking found", candidate_id=candidate.id)
            return ReconcileResult(found=False, candidate=candidate, message=NO_BOOKING_MESSAGE)

        start = ensure_utc(match.start)
        updated = commit_transition(
            self.candidates,
            candidate,
            {
                "interview_status": InterviewStatus.SCHEDULED,
                "interview_date": start,
                "meeting_link": match.meeting_link,
                "proposed_slots": None,
            },
            precondition,
            "reconcile_booking",
        )

        self.audit.record_activity(
            "interview_scheduled",
            candidate_id=candidate.id,
            job_id=job.id,
            actor_id=actor_id,
            details={"interview_date": start.isoformat(), "event_id": match.event_id, "reconciled": True},
        )
        logger.info("Calendar booking reconciled", candidate_id=candidate.id, interview_date=start.isoformat())
        return ReconcileResult(found=True, candidate=updated)

    async def list_busy(self, actor_id: str, start: datetime, end: datetime) -> list[BusyInterval]:
        """Busy intervals on the recruiter's own calendar."""
        start, end = ensure_utc(start), ensure_utc(end)
        if end <= start:
            raise WorkflowValidationError("End time must be after start time", field="end")
        return await self.calendar.list_busy(actor_id, start, end)
