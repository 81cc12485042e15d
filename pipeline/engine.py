"""
Candidate workflow engine.

Every inbound event goes through ``TransitionEngine``. For each one it loads
the current snapshot, checks the event is legal from the current status,
commits the new state with compare-and-set, records the activity and only
then hands notifications to the dispatcher. An illegal event raises before
anything is written or sent.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import structlog

from pipeline.adjudicator import ScreeningDecision, initial_status
from pipeline.dispatcher import Notification, NotificationKind, SideEffectDispatcher
from pipeline.errors import RecordNotFound, WorkflowValidationError
from pipeline.form_requirements import build_requirements, validate_submission
from pipeline.guards import commit_transition, require_event, require_owner
from pipeline.links import LinkBuilder
from pipeline.models import (
    ApplicationSubmission,
    CandidateRecord,
    FormConfigRecord,
    JobRecord,
    UploadedDocument,
)
from pipeline.repository import AuditLog, CandidateRepository, JobRepository
from pipeline.scheduling import SchedulingCoordinator
from pipeline.screening import DocumentStore, ScreeningMode, ScreeningResult, ScreeningService
from pipeline.status import InterviewStatus, PipelineEvent, PipelineStatus

logger = structlog.get_logger()

DEFAULT_REJECTION_REASON = (
    "After careful consideration, we have decided to move forward with other candidates "
    "whose experience more closely matches our current needs."
)
DEFAULT_ASSIGNMENT_DETAILS = (
    "No specific assignment details provided. Please wait for further contact."
)
RESUME_NOT_REQUESTED_REASON = "Resume not requested; manual review required"

MIN_TITLE_LENGTH = 2
MIN_DESCRIPTION_LENGTH = 10


@dataclass(frozen=True)
class AssignmentView:
    """What the public assignment page shows."""

    candidate_name: str
    job_title: str
    assignment_details: str
    status: PipelineStatus
    can_submit: bool


@dataclass(frozen=True)
class BookingView:
    """What the public booking page shows."""

    first_name: str
    job_title: str
    interview_status: Optional[InterviewStatus]
    proposed_slots: list[datetime]
    interview_date: Optional[datetime] = None
    meeting_link: Optional[str] = None


class TransitionEngine:
    """Applies workflow events to candidates and jobs."""

    def __init__(
        self,
        jobs: JobRepository,
        candidates: CandidateRepository,
        screening: ScreeningService,
        scheduling: SchedulingCoordinator,
        dispatcher: SideEffectDispatcher,
        audit: AuditLog,
        store: DocumentStore,
        links: LinkBuilder,
    ):
        self.jobs = jobs
        self.candidates = candidates
        self.screening = screening
        self.scheduling = scheduling
        self.dispatcher = dispatcher
        self.audit = audit
        self.store = store
        self.links = links

    # ------------------------------------------------------------------
    # Jobs
    # ------------------------------------------------------------------

    def create_job(
        self,
        owner_id: str,
        title: str,
        description: str,
        form_config: Optional[FormConfigRecord] = None,
        responsibilities: Optional[str] = None,
        keywords: Optional[str] = None,
        assignment_details: Optional[str] = None,
    ) -> JobRecord:
        title = (title or "").strip()
        description = (description or "").strip()
        if len(title) < MIN_TITLE_LENGTH:
            raise WorkflowValidationError(
                f"Title must be at least {MIN_TITLE_LENGTH} characters", field="title"
            )
        if len(description) < MIN_DESCRIPTION_LENGTH:
            raise WorkflowValidationError(
                f"Description must be at least {MIN_DESCRIPTION_LENGTH} characters", field="description"
            )

        job = self.jobs.create_job(
            user_id=owner_id,
            title=title,
            description=description,
            form_config=form_config or FormConfigRecord(),
            responsibilities=responsibilities or None,
            keywords=keywords or None,
            assignment_details=assignment_details or None,
        )
        self.audit.record_activity("job_created", job_id=job.id, actor_id=owner_id)
        return job

    def set_job_open(self, job_id: str, actor_id: str, is_open: bool) -> JobRecord:
        """Open or close a job. Only the owner may toggle it."""
        job = self.jobs.get_job(job_id)
        require_owner(job, actor_id)
        if job.is_open == is_open:
            return job

        updated = self.jobs.set_open(job_id, is_open)
        self.audit.record_activity(
            "job_opened" if is_open else "job_closed",
            job_id=job_id,
            actor_id=actor_id,
        )
        logger.info("Job status changed", job_id=job_id, is_open=is_open)
        return updated

    def list_jobs(self, owner_id: str) -> list[tuple[JobRecord, int]]:
        return self.jobs.list_jobs(owner_id)

    def get_job(self, job_id: str, actor_id: str) -> tuple[JobRecord, list[CandidateRecord]]:
        """A job with its candidates, for its owner."""
        job = self.jobs.get_job(job_id)
        require_owner(job, actor_id)
        return job, self.candidates.list_for_job(job_id)

    def public_job(self, job_id: str) -> JobRecord:
        return self.jobs.get_job(job_id)

    # ------------------------------------------------------------------
    # Applications
    # ------------------------------------------------------------------

    async def submit_application(
        self,
        job_id: str,
        submission: ApplicationSubmission,
        resume: Optional[UploadedDocument] = None,
    ) -> CandidateRecord:
        """Create a candidate from a public application.

        Steps run in a fixed order: form validation, resume storage and
        extraction, scoring, adjudication, then the single insert. Nothing is
        created if validation or resume storage fails.

        Raises:
            RecordNotFound: job does not exist
            WorkflowValidationError: job closed, or a required field is missing
            CollaboratorFailure: resume could not be stored
        """
        job = self.jobs.get_job(job_id)
        if not job.is_open:
            raise WorkflowValidationError("This job is no longer accepting applications", field="job_id")

        requirements = build_requirements(job.form_config)
        validate_submission(submission, resume, requirements)

        if job.form_config.include_resume:
            screening = await self.screening.screen(resume, job.context(), job.id)
        else:
            screening = ScreeningResult(
                score=None,
                reason=RESUME_NOT_REQUESTED_REASON,
                mode=ScreeningMode.SKIPPED,
                decision=ScreeningDecision.INDETERMINATE,
            )

        status = initial_status(screening.decision)
        optional = {
            name: getattr(submission, name) if requirements[name].collected else None
            for name in ("portfolio_url", "notice_period", "current_org", "years_of_experience")
        }
        candidate = self.candidates.create_candidate({
            "job_id": job.id,
            "name": submission.name,
            "email": submission.email,
            "resume_url": screening.resume_url,
            "screening_score": screening.score,
            "screening_reason": screening.reason,
            "screening_mode": screening.mode,
            "status": status,
            **optional,
        })

        self.audit.record_activity(
            "application_submitted",
            candidate_id=candidate.id,
            job_id=job.id,
            details={
                "to_status": status.value,
                "decision": screening.decision.value,
                "score": screening.score,
                "mode": screening.mode.value,
            },
        )
        logger.info(
            "Application submitted",
            candidate_id=candidate.id,
            job_id=job.id,
            status=status.value,
            score=screening.score,
        )

        notifications = []
        if status == PipelineStatus.ASSIGNMENT_SENT:
            notifications.append(Notification(
                kind=NotificationKind.ASSIGNMENT_INVITE,
                candidate_id=candidate.id,
                to_email=candidate.email,
                candidate_name=candidate.name,
                job_title=job.title,
                link=self.links.assignment_link(candidate.id),
                assignment_details=job.assignment_details or DEFAULT_ASSIGNMENT_DETAILS,
            ))
        elif status == PipelineStatus.REJECTED:
            notifications.append(Notification(
                kind=NotificationKind.REJECTION,
                candidate_id=candidate.id,
                to_email=candidate.email,
                candidate_name=candidate.name,
                job_title=job.title,
                reason=screening.reason,
            ))
        await self.dispatcher.dispatch(notifications)
        return candidate

    # ------------------------------------------------------------------
    # Assignments
    # ------------------------------------------------------------------

    def assignment_view(self, candidate_id: str) -> AssignmentView:
        candidate = self.candidates.get_candidate(candidate_id)
        job = self.jobs.get_job(candidate.job_id)
        return AssignmentView(
            candidate_name=candidate.name,
            job_title=job.title,
            assignment_details=job.assignment_details or DEFAULT_ASSIGNMENT_DETAILS,
            status=candidate.status,
            can_submit=candidate.status == PipelineStatus.ASSIGNMENT_SENT,
        )

    async def submit_assignment(
        self,
        candidate_id: str,
        link: Optional[str] = None,
        file: Optional[UploadedDocument] = None,
    ) -> CandidateRecord:
        """Record a candidate's assignment, given as a link or an uploaded file.

        A link wins when both are given.

        Raises:
            WorkflowValidationError: neither a link nor a file was provided
            IllegalTransition: candidate is not waiting for an assignment
            CollaboratorFailure: the file could not be stored
        """
        link = (link or "").strip() or None
        if link is None and (file is None or file.is_empty):
            raise WorkflowValidationError("Please provide either a link or a file", field="assignment")
        if link is not None and not link.startswith(("http://", "https://")):
            raise WorkflowValidationError("Assignment link must be an http(s) URL", field="assignment_link")

        candidate = self.candidates.get_candidate(candidate_id)
        precondition = require_event(PipelineEvent.RECEIVE_ASSIGNMENT)
        precondition(candidate)

        submission = link
        if submission is None:
            submission = await self.store.store(
                file.content,
                folder=f"assignments/{candidate.id}",
                filename=file.filename,
                content_type=file.content_type or "application/octet-stream",
            )

        updated = commit_transition(
            self.candidates,
            candidate,
            {"status": PipelineStatus.ASSIGNMENT_RECEIVED, "assignment_submission": submission},
            precondition,
            PipelineEvent.RECEIVE_ASSIGNMENT.value,
        )
        self.audit.record_activity(
            "assignment_received",
            candidate_id=candidate.id,
            job_id=candidate.job_id,
            details={
                "from_status": candidate.status.value,
                "to_status": updated.status.value,
                "kind": "link" if link else "file",
            },
        )
        logger.info("Assignment received", candidate_id=candidate.id, kind="link" if link else "file")
        return updated

    # ------------------------------------------------------------------
    # Recruiter decisions
    # ------------------------------------------------------------------

    async def approve(self, candidate_id: str, actor_id: str, slots: list[datetime]) -> CandidateRecord:
        """Approve a candidate; approval always carries the interview slot proposal."""
        return await self.scheduling.propose_slots(candidate_id, actor_id, slots)

    async def reject(
        self,
        candidate_id: str,
        actor_id: str,
        reason: Optional[str] = None,
    ) -> CandidateRecord:
        """Reject a candidate from any non-terminal status."""
        candidate = self.candidates.get_candidate(candidate_id)
        job = self.jobs.get_job(candidate.job_id)
        require_owner(job, actor_id)
        reason = (reason or "").strip() or DEFAULT_REJECTION_REASON

        updated = commit_transition(
            self.candidates,
            candidate,
            {"status": PipelineStatus.REJECTED},
            require_event(PipelineEvent.REJECT),
            PipelineEvent.REJECT.value,
        )
        self.audit.record_activity(
            "candidate_rejected",
            candidate_id=candidate.id,
            job_id=job.id,
            actor_id=actor_id,
            details={"from_status": candidate.status.value, "to_status": updated.status.value},
        )
        logger.info("Candidate rejected", candidate_id=candidate.id, from_status=candidate.status.value)

        await self.dispatcher.dispatch([
            Notification(
                kind=NotificationKind.REJECTION,
                candidate_id=updated.id,
                to_email=updated.email,
                candidate_name=updated.name,
                job_title=job.title,
                reason=reason,
            )
        ])
        return updated

    # ------------------------------------------------------------------
    # Read-only queries
    # ------------------------------------------------------------------

    def get_candidate(self, candidate_id: str, actor_id: str) -> CandidateRecord:
        candidate = self.candidates.get_candidate(candidate_id)
        require_owner(self.jobs.get_job(candidate.job_id), actor_id)
        return candidate

    def booking_view(self, candidate_id: str) -> BookingView:
        candidate = self.candidates.get_candidate(candidate_id)
        job = self.jobs.get_job(candidate.job_id)
        return BookingView(
            first_name=candidate.first_name,
            job_title=job.title,
            interview_status=candidate.interview_status,
            proposed_slots=list(candidate.proposed_slots or []),
            interview_date=candidate.interview_date,
            meeting_link=candidate.meeting_link,
        )

    async def resume_url(self, candidate_id: str, actor_id: str, expires_in: int = 3600) -> str:
        """Presigned download URL for a candidate's stored resume."""
        candidate = self.get_candidate(candidate_id, actor_id)
        if not candidate.resume_url:
            raise RecordNotFound("Resume", candidate_id)
        return await self.store.get_presigned_url(candidate.resume_url, expires_in=expires_in)
