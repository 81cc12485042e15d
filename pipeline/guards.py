"""
Preconditions and compare-and-set commits shared by the engine and the
scheduling coordinator.

A precondition is a callable that raises ``IllegalTransition`` for a candidate
snapshot it does not accept. ``commit_transition`` checks it, writes the patch
against the snapshot's version and, if another writer won, re-checks it
against the committed state so the caller learns which of the two happened.
"""

from datetime import datetime
from typing import Any, Callable, Optional

import structlog

from pipeline.errors import ConcurrentModification, IllegalTransition, PermissionDenied
from pipeline.models import CandidateRecord, JobRecord, ensure_utc
from pipeline.repository import CandidateRepository, StaleRecord
from pipeline.status import (
    InterviewStatus,
    PipelineEvent,
    PipelineStatus,
    can_advance_interview,
    can_transition,
)

logger = structlog.get_logger()

Precondition = Callable[[CandidateRecord], None]


def require_owner(job: JobRecord, actor_id: Optional[str]) -> None:
    if not actor_id or job.user_id != actor_id:
        raise PermissionDenied()


def require_event(event: PipelineEvent) -> Precondition:
    """Precondition: ``event`` is valid from the candidate's pipeline status."""

    def check(candidate: CandidateRecord) -> None:
        if not can_transition(candidate.status, event):
            raise IllegalTransition(
                f"Cannot {event.value.replace('_', ' ')} a candidate in status {candidate.status.value}",
                current_status=candidate.status.value,
                event=event.value,
            )

    return check


def require_invite_pending(slot: Optional[datetime] = None) -> Precondition:
    """Precondition: an invite is out and, if ``slot`` is given, it was one of the offered slots."""

    def check(candidate: CandidateRecord) -> None:
        if candidate.status != PipelineStatus.APPROVED or not can_advance_interview(
            candidate.interview_status, InterviewStatus.SCHEDULED
        ):
            current = candidate.interview_status.value if candidate.interview_status else "none"
            raise IllegalTransition(
                f"Candidate has no pending interview invite (interview status: {current})",
                current_status=candidate.status.value,
                event="book_slot",
            )
        if slot is not None and ensure_utc(slot) not in (candidate.proposed_slots or []):
            raise IllegalTransition(
                "Chosen slot is not one of the proposed slots",
                current_status=candidate.status.value,
                event="book_slot",
            )

    return check


def commit_transition(
    candidates: CandidateRepository,
    candidate: CandidateRecord,
    patch: dict[str, Any],
    precondition: Precondition,
    event: str,
) -> CandidateRecord:
    """Check ``precondition`` and write ``patch`` with compare-and-set.

    Raises:
        IllegalTransition: if the precondition fails, before or after a lost race
        ConcurrentModification: if a concurrent write won but the precondition still holds
    """
    precondition(candidate)
    try:
        return candidates.update_candidate(candidate.id, patch, candidate.version)
    except StaleRecord:
        current = candidates.get_candidate(candidate.id)
        logger.info(
            "Re-evaluating transition after concurrent write",
            candidate_id=candidate.id,
            pipeline_event=event,
            status=current.status.value,
            version=current.version,
        )
        precondition(current)
        raise ConcurrentModification(
            "Candidate was modified concurrently, please retry",
            current_status=current.status.value,
            event=event,
        )
