"""
Status definitions and transition rules for the candidate pipeline.

Two orthogonal enumerations describe where a candidate is:

- ``PipelineStatus``: the primary hiring stage.
- ``InterviewStatus``: the scheduling sub-protocol, only meaningful once a
  candidate is ``APPROVED``. ``None`` means no invite has been sent.

Both inherit from ``(str, Enum)`` so they store and serialize as plain strings.
Display labels are kept in separate tables and are never used for logic.

Pipeline transitions::

    (new)                -> APPLIED | ASSIGNMENT_SENT | REJECTED   (submit_application)
    ASSIGNMENT_SENT      -> ASSIGNMENT_RECEIVED                     (receive_assignment)
    APPLIED              -> APPROVED                                (approve)
    ASSIGNMENT_RECEIVED  -> APPROVED                                (approve)
    any non-terminal     -> REJECTED                                (reject)

Interview transitions::

    None -> INVITE_SENT -> SCHEDULED
"""

from enum import Enum
from typing import Optional


class PipelineStatus(str, Enum):
    """Primary hiring stage of a candidate."""

    APPLIED = "APPLIED"
    ASSIGNMENT_SENT = "ASSIGNMENT_SENT"
    REJECTED = "REJECTED"
    ASSIGNMENT_RECEIVED = "ASSIGNMENT_RECEIVED"
    APPROVED = "APPROVED"


class InterviewStatus(str, Enum):
    """Scheduling state once a candidate is approved."""

    INVITE_SENT = "INVITE_SENT"
    SCHEDULED = "SCHEDULED"


class PipelineEvent(str, Enum):
    """Inbound events that move a candidate along the pipeline."""

    SUBMIT_APPLICATION = "submit_application"
    RECEIVE_ASSIGNMENT = "receive_assignment"
    APPROVE = "approve"
    REJECT = "reject"


TERMINAL_STATUSES = frozenset({PipelineStatus.REJECTED, PipelineStatus.APPROVED})

# event -> source states it is valid from; None is "no candidate yet"
TRANSITIONS: dict[PipelineEvent, frozenset] = {
    PipelineEvent.SUBMIT_APPLICATION: frozenset({None}),
    PipelineEvent.RECEIVE_ASSIGNMENT: frozenset({PipelineStatus.ASSIGNMENT_SENT}),
    PipelineEvent.APPROVE: frozenset({PipelineStatus.APPLIED, PipelineStatus.ASSIGNMENT_RECEIVED}),
    PipelineEvent.REJECT: frozenset({
        PipelineStatus.APPLIED,
        PipelineStatus.ASSIGNMENT_SENT,
        PipelineStatus.ASSIGNMENT_RECEIVED,
    }),
}

INTERVIEW_TRANSITIONS: dict[Optional[InterviewStatus], frozenset] = {
    None: frozenset({InterviewStatus.INVITE_SENT}),
    InterviewStatus.INVITE_SENT: frozenset({InterviewStatus.SCHEDULED}),
    InterviewStatus.SCHEDULED: frozenset(),
}

STATUS_LABELS = {
    PipelineStatus.APPLIED: "Applied",
    PipelineStatus.ASSIGNMENT_SENT: "Assignment Sent",
    PipelineStatus.REJECTED: "Rejected",
    PipelineStatus.ASSIGNMENT_RECEIVED: "Assignment Received",
    PipelineStatus.APPROVED: "Approved",
}

INTERVIEW_STATUS_LABELS = {
    None: "Not Invited",
    InterviewStatus.INVITE_SENT: "Invite Sent",
    InterviewStatus.SCHEDULED: "Scheduled",
}


def can_transition(current: Optional[PipelineStatus], event: PipelineEvent) -> bool:
    """Return True if ``event`` is valid from ``current``.

    Pure predicate, no I/O. ``current`` is None only for a candidate that does
    not exist yet.

    Examples:
        >>> can_transition(None, PipelineEvent.SUBMIT_APPLICATION)
        True
        >>> can_transition(PipelineStatus.APPLIED, PipelineEvent.APPROVE)
        True
        >>> can_transition(PipelineStatus.REJECTED, PipelineEvent.REJECT)
        False
    """
    return current in TRANSITIONS.get(event, frozenset())


def allowed_events(current: Optional[PipelineStatus]) -> list[PipelineEvent]:
    """List the events valid from ``current``, in declaration order."""
    return [event for event in PipelineEvent if can_transition(current, event)]


def is_terminal(status: PipelineStatus) -> bool:
    """Return True if no pipeline edge leaves ``status``."""
    return status in TERMINAL_STATUSES


def can_advance_interview(
    current: Optional[InterviewStatus],
    target: InterviewStatus,
) -> bool:
    """Return True if the interview sub-protocol may move from ``current`` to ``target``."""
    return target in INTERVIEW_TRANSITIONS.get(current, frozenset())


def status_label(status: PipelineStatus) -> str:
    """Human-readable label for a pipeline status."""
    return STATUS_LABELS[PipelineStatus(status)]


def interview_status_label(status: Optional[InterviewStatus]) -> str:
    """Human-readable label for an interview status."""
    return INTERVIEW_STATUS_LABELS[InterviewStatus(status) if status else None]
