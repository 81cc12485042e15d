"""Tests for pipeline status transitions."""

import pytest

from pipeline.status import (
    InterviewStatus,
    PipelineEvent,
    PipelineStatus,
    allowed_events,
    can_advance_interview,
    can_transition,
    interview_status_label,
    is_terminal,
    status_label,
)


class TestCanTransition:
    @pytest.mark.parametrize(
        "current,event",
        [
            (None, PipelineEvent.SUBMIT_APPLICATION),
            (PipelineStatus.ASSIGNMENT_SENT, PipelineEvent.RECEIVE_ASSIGNMENT),
            (PipelineStatus.APPLIED, PipelineEvent.APPROVE),
            (PipelineStatus.ASSIGNMENT_RECEIVED, PipelineEvent.APPROVE),
            (PipelineStatus.APPLIED, PipelineEvent.REJECT),
            (PipelineStatus.ASSIGNMENT_SENT, PipelineEvent.REJECT),
            (PipelineStatus.ASSIGNMENT_RECEIVED, PipelineEvent.REJECT),
        ],
    )
    def test_legal_edges(self, current, event):
        assert can_transition(current, event)

    @pytest.mark.parametrize(
        "current,event",
        [
            (PipelineStatus.APPLIED, PipelineEvent.SUBMIT_APPLICATION),
            (PipelineStatus.APPLIED, PipelineEvent.RECEIVE_ASSIGNMENT),
            (PipelineStatus.ASSIGNMENT_SENT, PipelineEvent.APPROVE),
            (PipelineStatus.REJECTED, PipelineEvent.REJECT),
            (PipelineStatus.APPROVED, PipelineEvent.REJECT),
            (PipelineStatus.APPROVED, PipelineEvent.APPROVE),
        ],
    )
    def test_illegal_edges(self, current, event):
        assert not can_transition(current, event)

    def test_terminal_statuses_allow_nothing(self):
        assert allowed_events(PipelineStatus.REJECTED) == []
        assert allowed_events(PipelineStatus.APPROVED) == []
        assert is_terminal(PipelineStatus.REJECTED)
        assert not is_terminal(PipelineStatus.APPLIED)

    def test_allowed_events_in_declaration_order(self):
        assert allowed_events(PipelineStatus.APPLIED) == [PipelineEvent.APPROVE, PipelineEvent.REJECT]
        assert allowed_events(None) == [PipelineEvent.SUBMIT_APPLICATION]


class TestInterviewStatus:
    def test_forward_only(self):
        assert can_advance_interview(None, InterviewStatus.INVITE_SENT)
        assert can_advance_interview(InterviewStatus.INVITE_SENT, InterviewStatus.SCHEDULED)
        assert not can_advance_interview(None, InterviewStatus.SCHEDULED)
        assert not can_advance_interview(InterviewStatus.SCHEDULED, InterviewStatus.INVITE_SENT)
        assert not can_advance_interview(InterviewStatus.SCHEDULED, InterviewStatus.SCHEDULED)


def test_labels_accept_raw_strings():
    assert status_label("ASSIGNMENT_SENT") == "Assignment Sent"
    assert interview_status_label(None) == "Not Invited"
    assert interview_status_label("INVITE_SENT") == "Invite Sent"
