"""Tests for approval, slot booking and calendar reconciliation."""

import asyncio
from datetime import datetime, timedelta, timezone

import pytest

from pipeline.errors import (
    CollaboratorFailure,
    ConcurrentModification,
    IllegalTransition,
    PermissionDenied,
    WorkflowValidationError,
)
from pipeline.scheduling import (
    INTERVIEW_DURATION,
    NO_BOOKING_MESSAGE,
    RECONCILE_LOOKBACK,
    BusyInterval,
    CalendarEvent,
)
from pipeline.status import InterviewStatus, PipelineStatus
from tests.fakes import OTHER_USER_ID, OWNER_ID


def assert_slots_consistent(candidate):
    """Proposed slots exist exactly while an invite is pending."""
    pending = candidate.status == PipelineStatus.APPROVED and candidate.interview_status == InterviewStatus.INVITE_SENT
    assert (candidate.proposed_slots is not None) == pending


async def _applied(workflow):
    job = workflow.create_job(include_resume=False)
    return await workflow.apply(job, resume=False)


async def _invited(workflow, slots):
    candidate = await _applied(workflow)
    return await workflow.engine.approve(candidate.id, OWNER_ID, slots)


class TestProposeSlots:
    async def test_three_slots_stored_in_order(self, workflow, slots):
        candidate = await _applied(workflow)
        assert_slots_consistent(candidate)

        proposed = [slots[2], slots[0], slots[1]]
        updated = await workflow.engine.approve(candidate.id, OWNER_ID, proposed)

        assert updated.status == PipelineStatus.APPROVED
        assert updated.interview_status == InterviewStatus.INVITE_SENT
        assert updated.proposed_slots == proposed
        assert_slots_consistent(updated)

        kind, sent = workflow.notifier.sent[-1]
        assert kind == "approval_invite"
        assert sent["booking_link"] == f"http://frontend.test/meet/{candidate.id}"
        assert workflow.calendar.created == []

    async def test_fourth_slot_rejected(self, workflow, slots):
        candidate = await _applied(workflow)
        with pytest.raises(WorkflowValidationError) as exc_info:
            await workflow.engine.approve(candidate.id, OWNER_ID, slots + [slots[0] + timedelta(days=3)])

        assert exc_info.value.field == "slots"
        assert workflow.candidates.get_candidate(candidate.id).status == PipelineStatus.APPLIED
        assert workflow.notifier.sent == []

    @pytest.mark.parametrize("bad", [[], "duplicates"])
    async def test_empty_or_duplicate_slots_rejected(self, workflow, slots, bad):
        candidate = await _applied(workflow)
        proposal = [slots[0], slots[0]] if bad == "duplicates" else bad
        with pytest.raises(WorkflowValidationError):
            await workflow.engine.approve(candidate.id, OWNER_ID, proposal)

    async def test_naive_slots_are_utc(self, workflow, slots):
        candidate = await _applied(workflow)
        naive = slots[0].replace(tzinfo=None)
        updated = await workflow.engine.approve(candidate.id, OWNER_ID, [naive])
        assert updated.proposed_slots == [slots[0]]

    async def test_approve_from_assignment_sent_is_illegal(self, workflow, slots):
        candidate = await workflow.apply(workflow.create_job())
        assert candidate.status == PipelineStatus.ASSIGNMENT_SENT

        with pytest.raises(IllegalTransition):
            await workflow.engine.approve(candidate.id, OWNER_ID, slots)

    async def test_approve_after_assignment_received(self, workflow, slots):
        candidate = await workflow.apply(workflow.create_job())
        await workflow.engine.submit_assignment(candidate.id, link="https://example.com/solution")

        updated = await workflow.engine.approve(candidate.id, OWNER_ID, slots[:1])
        assert updated.status == PipelineStatus.APPROVED

    async def test_only_owner_can_approve(self, workflow, slots):
        candidate = await _applied(workflow)
        with pytest.raises(PermissionDenied):
            await workflow.engine.approve(candidate.id, OTHER_USER_ID, slots)

    async def test_approved_candidate_cannot_be_rejected(self, workflow, slots):
        candidate = await _invited(workflow, slots)
        with pytest.raises(IllegalTransition):
            await workflow.engine.reject(candidate.id, OWNER_ID)


class TestBookSlot:
    async def test_book_second_slot(self, workflow, slots):
        candidate = await _invited(workflow, slots)
        booked = await workflow.scheduling.book_slot(candidate.id, slots[1])

        assert booked.status == PipelineStatus.APPROVED
        assert booked.interview_status == InterviewStatus.SCHEDULED
        assert booked.interview_date == slots[1]
        assert booked.proposed_slots is None
        assert booked.meeting_link == "https://meet.google.com/abc-defg-hij"
        assert_slots_consistent(booked)

        [(owner_id, request)] = workflow.calendar.created
        assert owner_id == OWNER_ID
        assert request.start == slots[1]
        assert request.end == slots[1] + INTERVIEW_DURATION
        assert request.end - request.start == timedelta(minutes=45)
        assert request.attendee_email == "ada@example.com"
        assert request.summary == "Interview: Ada Lovelace (for Backend Engineer)"

    async def test_slot_in_other_timezone_matches(self, workflow, slots):
        candidate = await _invited(workflow, slots)
        offset = timezone(timedelta(hours=5, minutes=30))
        booked = await workflow.scheduling.book_slot(candidate.id, slots[0].astimezone(offset))
        assert booked.interview_date == slots[0]

    async def test_unoffered_slot_is_illegal(self, workflow, slots):
        candidate = await _invited(workflow, slots)
        with pytest.raises(IllegalTransition, match="not one of the proposed slots"):
            await workflow.scheduling.book_slot(candidate.id, slots[0] + timedelta(minutes=15))

        unchanged = workflow.candidates.get_candidate(candidate.id)
        assert unchanged.version == candidate.version
        assert workflow.calendar.created == []

    async def test_calendar_failure_mutates_nothing(self, workflow, slots):
        candidate = await _invited(workflow, slots)
        workflow.calendar.fail = True

        with pytest.raises(CollaboratorFailure):
            await workflow.scheduling.book_slot(candidate.id, slots[0])

        unchanged = workflow.candidates.get_candidate(candidate.id)
        assert unchanged.interview_status == InterviewStatus.INVITE_SENT
        assert unchanged.proposed_slots == slots
        assert unchanged.version == candidate.version

    async def test_second_booking_is_illegal(self, workflow, slots):
        candidate = await _invited(workflow, slots)
        await workflow.scheduling.book_slot(candidate.id, slots[0])
        with pytest.raises(IllegalTransition, match="no pending interview invite"):
            await workflow.scheduling.book_slot(candidate.id, slots[1])

    async def test_booking_without_invite_is_illegal(self, workflow, slots):
        candidate = await _applied(workflow)
        with pytest.raises(IllegalTransition):
            await workflow.scheduling.book_slot(candidate.id, slots[0])

    async def test_concurrent_bookings_exactly_one_wins(self, workflow, slots):
        candidate = await _invited(workflow, slots)

        results = await asyncio.gather(
            workflow.scheduling.book_slot(candidate.id, slots[0]),
            workflow.scheduling.book_slot(candidate.id, slots[1]),
            return_exceptions=True,
        )

        winners = [r for r in results if not isinstance(r, Exception)]
        losers = [r for r in results if isinstance(r, Exception)]
        assert len(winners) == 1
        assert len(losers) == 1
        assert isinstance(losers[0], IllegalTransition)
        assert not isinstance(losers[0], ConcurrentModification)

        final = workflow.candidates.get_candidate(candidate.id)
        assert final.interview_status == InterviewStatus.SCHEDULED
        assert final.interview_date == winners[0].interview_date
        assert final.version == candidate.version + 1

        live = workflow.calendar.live_event_ids()
        assert len(live) == 1
        surviving = int(live[0].split("-")[1]) - 1
        assert workflow.calendar.created[surviving][1].start == final.interview_date
        assert [owner for owner, _ in workflow.calendar.deleted] == [OWNER_ID]

    async def test_lost_booking_survives_failed_event_cleanup(self, workflow, slots):
        candidate = await _invited(workflow, slots)
        workflow.calendar.fail_delete = True

        results = await asyncio.gather(
            workflow.scheduling.book_slot(candidate.id, slots[0]),
            workflow.scheduling.book_slot(candidate.id, slots[1]),
            return_exceptions=True,
        )

        losers = [r for r in results if isinstance(r, Exception)]
        assert len(losers) == 1
        assert isinstance(losers[0], IllegalTransition)
        assert workflow.calendar.deleted == []
        assert workflow.candidates.get_candidate(candidate.id).interview_status == InterviewStatus.SCHEDULED

    async def test_single_booking_deletes_nothing(self, workflow, slots):
        candidate = await _invited(workflow, slots)
        await workflow.scheduling.book_slot(candidate.id, slots[1])
        assert workflow.calendar.deleted == []
        assert workflow.calendar.live_event_ids() == ["evt-1"]

    async def test_booking_view(self, workflow, slots):
        candidate = await _invited(workflow, slots)
        view = workflow.engine.booking_view(candidate.id)
        assert view.first_name == "Ada"
        assert view.proposed_slots == slots
        assert view.interview_status == InterviewStatus.INVITE_SENT

        await workflow.scheduling.book_slot(candidate.id, slots[2])
        view = workflow.engine.booking_view(candidate.id)
        assert view.proposed_slots == []
        assert view.interview_date == slots[2]


class TestReconcileBooking:
    async def test_found_by_attendee(self, workflow, slots):
        candidate = await _invited(workflow, slots)
        start = slots[0] + timedelta(hours=7)
        workflow.calendar.events = [
            CalendarEvent("other", slots[0], ("someone@example.com",)),
            CalendarEvent("evt-9", start, ("ADA@example.com",), "https://meet.google.com/xyz"),
        ]

        result = await workflow.scheduling.reconcile_booking(candidate.id, OWNER_ID)

        assert result.found
        assert result.candidate.interview_status == InterviewStatus.SCHEDULED
        assert result.candidate.interview_date == start
        assert result.candidate.meeting_link == "https://meet.google.com/xyz"
        assert result.candidate.proposed_slots is None

        owner_id, email, time_min = workflow.calendar.find_calls[0]
        assert (owner_id, email) == (OWNER_ID, "ada@example.com")
        assert datetime.now(timezone.utc) - time_min >= RECONCILE_LOOKBACK

    async def test_event_without_attendees_matches(self, workflow, slots):
        candidate = await _invited(workflow, slots)
        workflow.calendar.events = [CalendarEvent("evt-1", slots[1])]

        result = await workflow.scheduling.reconcile_booking(candidate.id, OWNER_ID)
        assert result.found
        assert result.candidate.interview_date == slots[1]

    async def test_not_found(self, workflow, slots):
        candidate = await _invited(workflow, slots)
        workflow.calendar.events = [CalendarEvent("other", slots[0], ("someone@example.com",))]

        result = await workflow.scheduling.reconcile_booking(candidate.id, OWNER_ID)

        assert not result.found
        assert result.message == NO_BOOKING_MESSAGE
        assert workflow.candidates.get_candidate(candidate.id).version == candidate.version

    async def test_requires_pending_invite(self, workflow, slots):
        candidate = await _applied(workflow)
        with pytest.raises(IllegalTransition):
            await workflow.scheduling.reconcile_booking(candidate.id, OWNER_ID)
        assert workflow.calendar.find_calls == []

    async def test_owner_only(self, workflow, slots):
        candidate = await _invited(workflow, slots)
        with pytest.raises(PermissionDenied):
            await workflow.scheduling.reconcile_booking(candidate.id, OTHER_USER_ID)


class TestListBusy:
    async def test_returns_calendar_intervals(self, workflow, slots):
        workflow.calendar.busy = [BusyInterval(slots[0], slots[0] + timedelta(hours=1))]
        busy = await workflow.scheduling.list_busy(OWNER_ID, slots[0], slots[0] + timedelta(days=7))
        assert busy == workflow.calendar.busy

    async def test_end_must_follow_start(self, workflow, slots):
        with pytest.raises(WorkflowValidationError) as exc_info:
            await workflow.scheduling.list_busy(OWNER_ID, slots[1], slots[0])
        assert exc_info.value.field == "end"
