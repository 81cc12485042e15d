"""Tests for compare-and-set commits against a stale snapshot."""

import pytest

from pipeline.errors import ConcurrentModification, IllegalTransition
from pipeline.guards import commit_transition, require_event
from pipeline.status import PipelineEvent, PipelineStatus


async def _assignment_sent(workflow):
    job = workflow.create_job()
    return await workflow.apply(job)


class TestCommitTransition:
    async def test_writes_and_bumps_version(self, workflow):
        candidate = await _assignment_sent(workflow)

        updated = commit_transition(
            workflow.candidates,
            candidate,
            {"status": PipelineStatus.REJECTED},
            require_event(PipelineEvent.REJECT),
            PipelineEvent.REJECT.value,
        )

        assert updated.status == PipelineStatus.REJECTED
        assert updated.version == candidate.version + 1

    async def test_stale_write_rechecked_against_committed_state(self, workflow):
        stale = await _assignment_sent(workflow)
        workflow.candidates.update_candidate(stale.id, {"status": PipelineStatus.REJECTED}, stale.version)

        with pytest.raises(IllegalTransition) as exc_info:
            commit_transition(
                workflow.candidates,
                stale,
                {"status": PipelineStatus.ASSIGNMENT_RECEIVED},
                require_event(PipelineEvent.RECEIVE_ASSIGNMENT),
                PipelineEvent.RECEIVE_ASSIGNMENT.value,
            )

        assert not isinstance(exc_info.value, ConcurrentModification)
        assert exc_info.value.details["current_status"] == PipelineStatus.REJECTED.value
        current = workflow.candidates.get_candidate(stale.id)
        assert current.status == PipelineStatus.REJECTED
        assert current.version == stale.version + 1

    async def test_stale_write_still_valid_is_concurrent_modification(self, workflow):
        stale = await _assignment_sent(workflow)
        workflow.candidates.update_candidate(stale.id, {"screening_reason": "re-scored"}, stale.version)

        with pytest.raises(ConcurrentModification) as exc_info:
            commit_transition(
                workflow.candidates,
                stale,
                {"status": PipelineStatus.REJECTED},
                require_event(PipelineEvent.REJECT),
                PipelineEvent.REJECT.value,
            )

        assert exc_info.value.details["event"] == PipelineEvent.REJECT.value
        assert workflow.candidates.get_candidate(stale.id).status == PipelineStatus.ASSIGNMENT_SENT
