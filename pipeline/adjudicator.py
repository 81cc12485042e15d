"""Screening policy: maps a raw AI score to a pipeline decision."""

from enum import Enum
from typing import Optional, Union

from pipeline.status import PipelineStatus

# Minimum score that passes screening (inclusive)
PASS_THRESHOLD = 70


class ScreeningDecision(str, Enum):
    """Outcome of screening a resume."""

    PASS = "pass"
    FAIL = "fail"
    INDETERMINATE = "indeterminate"


INITIAL_STATUS = {
    ScreeningDecision.PASS: PipelineStatus.ASSIGNMENT_SENT,
    ScreeningDecision.FAIL: PipelineStatus.REJECTED,
    ScreeningDecision.INDETERMINATE: PipelineStatus.APPLIED,
}


def adjudicate(score: Optional[Union[int, float]]) -> ScreeningDecision:
    """Decide pass/fail/indeterminate for a screening score.

    An absent score means screening could not run (unreadable resume, scorer
    unavailable) and the candidate needs manual review.

    Examples:
        >>> adjudicate(70)
        <ScreeningDecision.PASS: 'pass'>
        >>> adjudicate(69)
        <ScreeningDecision.FAIL: 'fail'>
        >>> adjudicate(None)
        <ScreeningDecision.INDETERMINATE: 'indeterminate'>
    """
    if score is None:
        return ScreeningDecision.INDETERMINATE
    if score >= PASS_THRESHOLD:
        return ScreeningDecision.PASS
    return ScreeningDecision.FAIL


def initial_status(decision: ScreeningDecision) -> PipelineStatus:
    """Status a new candidate is created in for a screening decision."""
    return INITIAL_STATUS[decision]
