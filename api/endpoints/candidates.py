"""Candidate endpoints for the owning recruiter."""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends

from api.schemas import (
    ERROR_RESPONSES,
    ApproveRequest,
    CandidateResponse,
    ReconcileResponse,
    RejectRequest,
    ResumeUrlResponse,
)
from api.services.workflow import get_current_user_id, get_engine, get_scheduling
from pipeline.engine import TransitionEngine
from pipeline.scheduling import SchedulingCoordinator

logger = structlog.get_logger()
router = APIRouter(responses=ERROR_RESPONSES)

RESUME_URL_EXPIRY_SECONDS = 3600


@router.get("/{candidate_id}", response_model=CandidateResponse)
async def get_candidate(
    candidate_id: str,
    engine: TransitionEngine = Depends(get_engine),
    user_id: str = Depends(get_current_user_id),
):
    """Get a candidate's current workflow state."""
    return CandidateResponse.from_record(engine.get_candidate(candidate_id, user_id))


@router.post("/{candidate_id}/approve", response_model=CandidateResponse)
async def approve_candidate(
    candidate_id: str,
    data: ApproveRequest,
    engine: TransitionEngine = Depends(get_engine),
    user_id: str = Depends(get_current_user_id),
):
    """Approve a candidate and send the booking link for the given slots."""
    candidate = await engine.approve(candidate_id, user_id, data.slots)
    return CandidateResponse.from_record(candidate)


@router.post("/{candidate_id}/propose-slots", response_model=CandidateResponse)
async def propose_slots(
    candidate_id: str,
    data: ApproveRequest,
    scheduling: SchedulingCoordinator = Depends(get_scheduling),
    user_id: str = Depends(get_current_user_id),
):
    """Offer up to three interview slots; this approves the candidate."""
    candidate = await scheduling.propose_slots(candidate_id, user_id, data.slots)
    return CandidateResponse.from_record(candidate)


@router.post("/{candidate_id}/reject", response_model=CandidateResponse)
async def reject_candidate(
    candidate_id: str,
    data: Optional[RejectRequest] = None,
    engine: TransitionEngine = Depends(get_engine),
    user_id: str = Depends(get_current_user_id),
):
    """Reject a candidate. Without a reason, a standard courteous one is sent."""
    candidate = await engine.reject(candidate_id, user_id, data.reason if data else None)
    return CandidateResponse.from_record(candidate)


@router.post("/{candidate_id}/reconcile-booking", response_model=ReconcileResponse)
async def reconcile_booking(
    candidate_id: str,
    scheduling: SchedulingCoordinator = Depends(get_scheduling),
    user_id: str = Depends(get_current_user_id),
):
    """Check the recruiter's calendar for a booking made outside the booking page."""
    result = await scheduling.reconcile_booking(candidate_id, user_id)
    return ReconcileResponse(
        found=result.found,
        message=result.message,
        candidate=CandidateResponse.from_record(result.candidate),
    )


@router.get("/{candidate_id}/resume", response_model=ResumeUrlResponse)
async def get_resume_url(
    candidate_id: str,
    engine: TransitionEngine = Depends(get_engine),
    user_id: str = Depends(get_current_user_id),
):
    """Presigned download link for the candidate's resume."""
    url = await engine.resume_url(candidate_id, user_id, expires_in=RESUME_URL_EXPIRY_SECONDS)
    return ResumeUrlResponse(url=url, expires_in=RESUME_URL_EXPIRY_SECONDS)
