"""Public interview booking page. No authentication."""

from fastapi import APIRouter, Depends

from api.schemas import ERROR_RESPONSES, BookingPageResponse, BookSlotRequest, BookSlotResponse
from api.services.workflow import get_engine, get_scheduling
from pipeline.engine import TransitionEngine
from pipeline.scheduling import SchedulingCoordinator

router = APIRouter(responses=ERROR_RESPONSES)


@router.get("/{candidate_id}", response_model=BookingPageResponse)
async def get_booking_page(
    candidate_id: str,
    engine: TransitionEngine = Depends(get_engine),
):
    """Slots offered to the candidate, or the booked interview."""
    view = engine.booking_view(candidate_id)
    return BookingPageResponse(
        first_name=view.first_name,
        job_title=view.job_title,
        interview_status=view.interview_status,
        proposed_slots=view.proposed_slots,
        interview_date=view.interview_date,
        meeting_link=view.meeting_link,
    )


@router.post("/{candidate_id}", response_model=BookSlotResponse)
async def book_slot(
    candidate_id: str,
    data: BookSlotRequest,
    scheduling: SchedulingCoordinator = Depends(get_scheduling),
):
    """Book one of the proposed slots."""
    candidate = await scheduling.book_slot(candidate_id, data.slot)
    return BookSlotResponse(
        interview_status=candidate.interview_status,
        interview_date=candidate.interview_date,
        meeting_link=candidate.meeting_link,
    )
