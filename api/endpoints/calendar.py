"""Calendar endpoints for the signed-in recruiter."""

from datetime import datetime

from fastapi import APIRouter, Depends, Query

from api.schemas import ERROR_RESPONSES, BusyIntervalResponse, CalendarStatusResponse
from api.services.workflow import get_credentials, get_current_user_id, get_scheduling
from pipeline.credentials import CredentialResolver
from pipeline.scheduling import SchedulingCoordinator

router = APIRouter(responses=ERROR_RESPONSES)


@router.get("/status", response_model=CalendarStatusResponse)
async def calendar_status(
    credentials: CredentialResolver = Depends(get_credentials),
    user_id: str = Depends(get_current_user_id),
):
    """Whether the recruiter has connected a Google calendar."""
    return CalendarStatusResponse(connected=credentials.settings_status(user_id)["calendar_connected"])


@router.get("/busy", response_model=list[BusyIntervalResponse])
async def busy_intervals(
    start: datetime = Query(...),
    end: datetime = Query(...),
    scheduling: SchedulingCoordinator = Depends(get_scheduling),
    user_id: str = Depends(get_current_user_id),
):
    """Busy intervals on the recruiter's calendar between start and end."""
    intervals = await scheduling.list_busy(user_id, start, end)
    return [BusyIntervalResponse(start=i.start, end=i.end) for i in intervals]
