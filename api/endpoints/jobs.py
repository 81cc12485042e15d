"""Job management endpoints for recruiters."""

import structlog
from fastapi import APIRouter, Depends, status

from api.schemas import (
    ERROR_RESPONSES,
    CandidateResponse,
    JobCreate,
    JobDetailResponse,
    JobResponse,
    JobStatusUpdate,
    ResponsibilitiesRequest,
    ResponsibilitiesResponse,
)
from api.services.workflow import get_current_user_id, get_engine, get_scorer
from pipeline.engine import TransitionEngine
from pipeline.integrations import ClaudeScorer
from pipeline.models import FormConfigRecord, JobRecord

logger = structlog.get_logger()
router = APIRouter(responses=ERROR_RESPONSES)


def _job_response(job: JobRecord, candidate_count: int | None = None) -> JobResponse:
    return JobResponse(**job.model_dump(), candidate_count=candidate_count)


@router.post("", response_model=JobResponse, status_code=status.HTTP_201_CREATED)
async def create_job(
    data: JobCreate,
    engine: TransitionEngine = Depends(get_engine),
    user_id: str = Depends(get_current_user_id),
):
    """Create a job posting. New jobs start open."""
    job = engine.create_job(
        owner_id=user_id,
        title=data.title,
        description=data.description,
        form_config=FormConfigRecord(**data.form_config.model_dump()),
        responsibilities=data.responsibilities,
        keywords=data.keywords,
        assignment_details=data.assignment_details,
    )
    return _job_response(job, candidate_count=0)


@router.get("", response_model=list[JobResponse])
async def list_jobs(
    engine: TransitionEngine = Depends(get_engine),
    user_id: str = Depends(get_current_user_id),
):
    """List the caller's jobs, newest first, with candidate counts."""
    return [_job_response(job, count) for job, count in engine.list_jobs(user_id)]


@router.post("/generate-responsibilities", response_model=ResponsibilitiesResponse)
async def generate_responsibilities(
    data: ResponsibilitiesRequest,
    scorer: ClaudeScorer = Depends(get_scorer),
    user_id: str = Depends(get_current_user_id),
):
    """Draft a responsibilities list for a job title with Claude."""
    text = await scorer.generate_responsibilities(data.title, user_id)
    return ResponsibilitiesResponse(responsibilities=text)


@router.get("/{job_id}", response_model=JobDetailResponse)
async def get_job(
    job_id: str,
    engine: TransitionEngine = Depends(get_engine),
    user_id: str = Depends(get_current_user_id),
):
    """Get a job with its candidates."""
    job, candidates = engine.get_job(job_id, user_id)
    return JobDetailResponse(
        **job.model_dump(),
        candidate_count=len(candidates),
        candidates=[CandidateResponse.from_record(c) for c in candidates],
    )


@router.patch("/{job_id}/status", response_model=JobResponse)
async def update_job_status(
    job_id: str,
    data: JobStatusUpdate,
    engine: TransitionEngine = Depends(get_engine),
    user_id: str = Depends(get_current_user_id),
):
    """Open or close a job for applications."""
    job = engine.set_job_open(job_id, user_id, data.is_open)
    return _job_response(job)
