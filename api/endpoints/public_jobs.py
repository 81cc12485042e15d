"""Public job pages and the application form. No authentication."""

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from api.schemas import ERROR_RESPONSES, ApplicationResponse, PublicJobResponse
from api.services.uploads import read_upload
from api.services.workflow import get_engine
from pipeline.engine import TransitionEngine
from pipeline.form_requirements import RESUME_FIELD
from pipeline.models import ApplicationSubmission

logger = structlog.get_logger()
router = APIRouter(responses=ERROR_RESPONSES)


@router.get("/{job_id}", response_model=PublicJobResponse)
async def get_public_job(
    job_id: str,
    engine: TransitionEngine = Depends(get_engine),
):
    """Job details for rendering the application form."""
    job = engine.public_job(job_id)
    return PublicJobResponse(**job.model_dump())


@router.post(
    "/{job_id}/applications",
    response_model=ApplicationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def submit_application(
    job_id: str,
    name: Optional[str] = Form(None),
    email: Optional[str] = Form(None),
    portfolio_url: Optional[str] = Form(None),
    notice_period: Optional[str] = Form(None),
    current_org: Optional[str] = Form(None),
    years_of_experience: Optional[str] = Form(None),
    resume: Optional[UploadFile] = File(None),
    engine: TransitionEngine = Depends(get_engine),
):
    """Submit an application. Screening runs before the response returns."""
    submission = ApplicationSubmission(
        name=name,
        email=email,
        portfolio_url=portfolio_url,
        notice_period=notice_period,
        current_org=current_org,
        years_of_experience=years_of_experience,
    )
    document = await read_upload(resume, RESUME_FIELD)
    candidate = await engine.submit_application(job_id, submission, document)
    return ApplicationResponse(candidate_id=candidate.id)
