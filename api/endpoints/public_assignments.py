"""Public assignment page and submission. No authentication."""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile

from api.schemas import ERROR_RESPONSES, AssignmentPageResponse, AssignmentSubmitResponse
from api.services.uploads import read_upload
from api.services.workflow import get_engine
from pipeline.engine import TransitionEngine

router = APIRouter(responses=ERROR_RESPONSES)


@router.get("/{candidate_id}", response_model=AssignmentPageResponse)
async def get_assignment(
    candidate_id: str,
    engine: TransitionEngine = Depends(get_engine),
):
    view = engine.assignment_view(candidate_id)
    return AssignmentPageResponse(
        candidate_name=view.candidate_name,
        job_title=view.job_title,
        assignment_details=view.assignment_details,
        status=view.status,
        can_submit=view.can_submit,
    )


@router.post("/{candidate_id}", response_model=AssignmentSubmitResponse)
async def submit_assignment(
    candidate_id: str,
    assignment_link: Optional[str] = Form(None),
    assignment_file: Optional[UploadFile] = File(None),
    engine: TransitionEngine = Depends(get_engine),
):
    """Submit the assignment as a link or a file."""
    document = await read_upload(assignment_file, "assignment_file")
    candidate = await engine.submit_assignment(candidate_id, link=assignment_link, file=document)
    return AssignmentSubmitResponse(status=candidate.status)
