"""
Declarative field requirements for application forms.

A job's FormConfig is turned into a set of ``FieldRequirement`` entries and a
single validator checks a submission against that set. Name and email are
always required. Portfolio is requested but never mandatory.
"""

import re
from dataclasses import dataclass
from typing import Optional

from pipeline.errors import WorkflowValidationError
from pipeline.models import ApplicationSubmission, FormConfigRecord, UploadedDocument

EMAIL_PATTERN = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

RESUME_FIELD = "resume"


@dataclass(frozen=True)
class FieldRequirement:
    """Whether a form field is collected and whether it must be filled."""

    name: str
    label: str
    collected: bool = True
    required: bool = True


def build_requirements(config: FormConfigRecord) -> dict[str, FieldRequirement]:
    """Map each form field to its requirement for a job's form config."""
    entries = [
        FieldRequirement("name", "Name"),
        FieldRequirement("email", "Email"),
        FieldRequirement(RESUME_FIELD, "Resume", config.include_resume, config.include_resume),
        FieldRequirement("portfolio_url", "Portfolio", config.include_portfolio, required=False),
        FieldRequirement("notice_period", "Notice Period", config.include_notice_period, config.include_notice_period),
        FieldRequirement("current_org", "Current Organization", config.include_current_org, config.include_current_org),
        FieldRequirement(
            "years_of_experience",
            "Years of Experience",
            config.include_years_experience,
            config.include_years_experience,
        ),
    ]
    return {entry.name: entry for entry in entries}


def validate_submission(
    submission: ApplicationSubmission,
    resume: Optional[UploadedDocument],
    requirements: dict[str, FieldRequirement],
) -> None:
    """Check a submission against its requirements.

    Raises:
        WorkflowValidationError: naming the first missing or malformed field
    """
    for requirement in requirements.values():
        if not requirement.required:
            continue
        if requirement.name == RESUME_FIELD:
            _validate_resume(resume, requirement)
            continue
        if getattr(submission, requirement.name, None) is None:
            raise WorkflowValidationError(f"{requirement.label} is required", field=requirement.name)

    if not EMAIL_PATTERN.match(submission.email or ""):
        raise WorkflowValidationError("Email address is not valid", field="email")


def _validate_resume(resume: Optional[UploadedDocument], requirement: FieldRequirement) -> None:
    if resume is None or resume.is_empty:
        raise WorkflowValidationError(f"{requirement.label} is required", field=requirement.name)
    if not resume.is_pdf:
        raise WorkflowValidationError(f"{requirement.label} must be a PDF file", field=requirement.name)
