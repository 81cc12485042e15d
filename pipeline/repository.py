"""
Persistence for jobs, candidates and the audit trail.

Candidate writes are compare-and-set on ``version``: an update names the
version it was computed from and matches zero rows if another writer got
there first. Callers see that as ``StaleRecord`` and re-evaluate against the
committed state.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any, Optional

import structlog
from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from api.models import Activity, Candidate, EmailLog, FormConfig, Job
from pipeline.errors import RecordNotFound
from pipeline.models import (
    CandidateRecord,
    FormConfigRecord,
    JobRecord,
    ensure_utc,
    serialize_slots,
)

logger = structlog.get_logger()


class StaleRecord(Exception):
    """Compare-and-set matched no row: the record changed since it was read."""

    def __init__(self, candidate_id: str, expected_version: int):
        self.candidate_id = candidate_id
        self.expected_version = expected_version
        super().__init__(f"Candidate {candidate_id} is no longer at version {expected_version}")


def _to_column_value(key: str, value: Any) -> Any:
    if key == "proposed_slots":
        return serialize_slots(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, datetime):
        return ensure_utc(value)
    return value


class JobRepository:
    """Reads and writes job postings."""

    def __init__(self, db: Session):
        self.db = db

    def _load(self, job_id: str) -> Job:
        job = self.db.execute(
            select(Job).where(Job.id == job_id).execution_options(populate_existing=True)
        ).unique().scalar_one_or_none()
        if not job:
            raise RecordNotFound("Job", job_id)
        return job

    def get_job(self, job_id: str) -> JobRecord:
        return JobRecord.model_validate(self._load(job_id))

    def create_job(
        self,
        user_id: str,
        title: str,
        description: str,
        form_config: FormConfigRecord,
        responsibilities: Optional[str] = None,
        keywords: Optional[str] = None,
        assignment_details: Optional[str] = None,
    ) -> JobRecord:
        job = Job(
            user_id=user_id,
            title=title,
            description=description,
            responsibilities=responsibilities,
            keywords=keywords,
            assignment_details=assignment_details,
            is_open=True,
        )
        job.form_config = FormConfig(**form_config.model_dump())
        self.db.add(job)
        self.db.commit()
        self.db.refresh(job)

        logger.info("Job created", job_id=job.id, user_id=user_id)
        return JobRecord.model_validate(job)

    def list_jobs(self, user_id: str) -> list[tuple[JobRecord, int]]:
        """Jobs owned by a user, newest first, with their candidate counts."""
        counts = dict(
            self.db.execute(
                select(Candidate.job_id, func.count(Candidate.id))
                .join(Job, Job.id == Candidate.job_id)
                .where(Job.user_id == user_id)
                .group_by(Candidate.job_id)
            ).all()
        )
        jobs = self.db.execute(
            select(Job).where(Job.user_id == user_id).order_by(Job.created_at.desc())
        ).unique().scalars().all()
        return [(JobRecord.model_validate(job), counts.get(job.id, 0)) for job in jobs]

    def set_open(self, job_id: str, is_open: bool) -> JobRecord:
        job = self._load(job_id)
        job.is_open = is_open
        self.db.commit()
        self.db.refresh(job)
        return JobRecord.model_validate(job)


class CandidateRepository:
    """Reads candidates and writes them with compare-and-set."""

    def __init__(self, db: Session):
        self.db = db

    def get_candidate(self, candidate_id: str) -> CandidateRecord:
        candidate = self.db.execute(
            select(Candidate)
            .where(Candidate.id == candidate_id)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if not candidate:
            raise RecordNotFound("Candidate", candidate_id)
        return CandidateRecord.model_validate(candidate)

    def list_for_job(self, job_id: str) -> list[CandidateRecord]:
        rows = self.db.execute(
            select(Candidate)
            .where(Candidate.job_id == job_id)
            .order_by(Candidate.created_at.desc())
            .execution_options(populate_existing=True)
        ).scalars().all()
        return [CandidateRecord.model_validate(row) for row in rows]

    def create_candidate(self, data: dict[str, Any]) -> CandidateRecord:
        candidate = Candidate(
            **{key: _to_column_value(key, value) for key, value in data.items()},
            version=1,
        )
        self.db.add(candidate)
        self.db.commit()
        self.db.refresh(candidate)
        return CandidateRecord.model_validate(candidate)

    def update_candidate(
        self,
        candidate_id: str,
        patch: dict[str, Any],
        expected_version: int,
    ) -> CandidateRecord:
        """Apply ``patch`` if the candidate is still at ``expected_version``.

        Raises:
            StaleRecord: if another write committed first
        """
        values = {key: _to_column_value(key, value) for key, value in patch.items()}
        values["version"] = Candidate.version + 1
        values["updated_at"] = func.now()

        result = self.db.execute(
            update(Candidate)
            .where(Candidate.id == candidate_id, Candidate.version == expected_version)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            self.db.rollback()
            logger.info(
                "Candidate compare-and-set lost",
                candidate_id=candidate_id,
                expected_version=expected_version,
            )
            raise StaleRecord(candidate_id, expected_version)

        self.db.commit()
        return self.get_candidate(candidate_id)


class AuditLog:
    """Writes the activity trail and the notification log."""

    def __init__(self, db: Session):
        self.db = db

    def record_activity(
        self,
        action: str,
        candidate_id: Optional[str] = None,
        job_id: Optional[str] = None,
        actor_id: Optional[str] = None,
        details: Optional[dict] = None,
    ) -> None:
        self.db.add(
            Activity(
                action=action,
                candidate_id=candidate_id,
                job_id=job_id,
                actor_id=actor_id,
                details=json.dumps(details, default=str) if details else None,
            )
        )
        self.db.commit()

    def record_email(
        self,
        email_type: str,
        to_email: str,
        candidate_id: Optional[str],
        status: str,
        message_id: Optional[str] = None,
        error: Optional[str] = None,
    ) -> None:
        self.db.add(
            EmailLog(
                email_type=email_type,
                to_email=to_email,
                candidate_id=candidate_id,
                status=status,
                message_id=message_id,
                error=error,
            )
        )
        self.db.commit()
