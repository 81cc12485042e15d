"""Candidate model: the workflow entity of the hiring pipeline."""

import uuid

from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey, Index
from sqlalchemy import func
from sqlalchemy.orm import relationship

from api.config.database import Base
from pipeline.status import PipelineStatus


class Candidate(Base):
    """
    One application to one job, and its position in the pipeline.

    Status values are the PipelineStatus / InterviewStatus enum values.
    Every write goes through pipeline.repository with a compare-and-set on
    ``version``.
    """

    __tablename__ = "candidates"

    id = Column(String(32), primary_key=True, default=lambda: uuid.uuid4().hex)
    job_id = Column(String(32), ForeignKey("jobs.id"), nullable=False)

    # Applicant
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    resume_url = Column(String(1024), nullable=True)  # Storage key
    portfolio_url = Column(String(1024), nullable=True)
    notice_period = Column(String(255), nullable=True)
    current_org = Column(String(255), nullable=True)
    years_of_experience = Column(String(255), nullable=True)

    # Screening
    screening_score = Column(Integer, nullable=True)  # 0-100, NULL = manual review
    screening_reason = Column(Text, nullable=True)
    screening_mode = Column(String(20), nullable=True)  # text, document, skipped

    # Pipeline
    status = Column(String(50), nullable=False, default=PipelineStatus.APPLIED.value)
    interview_status = Column(String(50), nullable=True)  # INVITE_SENT, SCHEDULED
    proposed_slots = Column(Text, nullable=True)  # JSON list of ISO timestamps
    interview_date = Column(DateTime(timezone=True), nullable=True)
    meeting_link = Column(String(1024), nullable=True)
    assignment_submission = Column(String(1024), nullable=True)  # Link or storage key

    # Compare-and-set counter
    version = Column(Integer, nullable=False, default=1)

    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    __table_args__ = (
        Index("idx_candidates_job", "job_id"),
        Index("idx_candidates_email", "email"),
    )

    job = relationship("Job", back_populates="candidates")

    def __repr__(self) -> str:
        return f"<Candidate(id={self.id}, name={self.name}, status={self.status})>"
