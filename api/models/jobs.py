"""Job posting and application-form configuration models."""

import uuid

from sqlalchemy import Column, String, Boolean, DateTime, Text, ForeignKey, Index
from sqlalchemy import func
from sqlalchemy.orm import relationship

from api.config.database import Base


def _new_id() -> str:
    return uuid.uuid4().hex


class Job(Base):
    """
    A job posting owned by a recruiter.

    Applications are accepted only while is_open is true. Jobs are never
    hard-deleted; the owner closes them instead.
    """

    __tablename__ = "jobs"

    id = Column(String(32), primary_key=True, default=_new_id)
    user_id = Column(String(255), nullable=False)  # Owning recruiter (token subject)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=False)
    responsibilities = Column(Text, nullable=True)
    keywords = Column(Text, nullable=True)  # Comma-separated skill tags
    assignment_details = Column(Text, nullable=True)

    is_open = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    __table_args__ = (
        Index("idx_jobs_user", "user_id"),
    )

    # Relationships
    form_config = relationship("FormConfig", back_populates="job", uselist=False, lazy="joined")
    candidates = relationship("Candidate", back_populates="job", order_by="Candidate.created_at.desc()")

    def __repr__(self) -> str:
        return f"<Job(id={self.id}, title={self.title}, is_open={self.is_open})>"


class FormConfig(Base):
    """
    Which optional fields the job's application form collects.

    Created with the job and never changed afterwards. Name and email are
    always collected and required.
    """

    __tablename__ = "form_configs"

    id = Column(String(32), primary_key=True, default=_new_id)
    job_id = Column(String(32), ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, unique=True)

    include_resume = Column(Boolean, nullable=False, default=False)
    include_portfolio = Column(Boolean, nullable=False, default=False)
    include_notice_period = Column(Boolean, nullable=False, default=False)
    include_current_org = Column(Boolean, nullable=False, default=False)
    include_years_experience = Column(Boolean, nullable=False, default=False)

    job = relationship("Job", back_populates="form_config")

    def __repr__(self) -> str:
        return f"<FormConfig(job_id={self.job_id})>"
