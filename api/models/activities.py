"""Activity model for the pipeline audit trail."""

from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey, Index
from sqlalchemy import func

from api.config.database import Base


class Activity(Base):
    """
    Business audit trail.

    Records committed workflow transitions (NOT operational logs).
    """

    __tablename__ = "activities"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # What happened
    # application_submitted, assignment_received, candidate_approved,
    # candidate_rejected, interview_scheduled, job_opened, job_closed
    action = Column(String(100), nullable=False)

    # Context
    candidate_id = Column(
        String(32),
        ForeignKey("candidates.id", ondelete="CASCADE"),
        nullable=True,
    )
    job_id = Column(
        String(32),
        ForeignKey("jobs.id", ondelete="SET NULL"),
        nullable=True,
    )
    actor_id = Column(String(255), nullable=True)  # None = candidate or system

    # Details (JSON)
    # {"from_status": "APPLIED", "to_status": "APPROVED"}
    details = Column(Text, nullable=True)

    created_at = Column(DateTime, default=func.now())

    __table_args__ = (
        Index("idx_activities_candidate", "candidate_id"),
        Index("idx_activities_created", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<Activity(id={self.id}, action={self.action})>"
