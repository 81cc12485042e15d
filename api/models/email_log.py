"""EmailLog model for notification delivery tracking."""

from sqlalchemy import Column, Integer, String, DateTime, Text, ForeignKey
from sqlalchemy import func

from api.config.database import Base


class EmailLog(Base):
    """
    Log of notification attempts, successful or not.

    Failed rows are what a recruiter works from to resend by hand.
    """

    __tablename__ = "email_log"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Recipient
    to_email = Column(String(255), nullable=False)

    # assignment_invite, rejection, approval_invite
    email_type = Column(String(50), nullable=False)

    # Context
    candidate_id = Column(String(32), ForeignKey("candidates.id"), nullable=True)

    # Status: sent, failed
    status = Column(String(50), default="sent")
    message_id = Column(String(255), nullable=True)
    error = Column(Text, nullable=True)

    sent_at = Column(DateTime, default=func.now())

    def __repr__(self) -> str:
        return f"<EmailLog(id={self.id}, to={self.to_email}, status={self.status})>"
