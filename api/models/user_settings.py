"""Per-user credentials for the AI scorer and the calendar provider."""

from sqlalchemy import Column, Integer, String, DateTime, Text
from sqlalchemy import func

from api.config.database import Base


class UserSettings(Base):
    """
    Credentials a recruiter stores for their own integrations.

    Encrypted fields: anthropic_api_key, google_client_secret,
    google_refresh_token, google_access_token
    """

    __tablename__ = "user_settings"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(255), nullable=False, unique=True)

    # Claude AI
    anthropic_api_key = Column(Text, nullable=True)  # Encrypted

    # Google OAuth / Calendar
    google_client_id = Column(String(255), nullable=True)
    google_client_secret = Column(Text, nullable=True)  # Encrypted
    google_refresh_token = Column(Text, nullable=True)  # Encrypted
    google_access_token = Column(Text, nullable=True)  # Encrypted
    google_token_expiry = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    def __repr__(self) -> str:
        return f"<UserSettings(user_id={self.user_id})>"
