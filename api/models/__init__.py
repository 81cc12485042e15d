"""SQLAlchemy ORM models for the Hiring Pipeline.

All models are imported here to ensure they're registered with Base.metadata
before any database operations.
"""

# Import base first
from api.config.database import Base

# Core models
from .jobs import Job, FormConfig
from .candidates import Candidate

# Configuration models
from .user_settings import UserSettings

# Audit models
from .activities import Activity
from .email_log import EmailLog

__all__ = [
    "Base",
    # Core
    "Job",
    "FormConfig",
    "Candidate",
    # Configuration
    "UserSettings",
    # Audit
    "Activity",
    "EmailLog",
]
