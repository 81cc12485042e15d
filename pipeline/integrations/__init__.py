"""External service integrations."""

from .claude import ClaudeScorer, ScoringError
from .google_calendar import CalendarError, GoogleCalendarClient
from .s3 import S3DocumentStore, StorageError
from .ses import EmailError, SESNotifier

__all__ = [
    "ClaudeScorer",
    "ScoringError",
    "GoogleCalendarClient",
    "CalendarError",
    "S3DocumentStore",
    "StorageError",
    "SESNotifier",
    "EmailError",
]
