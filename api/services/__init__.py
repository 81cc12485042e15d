"""Request-scoped services for the Hiring Pipeline API."""

from .token import decode_token, issue_token, renew_token
from .workflow import get_current_user_id, get_engine, get_scheduling

__all__ = [
    "decode_token",
    "issue_token",
    "renew_token",
    "get_current_user_id",
    "get_engine",
    "get_scheduling",
]
