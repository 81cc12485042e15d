"""Pydantic schemas for user settings endpoints."""

from typing import Optional

from .base import CamelModel


class SettingsUpdate(CamelModel):
    """Fields left out (or null) are unchanged; an empty string clears a field."""

    anthropic_api_key: Optional[str] = None
    google_client_id: Optional[str] = None
    google_client_secret: Optional[str] = None
    google_refresh_token: Optional[str] = None


class SettingsStatusResponse(CamelModel):
    """Which credentials are configured. Secrets are never returned."""

    anthropic_api_key: bool
    google_client_id: bool
    google_client_secret: bool
    calendar_connected: bool
    environment_anthropic_key: bool
