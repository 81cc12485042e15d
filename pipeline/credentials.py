"""
Per-user credential resolution.

A recruiter may store their own Anthropic key and Google OAuth client in user
settings. Collaborators never read settings or the environment themselves;
they ask a ``CredentialResolver``, which checks the user's stored value first
and falls back to the deployment environment.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional

import structlog
from cryptography.fernet import InvalidToken
from sqlalchemy import select
from sqlalchemy.orm import Session

from api.models import UserSettings
from pipeline.config import PipelineSettings, get_settings
from pipeline.models import ensure_utc
from pipeline.utils.encryption import decrypt_value, encrypt_value

logger = structlog.get_logger()

# Columns holding secrets; written encrypted, never echoed back
ENCRYPTED_FIELDS = (
    "anthropic_api_key",
    "google_client_secret",
    "google_refresh_token",
    "google_access_token",
)

EDITABLE_FIELDS = (
    "anthropic_api_key",
    "google_client_id",
    "google_client_secret",
    "google_refresh_token",
)


class Provider(str, Enum):
    """External services a user can hold credentials for."""

    ANTHROPIC = "anthropic"
    GOOGLE = "google"


class CredentialSource(str, Enum):
    USER = "user"
    ENVIRONMENT = "environment"
    NONE = "none"


@dataclass(frozen=True)
class ResolvedCredential:
    """A credential and where it came from."""

    key: Optional[str]
    source: CredentialSource

    @property
    def available(self) -> bool:
        return bool(self.key)


@dataclass(frozen=True)
class GoogleOAuthCredentials:
    """Everything needed to obtain a Google access token for one user."""

    client_id: str
    client_secret: str
    refresh_token: str
    access_token: Optional[str] = None
    expires_at: Optional[datetime] = None


class CredentialResolver:
    """Resolves credentials for a user, falling back to the environment."""

    def __init__(self, db: Session, config: Optional[PipelineSettings] = None):
        self.db = db
        self.config = config or get_settings()

    def _load(self, user_id: str) -> Optional[UserSettings]:
        return self.db.execute(
            select(UserSettings).where(UserSettings.user_id == user_id)
        ).scalar_one_or_none()

    def _read(self, row: Optional[UserSettings], field: str) -> Optional[str]:
        if row is None:
            return None
        value = getattr(row, field)
        if not value or field not in ENCRYPTED_FIELDS:
            return value or None
        try:
            return decrypt_value(value)
        except InvalidToken:
            logger.warning("Stored credential could not be decrypted", user_id=row.user_id, field=field)
            return None

    def resolve(self, user_id: Optional[str], provider: Provider) -> ResolvedCredential:
        """Resolve the API key (or refresh token, for Google) a user's work should run with."""
        row = self._load(user_id) if user_id else None

        if provider == Provider.ANTHROPIC:
            user_value = self._read(row, "anthropic_api_key")
            env_value = self.config.ANTHROPIC_API_KEY
        else:
            user_value = self._read(row, "google_refresh_token")
            env_value = None

        if user_value:
            return ResolvedCredential(user_value, CredentialSource.USER)
        if env_value:
            return ResolvedCredential(env_value, CredentialSource.ENVIRONMENT)
        return ResolvedCredential(None, CredentialSource.NONE)

    def google_oauth(self, user_id: str) -> Optional[GoogleOAuthCredentials]:
        """OAuth material for a user's calendar, or None if they never connected one."""
        row = self._load(user_id)
        refresh_token = self._read(row, "google_refresh_token")
        if not refresh_token:
            return None

        client_id = self._read(row, "google_client_id") or self.config.GOOGLE_CLIENT_ID
        client_secret = self._read(row, "google_client_secret") or self.config.GOOGLE_CLIENT_SECRET
        if not client_id or not client_secret:
            logger.warning("Google OAuth client not configured", user_id=user_id)
            return None

        return GoogleOAuthCredentials(
            client_id=client_id,
            client_secret=client_secret,
            refresh_token=refresh_token,
            access_token=self._read(row, "google_access_token"),
            expires_at=ensure_utc(row.google_token_expiry),
        )

    def store_access_token(
        self,
        user_id: str,
        access_token: str,
        expires_at: datetime,
        refresh_token: Optional[str] = None,
    ) -> None:
        """Persist a freshly exchanged access token (and a rotated refresh token)."""
        row = self._load(user_id)
        if row is None:
            row = UserSettings(user_id=user_id)
            self.db.add(row)
        row.google_access_token = encrypt_value(access_token)
        row.google_token_expiry = ensure_utc(expires_at)
        if refresh_token:
            row.google_refresh_token = encrypt_value(refresh_token)
        self.db.commit()

    def update_settings(self, user_id: str, values: dict[str, Optional[str]]) -> None:
        """Upsert a user's settings.

        A value of None leaves the stored field untouched; an empty string clears it.
        """
        row = self._load(user_id)
        if row is None:
            row = UserSettings(user_id=user_id)
            self.db.add(row)

        for field in EDITABLE_FIELDS:
            if field not in values or values[field] is None:
                continue
            value = values[field].strip() or None
            if field in ENCRYPTED_FIELDS:
                value = encrypt_value(value)
            setattr(row, field, value)

        # A new refresh token invalidates whatever access token was cached
        if values.get("google_refresh_token") is not None:
            row.google_access_token = None
            row.google_token_expiry = None

        self.db.commit()
        logger.info("User settings updated", user_id=user_id, fields=sorted(k for k, v in values.items() if v is not None))

    def settings_status(self, user_id: str) -> dict[str, bool]:
        """Which credentials a user has configured. Never returns the secrets."""
        row = self._load(user_id)
        return {
            "anthropic_api_key": bool(row and row.anthropic_api_key),
            "google_client_id": bool(row and row.google_client_id),
            "google_client_secret": bool(row and row.google_client_secret),
            "calendar_connected": bool(row and row.google_refresh_token),
            "environment_anthropic_key": bool(self.config.ANTHROPIC_API_KEY),
        }
