"""Per-user credential settings."""

import structlog
from fastapi import APIRouter, Depends

from api.schemas import SettingsStatusResponse, SettingsUpdate
from api.services.workflow import get_credentials, get_current_user_id
from pipeline.credentials import CredentialResolver

logger = structlog.get_logger()
router = APIRouter()


@router.get("", response_model=SettingsStatusResponse)
async def get_settings(
    credentials: CredentialResolver = Depends(get_credentials),
    user_id: str = Depends(get_current_user_id),
):
    """Which credentials the caller has configured."""
    return SettingsStatusResponse(**credentials.settings_status(user_id))


@router.put("", response_model=SettingsStatusResponse)
async def update_settings(
    data: SettingsUpdate,
    credentials: CredentialResolver = Depends(get_credentials),
    user_id: str = Depends(get_current_user_id),
):
    """Store the caller's credentials (encrypted)."""
    credentials.update_settings(user_id, data.model_dump())
    return SettingsStatusResponse(**credentials.settings_status(user_id))
