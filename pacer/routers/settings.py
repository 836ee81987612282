from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from pacer.auth import get_current_user_id
from pacer.database import get_db
from pacer.errors import InvalidInput
from pacer.events import log_event
from pacer.schemas import SettingsUpdate, UserSettingsData
from pacer.services.plan_defaults import DEFAULT_SETTINGS
from pacer.services.stores import SettingsStore

router = APIRouter(prefix="/api/settings", tags=["settings"])

NOT_SAVED = "Database not configured, settings were not saved"


@router.get("", response_model=UserSettingsData)
async def get_settings(
    session: Optional[AsyncSession] = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Stored settings, or the defaults for a new runner."""
    return await SettingsStore(session, user_id).load() or DEFAULT_SETTINGS


@router.put("", response_model=UserSettingsData)
async def update_settings(
    payload: SettingsUpdate,
    session: Optional[AsyncSession] = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Merge the given fields into the stored settings."""
    store = SettingsStore(session, user_id)
    current = await store.load() or DEFAULT_SETTINGS

    merged = current.model_dump()
    merged.update(payload.model_dump(exclude_unset=True))
    try:
        settings = UserSettingsData(**merged)
    except ValidationError as e:
        raise InvalidInput(str(e)) from e

    if not await store.save(settings):
        raise HTTPException(status_code=503, detail=NOT_SAVED)

    await log_event(session, "feature", "settings_updated", {
        "fields": sorted(payload.model_dump(exclude_unset=True)),
    })
    return settings
