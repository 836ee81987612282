from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.ext.asyncio import AsyncSession

from pacer.auth import get_current_user_id
from pacer.database import get_db
from pacer.events import log_event
from pacer.schemas import NutritionEntryCreate, NutritionEntryResponse
from pacer.services.nutrition import carb_target, tomorrow_workout
from pacer.services.plan_defaults import DEFAULT_SETTINGS
from pacer.services.stores import NUTRITION_HISTORY_LIMIT, NutritionLogStore, PlanStore, SettingsStore

router = APIRouter(prefix="/api/nutrition", tags=["nutrition"])


@router.get("", response_model=List[NutritionEntryResponse])
async def list_entries(
    limit: int = Query(NUTRITION_HISTORY_LIMIT, ge=1, le=NUTRITION_HISTORY_LIMIT),
    session: Optional[AsyncSession] = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Logged macro entries, most recent first."""
    return await NutritionLogStore(session, user_id).list(limit=limit)


@router.post("", response_model=NutritionEntryResponse, status_code=201)
async def add_entry(
    payload: NutritionEntryCreate,
    session: Optional[AsyncSession] = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    entry = await NutritionLogStore(session, user_id).append(payload)
    if entry is None:
        raise HTTPException(status_code=503, detail="Database not configured, entry was not saved")
    await log_event(session, "feature", "nutrition_logged")
    return entry


@router.get("/target")
async def get_carb_target(
    session: Optional[AsyncSession] = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Today's carbohydrate goal, sized for tomorrow's workout."""
    settings = await SettingsStore(session, user_id).load() or DEFAULT_SETTINGS
    plan = await PlanStore(session, user_id).load_or_create()
    workout = tomorrow_workout(plan, settings.current_week)
    return {
        "carbs": carb_target(settings.body_weight, workout),
        "tomorrow": workout.model_dump(mode="json") if workout else None,
    }
