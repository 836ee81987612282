from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import ValidationError
from sqlalchemy.ext.asyncio import AsyncSession

from pacer.auth import get_current_user_id
from pacer.database import get_db
from pacer.errors import InvalidInput
from pacer.events import log_event
from pacer.schemas import Workout, WorkoutUpdate
from pacer.services.stores import PlanStore
from pacer.services.volume import progress_percent, runs_completed, weekly_volume

router = APIRouter(prefix="/api/plan", tags=["plan"])


@router.get("", response_model=Dict[int, List[Workout]])
async def get_plan(
    session: Optional[AsyncSession] = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Full training plan, seeded with the default plan on first use."""
    return await PlanStore(session, user_id).load_or_create()


@router.get("/{week}")
async def get_week(
    week: int,
    session: Optional[AsyncSession] = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """One plan week with its mileage totals."""
    plan = await PlanStore(session, user_id).load_or_create()
    workouts = plan.get(week)
    if not workouts:
        raise HTTPException(status_code=404, detail=f"Week {week} not in plan")

    volume = weekly_volume(workouts)
    completed, total = runs_completed(workouts)
    return {
        "week": week,
        "workouts": [w.model_dump(mode="json") for w in workouts],
        "planned_miles": volume.planned,
        "actual_miles": volume.actual,
        "progress_percent": progress_percent(volume),
        "runs_completed": completed,
        "runs_total": total,
    }


@router.patch("/{week}/{day}", response_model=Workout)
async def update_workout(
    week: int,
    day: str,
    payload: WorkoutUpdate,
    session: Optional[AsyncSession] = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Manually edit one slot. A hand-entered actual replaces any Strava value."""
    store = PlanStore(session, user_id)
    plan = await store.load_or_create()

    workouts = plan.get(week, [])
    index = next((i for i, w in enumerate(workouts) if w.day == day), None)
    if index is None:
        raise HTTPException(status_code=404, detail=f"No workout for week {week}, {day}")

    changes = payload.model_dump(exclude_unset=True)
    if "actual" in changes:
        changes["from_strava"] = False
        changes["strava_date"] = None
    try:
        workout = Workout.model_validate({**workouts[index].model_dump(), **changes})
    except ValidationError as e:
        raise InvalidInput(str(e)) from e
    workouts[index] = workout

    if not await store.save(plan):
        raise HTTPException(status_code=503, detail="Database not configured, workout was not saved")

    await log_event(session, "feature", "workout_edited", {"week": week, "day": day})
    return workout
