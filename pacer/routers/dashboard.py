from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from pacer.auth import get_current_user_id
from pacer.database import get_db
from pacer.services.nutrition import carb_target, macro_calories, tomorrow_workout
from pacer.services.pace import pace_zones, target_pace
from pacer.services.plan_defaults import DEFAULT_SETTINGS
from pacer.services.race_countdown import days_to_race
from pacer.services.stores import DayLogStore, PlanStore, SettingsStore
from pacer.services.volume import monday_of_week, progress_percent, runs_completed, weekly_volume

router = APIRouter(prefix="/api/dashboard", tags=["dashboard"])

QUOTES = [
    "The miracle isn't that I finished. The miracle is that I had the courage to start.",
    "Run when you can, walk if you have to, crawl if you must; just never give up.",
    "Your body can stand almost anything. It's your mind you have to convince.",
    "The pain of discipline is far less than the pain of regret.",
    "Every mile is a gift. Appreciate every one.",
]


def daily_quote(today: date) -> str:
    # Sunday = 0, like the weekday numbering the quotes were picked for
    return QUOTES[((today.weekday() + 1) % 7) % len(QUOTES)]


def race_countdown_label(race_date: Optional[str], days: int) -> str:
    if not race_date:
        return "TBD"
    if days <= 0:
        return "Race Day!"
    return str(days)


@router.get("")
async def get_dashboard(
    session: Optional[AsyncSession] = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Everything the home screen shows, computed from stored data."""
    today = date.today()
    settings = await SettingsStore(session, user_id).load() or DEFAULT_SETTINGS
    plan = await PlanStore(session, user_id).load_or_create()
    days = await DayLogStore(session, user_id).load_all()

    week = plan.get(settings.current_week, [])
    volume = weekly_volume(week)
    completed, total = runs_completed(week)

    logged = days.get(today.isoformat())
    protein = (logged.protein if logged else None) or 0
    carbs = (logged.carbs if logged else None) or 0
    fats = (logged.fats if logged else None) or 0

    countdown = days_to_race(settings.race_date, today)

    return {
        "target_time": settings.target_time,
        "target_pace": target_pace(settings.target_time),
        "pace_zones": pace_zones(settings.target_time),
        "race_date": settings.race_date,
        "days_to_race": countdown,
        "days_to_race_label": race_countdown_label(settings.race_date, countdown),
        "current_week": settings.current_week,
        "total_training_weeks": settings.total_training_weeks,
        "week_of": monday_of_week(today).isoformat(),
        "weekly_volume": {"planned": volume.planned, "actual": volume.actual},
        "progress_percent": progress_percent(volume),
        "runs_completed": completed,
        "runs_total": total,
        "today_nutrition": {
            "protein": protein,
            "carbs": carbs,
            "fats": fats,
            "calories": macro_calories(protein, carbs, fats),
        },
        "carb_target": carb_target(settings.body_weight, tomorrow_workout(plan, settings.current_week, today)),
        "quote": daily_quote(today),
    }
