"""Backfill actual mileage in the plan from fitness tracker runs.

Only the current and previous plan week are considered, only runs from
the last 14 days count, and a slot that already has an actual value is
never overwritten. Running the same feed twice changes nothing.
"""
from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, Optional

from pacer.schemas import WEEKDAYS, ExternalActivity, TrainingPlan
from pacer.services.plan_updates import copy_plan


METERS_PER_MILE = 1609.34
RECENT_DAYS = 14


@dataclass
class ReconcileResult:
    plan: TrainingPlan
    runs: int
    updated: int


def _naive_local(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def meters_to_miles(meters: float) -> float:
    return round(meters / METERS_PER_MILE, 1)


def reconcile_activities(
    plan: TrainingPlan,
    current_week: int,
    activities: Iterable[ExternalActivity],
    now: Optional[datetime] = None,
) -> ReconcileResult:
    now = _naive_local(now or datetime.now())
    new_plan = copy_plan(plan)
    candidate_weeks = [w for w in (current_week, current_week - 1) if w >= 1 and w in new_plan]

    runs = 0
    updated = 0
    for activity in activities:
        if activity.activity_type != "Run":
            continue
        runs += 1

        started = _naive_local(activity.start_date)
        if (now - started).days > RECENT_DAYS:
            continue

        miles = meters_to_miles(activity.distance_meters)
        day_name = WEEKDAYS[started.weekday()]

        for week in candidate_weeks:
            workouts = new_plan[week]
            index = next((i for i, w in enumerate(workouts) if w.day == day_name), None)
            if index is None:
                continue
            workout = workouts[index]
            if workout.actual:
                continue
            workouts[index] = workout.model_copy(update={
                "actual": miles,
                "from_strava": True,
                "strava_date": activity.start_date,
            })
            updated += 1

    return ReconcileResult(plan=new_plan, runs=runs, updated=updated)
