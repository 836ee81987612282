from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Optional, Tuple

from pacer.schemas import Workout


@dataclass
class WeeklyVolume:
    planned: float
    actual: float


def weekly_volume(workouts: Iterable[Workout]) -> WeeklyVolume:
    """Sum planned and actual miles for a week. Missing actuals count as 0."""
    planned = 0.0
    actual = 0.0
    for workout in workouts:
        planned += workout.planned
        actual += workout.actual or 0
    return WeeklyVolume(planned=planned, actual=actual)


def progress_percent(volume: WeeklyVolume) -> float:
    """Share of planned miles completed, clamped to [0, 100]."""
    if volume.planned <= 0:
        return 0.0
    return max(0.0, min(100.0, volume.actual / volume.planned * 100))


def runs_completed(workouts: Iterable[Workout]) -> Tuple[int, int]:
    """Return (completed, total) for the non-rest workouts of a week."""
    completed = 0
    total = 0
    for workout in workouts:
        if workout.type == "Rest":
            continue
        total += 1
        if workout.actual is not None and workout.actual > 0:
            completed += 1
    return completed, total


def monday_of_week(today: Optional[date] = None) -> date:
    today = today or date.today()
    return today - timedelta(days=today.weekday())
