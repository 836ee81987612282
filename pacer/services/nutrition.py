from datetime import date, datetime, timedelta
from typing import Optional, Union

from pacer.schemas import WEEKDAYS, TrainingPlan, Workout


HIGH_INTENSITY_TYPES = ("Long Run", "Intervals")

# Grams of carbohydrate per pound of body weight
REST_CARBS_PER_LB = 5
MODERATE_CARBS_PER_LB = 6
HIGH_CARBS_PER_LB = 8


def carb_target(body_weight: float, workout: Optional[Workout]) -> int:
    """Carbohydrate grams to eat today, fuelling tomorrow's workout."""
    if workout is None or workout.type == "Rest":
        factor = REST_CARBS_PER_LB
    elif workout.type in HIGH_INTENSITY_TYPES:
        factor = HIGH_CARBS_PER_LB
    else:
        factor = MODERATE_CARBS_PER_LB
    return int(round(body_weight * factor))


def tomorrow_workout(
    plan: TrainingPlan,
    current_week: int,
    today: Optional[Union[date, datetime]] = None,
) -> Optional[Workout]:
    """Look up tomorrow's workout by weekday name in the current plan week."""
    if today is None:
        today = date.today()
    if isinstance(today, datetime):
        today = today.date()

    day_name = WEEKDAYS[(today + timedelta(days=1)).weekday()]
    for workout in plan.get(current_week, []):
        if workout.day == day_name:
            return workout
    return None


def macro_calories(protein: Optional[int], carbs: Optional[int], fats: Optional[int]) -> int:
    return (protein or 0) * 4 + (carbs or 0) * 4 + (fats or 0) * 9
