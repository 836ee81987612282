from datetime import date

from pacer.schemas import Workout
from pacer.services.nutrition import carb_target, macro_calories, tomorrow_workout
from pacer.services.plan_defaults import default_training_plan


def test_carb_target_by_workout_type():
    assert carb_target(170, Workout(day="Saturday", type="Long Run", planned=20)) == 1360
    assert carb_target(170, Workout(day="Tuesday", type="Intervals", planned=6)) == 1360
    assert carb_target(170, Workout(day="Monday", type="Rest", planned=0)) == 850
    assert carb_target(170, None) == 850
    assert carb_target(170, Workout(day="Thursday", type="Tempo", planned=5)) == 1020
    assert carb_target(170, Workout(day="Tuesday", type="Easy", planned=5)) == 1020


def test_tomorrow_workout_uses_weekday_name():
    plan = default_training_plan()

    # 2025-01-10 is a Friday, so tomorrow is Saturday's long run
    workout = tomorrow_workout(plan, 1, date(2025, 1, 10))
    assert workout.day == "Saturday"
    assert workout.type == "Long Run"

    # Sunday rolls over to Monday
    workout = tomorrow_workout(plan, 2, date(2025, 1, 12))
    assert workout.day == "Monday"
    assert workout.type == "Rest"


def test_tomorrow_workout_missing_week():
    assert tomorrow_workout(default_training_plan(), 9, date(2025, 1, 10)) is None


def test_macro_calories():
    assert macro_calories(150, 400, 70) == 150 * 4 + 400 * 4 + 70 * 9
    assert macro_calories(None, None, None) == 0
