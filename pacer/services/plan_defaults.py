from pacer.schemas import TrainingPlan, UserSettingsData, Workout


DEFAULT_SETTINGS = UserSettingsData()

_DEFAULT_WEEKS = {
    1: [
        ("Monday", "Rest", 0),
        ("Tuesday", "Easy", 5),
        ("Wednesday", "Easy", 6),
        ("Thursday", "Tempo", 5),
        ("Friday", "Rest", 0),
        ("Saturday", "Long Run", 12),
        ("Sunday", "Recovery", 4),
    ],
    2: [
        ("Monday", "Rest", 0),
        ("Tuesday", "Easy", 5),
        ("Wednesday", "Intervals", 6),
        ("Thursday", "Easy", 5),
        ("Friday", "Rest", 0),
        ("Saturday", "Long Run", 14),
        ("Sunday", "Recovery", 4),
    ],
}


def default_training_plan() -> TrainingPlan:
    """Starting plan for a new runner. Returns fresh objects on every call."""
    return {
        week: [Workout(day=day, type=workout_type, planned=miles) for day, workout_type, miles in days]
        for week, days in _DEFAULT_WEEKS.items()
    }
