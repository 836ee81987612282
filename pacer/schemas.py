from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from pacer.services.pace import parse_finish_time
from pacer.services.race_countdown import parse_calendar_date


WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

Weekday = Literal["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

WorkoutType = Literal["Rest", "Easy", "Recovery", "Tempo", "Intervals", "Long Run"]

WORKOUT_TYPES = ["Rest", "Easy", "Recovery", "Tempo", "Intervals", "Long Run"]


class Workout(BaseModel):
    day: Weekday
    # Free text: coach directives may carry types outside WORKOUT_TYPES
    type: str
    planned: float = Field(0, ge=0)
    actual: Optional[float] = Field(None, ge=0)
    pace: Optional[str] = None
    from_strava: bool = False
    strava_date: Optional[datetime] = None


# Week number (1-based) -> seven workouts, Monday first
TrainingPlan = Dict[int, List[Workout]]


class WorkoutUpdate(BaseModel):
    type: Optional[WorkoutType] = None
    planned: Optional[float] = Field(None, ge=0)
    actual: Optional[float] = Field(None, ge=0)
    pace: Optional[str] = None


def _check_date(value: Optional[str]) -> Optional[str]:
    if value in (None, ""):
        return None
    parse_calendar_date(value)
    return value


class UserSettingsData(BaseModel):
    body_weight: int = Field(168, gt=0)
    target_time: str = "2:59:59"
    race_date: Optional[str] = None  # YYYY-MM-DD
    in_training_plan: bool = False
    total_training_weeks: int = Field(16, ge=1)
    current_week: int = 1
    training_start_date: Optional[str] = None  # YYYY-MM-DD

    @field_validator("target_time")
    @classmethod
    def _valid_target_time(cls, value: str) -> str:
        parse_finish_time(value)
        return value

    @field_validator("race_date", "training_start_date")
    @classmethod
    def _valid_dates(cls, value: Optional[str]) -> Optional[str]:
        return _check_date(value)

    @model_validator(mode="after")
    def _clamp_current_week(self):
        self.current_week = max(1, min(self.current_week, self.total_training_weeks))
        return self


class SettingsUpdate(BaseModel):
    body_weight: Optional[int] = Field(None, gt=0)
    target_time: Optional[str] = None
    race_date: Optional[str] = None
    in_training_plan: Optional[bool] = None
    total_training_weeks: Optional[int] = Field(None, ge=1)
    current_week: Optional[int] = None
    training_start_date: Optional[str] = None


class DayDetailsData(BaseModel):
    workout: Optional[str] = None
    miles: Optional[float] = Field(None, ge=0)
    pace: Optional[str] = None
    protein: Optional[int] = Field(None, ge=0)
    carbs: Optional[int] = Field(None, ge=0)
    fats: Optional[int] = Field(None, ge=0)
    notes: Optional[str] = None


class NutritionEntryCreate(BaseModel):
    carbs: int = Field(ge=0)
    protein: int = Field(ge=0)
    fats: int = Field(ge=0)


class NutritionEntryResponse(BaseModel):
    id: int
    carbs: int
    protein: int
    fats: int
    calories: int
    created_at: str


class ExternalActivity(BaseModel):
    """An activity as reported by the fitness tracker feed."""
    start_date: datetime
    distance_meters: float
    activity_type: str


class PlanUpdate(BaseModel):
    week: int
    day: str
    type: str
    mileage: float
    pace: str


class ChatMessage(BaseModel):
    role: Literal["user", "assistant"]
    content: str


class ChatRequest(BaseModel):
    history: List[ChatMessage] = []
    message: str


class ChatResponse(BaseModel):
    reply: str
    updates: List[PlanUpdate]
    plan_updated: bool


class StravaExchange(BaseModel):
    code: str


class StravaConnectionResponse(BaseModel):
    athlete_id: str
    athlete: Optional[dict] = None
    expires_at: str


class SyncResponse(BaseModel):
    runs: int
    updated: int
    message: str
