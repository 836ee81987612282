from sqlalchemy import Column, Integer, String, DateTime, Float, Text, Date, Boolean, UniqueConstraint
from sqlalchemy.sql import func
from pacer.database import Base


class UserSettings(Base):
    __tablename__ = "user_settings"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, unique=True, index=True)
    body_weight = Column(Integer, default=168)
    target_time = Column(String, default="2:59:59")
    race_date = Column(Date)
    in_training_plan = Column(Boolean, default=False)
    total_training_weeks = Column(Integer, default=16)
    current_week = Column(Integer, default=1)
    training_start_date = Column(Date)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class DayDetails(Base):
    __tablename__ = "day_details"
    __table_args__ = (UniqueConstraint("user_id", "date", name="uq_day_details_user_date"),)

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    date = Column(Date, nullable=False)
    workout_type = Column(String)
    miles = Column(Float)
    pace = Column(String)
    protein = Column(Integer)
    carbs = Column(Integer)
    fats = Column(Integer)
    notes = Column(Text)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class PlanWorkout(Base):
    """One (week, day) slot of a user's training plan."""
    __tablename__ = "plan_workouts"
    __table_args__ = (UniqueConstraint("user_id", "week", "day", name="uq_plan_workouts_slot"),)

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    week = Column(Integer, nullable=False)
    day_index = Column(Integer, nullable=False)  # 0 = Monday
    day = Column(String, nullable=False)
    type = Column(String, nullable=False)
    planned = Column(Float, nullable=False, default=0)
    actual = Column(Float)
    pace = Column(String)

    # Source tracking
    from_strava = Column(Boolean, default=False)
    strava_date = Column(DateTime)


class NutritionEntry(Base):
    __tablename__ = "nutrition_entries"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, index=True)
    carbs = Column(Integer, nullable=False)
    protein = Column(Integer, nullable=False)
    fats = Column(Integer, nullable=False)
    calories = Column(Integer, nullable=False)
    created_at = Column(DateTime, server_default=func.now(), index=True)


class StravaConnection(Base):
    __tablename__ = "strava_connections"

    id = Column(Integer, primary_key=True)
    user_id = Column(String, nullable=False, unique=True, index=True)
    access_token = Column(String, nullable=False)
    refresh_token = Column(String, nullable=False)
    athlete_id = Column(String, nullable=False)
    athlete_data = Column(Text)  # JSON string
    expires_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class Event(Base):
    """Analytics events for tracking usage."""
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    timestamp = Column(DateTime, default=func.now(), nullable=False, index=True)
    event_type = Column(String, nullable=False)  # 'funnel' or 'feature'
    name = Column(String, nullable=False, index=True)
    event_metadata = Column("metadata", Text, nullable=True)  # JSON string
