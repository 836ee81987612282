"""Per-user persistence for settings, day logs, nutrition, plan and Strava tokens.

Every store takes the request's session and the signed-in user id. When the
database is not set up the session is None: loads return nothing and saves
are skipped. The Database logs the missing setup once.
"""
import json
import logging
from contextlib import asynccontextmanager
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from pacer.errors import TransientIOFailure
from pacer.models import DayDetails, NutritionEntry, PlanWorkout, StravaConnection, UserSettings
from pacer.schemas import (
    WEEKDAYS,
    DayDetailsData,
    NutritionEntryCreate,
    NutritionEntryResponse,
    TrainingPlan,
    UserSettingsData,
    Workout,
)
from pacer.services.nutrition import macro_calories
from pacer.services.plan_defaults import default_training_plan
from pacer.services.race_countdown import parse_calendar_date

logger = logging.getLogger(__name__)

NUTRITION_HISTORY_LIMIT = 100

def _to_date(value: Optional[str]) -> Optional[date]:
    return parse_calendar_date(value) if value else None


def _from_date(value: Optional[date]) -> Optional[str]:
    return value.isoformat() if value else None


class _Store:
    def __init__(self, session: Optional[AsyncSession], user_id: str):
        self.session = session
        self.user_id = user_id

    @property
    def configured(self) -> bool:
        return self.session is not None

    @asynccontextmanager
    async def _io(self, action: str):
        try:
            yield
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Database error while {action} for user {self.user_id}: {e}")
            raise TransientIOFailure(f"Database error while {action}") from e


class SettingsStore(_Store):

    async def load(self) -> Optional[UserSettingsData]:
        if not self.configured:
            return None
        async with self._io("loading settings"):
            result = await self.session.execute(
                select(UserSettings).where(UserSettings.user_id == self.user_id)
            )
            row = result.scalar_one_or_none()
        if row is None:
            return None
        return UserSettingsData(
            body_weight=row.body_weight,
            target_time=row.target_time,
            race_date=_from_date(row.race_date),
            in_training_plan=bool(row.in_training_plan),
            total_training_weeks=row.total_training_weeks,
            current_week=row.current_week,
            training_start_date=_from_date(row.training_start_date),
        )

    async def save(self, settings: UserSettingsData) -> bool:
        if not self.configured:
            return False
        data = settings.model_dump()
        data["race_date"] = _to_date(settings.race_date)
        data["training_start_date"] = _to_date(settings.training_start_date)

        async with self._io("saving settings"):
            result = await self.session.execute(
                select(UserSettings).where(UserSettings.user_id == self.user_id)
            )
            existing = result.scalar_one_or_none()
            if existing:
                for key, value in data.items():
                    setattr(existing, key, value)
            else:
                self.session.add(UserSettings(user_id=self.user_id, **data))
            await self.session.commit()
        return True


class DayLogStore(_Store):

    @staticmethod
    def _to_data(row: DayDetails) -> DayDetailsData:
        return DayDetailsData(
            workout=row.workout_type,
            miles=row.miles,
            pace=row.pace,
            protein=row.protein,
            carbs=row.carbs,
            fats=row.fats,
            notes=row.notes,
        )

    async def load_all(self) -> Dict[str, DayDetailsData]:
        if not self.configured:
            return {}
        async with self._io("loading day logs"):
            result = await self.session.execute(
                select(DayDetails)
                .where(DayDetails.user_id == self.user_id)
                .order_by(DayDetails.date)
            )
            rows = result.scalars().all()
        return {row.date.isoformat(): self._to_data(row) for row in rows}

    async def load(self, date_key: str) -> Optional[DayDetailsData]:
        day = parse_calendar_date(date_key)
        if not self.configured:
            return None
        async with self._io("loading day log"):
            result = await self.session.execute(
                select(DayDetails).where(
                    DayDetails.user_id == self.user_id,
                    DayDetails.date == day,
                )
            )
            row = result.scalar_one_or_none()
        return self._to_data(row) if row else None

    async def save(self, date_key: str, details: DayDetailsData) -> bool:
        day = parse_calendar_date(date_key)
        if not self.configured:
            return False

        data = details.model_dump()
        data["workout_type"] = data.pop("workout")
        # Empty form fields come through as ""
        data = {key: (None if value == "" else value) for key, value in data.items()}

        async with self._io("saving day log"):
            result = await self.session.execute(
                select(DayDetails).where(
                    DayDetails.user_id == self.user_id,
                    DayDetails.date == day,
                )
            )
            existing = result.scalar_one_or_none()
            if existing:
                for key, value in data.items():
                    setattr(existing, key, value)
            else:
                self.session.add(DayDetails(user_id=self.user_id, date=day, **data))
            await self.session.commit()
        return True


class NutritionLogStore(_Store):

    @staticmethod
    def _to_response(row: NutritionEntry) -> NutritionEntryResponse:
        return NutritionEntryResponse(
            id=row.id,
            carbs=row.carbs,
            protein=row.protein,
            fats=row.fats,
            calories=row.calories,
            created_at=row.created_at.isoformat() if row.created_at else "",
        )

    async def append(self, entry: NutritionEntryCreate) -> Optional[NutritionEntryResponse]:
        if not self.configured:
            return None
        row = NutritionEntry(
            user_id=self.user_id,
            carbs=entry.carbs,
            protein=entry.protein,
            fats=entry.fats,
            calories=macro_calories(entry.protein, entry.carbs, entry.fats),
            created_at=datetime.now(),
        )
        async with self._io("saving nutrition entry"):
            self.session.add(row)
            await self.session.commit()
            await self.session.refresh(row)
        return self._to_response(row)

    async def list(self, limit: int = NUTRITION_HISTORY_LIMIT) -> List[NutritionEntryResponse]:
        """Most recent entries first."""
        if not self.configured:
            return []
        async with self._io("loading nutrition entries"):
            result = await self.session.execute(
                select(NutritionEntry)
                .where(NutritionEntry.user_id == self.user_id)
                .order_by(NutritionEntry.created_at.desc(), NutritionEntry.id.desc())
                .limit(limit)
            )
            rows = result.scalars().all()
        return [self._to_response(row) for row in rows]


class PlanStore(_Store):

    async def load(self) -> Optional[TrainingPlan]:
        if not self.configured:
            return None
        async with self._io("loading training plan"):
            result = await self.session.execute(
                select(PlanWorkout)
                .where(PlanWorkout.user_id == self.user_id)
                .order_by(PlanWorkout.week, PlanWorkout.day_index)
            )
            rows = result.scalars().all()
        if not rows:
            return None

        plan: TrainingPlan = {}
        for row in rows:
            plan.setdefault(row.week, []).append(Workout(
                day=row.day,
                type=row.type,
                planned=row.planned or 0,
                actual=row.actual,
                pace=row.pace,
                from_strava=bool(row.from_strava),
                strava_date=row.strava_date,
            ))
        return plan

    async def load_or_create(self) -> TrainingPlan:
        """Load the plan, seeding the default plan on first use."""
        plan = await self.load()
        if plan is not None:
            return plan
        plan = default_training_plan()
        if await self.save(plan):
            logger.info(f"Seeded default training plan for user {self.user_id}")
        return plan

    async def save(self, plan: TrainingPlan) -> bool:
        if not self.configured:
            return False
        async with self._io("saving training plan"):
            result = await self.session.execute(
                select(PlanWorkout).where(PlanWorkout.user_id == self.user_id)
            )
            existing = {(row.week, row.day): row for row in result.scalars().all()}

            for week, workouts in plan.items():
                for workout in workouts:
                    data = {
                        "day_index": WEEKDAYS.index(workout.day),
                        "type": workout.type,
                        "planned": workout.planned,
                        "actual": workout.actual,
                        "pace": workout.pace,
                        "from_strava": workout.from_strava,
                        "strava_date": workout.strava_date,
                    }
                    row = existing.get((week, workout.day))
                    if row:
                        for key, value in data.items():
                            setattr(row, key, value)
                    else:
                        self.session.add(PlanWorkout(
                            user_id=self.user_id, week=week, day=workout.day, **data
                        ))
            await self.session.commit()
        return True


class StravaConnectionStore(_Store):

    async def get(self) -> Optional[StravaConnection]:
        if not self.configured:
            return None
        async with self._io("loading Strava connection"):
            result = await self.session.execute(
                select(StravaConnection).where(StravaConnection.user_id == self.user_id)
            )
            return result.scalar_one_or_none()

    async def save_token(self, token: dict) -> Optional[StravaConnection]:
        """Store a Strava OAuth token response (initial exchange or refresh).

        Refresh responses carry no athlete, so the stored one is kept.
        """
        if not self.configured:
            return None
        if not token.get("access_token"):
            raise TransientIOFailure("Strava token carried no access token")
        expires_at = datetime.fromtimestamp(token["expires_at"]) if token.get("expires_at") else (
            datetime.now() + timedelta(seconds=token.get("expires_in", 0))
        )
        athlete = token.get("athlete")

        async with self._io("saving Strava connection"):
            result = await self.session.execute(
                select(StravaConnection).where(StravaConnection.user_id == self.user_id)
            )
            connection = result.scalar_one_or_none()
            if connection is None:
                connection = StravaConnection(user_id=self.user_id)
                self.session.add(connection)

            connection.access_token = token["access_token"]
            connection.refresh_token = token.get("refresh_token") or connection.refresh_token
            connection.expires_at = expires_at
            if athlete:
                connection.athlete_id = str(athlete.get("id", ""))
                connection.athlete_data = json.dumps(athlete)
            elif connection.athlete_id is None:
                connection.athlete_id = ""

            await self.session.commit()
            await self.session.refresh(connection)
        return connection

    async def delete(self) -> bool:
        if not self.configured:
            return False
        async with self._io("deleting Strava connection"):
            result = await self.session.execute(
                delete(StravaConnection).where(StravaConnection.user_id == self.user_id)
            )
            await self.session.commit()
        return result.rowcount > 0


async def connected_user_ids(session: AsyncSession) -> List[str]:
    """Users with a stored Strava connection."""
    try:
        result = await session.execute(select(StravaConnection.user_id))
    except SQLAlchemyError as e:
        logger.error(f"Database error while listing Strava connections: {e}")
        raise TransientIOFailure("Database error while listing Strava connections") from e
    return [row[0] for row in result.all()]
