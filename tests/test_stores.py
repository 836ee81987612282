import pytest
from sqlalchemy import text

from pacer.database import Database
from pacer.errors import TransientIOFailure
from pacer.schemas import DayDetailsData, NutritionEntryCreate, UserSettingsData
from pacer.services.plan_defaults import default_training_plan
from pacer.services.stores import (
    DayLogStore,
    NutritionLogStore,
    PlanStore,
    SettingsStore,
    StravaConnectionStore,
    connected_user_ids,
)


@pytest.mark.asyncio
async def test_init_creates_tables(session):
    result = await session.execute(text("SELECT name FROM sqlite_master WHERE type='table'"))
    tables = [row[0] for row in result.fetchall()]
    for table in ("user_settings", "day_details", "plan_workouts", "nutrition_entries",
                  "strava_connections", "events"):
        assert table in tables


@pytest.mark.asyncio
async def test_uninitialized_database_is_not_ready():
    database = Database("sqlite:///:memory:")
    assert database.database_url == "sqlite+aiosqlite:///:memory:"
    assert database.ready is False


def test_unready_database_warns_once(caplog):
    database = Database("sqlite:///:memory:")
    with caplog.at_level("WARNING"):
        assert database.warn_if_not_ready() is True
        assert database.warn_if_not_ready() is True

    assert caplog.text.count("Database not configured") == 1


@pytest.mark.asyncio
async def test_settings_upsert(session):
    store = SettingsStore(session, "runner-1")
    assert await store.load() is None

    await store.save(UserSettingsData(body_weight=150, race_date="2026-10-04"))
    await store.save(UserSettingsData(body_weight=149, race_date="2026-10-04", current_week=3))

    settings = await store.load()
    assert settings.body_weight == 149
    assert settings.race_date == "2026-10-04"
    assert settings.current_week == 3


@pytest.mark.asyncio
async def test_plan_round_trip(session):
    store = PlanStore(session, "runner-1")
    assert await store.load() is None

    plan = await store.load_or_create()
    assert plan == default_training_plan()

    plan[2][6] = plan[2][6].model_copy(update={"actual": 4.4})
    await store.save(plan)

    loaded = await store.load()
    assert loaded == plan
    assert [w.day for w in loaded[2]][-1] == "Sunday"


@pytest.mark.asyncio
async def test_plan_save_adds_new_weeks(session):
    store = PlanStore(session, "runner-1")
    plan = await store.load_or_create()
    plan[3] = [w.model_copy() for w in plan[2]]
    await store.save(plan)

    assert sorted(await store.load()) == [1, 2, 3]


@pytest.mark.asyncio
async def test_day_log_blank_strings_are_stored_as_null(session):
    store = DayLogStore(session, "runner-1")
    await store.save("2025-01-14", DayDetailsData(workout="", pace="", notes="rest"))

    day = await store.load("2025-01-14")
    assert day.workout is None
    assert day.pace is None
    assert day.notes == "rest"


@pytest.mark.asyncio
async def test_nutrition_log_most_recent_first(session):
    store = NutritionLogStore(session, "runner-1")
    for carbs in (10, 20, 30):
        await store.append(NutritionEntryCreate(carbs=carbs, protein=0, fats=0))

    entries = await store.list(limit=2)
    assert [e.carbs for e in entries] == [30, 20]
    assert entries[0].calories == 120


@pytest.mark.asyncio
async def test_strava_connection_lifecycle(session):
    store = StravaConnectionStore(session, "runner-1")
    await store.save_token({
        "access_token": "a", "refresh_token": "r", "expires_at": 1736900000,
        "athlete": {"id": 7},
    })

    assert await connected_user_ids(session) == ["runner-1"]
    assert (await store.get()).athlete_id == "7"

    assert await store.delete() is True
    assert await store.delete() is False
    assert await connected_user_ids(session) == []


@pytest.mark.asyncio
async def test_strava_token_without_access_token_is_rejected(session):
    with pytest.raises(TransientIOFailure):
        await StravaConnectionStore(session, "runner-1").save_token({"refresh_token": "r", "expires_in": 3600})

    assert await connected_user_ids(session) == []


@pytest.mark.asyncio
async def test_stores_without_database_do_nothing():
    """A missing database degrades to defaults instead of failing."""
    assert await SettingsStore(None, "runner-1").load() is None
    assert await SettingsStore(None, "runner-1").save(UserSettingsData()) is False
    assert await DayLogStore(None, "runner-1").load_all() == {}
    assert await NutritionLogStore(None, "runner-1").list() == []
    assert await NutritionLogStore(None, "runner-1").append(NutritionEntryCreate(carbs=1, protein=1, fats=1)) is None
    assert await PlanStore(None, "runner-1").load_or_create() == default_training_plan()
    assert await StravaConnectionStore(None, "runner-1").get() is None
