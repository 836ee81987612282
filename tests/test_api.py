import pytest
from httpx import AsyncClient, ASGITransport


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


@pytest.mark.asyncio
async def test_missing_user_header_is_rejected(app):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as anonymous:
        response = await anonymous.get("/api/settings")
        assert response.status_code == 401

        # Public endpoints stay open
        assert (await anonymous.get("/api/config")).status_code == 200


@pytest.mark.asyncio
async def test_get_default_settings(client):
    response = await client.get("/api/settings")
    assert response.status_code == 200
    data = response.json()
    assert data["body_weight"] == 168
    assert data["target_time"] == "2:59:59"
    assert data["total_training_weeks"] == 16
    assert data["current_week"] == 1


@pytest.mark.asyncio
async def test_update_settings_merges_fields(client):
    response = await client.put("/api/settings", json={"body_weight": 160, "race_date": "2026-05-24"})
    assert response.status_code == 200

    response = await client.put("/api/settings", json={"target_time": "3:05:00"})
    data = response.json()
    assert data["body_weight"] == 160
    assert data["race_date"] == "2026-05-24"
    assert data["target_time"] == "3:05:00"

    # Persisted
    assert (await client.get("/api/settings")).json() == data


@pytest.mark.asyncio
async def test_update_settings_clamps_current_week(client):
    response = await client.put("/api/settings", json={"total_training_weeks": 12, "current_week": 20})
    assert response.json()["current_week"] == 12


@pytest.mark.asyncio
async def test_update_settings_rejects_bad_finish_time(client):
    response = await client.put("/api/settings", json={"target_time": "sub-three"})
    assert response.status_code == 422

    response = await client.put("/api/settings", json={"race_date": "05/24/2026"})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_settings_are_per_user(client, app):
    await client.put("/api/settings", json={"body_weight": 140})

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test", headers={"X-User-Id": "runner-2"}) as other:
        assert (await other.get("/api/settings")).json()["body_weight"] == 168


@pytest.mark.asyncio
async def test_plan_is_seeded_with_two_weeks(client):
    response = await client.get("/api/plan")
    assert response.status_code == 200
    plan = response.json()
    assert sorted(plan) == ["1", "2"]
    assert [w["day"] for w in plan["1"]][0] == "Monday"
    assert plan["1"][5]["type"] == "Long Run"


@pytest.mark.asyncio
async def test_get_week_summary(client):
    response = await client.get("/api/plan/1")
    assert response.status_code == 200
    data = response.json()
    assert data["planned_miles"] == 32
    assert data["actual_miles"] == 0
    assert data["runs_completed"] == 0
    assert data["runs_total"] == 5

    assert (await client.get("/api/plan/7")).status_code == 404


@pytest.mark.asyncio
async def test_patch_workout_actual(client):
    response = await client.patch("/api/plan/1/Tuesday", json={"actual": 5.5})
    assert response.status_code == 200
    assert response.json()["actual"] == 5.5
    assert response.json()["from_strava"] is False

    data = (await client.get("/api/plan/1")).json()
    assert data["actual_miles"] == 5.5
    assert data["runs_completed"] == 1

    assert (await client.patch("/api/plan/1/Funday", json={"actual": 1})).status_code == 404


@pytest.mark.asyncio
async def test_patch_workout_rejects_null_type_and_planned(client):
    for body in ({"planned": None}, {"type": None}):
        response = await client.patch("/api/plan/1/Tuesday", json=body)
        assert response.status_code == 422

    tuesday = (await client.get("/api/plan/1")).json()["workouts"][1]
    assert tuesday["type"] is not None
    assert tuesday["planned"] is not None


@pytest.mark.asyncio
async def test_day_log_upsert(client):
    payload = {"workout": "Easy", "miles": 6.2, "protein": 150, "carbs": 500, "fats": 60, "notes": "felt good"}
    response = await client.put("/api/days/2025-01-14", json=payload)
    assert response.status_code == 200

    response = await client.put("/api/days/2025-01-14", json={**payload, "miles": 7.0})
    assert response.status_code == 200

    days = (await client.get("/api/days")).json()
    assert list(days) == ["2025-01-14"]
    assert days["2025-01-14"]["miles"] == 7.0

    day = (await client.get("/api/days/2025-01-14")).json()
    assert day["notes"] == "felt good"


@pytest.mark.asyncio
async def test_day_log_errors(client):
    assert (await client.get("/api/days/2025-01-15")).status_code == 404
    assert (await client.put("/api/days/2025-02-30", json={})).status_code == 422


@pytest.mark.asyncio
async def test_nutrition_entries(client):
    response = await client.post("/api/nutrition", json={"carbs": 100, "protein": 30, "fats": 10})
    assert response.status_code == 201
    assert response.json()["calories"] == 100 * 4 + 30 * 4 + 10 * 9

    await client.post("/api/nutrition", json={"carbs": 50, "protein": 20, "fats": 5})

    entries = (await client.get("/api/nutrition")).json()
    assert len(entries) == 2
    assert entries[0]["carbs"] == 50

    entries = (await client.get("/api/nutrition", params={"limit": 1})).json()
    assert len(entries) == 1


@pytest.mark.asyncio
async def test_nutrition_target(client):
    await client.put("/api/settings", json={"body_weight": 170})
    data = (await client.get("/api/nutrition/target")).json()
    assert data["carbs"] in (850, 1020, 1360)


@pytest.mark.asyncio
async def test_dashboard_defaults(client):
    response = await client.get("/api/dashboard")
    assert response.status_code == 200
    data = response.json()

    assert data["target_pace"] == "6:52"
    assert data["pace_zones"]["Marathon Pace"] == "6:52"
    assert data["days_to_race"] == 0
    assert data["days_to_race_label"] == "TBD"
    assert data["weekly_volume"] == {"planned": 32, "actual": 0}
    assert data["runs_total"] == 5
    assert data["today_nutrition"]["calories"] == 0
    assert data["quote"]


@pytest.mark.asyncio
async def test_dashboard_race_day_label(client):
    await client.put("/api/settings", json={"race_date": "2020-04-20"})
    data = (await client.get("/api/dashboard")).json()
    assert data["days_to_race"] < 0
    assert data["days_to_race_label"] == "Race Day!"


@pytest.mark.asyncio
async def test_public_config(client):
    response = await client.get("/api/config")
    assert response.json() == {"backendUrl": "", "backendKey": ""}
