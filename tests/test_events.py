import pytest

from pacer.events import log_event


@pytest.mark.asyncio
async def test_get_events_empty(client):
    """Test getting events when none exist"""
    response = await client.get("/api/events")
    assert response.status_code == 200
    data = response.json()
    assert data["service"] == "pacer"
    assert data["events"] == []


@pytest.mark.asyncio
async def test_log_event_is_exported(client, session):
    await log_event(session, "feature", "coach_chat", {"applied": 2})

    events = (await client.get("/api/events")).json()["events"]
    assert len(events) == 1
    assert events[0]["name"] == "coach_chat"
    assert events[0]["event_type"] == "feature"
    assert events[0]["metadata"] == {"applied": 2}


@pytest.mark.asyncio
async def test_get_events_with_since_filter(client, session):
    await log_event(session, "funnel", "strava_connected")

    response = await client.get("/api/events?since=2999-01-01T00:00:00")
    assert response.status_code == 200
    assert response.json()["events"] == []

    response = await client.get("/api/events?since=2000-01-01T00:00:00")
    assert len(response.json()["events"]) == 1


@pytest.mark.asyncio
async def test_get_events_bad_since(client):
    response = await client.get("/api/events?since=yesterday")
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_requests_log_events(client):
    await client.post("/api/nutrition", json={"carbs": 10, "protein": 10, "fats": 10})

    names = [e["name"] for e in (await client.get("/api/events")).json()["events"]]
    assert "nutrition_logged" in names


@pytest.mark.asyncio
async def test_log_event_without_database():
    await log_event(None, "feature", "coach_chat")
