import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from pacer.config import Config
from pacer.database import Database
from pacer.main import create_app
from pacer.services.strava_client import StravaClient

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def database():
    """Fresh in-memory database for each test."""
    db = Database(TEST_DATABASE_URL)
    await db.init()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def session(database):
    async with database.session() as s:
        yield s


@pytest.fixture
def strava_client():
    return StravaClient(client_id="test-id", client_secret="test-secret")


@pytest.fixture
def app(database, strava_client):
    """App wired to the test database; the lifespan does not run under ASGITransport."""
    test_app = create_app(Config(database_url=TEST_DATABASE_URL), run_scheduler=False)
    test_app.state.db = database
    test_app.state.strava = strava_client
    test_app.state.coach = None
    return test_app


@pytest_asyncio.fixture
async def client(app):
    """Async HTTP client signed in as a test runner."""
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport,
        base_url="http://test",
        headers={"X-User-Id": "runner-1"},
    ) as ac:
        yield ac
