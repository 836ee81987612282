import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from pacer.config import Config
from pacer.database import Database
from pacer.errors import InvalidInput, NotConfigured, TransientIOFailure
from pacer.routers import coach, dashboard, days, events, nutrition, plan, settings, strava
from pacer.scheduler import start_scheduler, stop_scheduler
from pacer.services.coach_service import CoachService
from pacer.services.strava_client import StravaClient

logger = logging.getLogger(__name__)


def create_app(config: Optional[Config] = None, run_scheduler: bool = True) -> FastAPI:
    """Build the app around one Config; services live on ``app.state``."""
    config = config or Config.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        database = Database(config.database_url)
        await database.init()
        app.state.db = database

        app.state.strava = StravaClient(config.strava_client_id, config.strava_client_secret)
        app.state.strava.warn_if_not_configured()

        try:
            app.state.coach = CoachService(config.claude_oauth_token, config.coach_model)
        except NotConfigured as e:
            logger.warning(f"Coach disabled: {e}")
            app.state.coach = None

        scheduler = None
        if run_scheduler and app.state.strava.configured:
            scheduler = start_scheduler(database, app.state.strava, config.strava_sync_minutes)

        yield

        if scheduler is not None:
            stop_scheduler(scheduler)
        await database.dispose()

    app = FastAPI(title="Pacer", version="0.1.0", lifespan=lifespan, root_path=config.base_path)
    app.state.config = config

    @app.exception_handler(InvalidInput)
    async def invalid_input_handler(request: Request, exc: InvalidInput):
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.exception_handler(NotConfigured)
    async def not_configured_handler(request: Request, exc: NotConfigured):
        return JSONResponse(status_code=503, content={"detail": str(exc)})

    @app.exception_handler(TransientIOFailure)
    async def transient_failure_handler(request: Request, exc: TransientIOFailure):
        return JSONResponse(
            status_code=503,
            content={"detail": f"{exc}. Your change may not have persisted."},
        )

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    @app.get("/api/config")
    async def public_config():
        """Public backend settings the browser needs at runtime."""
        return {
            "backendUrl": config.public_backend_url,
            "backendKey": config.public_backend_key,
        }

    app.include_router(settings.router)
    app.include_router(plan.router)
    app.include_router(days.router)
    app.include_router(nutrition.router)
    app.include_router(dashboard.router)
    app.include_router(coach.router)
    app.include_router(strava.router)
    app.include_router(events.router)

    return app


app = create_app()
