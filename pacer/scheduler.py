from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger
import logging

from pacer.database import Database
from pacer.services.stores import connected_user_ids
from pacer.services.strava_client import StravaClient
from pacer.services.strava_sync import sync_user

logger = logging.getLogger(__name__)


async def sync_all_connections(database: Database, strava: StravaClient) -> int:
    """Sync every connected athlete. Returns the number of workouts updated.

    One user's failure is logged and does not stop the others.
    """
    if strava.warn_if_not_configured() or database.warn_if_not_ready():
        return 0

    async with database.session() as session:
        user_ids = await connected_user_ids(session)

    updated = 0
    for user_id in user_ids:
        try:
            async with database.session() as session:
                result = await sync_user(session, user_id, strava)
            updated += result.updated
        except Exception as e:
            logger.error(f"Strava sync failed for user {user_id}: {e}")

    if updated > 0:
        logger.info(f"Strava sync job: {updated} workout(s) updated across {len(user_ids)} athlete(s)")
    return updated


async def run_sync_job(database: Database, strava: StravaClient):
    """Scheduled entry point; never lets an error escape into the scheduler."""
    try:
        await sync_all_connections(database, strava)
    except Exception as e:
        logger.error(f"Error running Strava sync job: {e}")


def start_scheduler(database: Database, strava: StravaClient, minutes: int = 15) -> AsyncIOScheduler:
    """Start the background scheduler."""
    scheduler = AsyncIOScheduler()
    scheduler.add_job(
        run_sync_job,
        IntervalTrigger(minutes=minutes),
        args=[database, strava],
        id="strava_sync",
        replace_existing=True
    )
    scheduler.start()
    logger.info(f"Scheduler started with Strava sync ({minutes}m interval)")
    return scheduler


def stop_scheduler(scheduler: AsyncIOScheduler):
    """Stop the background scheduler."""
    scheduler.shutdown()
    logger.info("Scheduler stopped")
