"""Pull recent Strava runs into a user's training plan."""
import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from pacer.errors import NotConfigured, StravaAuthError
from pacer.events import log_event
from pacer.schemas import SyncResponse
from pacer.services.plan_defaults import DEFAULT_SETTINGS
from pacer.services.reconciler import reconcile_activities
from pacer.services.stores import PlanStore, SettingsStore, StravaConnectionStore
from pacer.services.strava_client import StravaClient

logger = logging.getLogger(__name__)

# Refresh tokens that expire within this window before using them
TOKEN_EXPIRY_MARGIN = timedelta(minutes=5)


def sync_message(runs: int, updated: int) -> str:
    if runs == 0:
        return "Strava connected! No recent runs found in the last 30 activities."
    if updated > 0:
        detail = f"Updated {updated} workout(s) with actual mileage."
    else:
        detail = "Your training plan is up to date."
    return f"Synced {runs} runs from Strava! {detail}"


async def _fresh_access_token(
    connections: StravaConnectionStore,
    strava: StravaClient,
    force: bool = False,
    now: Optional[datetime] = None,
) -> str:
    connection = await connections.get()
    if connection is None:
        raise NotConfigured("Strava is not connected")

    now = now or datetime.now()
    if force or connection.expires_at - TOKEN_EXPIRY_MARGIN <= now:
        logger.info(f"Refreshing Strava token for user {connections.user_id}")
        token = await strava.refresh_access_token(connection.refresh_token)
        connection = await connections.save_token(token)
    return connection.access_token


async def sync_user(
    session: AsyncSession,
    user_id: str,
    strava: StravaClient,
    now: Optional[datetime] = None,
) -> SyncResponse:
    """Fetch the latest activities and backfill the current and previous week.

    A rejected access token is refreshed once and the fetch retried.
    """
    connections = StravaConnectionStore(session, user_id)

    access_token = await _fresh_access_token(connections, strava, now=now)
    try:
        activities = await strava.fetch_activities(access_token)
    except StravaAuthError:
        access_token = await _fresh_access_token(connections, strava, force=True, now=now)
        activities = await strava.fetch_activities(access_token)

    settings = await SettingsStore(session, user_id).load() or DEFAULT_SETTINGS
    plans = PlanStore(session, user_id)
    plan = await plans.load_or_create()

    result = reconcile_activities(plan, settings.current_week, activities, now=now)
    if result.updated > 0:
        await plans.save(result.plan)

    logger.info(f"Strava sync for user {user_id}: {result.runs} runs, {result.updated} updated")
    await log_event(session, "feature", "strava_sync", {
        "runs": result.runs,
        "updated": result.updated,
    })

    return SyncResponse(
        runs=result.runs,
        updated=result.updated,
        message=sync_message(result.runs, result.updated),
    )
