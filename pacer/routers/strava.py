import json
import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request
from sqlalchemy.ext.asyncio import AsyncSession

from pacer.auth import get_current_user_id
from pacer.database import get_db
from pacer.errors import NotConfigured
from pacer.events import log_event
from pacer.schemas import StravaConnectionResponse, StravaExchange, SyncResponse
from pacer.services.stores import StravaConnectionStore
from pacer.services.strava_client import StravaClient
from pacer.services.strava_sync import sync_user

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/strava", tags=["strava"])


def _connection_response(connection) -> StravaConnectionResponse:
    return StravaConnectionResponse(
        athlete_id=connection.athlete_id,
        athlete=json.loads(connection.athlete_data) if connection.athlete_data else None,
        expires_at=connection.expires_at.isoformat(),
    )


def get_strava_client(request: Request) -> StravaClient:
    strava: Optional[StravaClient] = getattr(request.app.state, "strava", None)
    if strava is None or not strava.configured:
        raise NotConfigured("STRAVA_CLIENT_ID and STRAVA_CLIENT_SECRET required")
    return strava


@router.post("/exchange", response_model=SyncResponse)
async def exchange_code(
    payload: StravaExchange,
    session: Optional[AsyncSession] = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    strava: StravaClient = Depends(get_strava_client),
):
    """Finish the OAuth redirect: store the tokens, then sync right away."""
    if session is None:
        raise NotConfigured("Database not configured")

    token = await strava.exchange_code(payload.code)
    await StravaConnectionStore(session, user_id).save_token(token)
    await log_event(session, "funnel", "strava_connected")

    return await sync_user(session, user_id, strava)


@router.get("/connection", response_model=StravaConnectionResponse)
async def get_connection(
    session: Optional[AsyncSession] = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    connection = await StravaConnectionStore(session, user_id).get()
    if connection is None:
        raise HTTPException(status_code=404, detail="Strava is not connected")
    return _connection_response(connection)


@router.delete("/connection")
async def delete_connection(
    session: Optional[AsyncSession] = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    if not await StravaConnectionStore(session, user_id).delete():
        raise HTTPException(status_code=404, detail="Strava is not connected")
    await log_event(session, "funnel", "strava_disconnected")
    logger.info(f"Strava disconnected for user {user_id}")
    return {"status": "disconnected"}


@router.post("/sync", response_model=SyncResponse)
async def sync(
    session: Optional[AsyncSession] = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    strava: StravaClient = Depends(get_strava_client),
):
    """Backfill actual miles from the latest Strava runs."""
    if session is None:
        raise NotConfigured("Database not configured")
    try:
        return await sync_user(session, user_id, strava)
    except NotConfigured:
        raise HTTPException(status_code=404, detail="Strava is not connected")
