from typing import Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from pacer.auth import get_current_user_id
from pacer.database import get_db
from pacer.schemas import DayDetailsData
from pacer.services.stores import DayLogStore

router = APIRouter(prefix="/api/days", tags=["days"])


@router.get("", response_model=Dict[str, DayDetailsData])
async def list_days(
    session: Optional[AsyncSession] = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """All logged days keyed by YYYY-MM-DD."""
    return await DayLogStore(session, user_id).load_all()


@router.get("/{date_key}", response_model=DayDetailsData)
async def get_day(
    date_key: str,
    session: Optional[AsyncSession] = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    details = await DayLogStore(session, user_id).load(date_key)
    if details is None:
        raise HTTPException(status_code=404, detail=f"Nothing logged for {date_key}")
    return details


@router.put("/{date_key}", response_model=DayDetailsData)
async def save_day(
    date_key: str,
    payload: DayDetailsData,
    session: Optional[AsyncSession] = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    if not await DayLogStore(session, user_id).save(date_key, payload):
        raise HTTPException(status_code=503, detail="Database not configured, day was not saved")
    return payload
