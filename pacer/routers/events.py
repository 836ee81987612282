"""Events API for analytics export."""
import json
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pacer.database import get_db
from pacer.models import Event

router = APIRouter(prefix="/api", tags=["events"])

SERVICE_NAME = "pacer"


@router.get("/events")
async def get_events(since: str = None, session: Optional[AsyncSession] = Depends(get_db)):
    """Get analytics events, optionally filtered by timestamp."""
    if session is None:
        return {"service": SERVICE_NAME, "events": []}

    query = select(Event)

    if since:
        try:
            query = query.where(Event.timestamp > datetime.fromisoformat(since))
        except ValueError:
            raise HTTPException(status_code=422, detail=f"Invalid since timestamp: {since}")

    query = query.order_by(Event.timestamp)

    result = await session.execute(query)
    rows = result.scalars().all()

    events = []
    for row in rows:
        timestamp = row.timestamp
        if hasattr(timestamp, 'isoformat'):
            timestamp = timestamp.isoformat()

        events.append({
            "timestamp": timestamp,
            "event_type": row.event_type,
            "name": row.name,
            "metadata": json.loads(row.event_metadata) if row.event_metadata else None
        })

    return {"service": SERVICE_NAME, "events": events}
