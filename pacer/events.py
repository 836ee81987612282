"""Event logging helper for usage analytics."""
import json
import logging
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError

from pacer.models import Event

logger = logging.getLogger(__name__)


async def log_event(db, event_type: str, name: str, metadata: dict = None):
    """Log an analytics event.

    Args:
        db: SQLAlchemy AsyncSession, or None when the database is not set up
        event_type: 'funnel' or 'feature'
        name: Event name like 'plan_updated', 'strava_sync'
        metadata: Optional dict of additional context
    """
    if db is None:
        return

    db.add(Event(
        timestamp=datetime.utcnow(),
        event_type=event_type,
        name=name,
        event_metadata=json.dumps(metadata) if metadata else None,
    ))
    try:
        await db.commit()
    except SQLAlchemyError as e:
        # Analytics must never fail the request that produced them
        await db.rollback()
        logger.warning(f"Failed to log event {name}: {e}")
