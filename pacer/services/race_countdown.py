import re
from datetime import date, datetime
from typing import Optional, Union

from pacer.errors import InvalidInput


_DATE_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")


def parse_calendar_date(value: str) -> date:
    """Parse YYYY-MM-DD as a plain calendar date (no timezone involved)."""
    match = _DATE_RE.match(value.strip()) if isinstance(value, str) else None
    if not match:
        raise InvalidInput(f"Invalid date: {value!r}, expected YYYY-MM-DD")
    year, month, day = (int(g) for g in match.groups())
    try:
        return date(year, month, day)
    except ValueError as e:
        raise InvalidInput(f"Invalid date: {value!r} ({e})") from e


def days_to_race(race_date: Optional[str], now: Optional[Union[date, datetime]] = None) -> int:
    """Whole days from today until race day.

    Both ends are taken at midnight, so the result only depends on the
    calendar dates. Returns 0 without a race date; past races give a
    negative number.
    """
    if not race_date:
        return 0

    race_day = parse_calendar_date(race_date)
    if now is None:
        now = datetime.now()
    today = now.date() if isinstance(now, datetime) else now
    return (race_day - today).days
