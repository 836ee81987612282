"""Marathon goal pace and training pace zones."""
import math
from typing import Dict, Tuple

from pacer.errors import InvalidInput


MARATHON_MILES = 26.2

# Offsets in seconds per mile relative to marathon pace, (low, high).
# Negative offsets are faster than goal pace.
PACE_ZONE_OFFSETS: Dict[str, Tuple[int, int]] = {
    "Easy": (90, 120),
    "Marathon Pace": (0, 0),
    "Half Marathon Pace": (-21, -21),
    "Tempo": (9, 24),
    "Intervals": (-31, -16),
    "Recovery": (120, 150),
}


def parse_finish_time(value: str) -> int:
    """Convert a colon separated time ("H:MM:SS", "MM:SS", ...) to seconds.

    Components are read right to left as seconds, minutes, hours, so any
    number of components is accepted.
    """
    if not isinstance(value, str) or not value.strip():
        raise InvalidInput("Finish time must be a non-empty string")

    total = 0
    for part in value.strip().split(":"):
        part = part.strip()
        if not (part.isascii() and part.isdigit()):
            raise InvalidInput(f"Invalid finish time: {value!r}")
        total = total * 60 + int(part)
    return total


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def format_pace(seconds: float) -> str:
    """Format seconds per mile as M:SS."""
    whole = _round_half_up(seconds)
    mins, secs = divmod(whole, 60)
    return f"{mins}:{secs:02d}"


def target_pace_seconds(finish_time: str) -> float:
    """Seconds per mile needed to run the marathon in ``finish_time``."""
    return parse_finish_time(finish_time) / MARATHON_MILES


def target_pace(finish_time: str) -> str:
    return format_pace(target_pace_seconds(finish_time))


def pace_zones(finish_time: str) -> Dict[str, str]:
    """Named pace bands derived from goal marathon pace.

    Zones are offset from the displayed (whole second) goal pace so that
    "Marathon Pace" always equals ``target_pace(finish_time)``.
    """
    base = _round_half_up(target_pace_seconds(finish_time))
    zones = {}
    for name, (low, high) in PACE_ZONE_OFFSETS.items():
        # Fast zones of an extreme goal bottom out at 0:00
        fast, slow = max(0, base + low), max(0, base + high)
        if low == high:
            zones[name] = format_pace(fast)
        else:
            zones[name] = f"{format_pace(fast)} - {format_pace(slow)}"
    return zones
