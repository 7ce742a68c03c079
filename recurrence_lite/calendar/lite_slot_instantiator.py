"""Conversion of local wall-clock time slots into UTC instants.

The UTC offset is looked up for each calendar date separately, so the same
wall-clock time maps to different UTC instants on either side of a DST change.

DST policy for wall-clock times that do not map to exactly one instant:

* Ambiguous times (fall-back overlap) resolve to the first occurrence, i.e. the
  offset in effect before the transition (``fold=0``).
* Nonexistent times (spring-forward gap) are shifted forward by the size of the
  gap, so 02:30 on a day that jumps from 02:00 to 03:00 becomes 03:30.
"""

from collections.abc import Iterator
from datetime import date, datetime, time, timedelta, timezone
from zoneinfo import ZoneInfo

from dateutil import tz as dateutil_tz

from recurrence_lite.calendar.lite_models import NormalizedEvent


def localize_wall_time(day: date, minutes: int, tz: ZoneInfo) -> datetime:
    """Attach ``tz`` to the wall-clock time ``minutes`` after midnight on ``day``.

    Returns an aware local datetime with the DST policy above applied.
    """
    wall = datetime.combine(day, time(minutes // 60, minutes % 60), tzinfo=tz).replace(fold=0)
    return dateutil_tz.resolve_imaginary(wall)


def local_slot_to_utc(day: date, minutes: int, tz: ZoneInfo) -> datetime:
    """Convert a local day plus time slot into an aware UTC datetime."""
    return localize_wall_time(day, minutes, tz).astimezone(timezone.utc)


def instantiate_day(event: NormalizedEvent, day: date) -> Iterator[tuple[datetime, datetime]]:
    """Yield one UTC ``(start, end)`` pair per time slot of ``event`` on local ``day``.

    Slots are taken in ascending wall-clock order; ``end - start`` always equals
    the event's duration.
    """
    duration: timedelta = event.duration
    for minutes in event.slots:
        start = local_slot_to_utc(day, minutes, event.tz)
        yield start, start + duration
