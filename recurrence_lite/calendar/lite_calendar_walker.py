"""Local calendar day walk for recurring events.

The cursor advances one calendar day at a time in the event's local timezone,
never by a fixed 24 hours, so 23- and 25-hour days around DST transitions are
neither skipped nor visited twice. Days are generated with ``dateutil.rrule``
over naive local midnights.
"""

from collections.abc import Iterator
from datetime import date, datetime, time
from typing import Optional

from dateutil.rrule import DAILY, rrule, weekday

from recurrence_lite.calendar.lite_models import NormalizedEvent, RecurrenceFreq
from recurrence_lite.core.timezone_utils import local_date_of


def overlaps_window(start: datetime, end: datetime, query_from: datetime, query_until: datetime) -> bool:
    """Inclusive overlap: True when ``[start, end]`` touches ``[query_from, query_until]``.

    Events already in progress at ``query_from`` count as overlapping.
    """
    return end >= query_from and start <= query_until


def to_rrule_weekday(day_number: int) -> weekday:
    """Convert 0=Sunday..6=Saturday into a dateutil weekday (which counts from Monday)."""
    return weekday((day_number - 1) % 7)


def local_day_bounds(
    event: NormalizedEvent, query_from: datetime, query_until: datetime
) -> Optional[tuple[date, date]]:
    """Return the first and last local calendar day to examine, or None if the range is empty."""
    lower = max(local_date_of(query_from, event.tz), local_date_of(event.start_at, event.tz))
    upper = local_date_of(query_until, event.tz)
    if event.recurrence_until is not None:
        upper = min(upper, local_date_of(event.recurrence_until, event.tz))

    if lower > upper:
        return None
    return lower, upper


def iter_local_days(event: NormalizedEvent, query_from: datetime, query_until: datetime) -> Iterator[date]:
    """Yield candidate local days for a DAILY or WEEKLY event, in ascending order.

    WEEKLY events only yield days whose local weekday is in ``event.weekdays``;
    an empty weekday set yields nothing. NONE events are not walked.
    """
    if event.freq is RecurrenceFreq.NONE:
        return
    if event.freq is RecurrenceFreq.WEEKLY and not event.weekdays:
        # rrule treats an empty byweekday as "every day"
        return

    bounds = local_day_bounds(event, query_from, query_until)
    if bounds is None:
        return
    lower, upper = bounds

    byweekday = None
    if event.freq is RecurrenceFreq.WEEKLY:
        byweekday = [to_rrule_weekday(n) for n in sorted(event.weekdays)]

    days = rrule(
        DAILY,
        dtstart=datetime.combine(lower, time.min),
        until=datetime.combine(upper, time.min),
        byweekday=byweekday,
    )
    for cursor in days:
        yield cursor.date()
