"""Occurrence expansion for stored event definitions - recurrence_lite.

``expand()`` runs the four stages in order for one event:

1. validate and normalize the descriptor (``lite_event_validator``)
2. walk local calendar days (``lite_calendar_walker``)
3. turn each day's time slots into UTC instants (``lite_slot_instantiator``)
4. keep instances overlapping the query window, stopping at ``limit``

Expansion is pure and synchronous: no I/O, no logging, no shared state. Identical
inputs always produce identical output, and invalid events produce an empty list
instead of an exception.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Union

from recurrence_lite.calendar.lite_calendar_walker import iter_local_days, overlaps_window
from recurrence_lite.calendar.lite_event_validator import (
    MAX_TIME_SLOTS,
    ValidationOutcome,
    validate_event,
)
from recurrence_lite.calendar.lite_models import (
    EventDescriptor,
    NormalizedEvent,
    Occurrence,
    RecurrenceFreq,
)
from recurrence_lite.calendar.lite_slot_instantiator import instantiate_day
from recurrence_lite.core.timezone_utils import DEFAULT_EVENT_TIMEZONE, ensure_utc

EventInput = Union[EventDescriptor, NormalizedEvent, dict[str, Any]]


def _make_occurrence(event: NormalizedEvent, start: datetime, end: datetime) -> Occurrence:
    return Occurrence(
        event_id=event.event_id,
        title=event.title,
        world=event.world,
        category=event.category,
        start=start,
        end=end,
        timezone=event.timezone,
    )


def _collect_single(
    event: NormalizedEvent, query_from: datetime, query_until: datetime
) -> list[Occurrence]:
    if overlaps_window(event.start_at, event.end_at, query_from, query_until):
        return [_make_occurrence(event, event.start_at, event.end_at)]
    return []


def _collect_recurring(
    event: NormalizedEvent, query_from: datetime, query_until: datetime, limit: int
) -> list[Occurrence]:
    out: list[Occurrence] = []
    for day in iter_local_days(event, query_from, query_until):
        # Gap-shifted slots can land after later slots of the same day
        for start, end in sorted(instantiate_day(event, day)):
            if not overlaps_window(start, end, query_from, query_until):
                continue
            if event.recurrence_until is not None and start > event.recurrence_until:
                continue
            out.append(_make_occurrence(event, start, end))
            if len(out) >= limit:
                return out
    return out


def expand_normalized(
    event: NormalizedEvent, query_from: datetime, query_until: datetime, limit: int
) -> list[Occurrence]:
    """Expand an already validated event into occurrences inside the window.

    Returns an empty list when ``query_from > query_until`` or ``limit < 1``.
    """
    query_from = ensure_utc(query_from)
    query_until = ensure_utc(query_until)
    if query_from > query_until or limit < 1:
        return []

    try:
        if event.freq is RecurrenceFreq.NONE:
            out = _collect_single(event, query_from, query_until)
        else:
            out = _collect_recurring(event, query_from, query_until, limit)
    except OverflowError:
        # Instants at the edge of the representable range cannot be walked
        return []

    out.sort(key=lambda occ: occ.start)
    return out[:limit]


def expand_with_outcome(
    event: EventInput,
    query_from: datetime,
    query_until: datetime,
    limit: int,
    *,
    max_time_slots: int = MAX_TIME_SLOTS,
    default_timezone: str = DEFAULT_EVENT_TIMEZONE,
) -> tuple[list[Occurrence], ValidationOutcome]:
    """Like ``expand`` but also returns the validation outcome.

    Callers use the outcome to report why an event contributed no occurrences.
    """
    if isinstance(event, NormalizedEvent):
        outcome = ValidationOutcome(event=event)
    else:
        outcome = validate_event(
            event, max_time_slots=max_time_slots, default_timezone=default_timezone
        )

    if outcome.event is None:
        return [], outcome
    return expand_normalized(outcome.event, query_from, query_until, limit), outcome


def expand(
    event: EventInput,
    query_from: datetime,
    query_until: datetime,
    limit: int,
    *,
    max_time_slots: int = MAX_TIME_SLOTS,
    default_timezone: str = DEFAULT_EVENT_TIMEZONE,
) -> list[Occurrence]:
    """Expand one event into its occurrences inside ``[query_from, query_until]``.

    Args:
        event: EventDescriptor, stored event row (mapping) or NormalizedEvent
        query_from: Window start (naive values are taken as UTC)
        query_until: Window end (naive values are taken as UTC)
        limit: Maximum number of occurrences to return

    Returns:
        At most ``limit`` occurrences, ascending by start. Empty for invalid events
        and for ``query_from > query_until`` or ``limit < 1``.
    """
    occurrences, _ = expand_with_outcome(
        event,
        query_from,
        query_until,
        limit,
        max_time_slots=max_time_slots,
        default_timezone=default_timezone,
    )
    return occurrences
