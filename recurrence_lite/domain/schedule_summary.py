"""Short human-readable labels for an event's recurrence schedule."""

from __future__ import annotations

from typing import Any, Optional

from recurrence_lite.calendar.lite_event_validator import coerce_descriptor, normalize_time_slots
from recurrence_lite.calendar.lite_models import RecurrenceFreq, Weekday
from recurrence_lite.core.timezone_utils import DEFAULT_EVENT_TIMEZONE

WEEKDAY_LABELS: dict[Weekday, str] = {
    Weekday.SU: "Sun",
    Weekday.MO: "Mon",
    Weekday.TU: "Tue",
    Weekday.WE: "Wed",
    Weekday.TH: "Thu",
    Weekday.FR: "Fri",
    Weekday.SA: "Sat",
}


def format_clock_time(minutes: int) -> str:
    """Render minutes after midnight as 12-hour ``h:mm AM/PM``.

    Examples:
        >>> format_clock_time(0)
        '12:00 AM'
        >>> format_clock_time(15 * 60 + 5)
        '3:05 PM'
    """
    hour, minute = divmod(minutes, 60)
    suffix = "AM" if hour < 12 else "PM"
    hour12 = hour % 12 or 12
    return f"{hour12}:{minute:02d} {suffix}"


def _weekday_labels(by_weekday: Any) -> list[str]:
    if not isinstance(by_weekday, (list, tuple)):
        return []
    labels = []
    for code in by_weekday:
        try:
            labels.append(WEEKDAY_LABELS[Weekday(code)])
        except ValueError:
            continue
    return labels


def describe_schedule(event: Any) -> Optional[str]:
    """Describe a recurring event's schedule, e.g. "Weekly on Mon, Wed at 3:00 PM (America/New_York)".

    Args:
        event: EventDescriptor or stored event row

    Returns:
        The label, or None for one-off events and rows that cannot be read.
    """
    descriptor = coerce_descriptor(event)
    if descriptor is None:
        return None

    freq = descriptor.recurrence_freq
    freq = freq.value if isinstance(freq, RecurrenceFreq) else str(freq or "").strip().upper()
    if freq not in (RecurrenceFreq.DAILY.value, RecurrenceFreq.WEEKLY.value):
        return None

    timezone = descriptor.timezone if isinstance(descriptor.timezone, str) and descriptor.timezone.strip() else DEFAULT_EVENT_TIMEZONE
    parts = ["Daily" if freq == RecurrenceFreq.DAILY.value else "Weekly"]

    if freq == RecurrenceFreq.WEEKLY.value:
        days = _weekday_labels(descriptor.by_weekday)
        if days:
            parts.append("on " + ", ".join(days))

    slots = normalize_time_slots(descriptor.times, dropped=[])
    if slots:
        parts.append("at " + ", ".join(format_clock_time(m) for m in slots))

    label = " ".join(parts) + f" ({timezone})"
    if descriptor.recurrence_until is not None:
        until = descriptor.recurrence_until
        label += f" through {until.strftime('%b')} {until.day}, {until.year}"
    return label
