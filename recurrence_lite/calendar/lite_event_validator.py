"""Input validation and normalization of event descriptors.

First expansion stage: turns a raw ``EventDescriptor`` into a ``NormalizedEvent``
(resolved zone, positive duration, clean weekday set, sorted unique time slots) or
reports why the event has to be skipped. Nothing raised here escapes
``validate_event``; one malformed event must never abort a batch.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from pydantic import ValidationError

from recurrence_lite.calendar.lite_exceptions import (
    EventValidationError,
    InvalidTimeFormatError,
    InvalidWeekdayCodeError,
    MissingRequiredFieldError,
    NonPositiveDurationError,
    UnsupportedRecurrenceError,
)
from recurrence_lite.calendar.lite_models import (
    WEEKDAY_NUMBERS,
    EventDescriptor,
    NormalizedEvent,
    RecurrenceFreq,
    Weekday,
)
from recurrence_lite.core.timezone_utils import (
    DEFAULT_EVENT_TIMEZONE,
    canonical_timezone_name,
    resolve_timezone,
)

# Upper bound on time slots per event, bounds per-day work
MAX_TIME_SLOTS = 50

REQUIRED_FIELDS = ("id", "title", "world", "category")

_HHMM_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")


@dataclass
class ValidationOutcome:
    """Result of validating one descriptor.

    Exactly one of ``event`` and ``reason`` is set. ``dropped`` lists the parts that
    were discarded without skipping the event, as ``"<code>:<value>"`` strings.
    """

    event: Optional[NormalizedEvent] = None
    reason: Optional[str] = None
    detail: Optional[str] = None
    dropped: list[str] = field(default_factory=list)

    @property
    def skipped(self) -> bool:
        """True if the event contributes no occurrences because it is invalid."""
        return self.event is None


def coerce_descriptor(raw: Any) -> Optional[EventDescriptor]:
    """Build an ``EventDescriptor`` from a mapping, or return None if that fails.

    Descriptors are returned unchanged.
    """
    if isinstance(raw, EventDescriptor):
        return raw
    if not isinstance(raw, Mapping):
        return None
    try:
        return EventDescriptor.model_validate(dict(raw))
    except ValidationError:
        return None


def parse_time_slot(value: Any) -> int:
    """Parse a 24-hour ``HH:MM`` string into minutes after midnight.

    Raises:
        InvalidTimeFormatError: If ``value`` is not a valid ``HH:MM`` string
    """
    if not isinstance(value, str):
        raise InvalidTimeFormatError(f"Time slot must be a string, got {value!r}")
    match = _HHMM_PATTERN.match(value)
    if match is None:
        raise InvalidTimeFormatError(f"Time slot {value!r} is not HH:MM")
    return int(match.group(1)) * 60 + int(match.group(2))


def format_time_slot(minutes: int) -> str:
    """Format minutes after midnight as ``HH:MM``."""
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


def _as_list(value: Any) -> list[Any]:
    # Stored JSON columns may hold anything; only arrays carry values
    if isinstance(value, (list, tuple)):
        return list(value)
    return []


def _require_fields(descriptor: EventDescriptor) -> None:
    for name in REQUIRED_FIELDS:
        value = getattr(descriptor, name)
        if value is None or not value.strip():
            raise MissingRequiredFieldError(f"Event is missing required field {name!r}")


def _check_duration(descriptor: EventDescriptor) -> None:
    if descriptor.start_at is None or descriptor.end_at is None:
        raise NonPositiveDurationError("Event has no usable startAt/endAt")
    if descriptor.end_at <= descriptor.start_at:
        raise NonPositiveDurationError(
            f"endAt {descriptor.end_at.isoformat()} is not after startAt {descriptor.start_at.isoformat()}"
        )


def _parse_freq(value: Any) -> RecurrenceFreq:
    if value is None:
        return RecurrenceFreq.NONE
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, str):
        try:
            return RecurrenceFreq(value.strip().upper())
        except ValueError:
            pass
    raise UnsupportedRecurrenceError(f"Unsupported recurrence frequency {value!r}")


def normalize_weekdays(raw: Any, dropped: list[str]) -> frozenset[int]:
    """Map weekday codes to 0=Sunday..6=Saturday numbers, dropping unknown codes."""
    numbers: set[int] = set()
    for code in _as_list(raw):
        try:
            numbers.add(_weekday_number(code))
        except InvalidWeekdayCodeError:
            dropped.append(f"{InvalidWeekdayCodeError.code}:{code}")
    return frozenset(numbers)


def _weekday_number(code: Any) -> int:
    if isinstance(code, Weekday):
        return WEEKDAY_NUMBERS[code]
    if isinstance(code, str):
        try:
            return WEEKDAY_NUMBERS[Weekday(code)]
        except ValueError:
            pass
    raise InvalidWeekdayCodeError(f"Unknown weekday code {code!r}")


def normalize_time_slots(raw: Any, dropped: list[str], max_slots: int = MAX_TIME_SLOTS) -> tuple[int, ...]:
    """Filter ``HH:MM`` strings, cap at ``max_slots``, deduplicate and sort ascending."""
    valid: list[int] = []
    for value in _as_list(raw):
        try:
            valid.append(parse_time_slot(value))
        except InvalidTimeFormatError:
            dropped.append(f"{InvalidTimeFormatError.code}:{value}")

    if len(valid) > max_slots:
        for minutes in valid[max_slots:]:
            dropped.append(f"TooManyTimeSlots:{format_time_slot(minutes)}")
        valid = valid[:max_slots]

    return tuple(sorted(set(valid)))


def validate_event(
    raw: Any,
    *,
    max_time_slots: int = MAX_TIME_SLOTS,
    default_timezone: str = DEFAULT_EVENT_TIMEZONE,
) -> ValidationOutcome:
    """Validate and normalize one event descriptor.

    Args:
        raw: ``EventDescriptor`` or a mapping with the stored event row
        max_time_slots: Maximum number of time slots kept per event
        default_timezone: Zone used when the event has no timezone at all

    Returns:
        ValidationOutcome with either a NormalizedEvent or the skip reason code
    """
    descriptor = coerce_descriptor(raw)
    if descriptor is None:
        return ValidationOutcome(reason=EventValidationError.code, detail="Event row is not a mapping")

    dropped: list[str] = []
    try:
        _require_fields(descriptor)
        _check_duration(descriptor)

        tz_name = descriptor.timezone
        if tz_name is None or (isinstance(tz_name, str) and not tz_name.strip()):
            tz_name = default_timezone
        tz = resolve_timezone(tz_name)
        tz_name = canonical_timezone_name(tz_name)

        freq = _parse_freq(descriptor.recurrence_freq)
        weekdays = normalize_weekdays(descriptor.by_weekday, dropped)
        slots = normalize_time_slots(descriptor.times, dropped, max_time_slots)

        if not slots:
            # Fall back to the wall-clock time of the first occurrence
            try:
                local_start = descriptor.start_at.astimezone(tz)
            except (OverflowError, ValueError) as e:
                raise InvalidTimeFormatError("Cannot derive a time slot from startAt") from e
            slots = (local_start.hour * 60 + local_start.minute,)

    except EventValidationError as e:
        return ValidationOutcome(reason=e.code, detail=str(e), dropped=dropped)

    event = NormalizedEvent(
        event_id=descriptor.id,
        title=descriptor.title,
        world=descriptor.world,
        category=descriptor.category,
        start_at=descriptor.start_at,
        end_at=descriptor.end_at,
        tz=tz,
        timezone=tz_name,
        freq=freq,
        weekdays=weekdays,
        slots=slots,
        recurrence_until=descriptor.recurrence_until,
    )
    return ValidationOutcome(event=event, dropped=dropped)
