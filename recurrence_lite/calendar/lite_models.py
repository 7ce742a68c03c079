"""Data models for recurring event expansion - recurrence_lite."""

from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Optional
from zoneinfo import ZoneInfo

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_serializer, field_validator

from recurrence_lite.core.timezone_utils import format_instant, parse_instant


class RecurrenceFreq(str, Enum):
    """Supported repetition rules."""

    NONE = "NONE"
    DAILY = "DAILY"
    WEEKLY = "WEEKLY"


class Weekday(str, Enum):
    """Weekday codes as stored on events."""

    SU = "SU"
    MO = "MO"
    TU = "TU"
    WE = "WE"
    TH = "TH"
    FR = "FR"
    SA = "SA"

    @property
    def day_number(self) -> int:
        """Weekday number with 0=Sunday..6=Saturday."""
        return WEEKDAY_NUMBERS[self]


WEEKDAY_NUMBERS: dict[Weekday, int] = {day: number for number, day in enumerate(Weekday)}


class EventStatus(str, Enum):
    """Storage status of an event; only published events are expanded for callers."""

    DRAFT = "Draft"
    PUBLISHED = "Published"
    ARCHIVED = "Archived"


class EventDescriptor(BaseModel):
    """One stored event definition, as loaded from storage.

    Deliberately permissive: every field is optional and loosely typed so that a
    malformed row can still be represented and handed to the validator, which
    decides whether the event is usable.
    """

    id: Optional[str] = Field(default=None, description="Event ID")
    title: Optional[str] = Field(default=None, description="Event title")
    world: Optional[str] = Field(default=None, description="World the event takes place in")
    category: Optional[str] = Field(default=None, description="Event category label")
    status: Optional[str] = Field(default=None, description="Storage status (Draft/Published/Archived)")

    # First occurrence and duration
    start_at: Optional[datetime] = Field(
        default=None, validation_alias=AliasChoices("start_at", "startAt")
    )
    end_at: Optional[datetime] = Field(
        default=None, validation_alias=AliasChoices("end_at", "endAt")
    )
    timezone: Any = Field(default=None, description="IANA zone for local wall-clock times")

    # Recurrence
    recurrence_freq: Any = Field(
        default=RecurrenceFreq.NONE.value,
        validation_alias=AliasChoices("recurrence_freq", "recurrenceFreq"),
    )
    by_weekday: Any = Field(
        default=None, validation_alias=AliasChoices("by_weekday", "byWeekday", "byWeekdayJson")
    )
    times: Any = Field(default=None, validation_alias=AliasChoices("times", "timesJson"))
    recurrence_until: Optional[datetime] = Field(
        default=None, validation_alias=AliasChoices("recurrence_until", "recurrenceUntil")
    )

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    @field_validator("id", "title", "world", "category", "status", mode="before")
    @classmethod
    def _coerce_label(cls, value: Any) -> Optional[str]:
        if isinstance(value, Enum):
            value = value.value
        if isinstance(value, bool):
            return None
        if isinstance(value, (str, int)):
            return str(value)
        return None

    @field_validator("start_at", "end_at", "recurrence_until", mode="before")
    @classmethod
    def _coerce_instant(cls, value: Any) -> Optional[datetime]:
        # Unparseable instants are represented as missing; the validator skips on them
        if value is None:
            return None
        try:
            return parse_instant(value)
        except (ValueError, TypeError, OverflowError, OSError):
            return None

    @property
    def is_recurring(self) -> bool:
        """True unless the stored frequency is NONE (or absent)."""
        freq = self.recurrence_freq
        if isinstance(freq, Enum):
            freq = freq.value
        return isinstance(freq, str) and freq.strip().upper() not in ("", RecurrenceFreq.NONE.value)


@dataclass(frozen=True)
class NormalizedEvent:
    """An event descriptor that passed validation, ready for date math."""

    event_id: str
    title: str
    world: str
    category: str
    start_at: datetime
    end_at: datetime
    tz: ZoneInfo
    timezone: str
    freq: RecurrenceFreq
    weekdays: frozenset[int]
    slots: tuple[int, ...]  # minutes after local midnight, ascending
    recurrence_until: Optional[datetime] = None

    @property
    def duration(self) -> timedelta:
        """Fixed length applied to every occurrence."""
        return self.end_at - self.start_at


class Occurrence(BaseModel):
    """One concrete UTC instance of an event."""

    event_id: str = Field(..., serialization_alias="eventId", description="Source event ID")
    title: str
    world: str
    category: str
    start: datetime = Field(..., description="Start instant (UTC)")
    end: datetime = Field(..., description="End instant (UTC)")
    timezone: str = Field(..., description="Event timezone, echoed for display")

    model_config = ConfigDict(frozen=True)

    @field_serializer("start", "end")
    def serialize_datetime(self, dt: datetime) -> str:
        """Serialize instants to ISO 8601 UTC."""
        return format_instant(dt)

    def to_wire(self) -> dict[str, Any]:
        """Return the wire representation ``{eventId, title, world, category, start, end, timezone}``."""
        return self.model_dump(by_alias=True)
