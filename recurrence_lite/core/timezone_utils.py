"""Timezone resolution and instant helpers for recurrence_lite."""

from __future__ import annotations

import datetime
import logging
import os
from functools import lru_cache
from typing import Any, ClassVar
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dateutil import parser as date_parser

from recurrence_lite.calendar.lite_exceptions import InvalidTimezoneError

logger = logging.getLogger(__name__)

# Timezone applied to events stored without one
DEFAULT_EVENT_TIMEZONE = "America/New_York"

TEST_TIME_ENV = "RECURRENCE_LITE_TEST_TIME"
DEFAULT_TIMEZONE_ENV = "RECURRENCE_LITE_DEFAULT_TIMEZONE"


class TimezoneResolver:
    """Resolves IANA zone names to ``ZoneInfo`` objects."""

    # Obsolete names kept by older rows; zoneinfo still ships most of them but
    # the canonical name is what gets echoed back to callers.
    TZ_ALIAS_MAP: ClassVar[dict[str, str]] = {
        "US/Pacific": "America/Los_Angeles",
        "US/Mountain": "America/Denver",
        "US/Central": "America/Chicago",
        "US/Eastern": "America/New_York",
        "US/Alaska": "America/Anchorage",
        "US/Hawaii": "Pacific/Honolulu",
        "US/Arizona": "America/Phoenix",
        "GMT": "UTC",
        "Etc/UTC": "UTC",
        "Etc/GMT": "UTC",
        "Universal": "UTC",
        "Zulu": "UTC",
        "Asia/Rangoon": "Asia/Yangon",
        "America/Godthab": "America/Nuuk",
    }

    def canonical_name(self, tz_name: str) -> str:
        """Return the canonical IANA name for ``tz_name`` (aliases resolved)."""
        name = tz_name.strip()
        return self.TZ_ALIAS_MAP.get(name, name)

    def resolve(self, tz_name: Any) -> ZoneInfo:
        """Resolve a zone name, raising ``InvalidTimezoneError`` when it does not exist.

        Args:
            tz_name: IANA timezone identifier (e.g. "America/New_York")

        Returns:
            ZoneInfo for the zone

        Raises:
            InvalidTimezoneError: If the name is blank, not a string, or unknown
        """
        if not isinstance(tz_name, str) or not tz_name.strip():
            raise InvalidTimezoneError(f"Timezone must be a non-empty string, got {tz_name!r}")
        return _load_zone(self.canonical_name(tz_name))


@lru_cache(maxsize=64)
def _load_zone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError, TypeError, OSError) as e:
        # ValueError covers malformed keys such as absolute paths or "../"
        raise InvalidTimezoneError(f"Unknown timezone {name!r}") from e


class TimeProvider:
    """Provides current time with test time override support."""

    def now_utc(self) -> datetime.datetime:
        """Return current UTC time with tzinfo.

        Can be overridden for testing via the RECURRENCE_LITE_TEST_TIME environment
        variable (ISO 8601, e.g. "2024-03-09T12:00:00-05:00"). Naive values are
        taken as UTC.
        """
        test_time = os.environ.get(TEST_TIME_ENV)
        if test_time:
            try:
                return ensure_utc(date_parser.isoparse(test_time))
            except ValueError as e:
                logger.warning("Failed to parse %s=%r: %s", TEST_TIME_ENV, test_time, e)

        return datetime.datetime.now(datetime.timezone.utc)


# Singleton instances for global use
_resolver = TimezoneResolver()
_time_provider = TimeProvider()


def resolve_timezone(tz_name: Any) -> ZoneInfo:
    """Resolve an IANA zone name (convenience function).

    Raises:
        InvalidTimezoneError: If the zone cannot be resolved
    """
    return _resolver.resolve(tz_name)


def canonical_timezone_name(tz_name: str) -> str:
    """Return the canonical name for a zone alias (convenience function)."""
    return _resolver.canonical_name(tz_name)


def is_valid_timezone(tz_name: Any) -> bool:
    """Return True if ``tz_name`` resolves to a real zone."""
    try:
        resolve_timezone(tz_name)
    except InvalidTimezoneError:
        return False
    return True


def get_default_timezone(fallback: str = DEFAULT_EVENT_TIMEZONE) -> str:
    """Get default event timezone from environment with validation.

    Checks RECURRENCE_LITE_DEFAULT_TIMEZONE first, then falls back to ``fallback``.
    """
    timezone = os.environ.get(DEFAULT_TIMEZONE_ENV, fallback)

    if is_valid_timezone(timezone):
        return canonical_timezone_name(timezone)

    logger.warning("Invalid timezone %r, falling back to %r", timezone, fallback)
    return fallback


def now_utc() -> datetime.datetime:
    """Get current UTC time (convenience function)."""
    return _time_provider.now_utc()


def ensure_utc(dt: datetime.datetime) -> datetime.datetime:
    """Return ``dt`` as an aware UTC datetime; naive values are assumed to be UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=datetime.timezone.utc)
    return dt.astimezone(datetime.timezone.utc)


def parse_instant(value: Any) -> datetime.datetime:
    """Parse a stored instant into an aware UTC datetime.

    Accepts ``datetime`` objects, ISO 8601 strings ("2024-01-01T00:00:00Z") and
    numbers of milliseconds since the Unix epoch.

    Raises:
        ValueError: If a string is not valid ISO 8601
        OverflowError: If an epoch value is outside the supported date range
        TypeError: If ``value`` is of an unsupported type
    """
    if isinstance(value, datetime.datetime):
        return ensure_utc(value)
    if isinstance(value, str):
        return ensure_utc(date_parser.isoparse(value.strip()))
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return datetime.datetime.fromtimestamp(value / 1000, datetime.timezone.utc)
    raise TypeError(f"Unsupported instant value: {value!r}")


def format_instant(dt: datetime.datetime) -> str:
    """Format an instant as ISO 8601 UTC with a ``Z`` suffix and millisecond precision."""
    utc = ensure_utc(dt)
    return utc.strftime("%Y-%m-%dT%H:%M:%S.") + f"{utc.microsecond // 1000:03d}Z"


def local_date_of(instant: datetime.datetime, tz: ZoneInfo) -> datetime.date:
    """Return the calendar date of ``instant`` as seen on a wall clock in ``tz``."""
    return ensure_utc(instant).astimezone(tz).date()
