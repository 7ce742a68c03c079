"""Unit tests for recurrence_lite.core.timezone_utils module.

Tests zone resolution, alias handling, instant parsing/formatting and the time
provider with support for test time override.
"""

import datetime
import logging
from zoneinfo import ZoneInfo

import pytest

from recurrence_lite.calendar.lite_exceptions import InvalidTimezoneError
from recurrence_lite.core.timezone_utils import (
    DEFAULT_EVENT_TIMEZONE,
    TimeProvider,
    TimezoneResolver,
    canonical_timezone_name,
    ensure_utc,
    format_instant,
    get_default_timezone,
    is_valid_timezone,
    local_date_of,
    now_utc,
    parse_instant,
    resolve_timezone,
)

pytestmark = pytest.mark.unit

UTC = datetime.timezone.utc


class TestTimezoneResolver:
    """Tests for TimezoneResolver class."""

    def test_resolve_returns_zoneinfo(self):
        """Test a valid IANA name resolves to ZoneInfo."""
        assert TimezoneResolver().resolve("Europe/London") == ZoneInfo("Europe/London")

    def test_resolve_strips_whitespace(self):
        """Test surrounding whitespace is ignored."""
        assert resolve_timezone("  Asia/Tokyo ") == ZoneInfo("Asia/Tokyo")

    def test_canonical_name_maps_aliases(self):
        """Test obsolete aliases map to canonical names."""
        assert canonical_timezone_name("US/Pacific") == "America/Los_Angeles"
        assert canonical_timezone_name("GMT") == "UTC"
        assert canonical_timezone_name("Europe/Paris") == "Europe/Paris"

    @pytest.mark.parametrize("name", ["", "   ", None, 5, "Not/AZone", "/etc/localtime"])
    def test_resolve_when_invalid_then_raises(self, name):
        """Test blank, non-string and unknown names raise InvalidTimezoneError."""
        with pytest.raises(InvalidTimezoneError):
            resolve_timezone(name)

    def test_is_valid_timezone(self):
        """Test validity check mirrors resolve."""
        assert is_valid_timezone("America/Chicago")
        assert not is_valid_timezone("Invalid/Timezone")
        assert not is_valid_timezone(None)


class TestGetDefaultTimezone:
    """Tests for get_default_timezone."""

    def test_get_default_timezone_when_env_unset_then_fallback(self):
        """Test the fallback is used without an environment override."""
        assert get_default_timezone() == DEFAULT_EVENT_TIMEZONE

    def test_get_default_timezone_when_env_set_then_env_value(self, monkeypatch):
        """Test RECURRENCE_LITE_DEFAULT_TIMEZONE overrides the default."""
        monkeypatch.setenv("RECURRENCE_LITE_DEFAULT_TIMEZONE", "US/Central")

        assert get_default_timezone() == "America/Chicago"

    def test_get_default_timezone_when_env_invalid_then_fallback(self, monkeypatch, caplog):
        """Test an invalid override is logged and ignored."""
        caplog.set_level(logging.WARNING)
        monkeypatch.setenv("RECURRENCE_LITE_DEFAULT_TIMEZONE", "Nowhere/Land")

        assert get_default_timezone("UTC") == "UTC"
        assert "Nowhere/Land" in caplog.text


class TestTimeProvider:
    """Tests for TimeProvider class."""

    def test_now_utc_returns_aware_utc(self):
        """Test current time is timezone-aware UTC."""
        now = TimeProvider().now_utc()

        assert now.tzinfo is not None
        assert now.utcoffset() == datetime.timedelta(0)

    def test_now_utc_when_test_time_set_then_returns_it(self, monkeypatch):
        """Test RECURRENCE_LITE_TEST_TIME overrides the clock and is converted to UTC."""
        monkeypatch.setenv("RECURRENCE_LITE_TEST_TIME", "2024-03-09T12:00:00-05:00")

        assert now_utc() == datetime.datetime(2024, 3, 9, 17, tzinfo=UTC)

    def test_now_utc_when_test_time_invalid_then_real_clock(self, monkeypatch):
        """Test an unparseable override falls back to the real clock."""
        monkeypatch.setenv("RECURRENCE_LITE_TEST_TIME", "not-a-time")

        before = datetime.datetime.now(UTC)
        assert now_utc() >= before


class TestInstantHelpers:
    """Tests for instant parsing and formatting."""

    def test_ensure_utc_when_naive_then_assumed_utc(self):
        """Test naive datetimes are taken as UTC."""
        assert ensure_utc(datetime.datetime(2024, 1, 1, 12)) == datetime.datetime(2024, 1, 1, 12, tzinfo=UTC)

    def test_ensure_utc_converts_offsets(self):
        """Test aware datetimes are converted to UTC."""
        local = datetime.datetime(2024, 1, 1, 7, tzinfo=ZoneInfo("America/New_York"))

        result = ensure_utc(local)

        assert result.tzinfo is UTC
        assert result.hour == 12

    def test_parse_instant_accepts_z_suffix(self):
        """Test ISO strings with Z parse to aware UTC."""
        assert parse_instant("2024-01-01T00:00:00Z") == datetime.datetime(2024, 1, 1, tzinfo=UTC)

    def test_parse_instant_accepts_datetime(self):
        """Test datetime values pass through as UTC."""
        value = datetime.datetime(2024, 1, 1, tzinfo=UTC)

        assert parse_instant(value) == value

    def test_parse_instant_when_garbage_then_value_error(self):
        """Test malformed strings raise ValueError."""
        with pytest.raises(ValueError):
            parse_instant("January first")

    def test_parse_instant_accepts_epoch_milliseconds(self):
        """Test numbers are read as milliseconds since the Unix epoch."""
        assert parse_instant(1704121200000) == datetime.datetime(2024, 1, 1, 15, tzinfo=UTC)
        assert parse_instant(1704121200500.0) == datetime.datetime(2024, 1, 1, 15, 0, 0, 500000, tzinfo=UTC)

    @pytest.mark.parametrize("value", [True, None, [2024, 1, 1], {"startAt": "2024-01-01"}])
    def test_parse_instant_when_unsupported_type_then_type_error(self, value):
        """Test booleans and other non-instant values raise TypeError."""
        with pytest.raises(TypeError):
            parse_instant(value)

    def test_format_instant_uses_millisecond_z_format(self):
        """Test instants format as ISO 8601 with milliseconds and Z."""
        dt = datetime.datetime(2024, 1, 1, 15, 0, 0, 123456, tzinfo=UTC)

        assert format_instant(dt) == "2024-01-01T15:00:00.123Z"

    def test_local_date_of_uses_zone_calendar(self):
        """Test the local calendar date can differ from the UTC date."""
        instant = datetime.datetime(2024, 1, 1, 3, tzinfo=UTC)

        assert local_date_of(instant, ZoneInfo("America/New_York")) == datetime.date(2023, 12, 31)
        assert local_date_of(instant, ZoneInfo("Asia/Tokyo")) == datetime.date(2024, 1, 1)
