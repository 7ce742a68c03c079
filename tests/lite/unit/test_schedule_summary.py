"""Unit tests for recurrence_lite.domain.schedule_summary."""

import pytest

from recurrence_lite.calendar.lite_models import EventDescriptor
from recurrence_lite.domain.schedule_summary import describe_schedule, format_clock_time

pytestmark = [pytest.mark.unit, pytest.mark.fast]


class TestFormatClockTime:
    """Tests for format_clock_time."""

    @pytest.mark.parametrize(
        ("minutes", "label"),
        [(0, "12:00 AM"), (59, "12:59 AM"), (9 * 60, "9:00 AM"), (12 * 60, "12:00 PM"), (23 * 60 + 30, "11:30 PM")],
    )
    def test_format_clock_time_uses_twelve_hour_clock(self, minutes, label):
        """Test minutes after midnight render as h:mm AM/PM."""
        assert format_clock_time(minutes) == label


class TestDescribeSchedule:
    """Tests for describe_schedule."""

    def test_describe_schedule_when_weekly_then_lists_days_and_times(self, make_event):
        """Test weekly labels list weekdays in stored order and times ascending."""
        row = make_event(recurrenceFreq="WEEKLY", byWeekdayJson=["MO", "WE"], timesJson=["18:00", "15:00"])

        assert describe_schedule(row) == "Weekly on Mon, Wed at 3:00 PM, 6:00 PM (America/New_York)"

    def test_describe_schedule_when_daily_with_until_then_end_date_appended(self, make_event):
        """Test the series end date is appended when recurrenceUntil is set."""
        row = make_event(
            recurrenceFreq="DAILY",
            timesJson=["09:00"],
            timezone="UTC",
            recurrenceUntil="2025-01-05T23:59:59Z",
        )

        assert describe_schedule(row) == "Daily at 9:00 AM (UTC) through Jan 5, 2025"

    def test_describe_schedule_when_timezone_missing_then_default_shown(self, make_event):
        """Test rows without a timezone show the default zone."""
        row = make_event(recurrenceFreq="DAILY", timesJson=["07:15"], timezone=None)

        assert describe_schedule(row) == "Daily at 7:15 AM (America/New_York)"

    def test_describe_schedule_skips_invalid_parts(self, make_event):
        """Test unknown weekday codes and malformed times are left out of the label."""
        row = make_event(recurrenceFreq="WEEKLY", byWeekdayJson=["FR", "XX"], timesJson=["25:00", "20:00"])

        assert describe_schedule(row) == "Weekly on Fri at 8:00 PM (America/New_York)"

    def test_describe_schedule_accepts_descriptor(self, make_event):
        """Test descriptors are described the same way as rows."""
        row = make_event(recurrenceFreq="daily", timesJson=["12:00"])

        assert describe_schedule(EventDescriptor.model_validate(row)) == describe_schedule(row)

    def test_describe_schedule_when_single_event_then_none(self, make_event):
        """Test one-off events have no schedule label."""
        assert describe_schedule(make_event()) is None

    def test_describe_schedule_when_not_a_row_then_none(self):
        """Test values that are not event rows have no schedule label."""
        assert describe_schedule(None) is None
        assert describe_schedule("weekly") is None
