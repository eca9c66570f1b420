"""Tests for calendar helpers."""

from datetime import datetime, timezone

import pytest

from userdash.stats.dates import format_date, month_bounds, month_name, shift_months


class TestShiftMonths:
    """Calendar month arithmetic."""

    def test_moves_back_one_month(self):
        """Mid-month dates keep their day."""
        moment = datetime(2024, 3, 15, 12, 30, tzinfo=timezone.utc)
        assert shift_months(moment, -1) == datetime(2024, 2, 15, 12, 30, tzinfo=timezone.utc)

    def test_crosses_year_boundary(self):
        """January minus one month is December of the previous year."""
        moment = datetime(2024, 1, 10, tzinfo=timezone.utc)
        assert shift_months(moment, -1) == datetime(2023, 12, 10, tzinfo=timezone.utc)

    def test_clamps_to_leap_february(self):
        """March 31 maps to February 29 in a leap year."""
        moment = datetime(2024, 3, 31, tzinfo=timezone.utc)
        assert shift_months(moment, -1).date() == datetime(2024, 2, 29).date()

    def test_clamps_to_common_february(self):
        """March 31 maps to February 28 in a common year."""
        moment = datetime(2023, 3, 31, tzinfo=timezone.utc)
        assert shift_months(moment, -1).date() == datetime(2023, 2, 28).date()

    def test_forward_shift(self):
        """Positive shifts move forward."""
        moment = datetime(2024, 11, 30, tzinfo=timezone.utc)
        assert shift_months(moment, 3).date() == datetime(2025, 2, 28).date()


class TestMonthBounds:
    """First and last calendar day of a month."""

    def test_leap_february_ends_on_29(self):
        """February 2024 spans day 1 through day 29."""
        first, last = month_bounds(datetime(2024, 2, 10, 8, 0, tzinfo=timezone.utc))
        assert (first.day, last.day) == (1, 29)
        assert first.month == last.month == 2

    def test_common_february_ends_on_28(self):
        """February 2023 spans day 1 through day 28."""
        _, last = month_bounds(datetime(2023, 2, 10, tzinfo=timezone.utc))
        assert last.day == 28

    @pytest.mark.parametrize("month,days", [(1, 31), (4, 30), (7, 31), (9, 30), (12, 31)])
    def test_month_lengths(self, month, days):
        """Last day matches the true month length."""
        _, last = month_bounds(datetime(2023, month, 5, tzinfo=timezone.utc))
        assert last.day == days

    def test_first_day_starts_at_midnight(self):
        """The window opens at 00:00 of day 1."""
        first, _ = month_bounds(datetime(2024, 3, 15, 12, 45, 10, tzinfo=timezone.utc))
        assert first == datetime(2024, 3, 1, tzinfo=timezone.utc)


class TestFormatting:
    """Month names and table dates."""

    def test_month_name(self):
        """Month numbers are 1-based."""
        assert month_name(1) == "January"
        assert month_name(12) == "December"

    def test_format_iso_string(self):
        """ISO strings with a Z suffix are accepted."""
        assert format_date("2024-01-01T00:00:00Z") == "Jan 01, 2024"

    def test_format_converts_to_utc(self):
        """Offsets are normalized to UTC before formatting."""
        assert format_date("2024-01-01T01:00:00+02:00") == "Dec 31, 2023"

    def test_format_datetime(self):
        """Datetime objects are formatted directly."""
        assert format_date(datetime(2024, 7, 4, tzinfo=timezone.utc)) == "Jul 04, 2024"
