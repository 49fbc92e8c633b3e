"""
Unit tests for date/time display formatting.
"""

import pytest

from apd_monitor.dates import format_date, format_datetime


class TestFormatDateTime:
    """Test cases for format_datetime."""

    def test_omit_specific_time_at_midnight_marker(self):
        assert format_datetime("2024-03-05T03:00:00Z", omit_specific_time=True) == "2024-03-05"

    def test_full_datetime_without_flag(self):
        assert format_datetime("2024-03-05T03:00:00Z") == "05/03/2024 03:00"

    def test_flag_only_applies_to_marker(self):
        assert format_datetime("2024-03-05T13:45:00Z", omit_specific_time=True) == "05/03/2024 13:45"

    def test_without_utc_marker(self):
        assert format_datetime("2024-11-30T09:05:00") == "30/11/2024 09:05"

    def test_unparsable_returns_stripped_input(self):
        assert format_datetime("mañana") == "mañana"
        assert format_datetime("not-a-dateZ") == "not-a-date"

    @pytest.mark.parametrize("value", [None, "", 0])
    def test_empty_input(self, value):
        assert format_datetime(value) == ""


class TestFormatDate:
    """Test cases for format_date."""

    def test_date_only(self):
        assert format_date("2024-03-06") == "06/03/2024"

    def test_datetime_keeps_written_calendar_date(self):
        """No timezone shift: 03:00Z stays on the same calendar day."""
        assert format_date("2024-03-06T03:00:00Z") == "06/03/2024"

    def test_unparsable_returns_input(self):
        assert format_date("sin fecha") == "sin fecha"

    @pytest.mark.parametrize("value", [None, ""])
    def test_empty_input(self, value):
        assert format_date(value) == ""
