"""Tests for civil date arithmetic in the property timezone."""

import time
from datetime import date, datetime, timezone

import pytest

from src.utils.civil_date import add_days, add_months, now_local, parse_civil_date, today


@pytest.fixture
def host_timezone(monkeypatch):
    """Run a test with the host clock in a given timezone."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")

    def set_zone(name):
        monkeypatch.setenv("TZ", name)
        time.tzset()

    yield set_zone

    monkeypatch.undo()
    time.tzset()


class TestAddDays:
    """Tests for day shifts."""

    def test_crosses_month_end(self):
        assert add_days("2024-01-31", 1) == "2024-02-01"

    def test_leap_day_backwards(self):
        assert add_days("2024-03-01", -1) == "2024-02-29"

    def test_week_window(self):
        assert add_days("2024-12-28", 7) == "2025-01-04"

    def test_accepts_date_objects(self):
        assert add_days(date(2024, 1, 31), 1) == "2024-02-01"

    @pytest.mark.parametrize("zone", ["UTC", "America/Los_Angeles", "Pacific/Kiritimati"])
    def test_independent_of_host_timezone(self, host_timezone, zone):
        """Host timezone never shifts the result."""
        host_timezone(zone)
        assert add_days("2024-01-31", 1) == "2024-02-01"
        assert add_days("2024-02-01", -1) == "2024-01-31"


class TestAddMonths:
    """Tests for month shifts."""

    def test_one_month_back(self):
        assert add_months("2024-01-15", -1) == "2023-12-15"

    def test_clamps_to_month_end(self):
        assert add_months("2024-03-31", -1) == "2024-02-29"


class TestToday:
    """Tests for the property's current date."""

    def test_late_utc_evening_is_next_day_in_dhaka(self):
        """20:00 UTC is 02:00 the next day at UTC+6."""
        now = datetime(2024, 1, 31, 20, 0, tzinfo=timezone.utc)
        assert today(now=now) == "2024-02-01"

    def test_just_before_local_midnight(self):
        now = datetime(2024, 1, 31, 17, 59, tzinfo=timezone.utc)
        assert today(now=now) == "2024-01-31"

    def test_naive_instant_is_taken_as_utc(self):
        now = datetime(2024, 1, 31, 20, 0)
        assert today(now=now) == "2024-02-01"

    def test_explicit_zone(self):
        now = datetime(2024, 1, 31, 20, 0, tzinfo=timezone.utc)
        assert today(now=now, tz_name="UTC") == "2024-01-31"

    def test_host_utc_does_not_matter(self, host_timezone):
        host_timezone("UTC")
        now = datetime(2024, 1, 31, 20, 0, tzinfo=timezone.utc)
        assert today(now=now) == "2024-02-01"

    def test_now_local_offset(self):
        now = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)
        assert now_local(now=now).utcoffset().total_seconds() == 6 * 3600


class TestParseCivilDate:
    """Tests for date parsing."""

    def test_trims_time_part(self):
        assert parse_civil_date("2024-02-01T10:00:00Z") == date(2024, 2, 1)

    def test_rejects_garbage(self):
        with pytest.raises(ValueError):
            parse_civil_date("tomorrow")
