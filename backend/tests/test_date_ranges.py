"""
Tests for named date-range presets.
"""
from datetime import datetime, timezone

import pytest

from app.transform.date_ranges import DATE_RANGES, resolve_date_range

NOW = datetime(2024, 3, 15, 10, 30, tzinfo=timezone.utc)


class TestResolveDateRange:
    def test_today(self):
        assert resolve_date_range("today", now=NOW) == (
            "2024-03-15T00:00:00.000Z",
            "2024-03-15T10:30:00.000Z",
        )

    def test_yesterday(self):
        assert resolve_date_range("yesterday", now=NOW) == (
            "2024-03-14T00:00:00.000Z",
            "2024-03-14T23:59:59.999Z",
        )

    def test_last_7_days(self):
        start, end = resolve_date_range("last7days", now=NOW)
        assert start == "2024-03-08T00:00:00.000Z"
        assert end == "2024-03-15T10:30:00.000Z"

    def test_last_30_days(self):
        start, _ = resolve_date_range("last30days", now=NOW)
        assert start == "2024-02-14T00:00:00.000Z"

    def test_this_month(self):
        start, _ = resolve_date_range("thisMonth", now=NOW)
        assert start == "2024-03-01T00:00:00.000Z"

    def test_last_month_leap_year(self):
        assert resolve_date_range("lastMonth", now=NOW) == (
            "2024-02-01T00:00:00.000Z",
            "2024-02-29T23:59:59.999Z",
        )

    def test_last_month_across_year_boundary(self):
        january = datetime(2024, 1, 10, tzinfo=timezone.utc)
        assert resolve_date_range("lastMonth", now=january) == (
            "2023-12-01T00:00:00.000Z",
            "2023-12-31T23:59:59.999Z",
        )

    def test_naive_now_is_treated_as_utc(self):
        naive = datetime(2024, 3, 15, 10, 30)
        assert resolve_date_range("today", now=naive) == resolve_date_range("today", now=NOW)

    def test_unknown_preset(self):
        with pytest.raises(ValueError, match="Unknown date range"):
            resolve_date_range("lastYear", now=NOW)

    def test_every_preset_is_ordered(self):
        for name in DATE_RANGES:
            start, end = resolve_date_range(name, now=NOW)
            assert start <= end
