"""
Tests for daily forecast aggregation and series statistics.
"""

from datetime import date, datetime, timedelta, timezone

import pytest

from meteoviveiro.daily import day_label, group_by_day
from meteoviveiro.models import (
    ForecastPoint,
    HistoricalDataPoint,
    HistoricalTimeSeries,
    SortOrder,
)
from meteoviveiro.stats import series_stats


def point(iso, temperature):
    return ForecastPoint(timestamp=datetime.fromisoformat(iso), temperature=temperature)


class TestGroupByDay:
    """Test grouping of forecast points into local days."""

    def test_periods_and_labels(self):
        # Europe/Madrid is UTC+1 in January
        points = [
            point("2025-01-15T07:00:00+00:00", 5.0),   # 08:00 local
            point("2025-01-15T12:00:00+00:00", 12.0),  # 13:00 local
            point("2025-01-15T20:00:00+00:00", 9.0),   # 21:00 local
            point("2025-01-16T09:00:00+00:00", 7.0),
            point("2025-01-17T09:00:00+00:00", 8.0),
        ]

        days = group_by_day(points)

        assert [d.label for d in days] == ["Hoy", "Mañana", "vie"]
        today = days[0]
        assert today.date == date(2025, 1, 15)
        assert today.morning.temperature == 5.0
        assert today.afternoon.temperature == 12.0
        assert today.night.temperature == 9.0
        assert days[1].afternoon is None

    def test_min_max_cover_all_points(self):
        points = [
            point("2025-01-15T06:00:00+00:00", 5.0),
            point("2025-01-15T07:00:00+00:00", 12.0),
            point("2025-01-15T08:00:00+00:00", 9.0),
        ]

        day = group_by_day(points)[0]

        assert day.morning.temperature == 5.0
        assert day.temp_max == 12.0
        assert day.temp_min == 5.0

    def test_local_day_boundary(self):
        points = [
            point("2025-01-15T22:00:00+00:00", 4.0),  # 23:00 local
            point("2025-01-15T23:30:00+00:00", 3.0),  # 00:30 local, next day
        ]

        days = group_by_day(points)

        assert [d.date for d in days] == [date(2025, 1, 15), date(2025, 1, 16)]
        assert days[1].night.temperature == 3.0

    def test_unsorted_input(self):
        points = [
            point("2025-01-15T10:00:00+00:00", 11.0),
            point("2025-01-15T08:00:00+00:00", 6.0),
        ]

        assert group_by_day(points)[0].morning.temperature == 6.0

    def test_capped_at_four_days(self):
        start = datetime(2025, 1, 15, 11, tzinfo=timezone.utc)
        points = [
            ForecastPoint(timestamp=start + timedelta(days=i), temperature=float(i))
            for i in range(6)
        ]

        days = group_by_day(points)

        assert len(days) == 4
        assert days[-1].date == date(2025, 1, 18)

    def test_empty(self):
        assert group_by_day([]) == []

    def test_day_label(self):
        assert day_label(0, date(2025, 1, 19)) == "Hoy"
        assert day_label(1, date(2025, 1, 19)) == "Mañana"
        assert day_label(2, date(2025, 1, 19)) == "dom"

    def test_day_label_with_today(self):
        today = date(2025, 1, 18)
        assert day_label(5, date(2025, 1, 18), today) == "Hoy"
        assert day_label(0, date(2025, 1, 19), today) == "Mañana"
        assert day_label(0, date(2025, 1, 20), today) == "lun"

    def test_labels_follow_today(self):
        points = [
            point("2025-01-15T09:00:00+00:00", 7.0),
            point("2025-01-16T09:00:00+00:00", 8.0),
            point("2025-01-17T09:00:00+00:00", 9.0),
        ]

        days = group_by_day(points, today=date(2025, 1, 14))

        assert [d.label for d in days] == ["Mañana", "jue", "vie"]

    def test_today_matching_first_day(self):
        points = [
            point("2025-01-15T09:00:00+00:00", 7.0),
            point("2025-01-16T09:00:00+00:00", 8.0),
        ]

        days = group_by_day(points, today=date(2025, 1, 15))

        assert [d.label for d in days] == ["Hoy", "Mañana"]


class TestSeriesStats:
    """Test summary statistics of a series."""

    @pytest.fixture
    def series(self):
        return HistoricalTimeSeries(
            "TA_AVG_1.5m",
            "Temperatura",
            "°C",
            (
                HistoricalDataPoint(datetime(2025, 1, 15, 12, tzinfo=timezone.utc), 14.0),
                HistoricalDataPoint(datetime(2025, 1, 15, 11, tzinfo=timezone.utc), 16.0),
                HistoricalDataPoint(datetime(2025, 1, 15, 10, tzinfo=timezone.utc), 15.0),
            ),
            order=SortOrder.DESCENDING,
        )

    def test_descending_latest_is_first(self, series):
        stats = series_stats(series)

        assert stats.min == 14.0
        assert stats.max == 16.0
        assert stats.avg == pytest.approx(15.0)
        assert stats.latest == 14.0

    def test_ascending_latest_is_last(self, series):
        ascending = series.sorted(SortOrder.ASCENDING)
        assert series_stats(ascending).latest == 14.0

    def test_explicit_order_override(self, series):
        assert series_stats(series, order=SortOrder.ASCENDING).latest == 15.0

    def test_empty_series(self):
        empty = HistoricalTimeSeries("TA_AVG_1.5m", "Temperatura", "°C", ())
        stats = series_stats(empty)

        assert stats.min is None
        assert stats.latest is None
