"""
Year-over-Year Metrics Tests
============================

Tests for per-year summaries and the comparison title / summary text.
"""

import time
from datetime import timedelta, timezone

import pytest

from reflection_insights.contracts import ReflectionEntry
from reflection_insights.core.yearly import compare_years, compute_year_metrics, entries_in_year
from reflection_insights.temporal import year_bounds

UTC = timezone.utc


def entries_for(year: int, day_counts):
    """day_counts maps 'MM-DD' → number of entries that day."""
    entries = []
    for day, count in day_counts.items():
        for n in range(count):
            entries.append(ReflectionEntry(
                id=f"{year}-{day}-{n}",
                created_at=f"{year}-{day}T10:{n:02d}:00Z",
                plaintext="a note",
            ))
    return entries


class TestYearMetrics:

    def test_counts(self):
        entries = entries_for(2024, {"02-01": 4, "02-02": 1, "06-15": 1}) + entries_for(2023, {"01-01": 2})
        metrics = compute_year_metrics(entries, 2024, tz=UTC)
        assert metrics.year == 2024
        assert metrics.total_entries == 6
        assert metrics.active_days == 3
        assert metrics.top_day_count == 4
        assert metrics.spike_ratio == pytest.approx(4.0)
        assert metrics.classification is not None

    def test_empty_year(self):
        metrics = compute_year_metrics(entries_for(2023, {"01-01": 2}), 2022, tz=UTC)
        assert metrics.total_entries == 0
        assert metrics.active_days == 0
        assert metrics.classification is None

    def test_year_boundaries(self):
        entries = entries_for(2023, {"12-31": 1}) + entries_for(2024, {"01-01": 1})
        assert [e.id for e in entries_in_year(entries, 2024, UTC)] == ["2024-01-01-0"]

    def test_stable_across_calls(self):
        entries = entries_for(2024, {"03-01": 2, "03-05": 1})
        assert compute_year_metrics(entries, 2024, tz=UTC) == compute_year_metrics(entries, 2024, tz=UTC)


class TestCompareYears:

    def test_increase(self):
        entries = entries_for(2023, {"01-01": 2, "01-02": 1}) + entries_for(2024, {"05-01": 3, "05-02": 3})
        comparison = compare_years(entries, 2023, 2024, tz=UTC)
        assert comparison.delta_total_entries == 3
        assert comparison.delta_active_days == 0
        assert comparison.title == "2024 vs 2023: increased by 3 entries"
        assert comparison.summary == (
            "2024 had 6 entries (2 active days) compared to 2023's 3 entries (2 active days). "
            "That's a 100% increase."
        )

    def test_decrease(self):
        entries = entries_for(2023, {"01-01": 4}) + entries_for(2024, {"01-01": 2})
        comparison = compare_years(entries, 2023, 2024, tz=UTC)
        assert comparison.title == "2024 vs 2023: decreased by 2 entries"
        assert comparison.summary.endswith("That's a 50% decrease.")

    def test_unchanged(self):
        entries = entries_for(2023, {"01-01": 2}) + entries_for(2024, {"01-01": 2})
        comparison = compare_years(entries, 2023, 2024, tz=UTC)
        assert comparison.title == "2024 vs 2023: unchanged by 0 entries"
        assert "That's a" not in comparison.summary

    def test_no_data(self):
        comparison = compare_years([], 2023, 2024, tz=UTC)
        assert comparison.title == "2024 vs 2023: No data for either year"
        assert comparison.summary == "Neither 2023 nor 2024 have reflection entries."

    def test_only_later_year(self):
        comparison = compare_years(entries_for(2024, {"01-01": 2}), 2023, 2024, tz=UTC)
        assert comparison.title == "2024 vs 2023: 2024 had 2 entries"
        assert comparison.summary.endswith("No data available for 2023.")

    def test_only_earlier_year(self):
        comparison = compare_years(entries_for(2023, {"01-01": 2}), 2023, 2024, tz=UTC)
        assert comparison.title == "2024 vs 2023: 2023 had 2 entries"
        assert comparison.summary == "2023 had 2 entries across 1 active days. No data available for 2024."


@pytest.fixture
def eastern_local_time(monkeypatch):
    """System local time switched to US Eastern (EST in winter, EDT in summer)."""
    monkeypatch.setenv("TZ", "EST5EDT,M3.2.0,M11.1.0")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()


@pytest.mark.skipif(not hasattr(time, "tzset"), reason="needs time.tzset")
@pytest.mark.usefixtures("eastern_local_time")
class TestLocalYearBounds:

    def test_bounds_use_offset_of_their_own_date(self):
        start, end = year_bounds(2024)
        assert start.utcoffset() == timedelta(hours=-5)
        assert end.utcoffset() == timedelta(hours=-5)
        assert (start.month, start.day, start.hour) == (1, 1, 0)
        assert (end.month, end.day, end.hour) == (12, 31, 23)

    def test_last_hour_of_year_is_counted(self):
        """23:30 EST on Dec 31 is 04:30 UTC on Jan 1 and belongs to the earlier year."""
        entries = [ReflectionEntry("late", "2025-01-01T04:30:00Z", "a note")]
        metrics = compute_year_metrics(entries, 2024)
        assert metrics.total_entries == 1
        assert metrics.active_days == 1
        assert metrics.top_day_count == 1
        assert compute_year_metrics(entries, 2025).total_entries == 0
