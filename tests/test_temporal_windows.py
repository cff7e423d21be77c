"""
Temporal Layer Tests
====================

INVARIANTS TESTED:
1. Unparseable timestamps become None, never an exception
2. Naive timestamps are treated as UTC
3. Day distance rounds half up
4. Window day keys are inclusive at both ends
"""

from datetime import datetime, timedelta, timezone

from reflection_insights.contracts import ReflectionEntry
from reflection_insights.temporal import (
    day_key, days_between, filter_by_window, group_by_day, parse_timestamp,
    recency_gaps, timed_entries, window_day_keys, year_bounds,
)

UTC = timezone.utc
BASE = datetime(2024, 1, 1, 12, 0, tzinfo=UTC)


class TestParsing:

    def test_zulu_suffix(self):
        assert parse_timestamp("2024-01-01T12:00:00Z") == BASE

    def test_short_fraction_and_compact_offset(self):
        assert parse_timestamp("2024-01-01T12:00:00.5Z") == BASE + timedelta(milliseconds=500)
        assert parse_timestamp("2024-01-01T14:00:00+0200") == BASE

    def test_naive_is_utc(self):
        assert parse_timestamp("2024-01-01T12:00:00") == BASE
        assert parse_timestamp(datetime(2024, 1, 1, 12)) == BASE

    def test_garbage(self):
        assert parse_timestamp("not a date") is None
        assert parse_timestamp("") is None
        assert parse_timestamp(None) is None
        assert parse_timestamp(12345) is None


class TestDays:

    def test_days_between_rounds_half_up(self):
        assert days_between(BASE, BASE + timedelta(days=1, hours=12)) == 2
        assert days_between(BASE, BASE + timedelta(days=1, hours=11)) == 1
        assert days_between(BASE + timedelta(days=3), BASE) == 3

    def test_day_key_in_timezone(self):
        late = datetime(2024, 1, 1, 23, 30, tzinfo=UTC)
        assert day_key(late, UTC) == "2024-01-01"
        assert day_key(late, timezone(timedelta(hours=2))) == "2024-01-02"

    def test_window_day_keys_inclusive(self):
        keys = window_day_keys(BASE - timedelta(days=2), BASE, UTC)
        assert keys == ["2023-12-30", "2023-12-31", "2024-01-01"]

    def test_year_bounds(self):
        start, end = year_bounds(2024, UTC)
        assert start == datetime(2024, 1, 1, tzinfo=UTC)
        assert end.date().isoformat() == "2024-12-31"


class TestWindowing:

    def entries(self):
        return [
            ReflectionEntry("a", (BASE - timedelta(days=1)).isoformat(), "x"),
            ReflectionEntry("b", (BASE - timedelta(days=1, hours=2)).isoformat(), "x"),
            ReflectionEntry("c", (BASE - timedelta(days=9)).isoformat(), "x"),
            ReflectionEntry("d", "bad", "x"),
            ReflectionEntry("e", BASE.isoformat(), "x", deleted_at=BASE.isoformat()),
        ]

    def test_timed_entries_skip_deleted_and_undated(self):
        assert [t.entry.id for t in timed_entries(self.entries())] == ["a", "b", "c"]

    def test_filter_is_inclusive(self):
        window = filter_by_window(self.entries(), BASE - timedelta(days=9), BASE)
        assert [t.entry.id for t in window] == ["a", "b", "c"]

    def test_group_by_day(self):
        buckets = group_by_day(timed_entries(self.entries()), UTC)
        assert {k: len(v) for k, v in buckets.items()} == {"2023-12-31": 2, "2023-12-23": 1}

    def test_recency_gaps_chronological(self):
        gaps = recency_gaps(timed_entries(self.entries()))
        assert len(gaps) == 2
        assert gaps[1] == 2 / 24
        assert all(g >= 0 for g in gaps)
