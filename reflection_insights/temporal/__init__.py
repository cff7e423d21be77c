"""
Temporal Layer
==============

Timestamp parsing, calendar-day bucketing and window filtering.

INVARIANTS:
- Parsing failures degrade to "entry skipped", never to an exception
- Same entries + same reference time → same buckets
"""

from .windows import (
    TimedEntry, parse_timestamp, localize, day_key, days_between,
    timed_entries, filter_by_window, group_by_day, recency_gaps,
    window_day_keys, year_bounds, SECONDS_PER_DAY,
)

__all__ = [
    'TimedEntry',
    'parse_timestamp',
    'localize',
    'day_key',
    'days_between',
    'timed_entries',
    'filter_by_window',
    'group_by_day',
    'recency_gaps',
    'window_day_keys',
    'year_bounds',
    'SECONDS_PER_DAY',
]
