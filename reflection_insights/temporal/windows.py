"""
Time Windows and Day Buckets
============================

Timestamp parsing, calendar-day keys and window filtering for the
analysis layers.

INVARIANTS:
- Timestamps are parsed once, here; unparseable values are skipped, never raised
- Naive timestamps are treated as UTC
- Day keys are YYYY-MM-DD in the configured timezone (local when None)
- Every non-deleted entry inside a window lands in exactly one day bucket
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Dict, Iterable, List, Optional, Tuple, Union
import math

from ..contracts.base import ReflectionEntry

SECONDS_PER_DAY = 24 * 60 * 60


@dataclass(frozen=True)
class TimedEntry:
    """A reflection entry paired with its parsed creation time."""
    entry: ReflectionEntry
    at: datetime


def parse_timestamp(value: Union[datetime, str, None]) -> Optional[datetime]:
    """Parse an ISO-8601 string or datetime into an aware datetime, or None."""
    if value is None:
        return None
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            dt = datetime.fromisoformat(text.replace('Z', '+00:00'))
        except ValueError:
            return None
    else:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def localize(dt: datetime, tz: Optional[tzinfo] = None) -> datetime:
    """Convert to the analysis timezone (system local time when tz is None)."""
    return dt.astimezone(tz) if tz is not None else dt.astimezone()


def day_key(dt: datetime, tz: Optional[tzinfo] = None) -> str:
    """Calendar date key YYYY-MM-DD."""
    return localize(dt, tz).strftime('%Y-%m-%d')


def days_between(a: datetime, b: datetime) -> int:
    """Absolute distance in whole days, rounded half up."""
    diff = abs((b - a).total_seconds()) / SECONDS_PER_DAY
    return int(math.floor(diff + 0.5))


# =============================================================================
# WINDOW FILTERING
# =============================================================================

def timed_entries(entries: Iterable[ReflectionEntry]) -> List[TimedEntry]:
    """Pair live entries with parsed timestamps, skipping deleted or undated ones."""
    result: List[TimedEntry] = []
    for entry in entries:
        if entry.is_deleted:
            continue
        at = parse_timestamp(entry.created_at)
        if at is None:
            continue
        result.append(TimedEntry(entry=entry, at=at))
    return result


def filter_by_window(
    entries: Iterable[ReflectionEntry],
    start: datetime,
    end: datetime
) -> List[TimedEntry]:
    """Live entries with start <= created_at <= end."""
    return [t for t in timed_entries(entries) if start <= t.at <= end]


def group_by_day(
    items: Iterable[TimedEntry],
    tz: Optional[tzinfo] = None
) -> Dict[str, List[TimedEntry]]:
    """Bucket entries by calendar day, preserving first-seen order."""
    buckets: Dict[str, List[TimedEntry]] = {}
    for item in items:
        buckets.setdefault(day_key(item.at, tz), []).append(item)
    return buckets


def recency_gaps(items: Iterable[TimedEntry]) -> Tuple[float, ...]:
    """Gaps in days between consecutive entries, chronological."""
    ordered = sorted(t.at for t in items)
    return tuple(
        (ordered[i] - ordered[i - 1]).total_seconds() / SECONDS_PER_DAY
        for i in range(1, len(ordered))
    )


def window_day_keys(
    start: datetime,
    end: datetime,
    tz: Optional[tzinfo] = None
) -> List[str]:
    """Every calendar day key from start to end inclusive, oldest first."""
    first = localize(start, tz).date()
    last = localize(end, tz).date()
    keys: List[str] = []
    current = first
    while current <= last:
        keys.append(current.isoformat())
        current += timedelta(days=1)
    return keys


def year_bounds(year: int, tz: Optional[tzinfo] = None) -> Tuple[datetime, datetime]:
    """
    First and last instant of a calendar year in the analysis timezone.

    With tz None each bound carries the local UTC offset in force on its own
    date, not today's.
    """
    start = datetime.combine(date(year, 1, 1), time.min)
    end = datetime.combine(date(year, 12, 31), time.max)
    if tz is None:
        return start.astimezone(), end.astimezone()
    return start.replace(tzinfo=tz), end.replace(tzinfo=tz)
