"""
Distribution Contracts

Immutable result types produced by the distribution classifier and the
year-over-year metrics. Results are recomputed fresh on every call; nothing
here is ever updated incrementally.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Optional, Tuple

from .base import DistributionLabel


@dataclass(frozen=True)
class ShapeStatistics:
    """
    Statistics over the daily-count array of active days.

    concentration is the share of total volume produced by the top 10%
    most active days (at least one day).
    """
    mean: float = 0.0
    variance: float = 0.0
    skew: float = 0.0
    concentration: float = 0.0
    gap_variance: float = 0.0


@dataclass(frozen=True)
class WindowDistribution:
    """Per-window summary of writing activity."""
    window_days: int
    classification: DistributionLabel
    frequency_per_day: float
    magnitude_proxy: float  # average word count
    recency_gaps: Tuple[float, ...]  # days between consecutive entries
    top_spike_dates: Tuple[str, ...]  # YYYY-MM-DD, busiest first
    explanation: str
    shape: ShapeStatistics = field(default_factory=ShapeStatistics)

    def __post_init__(self):
        if self.window_days < 0:
            raise ValueError("window_days must not be negative")


@dataclass(frozen=True)
class DayCount:
    """Entry count for one calendar day."""
    date: str
    count: int


@dataclass(frozen=True)
class SpikeDay:
    """A calendar day whose count clears both the absolute and relative bars."""
    date: str
    count: int
    median_count: float
    multiplier: float


@dataclass(frozen=True)
class DistributionStats:
    """Headline statistics for the detailed distribution."""
    most_common_day_count: int = 0
    variance: float = 0.0
    spike_ratio: float = 0.0
    top10_percent_days_share: float = 0.0


@dataclass(frozen=True)
class FittedBucket:
    """Share and number of active days placed in one shape bucket."""
    share: float = 0.0
    count: int = 0


@dataclass(frozen=True)
class DateRange:
    start: datetime
    end: datetime

    def __post_init__(self):
        if self.start > self.end:
            raise ValueError("DateRange start must be before or equal to end")


@dataclass(frozen=True)
class DistributionResult:
    """
    Detailed distribution used by yearly and lifetime callers.

    daily_counts holds one slot per calendar day of the window, oldest
    first, zeros included.
    """
    window_days: int
    classification: DistributionLabel
    total_entries: int
    date_range: DateRange
    daily_counts: Tuple[int, ...]
    top_days: Tuple[DayCount, ...]
    stats: DistributionStats
    fitted_buckets: Dict[DistributionLabel, FittedBucket]
    spike_days: Tuple[SpikeDay, ...]
    shape: ShapeStatistics
    explanation: str


@dataclass(frozen=True)
class YearMetrics:
    """Numeric summary of one calendar year of writing."""
    year: int
    total_entries: int = 0
    active_days: int = 0
    top_day_count: int = 0
    spike_ratio: float = 0.0
    top10_share: float = 0.0
    classification: Optional[DistributionLabel] = None


@dataclass(frozen=True)
class YearOverYearComparison:
    """Two years side by side, later year minus earlier year."""
    year_a: YearMetrics
    year_b: YearMetrics
    delta_total_entries: int
    delta_active_days: int
    delta_spike_ratio: float
    title: str
    summary: str
