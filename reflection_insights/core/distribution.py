"""
Distribution Classifier
=======================

Classifies writing activity over a time window as normal, log-normal or
power-law, from the daily-count array of active days.

DESCRIPTIVE, NOT PRESCRIPTIVE:
==============================
The label describes the SHAPE of past activity.

ALLOWED:
- Counting entries per calendar day
- Moment statistics over daily counts and recency gaps
- Naming the busiest days and spike days

FORBIDDEN:
- Goals, streak targets or advice
- Judging one shape as better than another
- Reading entry content beyond a word count

INVARIANTS:
- Total: malformed timestamps are skipped; empty input or a non-positive
  window yields a zero-valued "normal" result
- Same entries + same reference time + same timezone → same result
- Classification rules are ordered; the first match wins
"""

from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union
import math

import numpy as np

from ..config import DistributionConfig, DistributionThresholds
from ..contracts.base import DistributionLabel, ReflectionEntry, TIME_WINDOWS
from ..contracts.distribution import (
    DateRange, DayCount, DistributionResult, DistributionStats, FittedBucket,
    ShapeStatistics, SpikeDay, WindowDistribution,
)
from ..lexicon.tokens import word_count
from ..observability import DiagnosticStage, Diagnostics, NullDiagnostics
from ..temporal.windows import (
    TimedEntry, filter_by_window, group_by_day, parse_timestamp,
    recency_gaps, window_day_keys,
)


# =============================================================================
# STATISTICS
# =============================================================================

def shape_statistics(
    daily_counts: Sequence[int],
    gaps: Sequence[float] = (),
    top_day_share: float = 0.1
) -> ShapeStatistics:
    """
    Mean, population variance, population skew and top-day concentration
    of a daily-count array, plus the population variance of recency gaps.
    """
    gap_array = np.asarray(gaps, dtype=float)
    gap_variance = float(gap_array.var()) if gap_array.size else 0.0

    counts = np.asarray(daily_counts, dtype=float)
    if counts.size == 0:
        return ShapeStatistics(gap_variance=gap_variance)

    mean = float(counts.mean())
    variance = float(counts.var())
    std = math.sqrt(variance)
    skew = float(((counts - mean) ** 3).mean()) / std ** 3 if std > 0 else 0.0

    total = float(counts.sum())
    if total > 0:
        ranked = np.sort(counts)[::-1]
        top_count = max(1, math.ceil(counts.size * top_day_share))
        concentration = float(ranked[:top_count].sum()) / total
    else:
        concentration = 0.0

    return ShapeStatistics(
        mean=mean,
        variance=variance,
        skew=skew,
        concentration=concentration,
        gap_variance=gap_variance,
    )


def classify_shape(
    shape: ShapeStatistics,
    has_gaps: bool,
    thresholds: Optional[DistributionThresholds] = None
) -> DistributionLabel:
    """Ordered decision rules; first match wins."""
    t = thresholds or DistributionThresholds()

    if (shape.concentration >= t.powerlaw_concentration
            or abs(shape.skew) >= t.powerlaw_abs_skew
            or (has_gaps and shape.gap_variance > t.powerlaw_gap_variance)):
        return DistributionLabel.POWERLAW

    if (shape.skew >= t.lognormal_skew
            or shape.concentration >= t.lognormal_concentration
            or (has_gaps and shape.gap_variance > t.lognormal_gap_variance)):
        return DistributionLabel.LOGNORMAL

    if (abs(shape.skew) <= t.normal_abs_skew
            and shape.concentration <= t.normal_concentration
            and shape.gap_variance <= t.normal_gap_variance):
        return DistributionLabel.NORMAL

    return DistributionLabel.LOGNORMAL


def _frequency_descriptor(frequency_per_day: float) -> str:
    if frequency_per_day < 0.5:
        return "sparse"
    if frequency_per_day < 1:
        return "moderate"
    return "frequent"


def _magnitude_descriptor(magnitude_proxy: float) -> str:
    if magnitude_proxy < 50:
        return "brief"
    if magnitude_proxy < 200:
        return "moderate"
    return "detailed"


def explain_distribution(
    classification: DistributionLabel,
    frequency_per_day: float,
    magnitude_proxy: float
) -> str:
    """Plain-language description of a classified window."""
    freq = _frequency_descriptor(frequency_per_day)
    mag = _magnitude_descriptor(magnitude_proxy)

    if classification == DistributionLabel.NORMAL:
        return f"Steady {freq} entries with consistent {mag} writing. Regular pattern with low variance."
    if classification == DistributionLabel.LOGNORMAL:
        return f"Mostly small entries with occasional medium spikes. {mag} writing with moderate variance."
    return f"Long quiet periods followed by rare huge spikes. {mag} writing with high variance."


# =============================================================================
# DAY-LEVEL HELPERS
# =============================================================================

def compute_active_days(daily_counts: Iterable[int]) -> int:
    """Number of days with at least one entry."""
    return sum(1 for count in daily_counts if count > 0)


def rank_days(day_counts: Iterable[DayCount]) -> List[DayCount]:
    """Busiest first; ties broken by most recent date."""
    return sorted(day_counts, key=lambda d: (d.count, d.date), reverse=True)


def get_top_spike_dates(
    days: Union[DistributionResult, Iterable[DayCount]],
    n: int = 3
) -> Tuple[str, ...]:
    """Dates of the n busiest days, busiest first."""
    day_counts = days.top_days if isinstance(days, DistributionResult) else days
    return tuple(d.date for d in rank_days(day_counts)[:max(0, n)])


def _round_tenth(value: float) -> float:
    return math.floor(value * 10 + 0.5) / 10


def find_spike_days(
    day_counts: Iterable[DayCount],
    config: Optional[DistributionConfig] = None
) -> Tuple[SpikeDay, ...]:
    """
    Days clearing both spike bars, most recent first.

    A spike needs count >= spike_min_count and count >= spike_min_multiplier
    times the median active-day count (a zero median counts as 1). Fewer
    than min_days_for_spikes active days yields no spikes.
    """
    config = config or DistributionConfig()
    active = [d for d in day_counts if d.count > 0]
    if len(active) < config.min_days_for_spikes:
        return ()

    median = float(np.median([d.count for d in active]))
    baseline = median if median > 0 else 1.0

    spikes = [
        SpikeDay(
            date=d.date,
            count=d.count,
            median_count=median,
            multiplier=_round_tenth(d.count / baseline),
        )
        for d in active
        if d.count >= config.spike_min_count
        and d.count >= config.spike_min_multiplier * baseline
    ]
    spikes.sort(key=lambda s: s.date, reverse=True)
    return tuple(spikes)


# =============================================================================
# WINDOW SAMPLING
# =============================================================================

@dataclass(frozen=True)
class _WindowSample:
    start: datetime
    end: datetime
    items: Tuple[TimedEntry, ...]
    buckets: Dict[str, List[TimedEntry]]
    gaps: Tuple[float, ...]
    shape: ShapeStatistics
    classification: DistributionLabel
    frequency_per_day: float
    magnitude_proxy: float

    @property
    def day_counts(self) -> List[DayCount]:
        return [DayCount(date=key, count=len(items)) for key, items in self.buckets.items()]


def _reference_time(now: Optional[datetime], diagnostics: Optional[Diagnostics] = None) -> datetime:
    parsed = parse_timestamp(now)
    if parsed is None:
        if now is not None and diagnostics is not None:
            diagnostics.warning(DiagnosticStage.DISTRIBUTION, f"Unusable reference time {now!r}; using current time")
        return datetime.now(timezone.utc)
    return parsed


def _sample_window(
    entries: Iterable[ReflectionEntry],
    window_days: int,
    end: datetime,
    config: DistributionConfig
) -> _WindowSample:
    # A non-positive window is empty
    if window_days > 0:
        start = end - timedelta(days=window_days)
        items = tuple(filter_by_window(entries, start, end))
    else:
        start, items = end, ()
    buckets = group_by_day(items, config.tz)
    gaps = recency_gaps(items)
    shape = shape_statistics(
        [len(v) for v in buckets.values()],
        gaps,
        config.thresholds.top_day_share,
    )

    if items:
        classification = classify_shape(shape, bool(gaps), config.thresholds)
        frequency = len(items) / window_days
        magnitude = sum(word_count(t.entry.plaintext) for t in items) / len(items)
    else:
        classification = DistributionLabel.NORMAL
        frequency = 0.0
        magnitude = 0.0

    return _WindowSample(
        start=start,
        end=end,
        items=items,
        buckets=buckets,
        gaps=gaps,
        shape=shape,
        classification=classification,
        frequency_per_day=frequency,
        magnitude_proxy=magnitude,
    )


def _record(diagnostics: Diagnostics, sample: _WindowSample, window_days: int):
    diagnostics.debug(
        DiagnosticStage.DISTRIBUTION,
        f"{window_days}-day window classified as {sample.classification.value}",
        window_days=window_days,
        entries=len(sample.items),
        active_days=len(sample.buckets),
        skew=round(sample.shape.skew, 4),
        concentration=round(sample.shape.concentration, 4),
        gap_variance=round(sample.shape.gap_variance, 4),
    )


# =============================================================================
# PUBLIC OPERATIONS
# =============================================================================

def compute_distribution(
    entries: Iterable[ReflectionEntry],
    window_days: int,
    now: Optional[datetime] = None,
    config: Optional[DistributionConfig] = None,
    diagnostics: Optional[Diagnostics] = None
) -> WindowDistribution:
    """
    Classify the entries of the last window_days days before now.

    Never raises: a non-positive window yields the zero-valued result and an
    unusable now falls back to the current time.
    """
    config = config or DistributionConfig()
    diagnostics = diagnostics or NullDiagnostics()

    sample = _sample_window(entries, window_days, _reference_time(now, diagnostics), config)
    _record(diagnostics, sample, window_days)

    return WindowDistribution(
        window_days=max(window_days, 0),
        classification=sample.classification,
        frequency_per_day=sample.frequency_per_day,
        magnitude_proxy=sample.magnitude_proxy,
        recency_gaps=sample.gaps,
        top_spike_dates=get_top_spike_dates(sample.day_counts, config.top_spike_count),
        explanation=explain_distribution(
            sample.classification, sample.frequency_per_day, sample.magnitude_proxy
        ),
        shape=sample.shape,
    )


def compute_distribution_layer(
    entries: Iterable[ReflectionEntry],
    now: Optional[datetime] = None,
    config: Optional[DistributionConfig] = None,
    diagnostics: Optional[Diagnostics] = None
) -> List[WindowDistribution]:
    """One WindowDistribution per supported window (7, 30, 90, 365 days)."""
    entries = list(entries)
    reference = _reference_time(now, diagnostics)
    return [
        compute_distribution(entries, window, reference, config, diagnostics)
        for window in TIME_WINDOWS
    ]


def _fitted_buckets(
    day_counts: Sequence[DayCount],
    spikes: Sequence[SpikeDay]
) -> Dict[DistributionLabel, FittedBucket]:
    """
    Place each active day in a shape bucket.

    Spike days are power-law, days above the median are log-normal, the
    rest are normal.
    """
    active = [d for d in day_counts if d.count > 0]
    tallies = {label: 0 for label in DistributionLabel}
    if active:
        median = float(np.median([d.count for d in active]))
        spike_dates = {s.date for s in spikes}
        for day in active:
            if day.date in spike_dates:
                tallies[DistributionLabel.POWERLAW] += 1
            elif day.count > median:
                tallies[DistributionLabel.LOGNORMAL] += 1
            else:
                tallies[DistributionLabel.NORMAL] += 1

    return {
        label: FittedBucket(
            share=(count / len(active)) if active else 0.0,
            count=count,
        )
        for label, count in tallies.items()
    }


def compute_distribution_detailed(
    entries: Iterable[ReflectionEntry],
    window_days: int,
    now: Optional[datetime] = None,
    config: Optional[DistributionConfig] = None,
    diagnostics: Optional[Diagnostics] = None
) -> DistributionResult:
    """
    Detailed variant: full daily-count array, busiest days, headline
    statistics, fitted buckets and spike days.

    daily_counts has one slot per calendar day from the window start to
    now (inclusive, oldest first), so it sums to total_entries. Degenerate
    input is handled as in compute_distribution.
    """
    config = config or DistributionConfig()
    diagnostics = diagnostics or NullDiagnostics()

    sample = _sample_window(entries, window_days, _reference_time(now, diagnostics), config)
    _record(diagnostics, sample, window_days)

    keys = window_day_keys(sample.start, sample.end, config.tz)
    daily_counts = tuple(len(sample.buckets.get(key, ())) for key in keys)

    day_counts = sample.day_counts
    ranked = rank_days(day_counts)
    spikes = find_spike_days(day_counts, config)

    active_counts = [d.count for d in day_counts]
    if active_counts:
        busiest = max(active_counts)
        median = float(np.median(active_counts))
        spike_ratio = busiest / median if median > 0 else 0.0
    else:
        busiest = 0
        spike_ratio = 0.0

    stats = DistributionStats(
        most_common_day_count=busiest,
        variance=float(np.var(np.asarray(daily_counts, dtype=float))) if daily_counts else 0.0,
        spike_ratio=spike_ratio,
        top10_percent_days_share=sample.shape.concentration,
    )

    return DistributionResult(
        window_days=max(window_days, 0),
        classification=sample.classification,
        total_entries=len(sample.items),
        date_range=DateRange(start=sample.start, end=sample.end),
        daily_counts=daily_counts,
        top_days=tuple(ranked[:config.top_days_count]),
        stats=stats,
        fitted_buckets=_fitted_buckets(day_counts, spikes),
        spike_days=spikes,
        shape=sample.shape,
        explanation=explain_distribution(
            sample.classification, sample.frequency_per_day, sample.magnitude_proxy
        ),
    )
