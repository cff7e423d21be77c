"""
Year-over-Year Metrics
======================

Numeric summaries of calendar years and a side-by-side comparison.
Computed with the detailed distribution anchored at the last instant of
each year, so a year's metrics never depend on when they are computed.

Empty years are a normal state: every metric is zero and the comparison
summary says which year has no data.
"""

from __future__ import annotations
from datetime import tzinfo
from typing import Iterable, List, Optional

from ..config import DistributionConfig
from ..contracts.base import ReflectionEntry
from ..contracts.distribution import YearMetrics, YearOverYearComparison
from ..observability import Diagnostics
from ..temporal.windows import localize, timed_entries, year_bounds
from .distribution import compute_active_days, compute_distribution_detailed


def entries_in_year(
    entries: Iterable[ReflectionEntry],
    year: int,
    tz: Optional[tzinfo] = None
) -> List[ReflectionEntry]:
    """Live, dated entries whose local creation date falls in year."""
    return [t.entry for t in timed_entries(entries) if localize(t.at, tz).year == year]


def compute_year_metrics(
    entries: Iterable[ReflectionEntry],
    year: int,
    tz: Optional[tzinfo] = None,
    diagnostics: Optional[Diagnostics] = None
) -> YearMetrics:
    year_entries = entries_in_year(entries, year, tz)
    if not year_entries:
        return YearMetrics(year=year)

    start, end = year_bounds(year, tz)
    window_days = (end.date() - start.date()).days + 1
    result = compute_distribution_detailed(
        year_entries,
        window_days,
        now=end,
        config=DistributionConfig(tz=tz),
        diagnostics=diagnostics,
    )

    return YearMetrics(
        year=year,
        total_entries=len(year_entries),
        active_days=compute_active_days(result.daily_counts),
        top_day_count=result.top_days[0].count if result.top_days else 0,
        spike_ratio=result.stats.spike_ratio,
        top10_share=result.stats.top10_percent_days_share,
        classification=result.classification,
    )


def _percent_change(delta: int, base: int) -> int:
    # half up
    return int((abs(delta) / base) * 100 + 0.5) if base > 0 else 0


def compare_years(
    entries: Iterable[ReflectionEntry],
    year_a: int,
    year_b: int,
    tz: Optional[tzinfo] = None,
    diagnostics: Optional[Diagnostics] = None
) -> YearOverYearComparison:
    """
    Compare year_b against year_a (deltas are b minus a).

    The summary degrades gracefully when either year has no entries.
    """
    entries = list(entries)
    metrics_a = compute_year_metrics(entries, year_a, tz, diagnostics)
    metrics_b = compute_year_metrics(entries, year_b, tz, diagnostics)

    a_count = metrics_a.total_entries
    b_count = metrics_b.total_entries
    delta_total = b_count - a_count

    if a_count == 0 and b_count == 0:
        title = f"{year_b} vs {year_a}: No data for either year"
        summary = f"Neither {year_a} nor {year_b} have reflection entries."
    elif a_count == 0:
        title = f"{year_b} vs {year_a}: {year_b} had {b_count} entries"
        summary = (f"{year_b} had {b_count} entries across {metrics_b.active_days} active days. "
                   f"No data available for {year_a}.")
    elif b_count == 0:
        title = f"{year_b} vs {year_a}: {year_a} had {a_count} entries"
        summary = (f"{year_a} had {a_count} entries across {metrics_a.active_days} active days. "
                   f"No data available for {year_b}.")
    else:
        if delta_total == 0:
            direction = "unchanged"
        elif delta_total > 0:
            direction = "increased"
        else:
            direction = "decreased"
        title = f"{year_b} vs {year_a}: {direction} by {abs(delta_total)} entries"
        summary = (f"{year_b} had {b_count} entries ({metrics_b.active_days} active days) "
                   f"compared to {year_a}'s {a_count} entries ({metrics_a.active_days} active days).")
        percent = _percent_change(delta_total, a_count)
        if percent != 0:
            change = "increase" if delta_total > 0 else "decrease"
            summary += f" That's a {percent}% {change}."

    return YearOverYearComparison(
        year_a=metrics_a,
        year_b=metrics_b,
        delta_total_entries=delta_total,
        delta_active_days=metrics_b.active_days - metrics_a.active_days,
        delta_spike_ratio=metrics_b.spike_ratio - metrics_a.spike_ratio,
        title=title,
        summary=summary,
    )
