"""
Contracts Module

This module defines the immutable records exchanged between the layers of
the insights engine. The core layers consume ONLY these canonical records
and produce ONLY these result types.

DESIGN PRINCIPLES:
==================
1. All contract types are immutable (frozen dataclasses, tuples not lists)
2. Invariants are validated at construction time
3. Results are recomputed on every call, never updated in place
4. Timestamps are parsed once at the temporal boundary
"""

from .base import (
    ErrorCode, Error, ReflectionEntry, BridgeInput,
    DistributionLabel, BridgeReason, TIME_WINDOWS,
)
from .distribution import (
    ShapeStatistics, WindowDistribution, DayCount, SpikeDay,
    DistributionStats, FittedBucket, DateRange, DistributionResult,
    YearMetrics, YearOverYearComparison,
)
from .bridges import (
    BridgeSignals, NarrativeBridge, BridgeWeights, DEFAULT_BRIDGE_WEIGHTS,
    EvidenceCheck, BridgeRunReport,
)
from .events import LegacyEvent, UnifiedEvent, RawEvent

__all__ = [
    "ErrorCode", "Error", "ReflectionEntry", "BridgeInput",
    "DistributionLabel", "BridgeReason", "TIME_WINDOWS",
    "ShapeStatistics", "WindowDistribution", "DayCount", "SpikeDay",
    "DistributionStats", "FittedBucket", "DateRange", "DistributionResult",
    "YearMetrics", "YearOverYearComparison",
    "BridgeSignals", "NarrativeBridge", "BridgeWeights", "DEFAULT_BRIDGE_WEIGHTS",
    "EvidenceCheck", "BridgeRunReport",
    "LegacyEvent", "UnifiedEvent", "RawEvent",
]
