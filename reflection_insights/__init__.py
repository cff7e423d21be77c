"""
Reflection Insights Engine

This package analyzes a user's decrypted journal entries, entirely in
memory, and returns plain immutable data. Each layer communicates only
through explicit contracts, never through shared mutable state.

LAYER STRUCTURE:
================

1. CONTRACTS (contracts/)
   - Responsibility: Immutable records and enums shared by all layers
   - MUST NOT: Contain analysis logic

2. TEMPORAL (temporal/)
   - Responsibility: Timestamp parsing, calendar-day keys, window filtering
   - MUST NOT: Raise on malformed timestamps (they are skipped)

3. LEXICON (lexicon/)
   - Responsibility: Pattern sets, stopwords, concrete tokens, anchors, stable hash
   - MUST NOT: Know about entries, timestamps or bridges

4. CORE (core/)
   - Responsibility: Distribution classifier, year-over-year metrics,
     narrative bridge engine, bridge topology
   - Allowed inputs: ReflectionEntry / BridgeInput records only
   - MUST NOT: Perform I/O, keep state between calls, prescribe meaning

5. INGESTION BOUNDARY (ingestion/)
   - Responsibility: Resolve raw event variants into ReflectionEntry records
   - MUST NOT: Interpret content

6. OBSERVABILITY (observability/)
   - Responsibility: Injectable diagnostics (no-op by default)
   - MUST NOT: Influence analysis output

CONSTRAINTS ENFORCED:
=====================
- Immutability-first: results are frozen dataclasses and tuples
- Deterministic: identical inputs (and reference time) give identical outputs
- Total over entry data: malformed records are skipped, never raised
- Descriptive only: no goals, advice or future claims
"""

from .config import (
    DistributionThresholds, DistributionConfig, BridgePipelineConfig, EngineSettings,
)
from .contracts import (
    ReflectionEntry, BridgeInput, DistributionLabel, BridgeReason, TIME_WINDOWS,
    WindowDistribution, DistributionResult, NarrativeBridge, BridgeWeights,
    DEFAULT_BRIDGE_WEIGHTS, BridgeRunReport, YearMetrics, YearOverYearComparison,
)
from .core import (
    compute_distribution, compute_distribution_detailed, compute_distribution_layer,
    build_narrative_bridges, build_bridge_report, compute_year_metrics, compare_years,
    hash_bridge_set, BridgeGraph,
)
from .observability import (
    Diagnostics, NullDiagnostics, CollectingDiagnostics, LoggingDiagnostics,
    diagnostics_from_settings,
)

__version__ = "0.1.0"

__all__ = [
    'DistributionThresholds',
    'DistributionConfig',
    'BridgePipelineConfig',
    'EngineSettings',
    'ReflectionEntry',
    'BridgeInput',
    'DistributionLabel',
    'BridgeReason',
    'TIME_WINDOWS',
    'WindowDistribution',
    'DistributionResult',
    'NarrativeBridge',
    'BridgeWeights',
    'DEFAULT_BRIDGE_WEIGHTS',
    'BridgeRunReport',
    'YearMetrics',
    'YearOverYearComparison',
    'compute_distribution',
    'compute_distribution_detailed',
    'compute_distribution_layer',
    'build_narrative_bridges',
    'build_bridge_report',
    'compute_year_metrics',
    'compare_years',
    'hash_bridge_set',
    'BridgeGraph',
    'Diagnostics',
    'NullDiagnostics',
    'CollectingDiagnostics',
    'LoggingDiagnostics',
    'diagnostics_from_settings',
]
