"""
Core Analysis Layer

RESPONSIBILITY: Distribution classification, year-over-year metrics,
narrative bridge generation and bridge topology
ALLOWED INPUTS: ReflectionEntry / BridgeInput records, configuration
OUTPUTS: WindowDistribution, DistributionResult, YearMetrics, NarrativeBridge

WHAT THIS LAYER MUST NOT DO:
============================
- Read raw event shapes (the ingestion boundary resolves them)
- Perform I/O, network calls or persistence
- Keep state between calls
- Emit anything except through the injected Diagnostics port
"""

from .distribution import (
    compute_distribution, compute_distribution_detailed, compute_distribution_layer,
    classify_shape, shape_statistics, explain_distribution, find_spike_days,
    compute_active_days, get_top_spike_dates, rank_days,
)
from .yearly import compute_year_metrics, compare_years, entries_in_year
from .bridges import (
    build_narrative_bridges, build_bridge_report, score_pair, has_minimum_evidence,
    prepare_reflections, PreparedReflection, PairScore,
)
from .quality import (
    apply_type_balance, apply_quality_guardrails, cap_edges_per_source,
    final_filter, hash_bridge_set,
)
from .language import (
    sanitize_explanation, normalize_explanation, alternate_framing,
    is_fallback_explanation, ExplanationDeduplicator, ExplanationSignals,
)
from .topology import BridgeGraph, GraphMetrics

__all__ = [
    'compute_distribution',
    'compute_distribution_detailed',
    'compute_distribution_layer',
    'classify_shape',
    'shape_statistics',
    'explain_distribution',
    'find_spike_days',
    'compute_active_days',
    'get_top_spike_dates',
    'rank_days',
    'compute_year_metrics',
    'compare_years',
    'entries_in_year',
    'build_narrative_bridges',
    'build_bridge_report',
    'score_pair',
    'has_minimum_evidence',
    'prepare_reflections',
    'PreparedReflection',
    'PairScore',
    'apply_type_balance',
    'apply_quality_guardrails',
    'cap_edges_per_source',
    'final_filter',
    'hash_bridge_set',
    'sanitize_explanation',
    'normalize_explanation',
    'alternate_framing',
    'is_fallback_explanation',
    'ExplanationDeduplicator',
    'ExplanationSignals',
    'BridgeGraph',
    'GraphMetrics',
]
