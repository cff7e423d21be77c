"""
Engine Configuration
====================

Tunable thresholds for the distribution classifier and the bridge pipeline.

The numbers are empirically tuned; they are preserved exactly and are
exposed as configuration rather than re-derived.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import tzinfo
from typing import Mapping, Optional
import logging
import os


# =============================================================================
# DISTRIBUTION CLASSIFIER
# =============================================================================

@dataclass(frozen=True)
class DistributionThresholds:
    """Decision thresholds for shape classification (first match wins)."""
    # Power law
    powerlaw_concentration: float = 0.6
    powerlaw_abs_skew: float = 2.0
    powerlaw_gap_variance: float = 100.0
    # Log normal
    lognormal_skew: float = 0.8
    lognormal_concentration: float = 0.4
    lognormal_gap_variance: float = 10.0
    # Normal
    normal_abs_skew: float = 0.4
    normal_concentration: float = 0.3
    normal_gap_variance: float = 10.0
    # Share of days counted as "top" for concentration
    top_day_share: float = 0.1


@dataclass(frozen=True)
class DistributionConfig:
    """Configuration for window and detailed distributions."""
    thresholds: DistributionThresholds = field(default_factory=DistributionThresholds)
    top_spike_count: int = 3
    top_days_count: int = 10
    spike_min_count: int = 3  # absolute bar for a spike day
    spike_min_multiplier: float = 2.0  # relative bar over the median day
    min_days_for_spikes: int = 3
    tz: Optional[tzinfo] = None  # None = local timezone


# =============================================================================
# NARRATIVE BRIDGE PIPELINE
# =============================================================================

@dataclass(frozen=True)
class BridgePipelineConfig:
    """Configuration for bridge candidate generation and post-processing."""
    max_days: int = 14  # narrative horizon
    top_k: int = 4  # candidates kept per source entry before filtering
    reversal_boost: float = 0.15
    domain_mismatch_damping: float = 0.3
    reversal_damping: float = 0.2
    contrast_damping: float = 0.5
    systemic_reason_floor: float = 0.3
    max_hits_per_signal: int = 8
    concrete_token_count: int = 3
    # Type balance
    max_type_share: float = 0.40
    under_type_share: float = 0.20
    balance_penalty: float = 0.7
    balance_bias: float = 0.05
    min_keep_share: float = 0.5
    # Quality guardrails
    max_bridges_per_pair: int = 3
    min_confidence: float = 0.40
    similarity_threshold: float = 0.7  # Jaccard overlap above this is a duplicate
    max_edges_per_type_per_source: int = 5
    fallback_rate_warning: float = 5.0  # percent

    def __post_init__(self):
        if self.max_days < 0:
            raise ValueError("max_days must be non-negative")
        if self.top_k < 0:
            raise ValueError("top_k must be non-negative")


# =============================================================================
# ENVIRONMENT SETTINGS
# =============================================================================

ENV_MODE_VAR = "REFLECTION_INSIGHTS_ENV"
ENV_LOG_LEVEL_VAR = "REFLECTION_INSIGHTS_LOG_LEVEL"


@dataclass(frozen=True)
class EngineSettings:
    """
    Process-level settings read from the environment.

    Only diagnostics depend on these; analysis output never does.
    """
    mode: str = "production"
    log_level: int = logging.INFO

    @property
    def is_development(self) -> bool:
        return self.mode == "development"

    @staticmethod
    def from_env(environ: Optional[Mapping[str, str]] = None) -> EngineSettings:
        env = os.environ if environ is None else environ
        mode = env.get(ENV_MODE_VAR, "production").strip().lower() or "production"
        level_name = env.get(ENV_LOG_LEVEL_VAR, "INFO").strip().upper()
        level = logging.getLevelName(level_name)
        if not isinstance(level, int):
            level = logging.INFO
        return EngineSettings(mode=mode, log_level=level)
