"""
Narrative Bridge Contracts

Immutable records for the narrative bridge engine.

A narrative bridge is a directed edge from an earlier reflection to a later
one. It carries a composite weight, the reasons that fired, an explanation
grounded in concrete tokens from both sides, and the two anchor phrases
that make it valid.

INVARIANTS:
===========
- created_at(from) <= created_at(to)
- reasons is never empty and always starts with SEQUENCE
- anchor_a and anchor_b are both present on every emitted bridge
- quality is 1.0 on every emitted bridge
"""

from __future__ import annotations
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Mapping, Optional, Tuple

from .base import BridgeReason


# =============================================================================
# SCORING WEIGHTS
# =============================================================================

_CAMEL_KEYS = {
    "sequenceWeight": "sequence_weight",
    "scaleWeight": "scale_weight",
    "systemicWeight": "systemic_weight",
    "mediaWeight": "media_weight",
    "contrastWeight": "contrast_weight",
    "sequenceDecayExponent": "sequence_decay_exponent",
    "minWeightThreshold": "min_weight_threshold",
}


@dataclass(frozen=True)
class BridgeWeights:
    """
    Named weights of the bridge scoring formula.

    Sequence decay dominates; scale and abstraction are balanced; contrast
    is decisive rather than blended.
    """
    sequence_weight: float = 0.42
    scale_weight: float = 0.22
    systemic_weight: float = 0.15
    media_weight: float = 0.10
    contrast_weight: float = 0.11
    sequence_decay_exponent: float = 1.5  # higher = more aggressive decay
    min_weight_threshold: float = 0.48

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if value < 0:
                raise ValueError(f"{f.name} must be non-negative, got {value}")
        if self.min_weight_threshold > 1.0:
            raise ValueError("min_weight_threshold must be between 0.0 and 1.0")

    def with_overrides(self, overrides: Optional[Mapping[str, float]] = None) -> BridgeWeights:
        """
        Return new weights with a partial override applied (immutable).

        Keys may be snake_case field names or the camelCase names used by
        JavaScript collaborators.
        """
        if not overrides:
            return self
        changes: Dict[str, float] = {}
        valid = {f.name for f in fields(self)}
        for key, value in overrides.items():
            name = _CAMEL_KEYS.get(key, key)
            if name not in valid:
                raise ValueError(f"Unknown bridge weight: {key}")
            changes[name] = float(value)
        return replace(self, **changes)


DEFAULT_BRIDGE_WEIGHTS = BridgeWeights()


# =============================================================================
# BRIDGE RECORDS
# =============================================================================

@dataclass(frozen=True)
class BridgeSignals:
    """Raw pattern hits across both reflections, plus their distance."""
    scale_hits: Tuple[str, ...] = ()
    systemic_hits: Tuple[str, ...] = ()
    media_hits: Tuple[str, ...] = ()
    contrast_hits: Tuple[str, ...] = ()
    days_apart: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scaleHits": list(self.scale_hits),
            "systemicHits": list(self.systemic_hits),
            "mediaHits": list(self.media_hits),
            "contrastHits": list(self.contrast_hits),
            "daysApart": self.days_apart,
        }


@dataclass(frozen=True)
class NarrativeBridge:
    """Directed, weighted, explained link between two reflections."""
    from_id: str
    to_id: str
    weight: float
    reasons: Tuple[BridgeReason, ...]
    explanation: str
    anchor_a: Optional[str]
    anchor_b: Optional[str]
    signals: BridgeSignals = field(default_factory=BridgeSignals)
    quality: float = 1.0
    is_fallback: bool = False

    def __post_init__(self):
        if not 0.0 <= self.weight <= 1.0:
            raise ValueError("weight must be between 0.0 and 1.0")
        if not self.reasons:
            raise ValueError("reasons must not be empty")

    @property
    def primary_type(self) -> BridgeReason:
        """First non-sequence reason, or SEQUENCE when it is the only one."""
        for reason in self.reasons:
            if reason is not BridgeReason.SEQUENCE:
                return reason
        return BridgeReason.SEQUENCE

    @property
    def has_anchors(self) -> bool:
        return bool(self.anchor_a) and bool(self.anchor_b)

    def to_dict(self) -> Dict[str, Any]:
        """Wire shape expected by the storage and rendering collaborators."""
        return {
            "from": self.from_id,
            "to": self.to_id,
            "weight": self.weight,
            "reasons": [r.value for r in self.reasons],
            "explanation": self.explanation,
            "isFallback": self.is_fallback,
            "quality": self.quality,
            "anchorA": self.anchor_a,
            "anchorB": self.anchor_b,
            "signals": self.signals.to_dict(),
        }


@dataclass(frozen=True)
class EvidenceCheck:
    """Outcome of the minimum-evidence gate for one pair."""
    has_evidence: bool
    evidence_type: Optional[str] = None


@dataclass(frozen=True)
class BridgeRunReport:
    """Bridges of one run together with its pipeline counters."""
    bridges: Tuple[NarrativeBridge, ...]
    set_hash: str
    pairs_evaluated: int = 0
    pairs_dropped_by_evidence: int = 0
    candidates_generated: int = 0
    dropped_by_balance: int = 0
    dropped_by_guardrails: int = 0
    dropped_by_cap: int = 0
    dropped_as_fallback: int = 0
