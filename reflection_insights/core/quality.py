"""
Bridge Quality Pipeline
=======================

Post-processing applied to scored bridge candidates:

1. Type balance (per source, while generating)
2. Quality guardrails (pair cap, confidence floor, semantic de-duplication)
3. Per-source edge cap by primary type
4. Final filter (fallback explanations, missing anchors)
5. Determinism hash over the surviving set

INVARIANTS:
- Every step is a pure function of its inputs; ties keep input order
- No step raises weights; type balance only re-orders and drops
- The set hash depends only on (from, to, primary type) tuples
"""

from __future__ import annotations
from collections import defaultdict
from dataclasses import dataclass
from typing import Dict, Iterable, List, Mapping, MutableMapping, Sequence, Tuple
import hashlib

from ..config import BridgePipelineConfig
from ..contracts.base import BridgeReason
from ..contracts.bridges import NarrativeBridge
from ..lexicon.tokens import jaccard_similarity


# =============================================================================
# TYPE BALANCE
# =============================================================================

def apply_type_balance(
    candidates: Sequence[NarrativeBridge],
    distribution: Mapping[BridgeReason, int],
    total: int,
    config: BridgePipelineConfig = BridgePipelineConfig()
) -> List[NarrativeBridge]:
    """
    Keep any single type from dominating the run.

    distribution counts every reason of the `total` bridges accepted so far
    (see record_reasons). SEQUENCE is on every bridge, so once anything has
    been accepted the re-selection always runs. Candidates are re-scored by
    primary type (overrepresented × balance_penalty, underrepresented ×
    (1 + balance_bias)) and re-selected so that no primary type passes the
    share, while still keeping at least min_keep_share of the candidates.
    """
    if not candidates:
        return []

    shares = {
        reason: (distribution.get(reason, 0) / total) if total > 0 else 0.0
        for reason in BridgeReason
    }
    over = {reason for reason, share in shares.items() if share > config.max_type_share}
    if not over:
        return list(candidates)
    under = {reason for reason, share in shares.items() if share < config.under_type_share}

    def adjusted(bridge: NarrativeBridge) -> float:
        score = bridge.weight
        if bridge.primary_type in over:
            score *= config.balance_penalty
        if bridge.primary_type in under:
            score *= 1 + config.balance_bias
        return score

    scored = sorted(candidates, key=adjusted, reverse=True)

    balanced: List[NarrativeBridge] = []
    counts: Dict[BridgeReason, int] = dict(distribution)
    for bridge in scored:
        current = counts.get(bridge.primary_type, 0)
        share_after = (current + 1) / (total + len(balanced) + 1)
        if share_after <= config.max_type_share or len(balanced) < len(candidates) * config.min_keep_share:
            balanced.append(bridge)
            counts[bridge.primary_type] = current + 1
    return balanced


def record_reasons(distribution: MutableMapping[BridgeReason, int], bridges: Iterable[NarrativeBridge]) -> None:
    """Add every reason of each accepted bridge to the running distribution."""
    for bridge in bridges:
        for reason in bridge.reasons:
            distribution[reason] = distribution.get(reason, 0) + 1


# =============================================================================
# QUALITY GUARDRAILS
# =============================================================================

def _edge_key(bridge: NarrativeBridge) -> Tuple[str, str, BridgeReason]:
    low, high = sorted((bridge.from_id, bridge.to_id))
    return low, high, bridge.primary_type


def _by_weight(bridges: Iterable[NarrativeBridge]) -> List[NarrativeBridge]:
    return sorted(bridges, key=lambda b: b.weight, reverse=True)


def apply_quality_guardrails(
    bridges: Sequence[NarrativeBridge],
    config: BridgePipelineConfig = BridgePipelineConfig()
) -> List[NarrativeBridge]:
    """
    Per undirected pair and primary type: keep the heaviest
    max_bridges_per_pair, drop those under min_confidence, and drop the
    lighter of any two whose explanations overlap above
    similarity_threshold.
    """
    groups: Dict[Tuple[str, str, BridgeReason], List[NarrativeBridge]] = defaultdict(list)
    for bridge in bridges:
        groups[_edge_key(bridge)].append(bridge)

    kept: List[NarrativeBridge] = []
    for group in groups.values():
        capped = _by_weight(group)[:config.max_bridges_per_pair]
        confident = [b for b in capped if b.weight >= config.min_confidence]

        distinct: List[NarrativeBridge] = []
        for candidate in confident:
            is_distinct = True
            for existing in distinct:
                similarity = jaccard_similarity(candidate.explanation, existing.explanation)
                if similarity > config.similarity_threshold:
                    if candidate.weight < existing.weight:
                        is_distinct = False
                    else:
                        distinct.remove(existing)
                    break
            if is_distinct:
                distinct.append(candidate)
        kept.extend(distinct)
    return kept


def cap_edges_per_source(
    bridges: Sequence[NarrativeBridge],
    config: BridgePipelineConfig = BridgePipelineConfig()
) -> List[NarrativeBridge]:
    """At most max_edges_per_type_per_source bridges per (source, primary type), heaviest first."""
    by_source: Dict[str, Dict[BridgeReason, List[NarrativeBridge]]] = defaultdict(lambda: defaultdict(list))
    for bridge in bridges:
        by_source[bridge.from_id][bridge.primary_type].append(bridge)

    capped: List[NarrativeBridge] = []
    for by_type in by_source.values():
        for typed in by_type.values():
            capped.extend(_by_weight(typed)[:config.max_edges_per_type_per_source])
    return capped


# =============================================================================
# FINAL FILTER & DETERMINISM
# =============================================================================

@dataclass(frozen=True)
class FinalFilterResult:
    bridges: Tuple[NarrativeBridge, ...]
    fallbacks: Tuple[NarrativeBridge, ...]
    missing_anchors: Tuple[NarrativeBridge, ...]

    @property
    def fallback_rate(self) -> float:
        """Percentage of pre-filter bridges with a fallback explanation."""
        total = len(self.bridges) + len(self.fallbacks) + len(self.missing_anchors)
        return (len(self.fallbacks) / total) * 100 if total else 0.0


def final_filter(bridges: Sequence[NarrativeBridge]) -> FinalFilterResult:
    """Drop fallback explanations, low-quality bridges and missing anchors."""
    kept: List[NarrativeBridge] = []
    fallbacks: List[NarrativeBridge] = []
    missing: List[NarrativeBridge] = []
    for bridge in bridges:
        if bridge.is_fallback:
            fallbacks.append(bridge)
        elif bridge.quality != 1.0 or not bridge.has_anchors:
            missing.append(bridge)
        else:
            kept.append(bridge)
    return FinalFilterResult(bridges=tuple(kept), fallbacks=tuple(fallbacks), missing_anchors=tuple(missing))


def hash_bridge_set(bridges: Iterable[NarrativeBridge]) -> str:
    """SHA-256 over the sorted (from, to, primary type) tuples."""
    keys = sorted((b.from_id, b.to_id, b.primary_type.value) for b in bridges)
    joined = "|".join(f"{from_id}:{to_id}:{kind}" for from_id, to_id, kind in keys)
    return hashlib.sha256(joined.encode("utf-8")).hexdigest()
