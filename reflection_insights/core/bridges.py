"""
Narrative Bridge Engine
=======================

Builds weighted, directed, evidence-gated links ("narrative bridges") from
earlier reflections to later ones.

SCORING:
========
    weight = sequence_weight · seq
           + scale_weight    · scale_carry
           + systemic_weight · systemic_lift
           + media_weight    · media_bridge
           + (contrast_weight + reversal_boost) · contrast

    seq = clamp01((1 - days_apart / max_days) ** sequence_decay_exponent)

A pair must pass the minimum-evidence gate (shared keyword, shared entity,
shared theme tag, or a temporal sequence signal) before it is scored, and
must yield a concrete token and an anchor phrase on BOTH sides before it
becomes a candidate.

INVARIANTS:
===========
- Input order never affects output: entries are sorted by (timestamp, id)
- Same input + same weights → identical bridges and identical set hash
- Every emitted bridge has both anchors, quality 1.0 and a non-fallback
  explanation
- Malformed timestamps skip the entry; empty text yields no bridges
"""

from __future__ import annotations
from collections import Counter
from dataclasses import dataclass, replace
from datetime import datetime
from typing import FrozenSet, Iterable, List, Mapping, Optional, Tuple, Union

from ..config import BridgePipelineConfig
from ..contracts.base import BridgeInput, BridgeReason, ReflectionEntry
from ..contracts.bridges import (
    BridgeRunReport, BridgeSignals, BridgeWeights, DEFAULT_BRIDGE_WEIGHTS,
    EvidenceCheck, NarrativeBridge,
)
from ..lexicon.patterns import (
    SignalHits, detect_belief_reversal, domains_mismatch, extract_signals,
    matching_domains, merge_hits,
)
from ..lexicon.tokens import entity_set, extract_anchor, extract_concrete_tokens, keyword_set
from ..observability import DiagnosticStage, Diagnostics, NullDiagnostics
from ..temporal.windows import days_between, parse_timestamp
from .language import ExplanationDeduplicator, ExplanationSignals, is_fallback_explanation, render_explanation
from .quality import (
    apply_quality_guardrails, apply_type_balance, cap_edges_per_source,
    final_filter, hash_bridge_set, record_reasons,
)

BridgeSource = Union[BridgeInput, ReflectionEntry]
WeightsLike = Union[BridgeWeights, Mapping[str, float], None]


def clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


# =============================================================================
# PREPARED REFLECTIONS
# =============================================================================

@dataclass(frozen=True)
class PreparedReflection:
    """A bridge input with its timestamp parsed and text signals extracted once."""
    id: str
    at: datetime
    text: str
    hits: SignalHits
    domains: FrozenSet[str]
    keywords: FrozenSet[str]
    entities: FrozenSet[str]

    @staticmethod
    def from_input(item: BridgeInput, max_hits: int = 8) -> Optional[PreparedReflection]:
        at = parse_timestamp(item.created_at)
        if at is None:
            return None
        text = item.text or ""
        return PreparedReflection(
            id=item.id,
            at=at,
            text=text,
            hits=extract_signals(text, max_hits),
            domains=matching_domains(text),
            keywords=keyword_set(text),
            entities=entity_set(text),
        )


def _as_bridge_input(item: BridgeSource) -> Optional[BridgeInput]:
    if isinstance(item, ReflectionEntry):
        return None if item.is_deleted else item.as_bridge_input()
    return item


def prepare_reflections(
    items: Iterable[BridgeSource],
    config: BridgePipelineConfig = BridgePipelineConfig()
) -> List[PreparedReflection]:
    """Parse, extract and sort by (timestamp, id); undated and deleted items are skipped."""
    prepared: List[PreparedReflection] = []
    for item in items:
        bridge_input = _as_bridge_input(item)
        if bridge_input is None:
            continue
        reflection = PreparedReflection.from_input(bridge_input, config.max_hits_per_signal)
        if reflection is not None:
            prepared.append(reflection)
    prepared.sort(key=lambda r: (r.at, r.id))
    return prepared


def resolve_weights(weights: WeightsLike) -> BridgeWeights:
    if weights is None:
        return DEFAULT_BRIDGE_WEIGHTS
    if isinstance(weights, BridgeWeights):
        return weights
    return DEFAULT_BRIDGE_WEIGHTS.with_overrides(weights)


# =============================================================================
# EVIDENCE & SCORING
# =============================================================================

def has_minimum_evidence(
    a: PreparedReflection,
    b: PreparedReflection,
    sequence_weight: float
) -> EvidenceCheck:
    """
    At least one of: a shared keyword (longer than three characters), a
    shared capitalized entity, a shared theme tag, or a positive sequence
    signal.
    """
    if a.keywords & b.keywords:
        return EvidenceCheck(True, "shared keyword")
    if a.entities & b.entities:
        return EvidenceCheck(True, "shared entity")
    if a.hits.themes & b.hits.themes:
        return EvidenceCheck(True, "shared theme tag")
    if sequence_weight > 0:
        return EvidenceCheck(True, "temporal sequence")
    return EvidenceCheck(False)


@dataclass(frozen=True)
class PairScore:
    """Every signal computed for one ordered pair."""
    days_apart: int
    sequence: float
    scale_carry: bool
    systemic_lift: float
    media_bridge: bool
    contrast: bool
    belief_reversal: bool
    domain_mismatch: bool
    weight: float
    reasons: Tuple[BridgeReason, ...]
    evidence: EvidenceCheck

    def explanation_signals(self, config: BridgePipelineConfig, zoom_shift: bool) -> ExplanationSignals:
        return ExplanationSignals(
            belief_reversal=self.belief_reversal,
            scale_carry=self.scale_carry,
            media_bridge=self.media_bridge,
            systemic_lift=self.systemic_lift,
            contrast=self.contrast,
            zoom_shift=zoom_shift,
            systemic_floor=config.systemic_reason_floor,
        )


def score_prepared(
    a: PreparedReflection,
    b: PreparedReflection,
    max_days: int,
    weights: BridgeWeights = DEFAULT_BRIDGE_WEIGHTS,
    config: BridgePipelineConfig = BridgePipelineConfig()
) -> PairScore:
    """Score the ordered pair (a earlier, b later)."""
    d = days_between(a.at, b.at)
    reversal = detect_belief_reversal(a.text, b.text)

    scale_carry = bool(b.hits.scale)
    mismatch = domains_mismatch(a.domains, b.domains)
    systemic_lift = 1.0 if len(b.hits.systemic) > len(a.hits.systemic) else 0.0
    if mismatch:
        systemic_lift *= config.domain_mismatch_damping

    media_bridge = bool(a.hits.media or b.hits.media)
    contrast = bool(b.hits.contrast) or reversal

    # Contrast is decisive, not blended with systemic lift
    if contrast and reversal:
        systemic_lift *= config.reversal_damping
    elif contrast and b.hits.contrast:
        systemic_lift *= config.contrast_damping

    normalized_distance = d / max_days if max_days > 0 else 0.0
    sequence = clamp01((1 - min(1.0, normalized_distance)) ** weights.sequence_decay_exponent)

    contrast_weight = weights.contrast_weight + (config.reversal_boost if reversal else 0.0)
    weight = (
        weights.sequence_weight * sequence
        + weights.scale_weight * scale_carry
        + weights.systemic_weight * systemic_lift
        + weights.media_weight * media_bridge
        + contrast_weight * contrast
    )

    reasons = [BridgeReason.SEQUENCE]
    if scale_carry:
        reasons.append(BridgeReason.SCALE)
    if systemic_lift > config.systemic_reason_floor and not (contrast and reversal):
        reasons.append(BridgeReason.SYSTEMIC)
    if media_bridge:
        reasons.append(BridgeReason.MEDIA)
    if contrast:
        reasons.append(BridgeReason.CONTRAST)

    return PairScore(
        days_apart=d,
        sequence=sequence,
        scale_carry=scale_carry,
        systemic_lift=systemic_lift,
        media_bridge=media_bridge,
        contrast=contrast,
        belief_reversal=reversal,
        domain_mismatch=mismatch,
        weight=weight,
        reasons=tuple(reasons),
        evidence=has_minimum_evidence(a, b, sequence),
    )


def score_pair(
    a: BridgeSource,
    b: BridgeSource,
    max_days: int = 14,
    weights: WeightsLike = None,
    config: Optional[BridgePipelineConfig] = None
) -> Optional[PairScore]:
    """
    Score two records without running the pipeline.

    The earlier record is treated as the source. Returns None when either
    record is deleted or has no usable timestamp.
    """
    config = config or BridgePipelineConfig()
    prepared = prepare_reflections([a, b], config)
    if len(prepared) != 2:
        return None
    return score_prepared(prepared[0], prepared[1], max_days, resolve_weights(weights), config)


# =============================================================================
# CANDIDATE GENERATION
# =============================================================================

def _candidate(
    a: PreparedReflection,
    b: PreparedReflection,
    score: PairScore,
    deduplicator: ExplanationDeduplicator,
    config: BridgePipelineConfig
) -> Optional[NarrativeBridge]:
    """Ground a scored pair in concrete tokens and anchors, or drop it."""
    a_tokens = extract_concrete_tokens(a.text, config.concrete_token_count)
    b_tokens = extract_concrete_tokens(b.text, config.concrete_token_count)
    if not a_tokens or not b_tokens:
        return None

    anchor_a = extract_anchor(a.text)
    anchor_b = extract_anchor(b.text)
    if not anchor_a or not anchor_b:
        return None

    signals = score.explanation_signals(config, zoom_shift=b.hits.has_zoom_shift)
    explanation = render_explanation(signals, a_tokens[0], b_tokens[0], deduplicator)

    limit = config.max_hits_per_signal
    return NarrativeBridge(
        from_id=a.id,
        to_id=b.id,
        weight=clamp01(score.weight),
        reasons=score.reasons,
        explanation=explanation,
        anchor_a=anchor_a,
        anchor_b=anchor_b,
        signals=BridgeSignals(
            scale_hits=merge_hits(a.hits.scale, b.hits.scale, limit),
            systemic_hits=merge_hits(a.hits.systemic, b.hits.systemic, limit),
            media_hits=merge_hits(a.hits.media, b.hits.media, limit),
            contrast_hits=merge_hits(a.hits.contrast, b.hits.contrast, limit),
            days_apart=score.days_apart,
        ),
        quality=1.0,
        is_fallback=is_fallback_explanation(explanation),
    )


def build_bridge_report(
    entries: Iterable[BridgeSource],
    max_days: Optional[int] = None,
    top_k: Optional[int] = None,
    weights: WeightsLike = None,
    config: Optional[BridgePipelineConfig] = None,
    diagnostics: Optional[Diagnostics] = None
) -> BridgeRunReport:
    """
    Run the full bridge pipeline and return the bridges with its counters.

    max_days and top_k default to the config values (14 and 4).

    Raises:
        ValueError: negative max_days / top_k, or an unknown weight key
    """
    config = config or BridgePipelineConfig()
    if max_days is not None or top_k is not None:
        config = replace(
            config,
            max_days=config.max_days if max_days is None else max_days,
            top_k=config.top_k if top_k is None else top_k,
        )
    resolved = resolve_weights(weights)
    diagnostics = diagnostics or NullDiagnostics()

    reflections = prepare_reflections(entries, config)
    deduplicator = ExplanationDeduplicator()
    distribution: Counter = Counter()
    bridges: List[NarrativeBridge] = []

    pairs_evaluated = 0
    dropped_by_evidence = 0
    candidates_generated = 0
    dropped_by_balance = 0

    for i, a in enumerate(reflections):
        candidates: List[NarrativeBridge] = []
        for b in reflections[i + 1:]:
            if days_between(a.at, b.at) > config.max_days:
                break  # only forward, within the narrative horizon
            pairs_evaluated += 1

            score = score_prepared(a, b, config.max_days, resolved, config)

            if not score.evidence.has_evidence:
                dropped_by_evidence += 1
                continue
            if score.weight < resolved.min_weight_threshold:
                continue

            bridge = _candidate(a, b, score, deduplicator, config)
            if bridge is not None:
                candidates.append(bridge)

        candidates_generated += len(candidates)
        candidates.sort(key=lambda c: c.weight, reverse=True)
        shortlisted = candidates[:config.top_k]
        balanced = apply_type_balance(shortlisted, distribution, len(bridges), config)
        if len(balanced) < len(shortlisted):
            diagnostics.debug(
                DiagnosticStage.BRIDGE_BALANCE,
                f"Adjusted type distribution: dropped {len(shortlisted) - len(balanced)} bridge(s)",
                source=a.id,
            )
        dropped_by_balance += len(shortlisted) - len(balanced)
        record_reasons(distribution, balanced)
        bridges.extend(balanced)

    diagnostics.debug(
        DiagnosticStage.BRIDGE_EVIDENCE,
        f"Evidence enforcement: {pairs_evaluated} pairs evaluated, {dropped_by_evidence} dropped",
        pairs_evaluated=pairs_evaluated,
        dropped=dropped_by_evidence,
        passed=len(bridges),
    )
    diagnostics.debug(
        DiagnosticStage.BRIDGE_BALANCE,
        "Reason distribution",
        **{reason.value: distribution.get(reason, 0) for reason in BridgeReason},
    )

    guarded = apply_quality_guardrails(bridges, config)
    diagnostics.debug(
        DiagnosticStage.BRIDGE_QUALITY,
        f"Kept {len(guarded)} bridge(s) after quality guardrails (from {len(bridges)} generated)",
        kept=len(guarded),
        dropped=len(bridges) - len(guarded),
    )

    capped = cap_edges_per_source(guarded, config)
    if len(capped) < len(guarded):
        diagnostics.debug(
            DiagnosticStage.BRIDGE_CAP,
            f"Dropped {len(guarded) - len(capped)} bridge(s) due to per-reflection edge cap",
            cap=config.max_edges_per_type_per_source,
            kept=len(capped),
        )

    filtered = final_filter(capped)
    fallback_rate = filtered.fallback_rate
    diagnostics.debug(
        DiagnosticStage.BRIDGE_QUALITY,
        f"Fallback rate: {fallback_rate:.1f}%",
        fallbacks=len(filtered.fallbacks),
        total=len(capped),
    )
    if fallback_rate >= config.fallback_rate_warning:
        diagnostics.warning(
            DiagnosticStage.BRIDGE_QUALITY,
            f"High fallback rate: {fallback_rate:.1f}% (target: <{config.fallback_rate_warning:g}%)",
        )
    diagnostics.debug(
        DiagnosticStage.BRIDGE_ANCHORS,
        f"Final bridges with both anchors: {len(filtered.bridges)}",
        missing_anchors=len(filtered.missing_anchors),
    )

    set_hash = hash_bridge_set(filtered.bridges)
    diagnostics.info(
        DiagnosticStage.BRIDGE_DETERMINISM,
        f"Bridge set hash: {set_hash} ({len(filtered.bridges)} bridges)",
        set_hash=set_hash,
        bridges=len(filtered.bridges),
    )

    return BridgeRunReport(
        bridges=filtered.bridges,
        set_hash=set_hash,
        pairs_evaluated=pairs_evaluated,
        pairs_dropped_by_evidence=dropped_by_evidence,
        candidates_generated=candidates_generated,
        dropped_by_balance=dropped_by_balance,
        dropped_by_guardrails=len(bridges) - len(guarded),
        dropped_by_cap=len(guarded) - len(capped),
        dropped_as_fallback=len(filtered.fallbacks) + len(filtered.missing_anchors),
    )


def build_narrative_bridges(
    entries: Iterable[BridgeSource],
    max_days: Optional[int] = None,
    top_k: Optional[int] = None,
    weights: WeightsLike = None,
    config: Optional[BridgePipelineConfig] = None,
    diagnostics: Optional[Diagnostics] = None
) -> List[NarrativeBridge]:
    """
    Narrative bridges between entries, in generation order.

    max_days (narrative horizon, default 14) and top_k (candidates kept per
    source, default 4) override the config values when given.

    weights may be a BridgeWeights or a partial mapping of weight names
    (snake_case or camelCase).
    """
    report = build_bridge_report(entries, max_days, top_k, weights, config, diagnostics)
    return list(report.bridges)
