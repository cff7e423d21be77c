"""
Bridge Explanation Language
===========================

Turns the signals of a scored pair into one short, observational sentence
grounded in a concrete token from each reflection.

INSIGHT TRUST BOUNDARY:
=======================
Explanations observe patterns, tensions and trajectories. They never
prescribe.

ALLOWED:
- Past-tense, observational framing ("You followed X into Y.")
- Deterministic paraphrase selection keyed by a stable text hash

FORBIDDEN:
- Directives ("you should", "you must", "you need to")
- Deterministic future claims ("this will", "it will")
- Randomness of any kind

PIPELINE:
=========
compose → sanitize → normalize → de-duplicate (alternate framing on a
repeat, sanitized and normalized again) → fallback detection
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, List, Pattern, Sequence, Set, Tuple
import re

from ..lexicon.tokens import stable_hash, variant_index


@dataclass(frozen=True)
class ExplanationSignals:
    """The pair signals that shape an explanation."""
    belief_reversal: bool = False
    scale_carry: bool = False
    media_bridge: bool = False
    systemic_lift: float = 0.0
    contrast: bool = False
    zoom_shift: bool = False
    systemic_floor: float = 0.3


# =============================================================================
# COMPOSITION
# =============================================================================

def compose_parts(signals: ExplanationSignals, a: str, b: str) -> List[str]:
    """Explanation parts in priority order: contrast, scale, media, systemic."""
    parts: List[str] = []

    if signals.contrast:
        if signals.belief_reversal:
            parts.append(f"You changed your mind about {a}.")
        elif signals.zoom_shift:
            parts.append(f"You zoomed out from {a} to see {b} in a bigger picture.")
        else:
            parts.append(f"You saw {a} differently when thinking about {b}.")

    if signals.scale_carry:
        parts.append(f"You kept thinking about {a} and where {b} leads.")

    if signals.media_bridge:
        parts.append(f"Something about {a} stuck with you when reflecting on {b}.")

    if signals.systemic_lift > signals.systemic_floor and not signals.contrast:
        parts.append(f"You moved from {a} to how {b} works as a system.")

    return parts


def compose_explanation(parts: Sequence[str], a: str, b: str) -> str:
    if parts:
        return " ".join(parts)
    return f"{a} connects to {b} in your thinking."


# =============================================================================
# SANITIZATION
# =============================================================================

_PRESCRIPTIVE = tuple(re.compile(p, re.IGNORECASE) for p in (
    r"\byou should\b",
    r"\byou must\b",
    r"\byou need to\b",
    r"\byou ought to\b",
    r"\byou have to\b",
    r"\byou will\b",
    r"\byou'll\b",
    r"\bthis will\b",
    r"\bthis must\b",
    r"\bthis should\b",
    r"\bit will\b",
    r"\bit must\b",
    r"\bit should\b",
))

# Future claims rewritten as past observation, applied in order
_PAST_TENSE: Tuple[Tuple[Pattern[str], str], ...] = tuple(
    (re.compile(p, re.IGNORECASE), r) for p, r in (
        (r"\byou will\b", "you did"),
        (r"\bthis will\b", "this did"),
        (r"\bit will\b", "it did"),
        (r"\bwill (lead to|result in|cause|create|bring)\b", "led to"),
        (r"\bwill (be|become|happen)\b", "was"),
        (r"\bwill\b", "did"),
        (r"\bwhere it leads\b", "where it led"),
        (r"\bleads to\b", "led to"),
    )
)

_RESIDUAL_DIRECTIVE = re.compile(r"\b(should|must|need to|ought to|have to|will)\b", re.IGNORECASE)
_DIRECTIVE_WORDS = re.compile(r"\b(should|must|need to|ought to|have to)\b", re.IGNORECASE)
_WILL = re.compile(r"\bwill\b", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")

SANITIZED_FALLBACK = "This connects to an earlier reflection."
MIN_EXPLANATION_LENGTH = 10


def _squash(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def sanitize_explanation(explanation: str) -> str:
    """Remove prescriptive language and rewrite future claims in the past tense."""
    sanitized = explanation
    for pattern in _PRESCRIPTIVE:
        sanitized = pattern.sub("", sanitized)
    for pattern, replacement in _PAST_TENSE:
        sanitized = pattern.sub(replacement, sanitized)
    sanitized = _squash(sanitized)

    if _RESIDUAL_DIRECTIVE.search(sanitized):
        sanitized = _WILL.sub("did", _DIRECTIVE_WORDS.sub("", sanitized))
        sanitized = _squash(sanitized)

    if len(sanitized) < MIN_EXPLANATION_LENGTH:
        return SANITIZED_FALLBACK
    return sanitized


# =============================================================================
# NORMALIZATION (repeated sentence frames → hash-selected paraphrases)
# =============================================================================

_Variant = Callable[[str, str], str]

# (frame with {a}/{b} slots, paraphrases)
_FRAMES: Tuple[Tuple[str, Tuple[_Variant, ...]], ...] = (
    ("a different lens on {a} emerged through {b}", (
        lambda a, b: f"Your perspective on {a} shifted when you considered {b}.",
        lambda a, b: f"You reconsidered {a} in light of {b}.",
        lambda a, b: f"Your view of {a} evolved through {b}.",
        lambda a, b: f"You reframed {a} by connecting it to {b}.",
    )),
    ("you saw {a} differently when thinking about {b}", (
        lambda a, b: f"Your understanding of {a} deepened when you reflected on {b}.",
        lambda a, b: f"You viewed {a} from a new angle after considering {b}.",
        lambda a, b: f"Your take on {a} shifted as you explored {b}.",
        lambda a, b: f"You reconsidered {a} through the lens of {b}.",
    )),
    ("you kept thinking about {a} and where {b} leads", (
        lambda a, b: f"You continued exploring {a} and traced its connection to {b}.",
        lambda a, b: f"Your thoughts on {a} extended into {b}.",
        lambda a, b: f"You followed {a} into {b}.",
        lambda a, b: f"You carried {a} forward into {b}.",
    )),
    ("something about {a} stuck with you when reflecting on {b}", (
        lambda a, b: f"{a} resonated with you as you reflected on {b}.",
        lambda a, b: f"You carried {a} with you into your thoughts on {b}.",
        lambda a, b: f"{a} lingered in your mind when you considered {b}.",
        lambda a, b: f"You held onto {a} while exploring {b}.",
    )),
    ("you moved from {a} to how {b} works as a system", (
        lambda a, b: f"You shifted from {a} to examining {b} as a system.",
        lambda a, b: f"Your focus moved from {a} to the systemic nature of {b}.",
        lambda a, b: f"You transitioned from {a} to understanding {b} systematically.",
        lambda a, b: f"You expanded from {a} to see {b} as a system.",
    )),
    ("you zoomed out from {a} to see {b} in a bigger picture", (
        lambda a, b: f"You stepped back from {a} to see {b} in context.",
        lambda a, b: f"You widened your view from {a} to include {b}.",
        lambda a, b: f"You expanded your perspective from {a} to encompass {b}.",
        lambda a, b: f"You pulled back from {a} to see how {b} fits.",
    )),
    ("{a} connects to {b} in your thinking", (
        lambda a, b: f"{a} links to {b} in your reflections.",
        lambda a, b: f"{a} relates to {b} in your thoughts.",
        lambda a, b: f"{a} ties into {b} in your thinking.",
        lambda a, b: f"{a} bridges to {b} in your mind.",
    )),
)


def _frame_pattern(frame: str, a: str, b: str) -> Pattern[str]:
    # The frame's own full stop is consumed; every paraphrase carries one
    source = re.escape(frame).replace(r"\{a\}", re.escape(a)).replace(r"\{b\}", re.escape(b))
    return re.compile(source + r"\.?", re.IGNORECASE)


def normalize_explanation(explanation: str, a: str, b: str) -> str:
    """Replace each recognised stock frame with a hash-selected paraphrase."""
    normalized = explanation
    for frame, variants in _FRAMES:
        pattern = _frame_pattern(frame, a, b)
        if pattern.search(normalized):
            chosen = variants[variant_index(explanation, len(variants))](a, b)
            normalized = pattern.sub(lambda _m: chosen, normalized, count=1)
    return _squash(normalized)


def alternate_framing(
    parts: Sequence[str],
    signals: ExplanationSignals,
    a: str,
    b: str
) -> str:
    """Second framing used when an explanation repeats within a run."""
    key = "|".join(parts)
    alternates: List[str] = []

    if signals.contrast:
        if signals.belief_reversal:
            alternates.append(f"Your perspective on {a} shifted when considering {b}.")
            alternates.append(f"You reconsidered {a} in light of {b}.")
        else:
            alternates.append(f"You viewed {a} from another angle when thinking about {b}.")
            lens = (
                f"Your perspective on {a} shifted when you considered {b}.",
                f"You reconsidered {a} in light of {b}.",
                f"Your view of {a} evolved through {b}.",
            )
            alternates.append(lens[variant_index(key, len(lens))])

    if signals.scale_carry:
        alternates.append(f"Scale remained central: {a} and {b} both explore magnitude.")
        alternates.append(f"You continued exploring scale through {a} and {b}.")

    if signals.media_bridge:
        alternates.append(f"Media about {a} influenced your reflection on {b}.")
        alternates.append(f"Something from media about {a} resonated when thinking about {b}.")

    if signals.systemic_lift > signals.systemic_floor and not signals.contrast:
        alternates.append(f"You shifted from {a} to systemic thinking about {b}.")
        alternates.append(f"The system level of {b} became clearer after {a}.")

    if alternates:
        return alternates[variant_index(key, len(alternates))]
    return f"{a} builds on what came before with {b}."


# =============================================================================
# FALLBACK DETECTION & DE-DUPLICATION
# =============================================================================

FALLBACK_TEMPLATES: Tuple[str, ...] = (
    "this later reflection builds on the earlier one",
    "this connects to an earlier reflection",
    "this builds on what came before",
    "you viewed this from another angle",
    "you saw this differently the second time",
)


def canonical_text(explanation: str) -> str:
    return _squash(explanation.lower())


def is_fallback_explanation(explanation: str) -> bool:
    """Generic placeholder rather than a grounded observation."""
    normalized = canonical_text(explanation)
    return any(template in normalized for template in FALLBACK_TEMPLATES)


@dataclass
class ExplanationDeduplicator:
    """
    Tracks explanation hashes within one run.

    A repeated explanation is re-framed once; the re-framed text is recorded
    whether or not it is itself new.
    """
    _seen: Set[str] = field(default_factory=set)

    def resolve(
        self,
        explanation: str,
        parts: Sequence[str],
        signals: ExplanationSignals,
        a: str,
        b: str
    ) -> str:
        digest = stable_hash(canonical_text(explanation))
        if digest not in self._seen:
            self._seen.add(digest)
            return explanation

        alternate = alternate_framing(parts, signals, a, b)
        alternate = normalize_explanation(sanitize_explanation(alternate), a, b)
        self._seen.add(stable_hash(canonical_text(alternate)))
        return alternate

    @property
    def seen_count(self) -> int:
        return len(self._seen)


def render_explanation(
    signals: ExplanationSignals,
    a: str,
    b: str,
    deduplicator: ExplanationDeduplicator
) -> str:
    """Full pipeline: compose, sanitize, normalize, de-duplicate."""
    parts = compose_parts(signals, a, b)
    explanation = compose_explanation(parts, a, b)
    explanation = normalize_explanation(sanitize_explanation(explanation), a, b)
    return deduplicator.resolve(explanation, parts, signals, a, b)
