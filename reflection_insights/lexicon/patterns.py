"""
Lexical Pattern Sets
====================

Four independent pattern families recognised in reflection text:

- SCALE:     magnitude, currency and percentage language
- SYSTEMIC:  institutional and feedback-loop language
- MEDIA:     watching / show language
- CONTRAST:  zoom shifts and belief reversals

Plus the "specific domain" marker sets used to damp systemic lift between
reflections that share systems vocabulary but not a subject.

Patterns are ASCII word-bounded and case-insensitive so matching is stable
across platforms. Hit lists are deduplicated in pattern order and capped.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import FrozenSet, List, Pattern, Sequence, Tuple
import re

_FLAGS = re.IGNORECASE | re.ASCII


def _compile(*sources: str) -> Tuple[Pattern[str], ...]:
    return tuple(re.compile(s, _FLAGS) for s in sources)


# =============================================================================
# PATTERN FAMILIES
# =============================================================================

SCALE_PATTERNS = _compile(
    r"\b(crore|lakh|million|billion|trillion)\b",
    r"\b₹\s?\d[\d,]*\b",
    r"\b\$\s?\d[\d,]*\b",
    r"\b\d+(\.\d+)?\s?(%|bps)\b",
    r"\border(s)? of magnitude\b",
    r"\bat that scale\b",
    r"\bsystem level\b",
)

SYSTEMIC_PATTERNS = _compile(
    r"\b(trust|belief|coordination|legitimacy)\b",
    r"\b(institution|policy|central bank|treasury|inflation|money supply)\b",
    r"\b(feedback loop|second order|transmission|distort|price signals)\b",
    r"\b(structural|architecture|layer|control)\b",
)

MEDIA_PATTERNS = _compile(
    r"\b(watching|watched|show|movie|film|series|episode|documentary)\b",
    r"\b(this show|this film|this movie)\b",
)

CONTRAST_PATTERNS = _compile(
    r"\b(zoomed in|zoomed out|micro|macro|local|global)\b",
    r"\b(specific|concrete)\b",
    r"\b(abstract|systemic|structural)\b",
    r"\b(inside the system|outside the system)\b",
    # Belief reversal
    r"\b(I believed|I thought|I used to think|I once believed)\b",
    r"\b(I now believe|I now think|actually|but actually|however|on reflection)\b",
    r"\b(not|cannot|does not|will not|cannot solve|does not fix)\b",
)

ALL_PATTERNS: Tuple[Pattern[str], ...] = (
    SCALE_PATTERNS + SYSTEMIC_PATTERNS + MEDIA_PATTERNS + CONTRAST_PATTERNS
)

# Belief reversal: "I believed X" earlier, "I now believe not-X" later
_REVERSAL_BEFORE = re.compile(r"\b(I believed|I thought|I used to think)\b", _FLAGS)
_REVERSAL_AFTER = re.compile(r"\b(I now believe|I now think|actually|but actually)\b", _FLAGS)
_MODAL_CLAIM = re.compile(r"\b(will|can|does)\b", _FLAGS)
_NEGATED_CLAIM = re.compile(r"\b(will not|cannot|does not|cannot solve|does not fix)\b", _FLAGS)

ZOOM_SHIFT = re.compile(r"zoomed|micro|macro|local|global", _FLAGS)

# Mutually exclusive subject areas that share "systems" vocabulary
DOMAIN_MARKERS: Tuple[Tuple[str, Pattern[str]], ...] = (
    ("government", re.compile(
        r"\b(government|policy|institution|central bank|treasury|economy|economic|monetary|currency)\b", _FLAGS)),
    ("code", re.compile(
        r"\b(code|software|programming|architecture|system design|algorithm|function|variable)\b", _FLAGS)),
    ("fitness", re.compile(
        r"\b(workout|exercise|fitness|training|routine|gym|muscle)\b", _FLAGS)),
    ("network", re.compile(
        r"\b(internet|network|connection|buffering|bandwidth|wifi|router)\b", _FLAGS)),
)


# =============================================================================
# MATCHERS
# =============================================================================

def collect_hits(text: str, patterns: Sequence[Pattern[str]], limit: int = 8) -> Tuple[str, ...]:
    """First match of each pattern, trimmed, deduplicated in order, capped."""
    hits: List[str] = []
    for pattern in patterns:
        match = pattern.search(text or "")
        if match:
            hit = match.group(0).strip()
            if hit not in hits:
                hits.append(hit)
    return tuple(hits[:limit])


def detect_belief_reversal(earlier: str, later: str) -> bool:
    """Earlier text states a belief that the later text reverses or negates."""
    if _REVERSAL_BEFORE.search(earlier) and _REVERSAL_AFTER.search(later):
        return True
    return bool(_MODAL_CLAIM.search(earlier) and _NEGATED_CLAIM.search(later))


def matching_domains(text: str) -> FrozenSet[str]:
    """Names of the specific domains whose markers appear in text."""
    return frozenset(name for name, pattern in DOMAIN_MARKERS if pattern.search(text or ""))


def domains_mismatch(a: FrozenSet[str], b: FrozenSet[str]) -> bool:
    """Both texts name a specific domain and none of them overlap."""
    return bool(a) and bool(b) and not (a & b)


@dataclass(frozen=True)
class SignalHits:
    """Pattern hits of one reflection, per family."""
    scale: Tuple[str, ...] = ()
    systemic: Tuple[str, ...] = ()
    media: Tuple[str, ...] = ()
    contrast: Tuple[str, ...] = ()

    @property
    def themes(self) -> FrozenSet[str]:
        """Lowercased union of all hits, used as theme tags."""
        return frozenset(h.lower() for h in self.scale + self.systemic + self.media + self.contrast)

    @property
    def has_zoom_shift(self) -> bool:
        return any(ZOOM_SHIFT.search(hit) for hit in self.contrast)


def extract_signals(text: str, limit: int = 8) -> SignalHits:
    """Run the four pattern families over text."""
    return SignalHits(
        scale=collect_hits(text, SCALE_PATTERNS, limit),
        systemic=collect_hits(text, SYSTEMIC_PATTERNS, limit),
        media=collect_hits(text, MEDIA_PATTERNS, limit),
        contrast=collect_hits(text, CONTRAST_PATTERNS, limit),
    )


def merge_hits(a: Sequence[str], b: Sequence[str], limit: int = 8) -> Tuple[str, ...]:
    """Ordered union of two hit lists, capped."""
    merged: List[str] = []
    for hit in list(a) + list(b):
        if hit not in merged:
            merged.append(hit)
    return tuple(merged[:limit])
