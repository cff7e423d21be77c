"""
Tokenization, Anchors and Stable Hashing
========================================

Word-level helpers shared by the bridge engine:

- concept filtering (length, letters, stopwords, numerics)
- concrete tokens used to ground explanations
- anchors: 2-6 word evidence phrases quoted from the reflection itself
- a stable 32-bit string hash used for paraphrase selection and
  explanation de-duplication

INVARIANTS:
- Pure functions of their text inputs; no randomness, no locale dependence
- Word characters are ASCII [A-Za-z0-9_]
- An anchor is always a contiguous run of the source text's own words
"""

from __future__ import annotations
from typing import FrozenSet, List, Optional, Set, Tuple
import re

from .patterns import ALL_PATTERNS, collect_hits
from .stopwords import ALL_STOPWORDS

_NON_WORD = re.compile(r"[^\w]", re.ASCII)
_NON_WORD_OR_SPACE = re.compile(r"[^\w\s]", re.ASCII)
_HAS_LETTER = re.compile(r"[a-z]")
_ALL_DIGITS = re.compile(r"^\d+$", re.ASCII)
_SENTENCE_BREAK = re.compile(r"[.!?]\s+")
_CAPITALIZED_WORD = re.compile(r"\b[A-Z][a-z]+\b", re.ASCII)
_CAPITALIZED_PHRASE = re.compile(r"\b[A-Z][a-z]+(?:\s+[A-Z][a-z]+){1,5}\b", re.ASCII)
_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"

MIN_ANCHOR_WORDS = 2
MAX_ANCHOR_WORDS = 6


# =============================================================================
# WORDS
# =============================================================================

def strip_non_word(word: str) -> str:
    return _NON_WORD.sub("", word)


def word_count(text: str) -> int:
    """Whitespace-separated word count."""
    return len((text or "").split())


def is_concept(word: str, min_length: int = 4) -> bool:
    """
    A lowercase word that can stand for a concept.

    Long enough, contains a letter, not a stopword, not purely numeric.
    """
    if len(word) < min_length:
        return False
    if not _HAS_LETTER.search(word):
        return False
    if word in ALL_STOPWORDS:
        return False
    return not _ALL_DIGITS.match(word)


def significant_words(text: str, min_length: int = 4) -> List[str]:
    """Lowercased, punctuation-stripped concept words in text order."""
    words = (strip_non_word(w) for w in (text or "").lower().split())
    return [w for w in words if is_concept(w, min_length)]


def keyword_set(text: str) -> FrozenSet[str]:
    """Lowercased stripped words longer than three characters."""
    words = (strip_non_word(w) for w in (text or "").lower().split())
    return frozenset(w for w in words if len(w) > 3)


def entity_set(text: str) -> FrozenSet[str]:
    """Capitalized words longer than two characters, lowercased."""
    entities: Set[str] = set()
    for raw in (text or "").split():
        word = strip_non_word(raw)
        if len(word) > 2 and "A" <= word[0] <= "Z":
            entities.add(word.lower())
    return frozenset(entities)


# =============================================================================
# CONCRETE TOKENS
# =============================================================================

def extract_concrete_tokens(text: str, max_tokens: int = 3) -> Tuple[str, ...]:
    """
    Concrete tokens for grounding explanations, most concrete first.

    Capitalized words (likely entities) come first, then thematic pattern
    hits, then significant words.
    """
    text = text or ""
    tokens: List[str] = []

    def offer(token: str) -> bool:
        if token not in tokens:
            tokens.append(token)
        return len(tokens) >= max_tokens

    if max_tokens <= 0:
        return ()

    for cap in _CAPITALIZED_WORD.findall(text)[: max_tokens * 2]:
        lowered = cap.lower()
        if is_concept(lowered) and offer(lowered):
            return tuple(tokens)

    for hit in collect_hits(text, ALL_PATTERNS)[: max_tokens * 2]:
        normalized = strip_non_word(hit.lower().strip())
        if is_concept(normalized) and offer(normalized):
            return tuple(tokens)

    for word in significant_words(text):
        if offer(word):
            break
    return tuple(tokens[:max_tokens])


# =============================================================================
# ANCHORS
# =============================================================================

def _sentence_anchor(sentence: str) -> Optional[str]:
    words = sentence.split()
    kept: List[Tuple[int, str]] = []
    for index, raw in enumerate(words):
        cleaned = strip_non_word(raw.lower())
        if is_concept(cleaned, min_length=3):
            kept.append((index, cleaned))

    for i in range(len(kept) - 1):
        for length in range(MIN_ANCHOR_WORDS, min(MAX_ANCHOR_WORDS, len(kept) - i) + 1):
            window = kept[i:i + length]
            if not any(len(word) >= 4 for _, word in window):
                continue
            first, last = window[0][0], window[-1][0]
            if last - first + 1 > MAX_ANCHOR_WORDS:
                break
            phrase = _NON_WORD_OR_SPACE.sub("", " ".join(words[first:last + 1])).strip()
            if phrase:
                return phrase
    return None


def extract_anchor(text: str) -> Optional[str]:
    """
    Evidence phrase of 2-6 words quoted from text, or None.

    Tries, in order: a sentence fragment built around non-stopword content,
    the first thematic pattern hit, a run of capitalized words.
    """
    text = text or ""
    for sentence in _SENTENCE_BREAK.split(text):
        if not sentence.strip():
            continue
        anchor = _sentence_anchor(sentence)
        if anchor:
            return anchor

    hits = collect_hits(text, ALL_PATTERNS)
    if hits:
        hit = hits[0]
        words = [w for w in hit.lower().split() if is_concept(w, min_length=3)]
        if MIN_ANCHOR_WORDS <= len(words) <= MAX_ANCHOR_WORDS:
            return hit.strip()

    match = _CAPITALIZED_PHRASE.search(text)
    if match:
        phrase = match.group(0)
        if MIN_ANCHOR_WORDS <= len(phrase.split()) <= MAX_ANCHOR_WORDS:
            return phrase
    return None


# =============================================================================
# HASHING & SIMILARITY
# =============================================================================

def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    sign = "-" if value < 0 else ""
    value = abs(value)
    digits: List[str] = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36[remainder])
    return sign + "".join(reversed(digits))


def stable_hash(text: str) -> str:
    """
    32-bit rolling hash (h * 31 + code unit) rendered in signed base 36.

    Iterates UTF-16 code units so the value is identical across runtimes
    that hash the same string.
    """
    data = text.encode("utf-16-le")
    h = 0
    for i in range(0, len(data), 2):
        unit = data[i] | (data[i + 1] << 8)
        h = (h * 31 + unit) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return _to_base36(h)


def variant_index(text: str, count: int) -> int:
    """Deterministic choice among count variants, keyed by text."""
    if count <= 0:
        raise ValueError("count must be positive")
    tail = stable_hash(text)[-2:] or "0"
    return abs(int(tail, 36)) % count


def jaccard_similarity(a: str, b: str) -> float:
    """Word-overlap similarity of two explanations (words longer than 2)."""
    words_a = {w for w in a.lower().split() if len(w) > 2}
    words_b = {w for w in b.lower().split() if len(w) > 2}
    if not words_a or not words_b:
        return 0.0
    return len(words_a & words_b) / len(words_a | words_b)
