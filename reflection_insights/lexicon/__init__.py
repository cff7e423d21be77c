"""
Lexicon Layer (Signal Extractor)
================================

Text-level signals consumed by the bridge engine.

BOUNDARY ENFORCEMENT:
- Depends only on the standard library (re)
- Knows nothing about entries, timestamps or bridges
- Every function is pure over its string inputs

INVARIANTS:
- Pattern hit lists are ordered by pattern, deduplicated and capped
- Concrete tokens are lowercase concept words
- Anchors are 2-6 words quoted from the source text
"""

from .stopwords import ENGLISH_STOPWORDS, CUSTOM_JUNK_TOKENS, ALL_STOPWORDS, is_stopword
from .patterns import (
    SCALE_PATTERNS, SYSTEMIC_PATTERNS, MEDIA_PATTERNS, CONTRAST_PATTERNS,
    ALL_PATTERNS, DOMAIN_MARKERS, SignalHits,
    collect_hits, detect_belief_reversal, matching_domains, domains_mismatch,
    extract_signals, merge_hits,
)
from .tokens import (
    strip_non_word, word_count, is_concept, significant_words, keyword_set,
    entity_set, extract_concrete_tokens, extract_anchor, stable_hash,
    variant_index, jaccard_similarity,
)

__all__ = [
    'ENGLISH_STOPWORDS',
    'CUSTOM_JUNK_TOKENS',
    'ALL_STOPWORDS',
    'is_stopword',
    'SCALE_PATTERNS',
    'SYSTEMIC_PATTERNS',
    'MEDIA_PATTERNS',
    'CONTRAST_PATTERNS',
    'ALL_PATTERNS',
    'DOMAIN_MARKERS',
    'SignalHits',
    'collect_hits',
    'detect_belief_reversal',
    'matching_domains',
    'domains_mismatch',
    'extract_signals',
    'merge_hits',
    'strip_non_word',
    'word_count',
    'is_concept',
    'significant_words',
    'keyword_set',
    'entity_set',
    'extract_concrete_tokens',
    'extract_anchor',
    'stable_hash',
    'variant_index',
    'jaccard_similarity',
]
