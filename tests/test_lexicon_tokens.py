"""
Lexicon Tests
=============

Tests for pattern families, concept filtering, concrete tokens, anchors
and the stable hash.
"""

import re

import pytest

from reflection_insights.lexicon import (
    CONTRAST_PATTERNS, collect_hits, detect_belief_reversal, domains_mismatch,
    entity_set, extract_anchor, extract_concrete_tokens, extract_signals,
    is_concept, is_stopword, jaccard_similarity, keyword_set, matching_domains,
    merge_hits, significant_words, stable_hash, variant_index, word_count,
)

SCALE_TEXT = "Thinking about Farzi counterfeit scale. Billions and crores involved. This is massive."
SYSTEMS_TEXT = (
    "The scale breaks intuition. At that scale, systems behave differently. "
    "Policy transmission gets distorted."
)


class TestPatterns:

    def test_signal_families(self):
        hits = extract_signals(SYSTEMS_TEXT)
        assert hits.scale == ("At that scale",)
        assert hits.systemic == ("Policy", "transmission")
        assert hits.media == ()
        assert hits.contrast == ()

    def test_hits_are_capped(self):
        text = "zoomed out, specific, abstract, inside the system, I believed, actually, not"
        assert len(collect_hits(text, CONTRAST_PATTERNS, limit=3)) == 3

    def test_zoom_shift(self):
        assert extract_signals("Zoomed out to see the pattern.").has_zoom_shift
        assert not extract_signals("I believed otherwise.").has_zoom_shift

    def test_themes_lowercased(self):
        assert "policy" in extract_signals(SYSTEMS_TEXT).themes

    def test_belief_reversal(self):
        assert detect_belief_reversal("I believed markets work.", "I now believe otherwise.")
        assert detect_belief_reversal("Regulation can fix this.", "Regulation cannot solve it.")
        assert not detect_belief_reversal("Markets work.", "Markets still work.")

    def test_domain_mismatch(self):
        government = matching_domains("Economic policy shifts.")
        fitness = matching_domains("My workout routine.")
        assert government == frozenset({"government"})
        assert domains_mismatch(government, fitness)
        assert not domains_mismatch(government, government)
        assert not domains_mismatch(government, frozenset())

    def test_merge_hits(self):
        assert merge_hits(("a", "b"), ("b", "c"), limit=2) == ("a", "b")


class TestWords:

    def test_is_concept(self):
        assert is_concept("policy")
        assert not is_concept("the")
        assert not is_concept("1234")
        assert not is_concept("believe")
        assert is_stopword("Story")

    def test_significant_words(self):
        assert significant_words("The Policy, and the scale!") == ["policy", "scale"]

    def test_keyword_and_entity_sets(self):
        assert keyword_set("Scale breaks policy.") == frozenset({"scale", "breaks", "policy"})
        assert entity_set("Farzi met RBI at the bank.") == frozenset({"farzi", "rbi"})

    def test_word_count(self):
        assert word_count("  one two\nthree ") == 3
        assert word_count("") == 0


class TestConcreteTokens:

    def test_capitalized_words_first(self):
        assert extract_concrete_tokens(SCALE_TEXT)[0] == "thinking"
        assert extract_concrete_tokens(SYSTEMS_TEXT)[0] == "policy"

    def test_token_limit(self):
        assert len(extract_concrete_tokens(SCALE_TEXT, max_tokens=2)) == 2
        assert extract_concrete_tokens(SCALE_TEXT, max_tokens=0) == ()

    def test_no_concepts(self):
        assert extract_concrete_tokens("it is what it is") == ()


class TestAnchors:

    def test_sentence_anchor(self):
        assert extract_anchor(SCALE_TEXT) == "Thinking about Farzi"
        assert extract_anchor(SYSTEMS_TEXT) == "scale breaks"

    def test_anchor_is_quoted_from_text(self):
        anchor = extract_anchor("Honestly, the inflation numbers surprised me today.")
        assert anchor is not None
        assert 2 <= len(anchor.split()) <= 6
        assert anchor in "Honestly the inflation numbers surprised me today"

    def test_no_anchor(self):
        assert extract_anchor("") is None
        assert extract_anchor("It is.") is None


class TestStableHash:

    def test_known_values(self):
        assert stable_hash("") == "0"
        assert stable_hash("a") == "2p"
        assert stable_hash("ab") == "2e9"

    def test_signed_base36(self):
        value = stable_hash("a much longer string that overflows thirty two bits")
        assert re.fullmatch(r"-?[0-9a-z]+", value)

    def test_variant_index(self):
        for text in ("alpha", "beta", "gamma"):
            assert 0 <= variant_index(text, 4) < 4
        assert variant_index("alpha", 4) == variant_index("alpha", 4)
        with pytest.raises(ValueError):
            variant_index("alpha", 0)

    def test_jaccard(self):
        assert jaccard_similarity("one two three", "one two three") == 1.0
        assert jaccard_similarity("one two three", "four five six") == 0.0
        assert jaccard_similarity("", "one") == 0.0
