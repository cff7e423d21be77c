"""
Narrative Bridge Engine Tests
=============================

End-to-end tests for bridge generation.

INVARIANTS TESTED:
1. Example pair 3 days apart → exactly one scale bridge above threshold
2. The same pair 15 days apart → no bridge (narrative horizon)
3. Every emitted bridge has both anchors, quality 1.0, SEQUENCE first
4. Input order never changes the output
5. Diagnostics never change the output
6. A single-type corpus is thinned by type balance
7. Systemic damping and the reversal boost use their fixed factors
"""

import pytest

from reflection_insights.config import BridgePipelineConfig
from reflection_insights.contracts import BridgeInput, BridgeReason, ReflectionEntry
from reflection_insights.core.bridges import (
    build_bridge_report, build_narrative_bridges, has_minimum_evidence,
    prepare_reflections, score_pair,
)
from reflection_insights.core.quality import hash_bridge_set
from reflection_insights.lexicon.tokens import strip_non_word
from reflection_insights.observability import CollectingDiagnostics, DiagnosticStage

SCALE_TEXT = "Thinking about Farzi counterfeit scale. Billions and crores involved. This is massive."
SYSTEMS_TEXT = (
    "The scale breaks intuition. At that scale, systems behave differently. "
    "Policy transmission gets distorted."
)


def example_pair(later_at: str = "2024-01-04T14:00:00Z"):
    return [
        BridgeInput(id="r1", created_at="2024-01-01T10:00:00Z", text=SCALE_TEXT),
        BridgeInput(id="r2", created_at=later_at, text=SYSTEMS_TEXT),
    ]


def corpus():
    return example_pair() + [
        BridgeInput("r3", "2024-01-06T09:00:00Z",
                    "Watched a documentary about currency policy. Interesting how central banks work."),
        BridgeInput("r4", "2024-01-08T11:00:00Z",
                    "The real issue is trust and coordination. Institutions need legitimacy. "
                    "This is about systemic architecture."),
        BridgeInput("r5", "2024-01-09T20:00:00Z",
                    "I believed that markets are efficient. Prices reflect all available information."),
        BridgeInput("r6", "2024-01-11T14:00:00Z",
                    "I now believe markets are not efficient. Prices can be distorted by scale."),
    ]


class TestExamplePair:

    def test_three_days_apart_yields_one_bridge(self):
        """Scale language carried forward within the horizon → one bridge."""
        bridges = build_narrative_bridges(example_pair())
        assert len(bridges) == 1

        bridge = bridges[0]
        assert (bridge.from_id, bridge.to_id) == ("r1", "r2")
        assert BridgeReason.SEQUENCE in bridge.reasons
        assert BridgeReason.SCALE in bridge.reasons
        assert bridge.weight >= 0.48
        assert bridge.weight == pytest.approx(0.6625, abs=1e-3)
        assert bridge.signals.days_apart == 3

    def test_anchors_and_explanation(self):
        bridge = build_narrative_bridges(example_pair())[0]
        assert bridge.anchor_a == "Thinking about Farzi"
        assert bridge.anchor_b == "scale breaks"
        assert "thinking" in bridge.explanation.lower()
        assert "policy" in bridge.explanation.lower()
        assert not bridge.is_fallback
        assert bridge.quality == 1.0

    def test_fifteen_days_apart_yields_nothing(self):
        """Beyond max_days the pair is never scored."""
        report = build_bridge_report(example_pair("2024-01-16T10:00:00Z"))
        assert report.bridges == ()
        assert report.pairs_evaluated == 0

    def test_max_days_override(self):
        """A wider horizon admits the same pair at 15 days."""
        bridges = build_narrative_bridges(example_pair("2024-01-16T10:00:00Z"), max_days=30)
        assert len(bridges) == 1

    def test_top_k_zero_keeps_nothing(self):
        assert build_narrative_bridges(example_pair(), top_k=0) == []

    def test_weight_threshold_override(self):
        """Partial camelCase overrides apply on top of the defaults."""
        assert build_narrative_bridges(example_pair(), weights={"minWeightThreshold": 0.9}) == []

    def test_unknown_weight_rejected(self):
        with pytest.raises(ValueError):
            build_narrative_bridges(example_pair(), weights={"bogus": 1.0})

    def test_negative_max_days_rejected(self):
        with pytest.raises(ValueError):
            build_narrative_bridges(example_pair(), max_days=-1)


class TestInputHandling:

    def test_empty_input(self):
        report = build_bridge_report([])
        assert report.bridges == ()
        assert report.set_hash == hash_bridge_set([])

    def test_empty_text_yields_no_bridges(self):
        entries = [
            BridgeInput("a", "2024-01-01T10:00:00Z", ""),
            BridgeInput("b", "2024-01-02T10:00:00Z", ""),
        ]
        assert build_narrative_bridges(entries) == []

    def test_malformed_timestamp_skipped(self):
        entries = example_pair() + [BridgeInput("x", "yesterday", SYSTEMS_TEXT)]
        assert [b.to_id for b in build_narrative_bridges(entries)] == ["r2"]

    def test_reflection_entries_accepted(self):
        """ReflectionEntry records work directly; deleted ones are ignored."""
        entries = [
            ReflectionEntry("r1", "2024-01-01T10:00:00Z", SCALE_TEXT),
            ReflectionEntry("r2", "2024-01-04T14:00:00Z", SYSTEMS_TEXT),
            ReflectionEntry("r3", "2024-01-05T14:00:00Z", SYSTEMS_TEXT, deleted_at="2024-01-06T00:00:00Z"),
        ]
        bridges = build_narrative_bridges(entries)
        assert [(b.from_id, b.to_id) for b in bridges] == [("r1", "r2")]

    def test_prepare_sorts_by_time_then_id(self):
        entries = [
            BridgeInput("b", "2024-01-02T00:00:00Z", "x"),
            BridgeInput("c", "2024-01-01T00:00:00Z", "x"),
            BridgeInput("a", "2024-01-02T00:00:00Z", "x"),
        ]
        assert [r.id for r in prepare_reflections(entries)] == ["c", "a", "b"]


class TestBridgeInvariants:

    def test_every_bridge_is_grounded(self):
        """Both anchors present, quoted from their own reflection."""
        texts = {item.id: item.text for item in corpus()}
        bridges = build_narrative_bridges(corpus())
        assert bridges

        for bridge in bridges:
            assert bridge.reasons[0] is BridgeReason.SEQUENCE
            assert bridge.quality == 1.0
            assert bridge.has_anchors
            assert 0.0 <= bridge.weight <= 1.0
            for anchor, source in ((bridge.anchor_a, bridge.from_id), (bridge.anchor_b, bridge.to_id)):
                source_words = {strip_non_word(w).lower() for w in texts[source].split()}
                assert 2 <= len(anchor.split()) <= 6
                assert all(w.lower() in source_words for w in anchor.split())

    def test_bridges_point_forward(self):
        times = {item.id: item.created_at for item in corpus()}
        for bridge in build_narrative_bridges(corpus()):
            assert times[bridge.from_id] <= times[bridge.to_id]

    def test_shuffled_input_same_output(self):
        forward = build_bridge_report(corpus())
        backward = build_bridge_report(list(reversed(corpus())))
        assert forward.bridges == backward.bridges
        assert forward.set_hash == backward.set_hash

    def test_repeat_runs_identical(self):
        first = [b.to_dict() for b in build_narrative_bridges(corpus())]
        second = [b.to_dict() for b in build_narrative_bridges(corpus())]
        assert first == second


class TestEvidence:

    def test_no_shared_signal_and_no_sequence(self):
        """Removing every evidence signal removes the candidate."""
        a, b = prepare_reflections([
            BridgeInput("a", "2024-01-01T00:00:00Z", "cats purr"),
            BridgeInput("b", "2024-01-02T00:00:00Z", "dogs bark"),
        ])
        assert not has_minimum_evidence(a, b, 0.0).has_evidence
        check = has_minimum_evidence(a, b, 0.5)
        assert check.has_evidence
        assert check.evidence_type == "temporal sequence"

    def test_shared_keyword_first(self):
        score = score_pair(*example_pair())
        assert score.evidence.evidence_type == "shared keyword"
        assert score.days_apart == 3
        assert score.scale_carry
        assert score.systemic_lift == 1.0

    def test_score_pair_orders_by_time(self):
        later, earlier = reversed(example_pair())
        assert score_pair(later, earlier).days_apart == 3

    def test_score_pair_undated(self):
        assert score_pair(BridgeInput("a", "", "x"), BridgeInput("b", "2024-01-01", "y")) is None


class TestReportDiagnostics:

    def test_diagnostics_do_not_change_output(self):
        diagnostics = CollectingDiagnostics()
        with_diagnostics = build_bridge_report(corpus(), diagnostics=diagnostics)
        without = build_bridge_report(corpus())
        assert with_diagnostics == without
        assert diagnostics.event_count > 0

    def test_determinism_hash_recorded(self):
        diagnostics = CollectingDiagnostics()
        report = build_bridge_report(corpus(), diagnostics=diagnostics)
        event = diagnostics.last(DiagnosticStage.BRIDGE_DETERMINISM)
        assert event is not None
        assert event.data["set_hash"] == report.set_hash

    def test_evidence_counters(self):
        diagnostics = CollectingDiagnostics()
        report = build_bridge_report(example_pair(), diagnostics=diagnostics)
        event = diagnostics.last(DiagnosticStage.BRIDGE_EVIDENCE)
        assert event.data["pairs_evaluated"] == report.pairs_evaluated == 1
        assert report.candidates_generated == 1

    def test_config_object(self):
        """max_days on the config is honoured when no override is given."""
        config = BridgePipelineConfig(max_days=2)
        assert build_narrative_bridges(example_pair(), config=config) == []


class TestTypeBalancePipeline:

    def scale_corpus(self):
        """Six same-day reflections whose every candidate is a scale bridge."""
        return [
            BridgeInput(f"s{hour}", f"2024-01-01T{hour:02d}:00:00Z", SYSTEMS_TEXT)
            for hour in range(8, 14)
        ]

    def test_scale_candidates_thinned(self):
        """After the first source, each batch keeps only half of its shortlist."""
        report = build_bridge_report(self.scale_corpus())
        assert report.candidates_generated == 15
        assert report.dropped_by_balance == 4

    def test_every_reason_counted(self):
        diagnostics = CollectingDiagnostics()
        build_bridge_report(self.scale_corpus(), diagnostics=diagnostics)
        event = diagnostics.last(DiagnosticStage.BRIDGE_BALANCE)
        assert event.data["sequence"] == 10
        assert event.data["scale"] == 10
        assert event.data["media"] == 0


def same_day(earlier: str, later: str):
    return (
        BridgeInput("a", "2024-01-01T09:00:00Z", earlier),
        BridgeInput("b", "2024-01-01T10:00:00Z", later),
    )


class TestSignalDamping:
    """Same-day pairs, so the sequence term is exactly 0.42."""

    def test_shared_domain_keeps_full_lift(self):
        score = score_pair(*same_day(
            "Economic policy matters.",
            "Trust and coordination shape economic policy. Feedback loop every year.",
        ))
        assert not score.domain_mismatch
        assert score.systemic_lift == 1.0
        assert score.weight == pytest.approx(0.42 + 0.15)
        assert score.reasons == (BridgeReason.SEQUENCE, BridgeReason.SYSTEMIC)

    def test_domain_mismatch_damps_lift(self):
        """Policy talk followed by gym talk: lift × 0.3, too weak to be a reason."""
        score = score_pair(*same_day(
            "Economic policy matters.",
            "Trust and coordination shape my gym routine. Feedback loop every week.",
        ))
        assert score.domain_mismatch
        assert score.systemic_lift == pytest.approx(0.3)
        assert score.weight == pytest.approx(0.42 + 0.15 * 0.3)
        assert score.reasons == (BridgeReason.SEQUENCE,)

    def test_belief_reversal(self):
        """Lift × 0.2, contrast weight raised by 0.15, systemic never a reason."""
        score = score_pair(*same_day(
            "I believed that markets are efficient.",
            "I now believe trust and coordination matter more.",
        ))
        assert score.belief_reversal
        assert score.contrast
        assert score.systemic_lift == pytest.approx(0.2)
        assert score.weight == pytest.approx(0.42 + 0.15 * 0.2 + 0.11 + 0.15)
        assert score.reasons == (BridgeReason.SEQUENCE, BridgeReason.CONTRAST)

    def test_reversal_boost_is_additive(self):
        pair = same_day(
            "I believed that markets are efficient.",
            "I now believe trust and coordination matter more.",
        )
        boosted = score_pair(*pair)
        plain = score_pair(*pair, config=BridgePipelineConfig(reversal_boost=0.0))
        assert boosted.weight - plain.weight == pytest.approx(0.15)

    def test_reversal_drops_systemic_reason(self):
        """Even an undamped lift is not reported as systemic on a reversal."""
        score = score_pair(
            *same_day(
                "I believed that markets are efficient.",
                "I now believe trust and coordination matter more.",
            ),
            config=BridgePipelineConfig(reversal_damping=1.0),
        )
        assert score.systemic_lift == 1.0
        assert BridgeReason.SYSTEMIC not in score.reasons

    def test_other_contrast_halves_lift(self):
        score = score_pair(*same_day(
            "Economic policy matters.",
            "Zoomed out: trust, policy and transmission in the economy.",
        ))
        assert not score.belief_reversal
        assert score.contrast
        assert score.systemic_lift == pytest.approx(0.5)
        assert score.weight == pytest.approx(0.42 + 0.15 * 0.5 + 0.11)
        assert score.reasons == (
            BridgeReason.SEQUENCE, BridgeReason.SYSTEMIC, BridgeReason.CONTRAST,
        )
