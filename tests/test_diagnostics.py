"""
Observability Tests
===================

Tests for the injectable diagnostics port and its sinks.

BOUNDARY VERIFICATION:
1. NullDiagnostics is the default and records nothing
2. Collectors are append-only and filterable
3. LoggingDiagnostics routes each stage to its own child logger
4. Diagnostics never change analysis output
"""

import logging
from datetime import datetime, timedelta, timezone

import pytest

from reflection_insights.config import DistributionConfig, EngineSettings
from reflection_insights.contracts import ReflectionEntry
from reflection_insights.core.distribution import compute_distribution_detailed
from reflection_insights.observability import (
    LOGGER_NAME, CollectingDiagnostics, DiagnosticEvent, DiagnosticStage, Diagnostics,
    LoggingDiagnostics, NullDiagnostics, diagnostics_from_settings,
)

NOW = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)


class TestCollectingDiagnostics:

    def test_filters(self):
        diagnostics = CollectingDiagnostics()
        diagnostics.debug(DiagnosticStage.BRIDGE_BALANCE, "balanced", dropped=1)
        diagnostics.warning(DiagnosticStage.BRIDGE_QUALITY, "High fallback rate")
        diagnostics.info(DiagnosticStage.BRIDGE_QUALITY, "kept")

        assert diagnostics.event_count == 3
        assert len(diagnostics.get_events(DiagnosticStage.BRIDGE_QUALITY)) == 2
        warnings = diagnostics.get_events(min_level=logging.WARNING)
        assert [e.message for e in warnings] == ["High fallback rate"]
        assert warnings[0].is_warning
        assert diagnostics.last(DiagnosticStage.BRIDGE_QUALITY).message == "kept"
        assert diagnostics.last(DiagnosticStage.INGESTION) is None

    def test_event_data(self):
        diagnostics = CollectingDiagnostics()
        diagnostics.debug(DiagnosticStage.BRIDGE_CAP, "capped", cap=5)
        event = diagnostics.get_events()[0]
        assert event == DiagnosticEvent(DiagnosticStage.BRIDGE_CAP, "capped", {"cap": 5}, logging.DEBUG)

    def test_returned_list_is_a_copy(self):
        diagnostics = CollectingDiagnostics()
        diagnostics.debug(DiagnosticStage.DISTRIBUTION, "one")
        diagnostics.get_events().clear()
        assert diagnostics.event_count == 1


class TestSinks:

    def test_port_is_abstract(self):
        with pytest.raises(NotImplementedError):
            Diagnostics().debug(DiagnosticStage.DISTRIBUTION, "x")

    def test_null_sink_accepts_everything(self):
        NullDiagnostics().warning(DiagnosticStage.INGESTION, "ignored", code="X")

    def test_logging_sink_uses_stage_logger(self, caplog):
        caplog.set_level(logging.DEBUG, logger=LOGGER_NAME)
        LoggingDiagnostics().info(DiagnosticStage.BRIDGE_DETERMINISM, "Bridge set hash: abc", bridges=2)

        record = caplog.records[-1]
        assert record.name == f"{LOGGER_NAME}.bridge-determinism"
        assert record.levelno == logging.INFO
        assert record.getMessage() == "Bridge set hash: abc (bridges=2)"

    def test_logging_sink_respects_level(self, caplog):
        caplog.set_level(logging.WARNING, logger=LOGGER_NAME)
        LoggingDiagnostics().debug(DiagnosticStage.BRIDGE_CAP, "quiet")
        assert not [r for r in caplog.records if r.getMessage() == "quiet"]


class TestSettings:

    def test_defaults(self):
        settings = EngineSettings.from_env({})
        assert settings.mode == "production"
        assert settings.log_level == logging.INFO
        assert isinstance(diagnostics_from_settings(settings), NullDiagnostics)

    def test_development_mode_logs(self):
        settings = EngineSettings.from_env({
            "REFLECTION_INSIGHTS_ENV": "Development",
            "REFLECTION_INSIGHTS_LOG_LEVEL": "debug",
        })
        assert settings.is_development
        assert settings.log_level == logging.DEBUG
        assert isinstance(diagnostics_from_settings(settings), LoggingDiagnostics)

    def test_unknown_level_falls_back_to_info(self):
        settings = EngineSettings.from_env({"REFLECTION_INSIGHTS_LOG_LEVEL": "chatty"})
        assert settings.log_level == logging.INFO


class TestNoBehaviouralEffect:

    def test_distribution_unchanged(self):
        entries = [
            ReflectionEntry(f"e{i}", (NOW - timedelta(days=i % 4, hours=i)).isoformat(), "note")
            for i in range(12)
        ]
        config = DistributionConfig(tz=timezone.utc)
        diagnostics = CollectingDiagnostics()
        observed = compute_distribution_detailed(entries, 7, now=NOW, config=config, diagnostics=diagnostics)
        silent = compute_distribution_detailed(entries, 7, now=NOW, config=config)

        assert observed == silent
        assert diagnostics.last(DiagnosticStage.DISTRIBUTION).data["entries"] == 12
