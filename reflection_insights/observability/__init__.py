"""
Observability Layer
===================

RESPONSIBILITY: Record pipeline diagnostics (counters, drop reasons, hashes)
ALLOWED INPUTS: DiagnosticEvent records emitted by the engine
OUTPUTS: Collected events, or standard-library log records

WHAT THIS LAYER MUST NOT DO:
============================
- Modify engine behavior or output
- Filter or interpret events (only record them)
- Raise into the caller's pipeline

BOUNDARY ENFORCEMENT:
=====================
- The engine receives a Diagnostics instance by injection; NullDiagnostics
  is the default, so nothing is emitted unless asked for
- Events are frozen; collectors are append-only
- Process-level configuration is read once by EngineSettings, never here
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Mapping, Optional
import logging

from ..config import EngineSettings

LOGGER_NAME = "reflection_insights"


class DiagnosticStage(Enum):
    """Pipeline stage that emitted an event."""
    DISTRIBUTION = "distribution"
    BRIDGE_EVIDENCE = "bridge-evidence"
    BRIDGE_BALANCE = "bridge-balance"
    BRIDGE_QUALITY = "bridge-quality"
    BRIDGE_CAP = "bridge-cap"
    BRIDGE_ANCHORS = "bridge-anchors"
    BRIDGE_DETERMINISM = "bridge-determinism"
    INGESTION = "ingestion"


@dataclass(frozen=True)
class DiagnosticEvent:
    """A single diagnostic record."""
    stage: DiagnosticStage
    message: str
    data: Mapping[str, Any] = field(default_factory=dict)
    level: int = logging.DEBUG

    @property
    def is_warning(self) -> bool:
        return self.level >= logging.WARNING


# =============================================================================
# DIAGNOSTICS SINKS
# =============================================================================

class Diagnostics:
    """
    Diagnostics port.

    Subclasses override record(); the helpers build events for them.
    """

    def record(self, event: DiagnosticEvent):
        raise NotImplementedError

    def debug(self, stage: DiagnosticStage, message: str, **data: Any):
        self.record(DiagnosticEvent(stage=stage, message=message, data=data, level=logging.DEBUG))

    def info(self, stage: DiagnosticStage, message: str, **data: Any):
        self.record(DiagnosticEvent(stage=stage, message=message, data=data, level=logging.INFO))

    def warning(self, stage: DiagnosticStage, message: str, **data: Any):
        self.record(DiagnosticEvent(stage=stage, message=message, data=data, level=logging.WARNING))


class NullDiagnostics(Diagnostics):
    """Discards every event."""

    def record(self, event: DiagnosticEvent):
        pass


class CollectingDiagnostics(Diagnostics):
    """
    Append-only in-memory collector.

    Used by tests and the validation harness to inspect pipeline counters.
    """

    def __init__(self):
        self._events: List[DiagnosticEvent] = []

    def record(self, event: DiagnosticEvent):
        self._events.append(event)

    def get_events(
        self,
        stage: Optional[DiagnosticStage] = None,
        min_level: int = logging.NOTSET
    ) -> List[DiagnosticEvent]:
        """Get events, optionally filtered by stage and level."""
        events = self._events
        if stage is not None:
            events = [e for e in events if e.stage == stage]
        if min_level > logging.NOTSET:
            events = [e for e in events if e.level >= min_level]
        return list(events)

    def last(self, stage: DiagnosticStage) -> Optional[DiagnosticEvent]:
        """Most recent event of a stage, if any."""
        events = self.get_events(stage)
        return events[-1] if events else None

    @property
    def event_count(self) -> int:
        return len(self._events)


class LoggingDiagnostics(Diagnostics):
    """Forwards events to the standard logging module, one child logger per stage."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self._logger = logger or logging.getLogger(LOGGER_NAME)

    def record(self, event: DiagnosticEvent):
        logger = self._logger.getChild(event.stage.value)
        if not logger.isEnabledFor(event.level):
            return
        if event.data:
            details = " ".join(f"{key}={value}" for key, value in sorted(event.data.items()))
            logger.log(event.level, "%s (%s)", event.message, details)
        else:
            logger.log(event.level, "%s", event.message)


def diagnostics_from_settings(settings: Optional[EngineSettings] = None) -> Diagnostics:
    """
    Diagnostics for the current process.

    Development mode logs through LoggingDiagnostics at the configured level;
    production mode is silent.
    """
    settings = settings or EngineSettings.from_env()
    if not settings.is_development:
        return NullDiagnostics()
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(settings.log_level)
    return LoggingDiagnostics(logger)


__all__ = [
    'LOGGER_NAME',
    'DiagnosticStage',
    'DiagnosticEvent',
    'Diagnostics',
    'NullDiagnostics',
    'CollectingDiagnostics',
    'LoggingDiagnostics',
    'diagnostics_from_settings',
]
