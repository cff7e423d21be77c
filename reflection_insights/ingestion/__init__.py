"""
Ingestion Boundary
==================

RESPONSIBILITY: Turn raw journaling events into canonical ReflectionEntry records
ALLOWED INPUTS: LegacyEvent / UnifiedEvent
OUTPUTS: MappingReport (entries + explicit drop records)

WHAT THIS LAYER MUST NOT DO:
============================
- Interpret entry content
- Classify, score or bridge entries
- Let raw event shapes leak past this boundary

BOUNDARY ENFORCEMENT:
=====================
Imports only contracts, temporal parsing and the diagnostics port.
"""

from .mapper import (
    MissingTimestampError, DroppedEvent, MappingReport,
    TIMESTAMP_FIELDS, first_timestamp_value, map_event, map_events,
    events_to_entries,
)

__all__ = [
    'MissingTimestampError',
    'DroppedEvent',
    'MappingReport',
    'TIMESTAMP_FIELDS',
    'first_timestamp_value',
    'map_event',
    'map_events',
    'events_to_entries',
]
