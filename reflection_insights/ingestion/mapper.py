"""
Event → Reflection Mapper
=========================

Resolves the two raw event shapes into canonical ReflectionEntry records.

GUARANTEES:
- Every event is either mapped or dropped with an explicit reason
- Timestamp priority: occurred_at → created_at → event_at → timestamp
- Only journal/written events carrying text become entries
- No interpretation of content beyond locating it
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, List, Optional, Tuple, Union

from ..contracts.base import Error, ErrorCode, ReflectionEntry
from ..contracts.events import RawEvent, TimestampLike
from ..observability import DiagnosticStage, Diagnostics, NullDiagnostics
from ..temporal.windows import parse_timestamp

JOURNAL_SOURCE_KIND = "journal"
WRITTEN_EVENT_KIND = "written"
TIMESTAMP_FIELDS: Tuple[str, ...] = ("occurred_at", "created_at", "event_at", "timestamp")


class MissingTimestampError(ValueError):
    """Strict mode: a journal event has no usable timestamp field."""

    def __init__(self, event_id: str, detail: str = "no valid timestamp field"):
        super().__init__(
            f"Event {event_id} has {detail} ({', '.join(TIMESTAMP_FIELDS)})"
        )
        self.event_id = event_id


@dataclass(frozen=True)
class DroppedEvent:
    """Record of an event that did not become a reflection entry."""
    event_id: str
    error: Error

    @property
    def code(self) -> ErrorCode:
        return self.error.code

    def to_dict(self) -> dict:
        return {
            'event_id': self.event_id,
            'code': self.error.code.name,
            'reason': self.error.message,
            'timestamp': self.error.timestamp.isoformat(),
        }


@dataclass(frozen=True)
class MappingReport:
    """Outcome of mapping a batch of events."""
    entries: Tuple[ReflectionEntry, ...] = field(default_factory=tuple)
    dropped: Tuple[DroppedEvent, ...] = field(default_factory=tuple)

    @property
    def mapped_count(self) -> int:
        return len(self.entries)

    @property
    def dropped_count(self) -> int:
        return len(self.dropped)


# =============================================================================
# FIELD RESOLUTION
# =============================================================================

def first_timestamp_value(event: RawEvent) -> Tuple[Optional[str], TimestampLike]:
    """The highest-priority timestamp field that is present, with its value."""
    for name in TIMESTAMP_FIELDS:
        value = getattr(event, name, None)
        if value is not None and value != "":
            return name, value
    return None, None


def to_iso(dt: datetime) -> str:
    """UTC ISO-8601 with millisecond precision and a Z suffix."""
    return dt.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# =============================================================================
# MAPPING
# =============================================================================

def map_event(
    event: RawEvent,
    index: int = 0,
    strict: bool = False,
    now: Optional[datetime] = None
) -> Union[ReflectionEntry, DroppedEvent]:
    """
    Map one event.

    Returns:
        ReflectionEntry for a journal entry with text and a valid timestamp,
        DroppedEvent otherwise

    Raises:
        MissingTimestampError: strict mode and the timestamp is missing or invalid
    """
    now = now or datetime.now(timezone.utc)
    event_id = event.id or f"reflection-{index}"

    def dropped(code: ErrorCode, message: str) -> DroppedEvent:
        return DroppedEvent(event_id=event_id, error=Error(code=code, message=message, timestamp=now))

    source_kind, event_kind = event.source_kind, event.event_kind
    if source_kind != JOURNAL_SOURCE_KIND or event_kind != WRITTEN_EVENT_KIND:
        return dropped(
            ErrorCode.NOT_A_JOURNAL_EVENT,
            f"Not a journal entry (source_kind={source_kind}, event_kind={event_kind})",
        )

    text = event.text
    if not text:
        return dropped(ErrorCode.EMPTY_PAYLOAD, "Journal event has no text")

    field_name, raw_value = first_timestamp_value(event)
    if field_name is None:
        if strict:
            raise MissingTimestampError(event_id)
        return dropped(ErrorCode.MISSING_TIMESTAMP, "No timestamp field present")

    parsed = parse_timestamp(raw_value)
    if parsed is None:
        if strict:
            raise MissingTimestampError(event_id, f"invalid {field_name}: {raw_value!r}")
        record = dropped(ErrorCode.INVALID_TIMESTAMP, f"Unparseable {field_name}: {raw_value!r}")
        return DroppedEvent(event_id=event_id, error=record.error.with_context("field", field_name))

    return ReflectionEntry(id=event_id, created_at=to_iso(parsed), plaintext=text)


def map_events(
    events: Iterable[RawEvent],
    strict: bool = False,
    diagnostics: Optional[Diagnostics] = None,
    now: Optional[datetime] = None
) -> MappingReport:
    """
    Map a batch of events, preserving input order.

    Raises:
        MissingTimestampError: strict mode only
    """
    diagnostics = diagnostics or NullDiagnostics()
    now = now or datetime.now(timezone.utc)

    entries: List[ReflectionEntry] = []
    dropped: List[DroppedEvent] = []
    for index, event in enumerate(events):
        result = map_event(event, index=index, strict=strict, now=now)
        if isinstance(result, DroppedEvent):
            dropped.append(result)
        else:
            entries.append(result)

    diagnostics.debug(
        DiagnosticStage.INGESTION,
        f"Mapped {len(entries)} journal entries, dropped {len(dropped)} events",
        mapped=len(entries),
        dropped=len(dropped),
    )
    for record in dropped:
        if record.code in (ErrorCode.MISSING_TIMESTAMP, ErrorCode.INVALID_TIMESTAMP):
            diagnostics.warning(
                DiagnosticStage.INGESTION,
                f"Event {record.event_id} dropped: {record.error.message}",
                code=record.code.name,
            )

    return MappingReport(entries=tuple(entries), dropped=tuple(dropped))


def events_to_entries(events: Iterable[RawEvent], strict: bool = False) -> List[ReflectionEntry]:
    """Journal entries only; dropped events are discarded."""
    return list(map_events(events, strict=strict).entries)
