"""
Raw Event Contracts

The journaling application emits two event shapes. They are modelled here
as a tagged variant so the ingestion boundary resolves the shape ONCE and
the core only ever sees ReflectionEntry records.

VARIANTS:
=========
- LegacyEvent:  payload mapping with source_kind / event_kind and the text
                under "content" or "raw_metadata.content"
- UnifiedEvent: flat fields, text under "details"

Timestamps may be datetimes or ISO strings; any of them may be missing.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Literal, Mapping, Optional, Union

TimestampLike = Union[datetime, str, None]


@dataclass(frozen=True)
class LegacyEvent:
    """Older internal event with an opaque decrypted payload."""
    id: str
    payload: Mapping[str, Any] = field(default_factory=dict)
    occurred_at: TimestampLike = None
    created_at: TimestampLike = None
    event_at: TimestampLike = None
    timestamp: TimestampLike = None
    kind: Literal["legacy"] = "legacy"

    @property
    def source_kind(self) -> Optional[str]:
        return self.payload.get("source_kind")

    @property
    def event_kind(self) -> Optional[str]:
        return self.payload.get("event_kind")

    @property
    def text(self) -> Optional[str]:
        content = self.payload.get("content")
        if isinstance(content, str):
            return content
        raw_metadata = self.payload.get("raw_metadata")
        if isinstance(raw_metadata, Mapping) and isinstance(raw_metadata.get("content"), str):
            return raw_metadata["content"]
        return None


@dataclass(frozen=True)
class UnifiedEvent:
    """Current internal event shape."""
    id: str
    source_kind: Optional[str] = None
    event_kind: Optional[str] = None
    details: Optional[str] = None
    occurred_at: TimestampLike = None
    created_at: TimestampLike = None
    event_at: TimestampLike = None
    timestamp: TimestampLike = None
    kind: Literal["unified"] = "unified"

    @property
    def text(self) -> Optional[str]:
        return self.details


RawEvent = Union[LegacyEvent, UnifiedEvent]
