"""
Base Contracts and Shared Types

These are the foundational types used across all layers.
All types here are IMMUTABLE and represent pure data.
No behavior beyond trivial conversions, no side effects.

BOUNDARY ENFORCEMENT:
=====================
- This module is READ-ONLY from all layers
- The core never sees raw event shapes, only ReflectionEntry / BridgeInput
- All types are frozen dataclasses for immutability guarantee
"""

from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Tuple
from enum import Enum, auto


# =============================================================================
# ERROR STATES (Explicit, never silent)
# =============================================================================

class ErrorCode(Enum):
    """
    Explicit error codes for conditions that are reported, not raised.
    The engine itself is total; these describe records it had to skip.
    """
    # Ingestion errors
    MISSING_TIMESTAMP = auto()
    INVALID_TIMESTAMP = auto()
    EMPTY_PAYLOAD = auto()
    NOT_A_JOURNAL_EVENT = auto()

    # Analysis errors
    INSUFFICIENT_DATA = auto()


@dataclass(frozen=True)
class Error:
    """
    Immutable error representation with full context.
    Errors are data, not exceptions - they can be stored and queried.
    """
    code: ErrorCode
    message: str
    timestamp: datetime
    context: Tuple[Tuple[str, str], ...] = field(default_factory=tuple)

    def with_context(self, key: str, value: str) -> Error:
        """Return new Error with additional context (immutable)."""
        return Error(
            code=self.code,
            message=self.message,
            timestamp=self.timestamp,
            context=self.context + ((key, value),)
        )


# =============================================================================
# CANONICAL INPUT RECORDS
# =============================================================================

@dataclass(frozen=True)
class ReflectionEntry:
    """
    One decrypted journal entry, as supplied by the journaling UI.

    created_at is an ISO-8601 string and is never mutated. Entries with
    deleted_at set are excluded from every analysis.
    """
    id: str
    created_at: str
    plaintext: str = ""
    deleted_at: Optional[str] = None
    source_id: Optional[str] = None

    @property
    def is_deleted(self) -> bool:
        return bool(self.deleted_at)

    def as_bridge_input(self) -> BridgeInput:
        return BridgeInput(id=self.id, created_at=self.created_at, text=self.plaintext or "")


@dataclass(frozen=True)
class BridgeInput:
    """Minimal record consumed by the narrative bridge engine."""
    id: str
    created_at: str
    text: str = ""


# =============================================================================
# LABELS (Explicit, closed sets)
# =============================================================================

class DistributionLabel(Enum):
    """Statistical shape of a writing-activity series."""
    NORMAL = "normal"
    LOGNORMAL = "lognormal"
    POWERLAW = "powerlaw"


class BridgeReason(Enum):
    """
    Reason types a narrative bridge can carry.
    Declaration order is the order reasons are attached to a bridge.
    """
    SEQUENCE = "sequence"
    SCALE = "scale"
    SYSTEMIC = "systemic"
    MEDIA = "media"
    CONTRAST = "contrast"


# Supported analysis windows, in days
TIME_WINDOWS: Tuple[int, ...] = (7, 30, 90, 365)
