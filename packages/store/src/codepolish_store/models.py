"""History data models.

Decoupled from codepolish_core so the store layer can be used independently
and codepolish_core has no knowledge of persistence concerns.
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass

UNKNOWN = "unknown"


def compute_content_hash(original_code: str, improved_code: str) -> str:
    """Return the SHA-256 hex digest of ``original_code + improved_code``.

    The pair, not just the original, is hashed so that different outcomes for
    the same input (e.g. conversions to different target languages) are kept
    as separate rows.
    """
    return hashlib.sha256((original_code + improved_code).encode("utf-8")).hexdigest()


@dataclass
class Complexity:
    """Complexity labels attached to a history record. All fields optional."""

    time: str | None = None
    space: str | None = None
    cyclomatic: int | None = None

    @classmethod
    def from_dict(cls, d: dict | None) -> Complexity:
        d = d or {}
        return cls(time=d.get("time"), space=d.get("space"), cyclomatic=d.get("cyclomatic"))


@dataclass
class HistoryRecord:
    """A persisted (original, improved) code pair.

    Created exactly once by SQLiteStore.record(); never updated.
    """

    id: int
    original_code: str
    improved_code: str
    timestamp: str  # ISO-8601 UTC, assigned by the store
    language: str
    time_complexity: str
    space_complexity: str
    cyclomatic_complexity: int
    content_hash: str

    def to_dict(self) -> dict:
        """JSON form served by GET /api/history (camelCase keys)."""
        return {
            "id": self.id,
            "originalCode": self.original_code,
            "improvedCode": self.improved_code,
            "timestamp": self.timestamp,
            "language": self.language,
            "timeComplexity": self.time_complexity,
            "spaceComplexity": self.space_complexity,
            "cyclomaticComplexity": self.cyclomatic_complexity,
            "contentHash": self.content_hash,
        }
