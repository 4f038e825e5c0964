"""SQLiteStore — local file-based history of reviewed code pairs.

Schema:
  history — one row per distinct (original, improved) pair. The ``hash``
            column is UNIQUE, so INSERT OR IGNORE turns a repeated pair into
            a no-op and two racing inserts of the same pair can never both
            commit.
"""

from __future__ import annotations

import logging
import sqlite3
import threading
from datetime import datetime, timezone

from codepolish_store.base import MAX_HISTORY_LIMIT, BaseStore
from codepolish_store.errors import InternalError, ValidationError
from codepolish_store.models import UNKNOWN, Complexity, HistoryRecord, compute_content_hash

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS history (
    id                    INTEGER PRIMARY KEY AUTOINCREMENT,
    originalCode          TEXT NOT NULL,
    improvedCode          TEXT NOT NULL,
    timestamp             TEXT NOT NULL,
    language              TEXT NOT NULL,
    timeComplexity        TEXT NOT NULL,
    spaceComplexity       TEXT NOT NULL,
    cyclomaticComplexity  INTEGER NOT NULL,
    hash                  TEXT UNIQUE NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_history_timestamp ON history (timestamp);
"""


def _require_code(name: str, value) -> str:
    if not isinstance(value, str) or not value:
        raise ValidationError(f"{name} must be a non-empty string")
    return value


def _label(value) -> str:
    if value is None or value == "":
        return UNKNOWN
    if not isinstance(value, str):
        raise ValidationError(f"expected a string label, got {type(value).__name__}")
    return value


def _cyclomatic(value) -> int:
    if not value:
        return 0
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError("cyclomatic complexity must be a number")
    if isinstance(value, float) and not value.is_integer():
        raise ValidationError("cyclomatic complexity must be an integer")
    if value < 0:
        raise ValidationError("cyclomatic complexity must be non-negative")
    return int(value)


class SQLiteStore(BaseStore):
    """Stores review history in a local SQLite database file.

    The database file path defaults to ``history.db`` in the current working
    directory. Configure via .codepolish.yml: ``store_path: /path/to/history.db``.

    One connection is shared by every thread that touches the store (the HTTP
    server runs sync handlers in a threadpool); ``_lock`` serializes access.
    """

    def __init__(self, db_path: str = "history.db"):
        self._lock = threading.Lock()
        try:
            self._conn = sqlite3.connect(db_path, check_same_thread=False)
            self._conn.row_factory = sqlite3.Row
            self._conn.executescript(_SCHEMA)
            self._conn.commit()
        except sqlite3.Error as e:
            logger.exception("Could not open history database at %s", db_path)
            raise InternalError("Failed to open history store") from e

    def record(
        self,
        original_code: str,
        improved_code: str,
        language: str | None = None,
        complexity: Complexity | None = None,
    ) -> bool:
        _require_code("originalCode", original_code)
        _require_code("improvedCode", improved_code)
        complexity = complexity or Complexity()
        row = (
            original_code,
            improved_code,
            datetime.now(timezone.utc).isoformat(),
            _label(language),
            _label(complexity.time),
            _label(complexity.space),
            _cyclomatic(complexity.cyclomatic),
            compute_content_hash(original_code, improved_code),
        )

        try:
            with self._lock:
                cursor = self._conn.execute(
                    """
                    INSERT OR IGNORE INTO history
                      (originalCode, improvedCode, timestamp, language,
                       timeComplexity, spaceComplexity, cyclomaticComplexity, hash)
                    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                    """,
                    row,
                )
                self._conn.commit()
        except sqlite3.Error as e:
            logger.exception("Error saving history")
            raise InternalError("Failed to save history") from e

        inserted = cursor.rowcount > 0
        if not inserted:
            logger.debug("History entry %s already present", row[-1][:12])
        return inserted

    def list_history(self, limit: int = MAX_HISTORY_LIMIT) -> list[HistoryRecord]:
        limit = max(1, min(int(limit), MAX_HISTORY_LIMIT))
        try:
            with self._lock:
                rows = self._conn.execute(
                    "SELECT * FROM history ORDER BY timestamp DESC, id DESC LIMIT ?",
                    (limit,),
                ).fetchall()
        except sqlite3.Error as e:
            logger.exception("Error reading history")
            raise InternalError("Failed to read history") from e

        return [self._row_to_record(r) for r in rows]

    def count(self) -> int:
        try:
            with self._lock:
                (n,) = self._conn.execute("SELECT COUNT(*) FROM history").fetchone()
        except sqlite3.Error as e:
            logger.exception("Error counting history")
            raise InternalError("Failed to read history") from e
        return n

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    @staticmethod
    def _row_to_record(row: sqlite3.Row) -> HistoryRecord:
        return HistoryRecord(
            id=row["id"],
            original_code=row["originalCode"],
            improved_code=row["improvedCode"],
            timestamp=row["timestamp"],
            language=row["language"],
            time_complexity=row["timeComplexity"],
            space_complexity=row["spaceComplexity"],
            cyclomatic_complexity=row["cyclomaticComplexity"],
            content_hash=row["hash"],
        )
