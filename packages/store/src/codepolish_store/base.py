"""Abstract store interface.

The server and CLI depend on BaseStore, not on a concrete backend, so the
SQLite file can be swapped for another engine without touching either.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from codepolish_store.models import Complexity, HistoryRecord

MAX_HISTORY_LIMIT = 100


class BaseStore(ABC):
    """Content-addressed persistence layer for review history."""

    @abstractmethod
    def record(
        self,
        original_code: str,
        improved_code: str,
        language: str | None = None,
        complexity: Complexity | None = None,
    ) -> bool:
        """Persist an (original, improved) pair.

        Returns True if a new row was written, False if a row with the same
        content hash already exists. Raises ValidationError for empty code
        and InternalError on storage faults.
        """

    @abstractmethod
    def list_history(self, limit: int = MAX_HISTORY_LIMIT) -> list[HistoryRecord]:
        """Return at most ``limit`` records, newest first.

        Returns an empty list for an empty store.
        """

    @abstractmethod
    def count(self) -> int:
        """Return the number of stored records."""

    def close(self) -> None:
        """Release any resources held by the store (connections, file handles).

        Optional. Default is a no-op so callers can always call close() safely.
        """
