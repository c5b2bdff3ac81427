"""
Run history kept by the caller.

The engine never reads or writes history. Callers record a ``HistoryEntry``
per completed run in a ``RunHistory`` they own and persist it however they
like via ``to_list()`` / ``from_list()``.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from ledgerrecon.core.recon.models import ReconciliationResult


logger = logging.getLogger(__name__)

MAX_HISTORY_ENTRIES = 50


@dataclass(frozen=True)
class HistoryEntry:
    id: str
    date: str
    left_name: str
    right_name: str
    match_count: int
    variance_count: int
    missing_count: int
    status: str = "Completed"

    @classmethod
    def from_result(
        cls,
        result: ReconciliationResult,
        left_name: str = "File 1",
        right_name: str = "File 2",
        run_id: Optional[str] = None,
    ) -> "HistoryEntry":
        summary = result.summary
        return cls(
            id=run_id or uuid.uuid4().hex,
            date=datetime.now(timezone.utc).isoformat(),
            left_name=left_name,
            right_name=right_name,
            match_count=summary.match_count,
            variance_count=summary.variance_count,
            missing_count=summary.missing_count,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class RunHistory:
    """Newest-first list of past runs, capped at ``max_entries``."""

    def __init__(self, entries: Iterable[HistoryEntry] = (), max_entries: int = MAX_HISTORY_ENTRIES):
        if max_entries < 1:
            raise ValueError(f"max_entries must be >= 1, got {max_entries}")
        self.max_entries = max_entries
        self._entries: List[HistoryEntry] = list(entries)[:max_entries]

    def add(self, entry: HistoryEntry) -> None:
        self._entries = [entry] + self._entries[: self.max_entries - 1]

    def clear(self) -> None:
        self._entries = []

    @property
    def entries(self) -> List[HistoryEntry]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def to_list(self) -> List[Dict[str, Any]]:
        return [e.to_dict() for e in self._entries]

    @classmethod
    def from_list(cls, data: Iterable[Dict[str, Any]], max_entries: int = MAX_HISTORY_ENTRIES) -> "RunHistory":
        """Rebuild a history from ``to_list()`` output, skipping malformed entries."""
        entries = []
        for item in data:
            try:
                entries.append(HistoryEntry(**item))
            except TypeError as e:
                logger.warning(f"Skipping malformed history entry: {e}")
        return cls(entries, max_entries=max_entries)


__all__ = [
    "MAX_HISTORY_ENTRIES",
    "HistoryEntry",
    "RunHistory",
]
