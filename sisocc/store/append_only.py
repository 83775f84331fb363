"""Append-only in-memory stores for status history and audit entries.

Neither store offers update or delete.
"""

from __future__ import annotations

import asyncio
import logging
from uuid import UUID

from sisocc.domain.audit import AuditEntry
from sisocc.domain.history import HistoryEntry

logger = logging.getLogger(__name__)


class InMemoryHistoryStore:
    """HistoryRepository keeping entries per occurrence in append order."""

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._entries: dict[UUID, list[HistoryEntry]] = {}

    async def append(self, entry: HistoryEntry) -> None:
        async with self._lock:
            self._entries.setdefault(entry.occurrence_id, []).append(entry)

    async def list_for(self, occurrence_id: UUID) -> list[HistoryEntry]:
        async with self._lock:
            return list(self._entries.get(occurrence_id, []))


class InMemoryAuditLog:
    """AuditSink that keeps every entry in memory and mirrors it to the log."""

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._entries: list[AuditEntry] = []

    async def record(self, entry: AuditEntry) -> None:
        async with self._lock:
            self._entries.append(entry)
        logger.info(
            "audit %s %s/%s by %s",
            entry.action.value,
            entry.entity_type,
            entry.entity_id,
            entry.actor_id,
        )

    @property
    def entries(self) -> list[AuditEntry]:
        """Read-only view of recorded entries."""
        return list(self._entries)
