"""HistoryRecorder — append-only status history for occurrences.

Entries are written once and never updated or deleted.  Failures from the
underlying repository propagate, so the caller aborts the status change.
"""

from __future__ import annotations

import logging
from uuid import UUID

from sisocc.domain.history import HistoryEntry
from sisocc.store.protocols import HistoryRepository

logger = logging.getLogger(__name__)


class HistoryRecorder:
    def __init__(self, repository: HistoryRepository) -> None:
        self._repository = repository

    async def record(self, entry: HistoryEntry) -> HistoryEntry:
        """Append *entry* to the history of its occurrence."""
        await self._repository.append(entry)
        logger.debug(
            "History %s: %s → %s by %s",
            entry.occurrence_id,
            entry.previous_status.value,
            entry.new_status.value,
            entry.actor_id,
        )
        return entry

    async def list(self, occurrence_id: UUID) -> list[HistoryEntry]:
        """Entries for *occurrence_id*, newest first.

        Entries sharing a timestamp keep reverse append order, so the most
        recent change still comes first.
        """
        entries = await self._repository.list_for(occurrence_id)
        ordered = list(reversed(entries))
        ordered.sort(key=lambda e: e.created_at, reverse=True)
        return ordered
