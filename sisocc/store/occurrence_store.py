"""In-memory occurrence store with async-safe access.

Design notes:
    - An asyncio.Lock guards every read and write so concurrent request
      handlers never corrupt the index.
    - Records cross the store boundary as deep copies.  Callers mutate
      their own copy and hand it back through save().
    - The lock covers single calls only.  A read followed by a save is an
      unguarded read-modify-write; the later save wins.
"""

from __future__ import annotations

import asyncio
import logging
from uuid import UUID

from sisocc.domain.errors import OccurrenceNotFoundError
from sisocc.domain.occurrence import Occurrence, OccurrenceFilter
from sisocc.store.protocols import GROUPABLE_FIELDS

logger = logging.getLogger(__name__)


class InMemoryOccurrenceStore:
    """Dictionary-backed OccurrenceRepository."""

    def __init__(self) -> None:
        self._lock = asyncio.Lock()
        self._occurrences: dict[UUID, Occurrence] = {}

    # ── Writes ───────────────────────────────────────────────────────────

    async def add(self, occurrence: Occurrence) -> Occurrence:
        async with self._lock:
            if occurrence.id in self._occurrences:
                raise ValueError(f"Occurrence {occurrence.id} already exists")
            self._occurrences[occurrence.id] = occurrence.model_copy(deep=True)
            logger.debug("Stored occurrence %s", occurrence.id)
            return occurrence.model_copy(deep=True)

    async def save(self, occurrence: Occurrence) -> Occurrence:
        async with self._lock:
            if occurrence.id not in self._occurrences:
                raise OccurrenceNotFoundError(occurrence.id)
            self._occurrences[occurrence.id] = occurrence.model_copy(deep=True)
            logger.debug("Saved occurrence %s", occurrence.id)
            return occurrence.model_copy(deep=True)

    async def delete(self, occurrence_id: UUID) -> bool:
        async with self._lock:
            return self._occurrences.pop(occurrence_id, None) is not None

    # ── Reads ────────────────────────────────────────────────────────────

    async def get(self, occurrence_id: UUID) -> Occurrence | None:
        async with self._lock:
            occurrence = self._occurrences.get(occurrence_id)
            return occurrence.model_copy(deep=True) if occurrence else None

    async def list(
        self,
        criteria: OccurrenceFilter | None = None,
        offset: int = 0,
        limit: int | None = None,
    ) -> list[Occurrence]:
        async with self._lock:
            matching = sorted(
                self._select(criteria),
                key=lambda o: o.occurred_at,
                reverse=True,
            )
        end = None if limit is None else offset + limit
        return [o.model_copy(deep=True) for o in matching[offset:end]]

    async def count(self, criteria: OccurrenceFilter | None = None) -> int:
        async with self._lock:
            return len(self._select(criteria))

    async def count_by(
        self, field: str, criteria: OccurrenceFilter | None = None
    ) -> dict[str, int]:
        if field not in GROUPABLE_FIELDS:
            raise ValueError(f"Cannot group occurrences by {field!r}")
        counts: dict[str, int] = {}
        async with self._lock:
            for occurrence in self._select(criteria):
                key = getattr(occurrence, field).value
                counts[key] = counts.get(key, 0) + 1
        return counts

    async def response_times(
        self, criteria: OccurrenceFilter | None = None
    ) -> list[int]:
        async with self._lock:
            return [
                o.response_time_minutes
                for o in self._select(criteria)
                if o.response_time_minutes is not None
            ]

    # ── Internals ────────────────────────────────────────────────────────

    def _select(self, criteria: OccurrenceFilter | None) -> list[Occurrence]:
        """Must be called while holding self._lock."""
        if criteria is None:
            return list(self._occurrences.values())
        return [o for o in self._occurrences.values() if criteria.matches(o)]
