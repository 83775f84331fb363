"""Collaborator protocols consumed by the lifecycle engine.

The engine depends on these protocols only.  Swap implementations to
change the storage engine or audit destination without touching
lifecycle logic.
"""

from __future__ import annotations

from typing import Protocol
from uuid import UUID

from sisocc.domain.audit import AuditEntry
from sisocc.domain.history import HistoryEntry
from sisocc.domain.occurrence import ActorProfile, Occurrence, OccurrenceFilter

# Fields that support group-count queries.
GROUPABLE_FIELDS = ("status", "type", "priority")


class OccurrenceRepository(Protocol):
    async def add(self, occurrence: Occurrence) -> Occurrence: ...

    async def get(self, occurrence_id: UUID) -> Occurrence | None: ...

    async def save(self, occurrence: Occurrence) -> Occurrence:
        """Replace the stored record.  Raises OccurrenceNotFoundError if gone."""
        ...

    async def delete(self, occurrence_id: UUID) -> bool: ...

    async def list(
        self,
        criteria: OccurrenceFilter | None = None,
        offset: int = 0,
        limit: int | None = None,
    ) -> list[Occurrence]:
        """Matching records, newest occurred_at first."""
        ...

    async def count(self, criteria: OccurrenceFilter | None = None) -> int: ...

    async def count_by(
        self, field: str, criteria: OccurrenceFilter | None = None
    ) -> dict[str, int]: ...

    async def response_times(
        self, criteria: OccurrenceFilter | None = None
    ) -> list[int]:
        """Non-null response_time_minutes of matching records."""
        ...


class HistoryRepository(Protocol):
    async def append(self, entry: HistoryEntry) -> None: ...

    async def list_for(self, occurrence_id: UUID) -> list[HistoryEntry]:
        """Entries in append order."""
        ...


class AuditSink(Protocol):
    async def record(self, entry: AuditEntry) -> None: ...


class ActorDirectory(Protocol):
    async def get(self, actor_id: str) -> ActorProfile | None: ...
