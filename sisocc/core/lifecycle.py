"""LifecycleManager — create/update/delete semantics for occurrences.

Write path:
    validate → [resolve coordinates] → persist → [history on status change]
    → audit → publish (fire-and-forget) → enriched view

Rules:
    1. A history entry is written iff the submitted status differs from the
       stored one, and it is written before the field update is saved.
    2. responded_at + response_time_minutes are set together, once, on the
       first entry into IN_PROGRESS.  resolved_at is set once, on the first
       entry into RESOLVED.  Reopening never clears either.
    3. id, created_by and occurred_at never change after create.
    4. Persistence, history and audit failures abort the operation.
       Notification failures never do.
    5. Updates are an unguarded read-modify-write; concurrent updates to the
       same occurrence race and the later save wins.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any
from uuid import UUID

from sisocc.core.geocoding import CoordinateResolver, GeocodingPolicy
from sisocc.core.history import HistoryRecorder
from sisocc.domain.audit import AuditEntry, RequestContext
from sisocc.domain.enums import AuditAction, OccurrenceStatus, Priority
from sisocc.domain.errors import CoordinatesRequiredError, GeocodingError, OccurrenceNotFoundError
from sisocc.domain.history import HistoryEntry
from sisocc.domain.occurrence import (
    ActorProfile,
    Coordinates,
    Occurrence,
    OccurrenceCreate,
    OccurrenceFilter,
    OccurrencePatch,
    OccurrenceView,
)
from sisocc.foundation.clock import utc_now
from sisocc.services.notifications import (
    OCCURRENCE_CREATED,
    OCCURRENCE_DELETED,
    OCCURRENCE_UPDATED,
    NotificationPublisher,
)
from sisocc.store.protocols import ActorDirectory, AuditSink, OccurrenceRepository

logger = logging.getLogger(__name__)

# Recife city centre
DEFAULT_COORDINATES = Coordinates(latitude=-8.0476, longitude=-34.877)


class LifecycleManager:
    """Owns the write semantics of the occurrence lifecycle.

    Args:
        occurrences: Persistence for occurrence records.
        history: Recorder for status-change history.
        audit: Destination for audit entries.
        publisher: Best-effort real-time fanout.
        resolver: Address → coordinates lookup.
        actors: Source of display data for created_by / assignee.
        geocoding_policy: What create() does when resolution fails.
        default_coordinates: Substituted under GeocodingPolicy.FALLBACK.
    """

    def __init__(
        self,
        occurrences: OccurrenceRepository,
        history: HistoryRecorder,
        audit: AuditSink,
        publisher: NotificationPublisher,
        resolver: CoordinateResolver,
        actors: ActorDirectory | None = None,
        geocoding_policy: GeocodingPolicy = GeocodingPolicy.FALLBACK,
        default_coordinates: Coordinates = DEFAULT_COORDINATES,
    ) -> None:
        self._occurrences = occurrences
        self._history = history
        self._audit = audit
        self._publisher = publisher
        self._resolver = resolver
        self._actors = actors
        self._geocoding_policy = geocoding_policy
        self._default_coordinates = default_coordinates

    @property
    def geocoding_policy(self) -> GeocodingPolicy:
        return self._geocoding_policy

    # ── Create ───────────────────────────────────────────────────────────

    async def create(self, data: OccurrenceCreate, context: RequestContext) -> OccurrenceView:
        coordinates = data.coordinates or await self._resolve(data.address)
        now = utc_now()

        occurrence = Occurrence(
            type=data.type,
            location=data.location,
            address=data.address,
            latitude=coordinates.latitude,
            longitude=coordinates.longitude,
            status=data.status or OccurrenceStatus.NEW,
            priority=data.priority or Priority.MEDIUM,
            description=data.description,
            created_by=context.actor_id,
            assignee_id=data.assignee_id,
            occurred_at=now,
            photos=list(data.photos),
            created_at=now,
            updated_at=now,
        )
        stored = await self._occurrences.add(occurrence)
        await self._audit.record(AuditEntry.for_request(
            context,
            AuditAction.CREATE,
            str(stored.id),
            {"type": stored.type.value, "location": stored.location},
        ))
        logger.info("Created occurrence %s (%s) by %s", stored.id, stored.type.value, context.actor_id)

        view = await self._view(stored)
        self._publisher.publish(OCCURRENCE_CREATED, view)
        return view

    async def _resolve(self, address: str) -> Coordinates:
        try:
            return await self._resolver.resolve(address)
        except GeocodingError as exc:
            if self._geocoding_policy is GeocodingPolicy.REJECT:
                logger.warning("Geocoding failed for %r, rejecting: %s", address, exc)
                raise CoordinatesRequiredError(address) from exc
            logger.warning("Geocoding failed for %r, using default coordinates: %s", address, exc)
            return self._default_coordinates

    # ── Read ─────────────────────────────────────────────────────────────

    async def get(self, occurrence_id: UUID) -> OccurrenceView:
        """Single occurrence with actor contact data and history, newest first."""
        occurrence = await self._require(occurrence_id)
        history = await self._history.list(occurrence_id)
        return await self._view(occurrence, contact=True, history=history)

    async def list(
        self,
        criteria: OccurrenceFilter | None = None,
        page: int = 1,
        limit: int = 50,
    ) -> tuple[list[OccurrenceView], int]:
        """One page of occurrences (newest occurred_at first) and the total match count."""
        if page < 1 or limit < 1:
            raise ValueError("page and limit must be positive")
        records = await self._occurrences.list(criteria, offset=(page - 1) * limit, limit=limit)
        total = await self._occurrences.count(criteria)
        return [await self._view(o) for o in records], total

    # ── Update ───────────────────────────────────────────────────────────

    async def update(
        self,
        occurrence_id: UUID,
        patch: OccurrencePatch,
        context: RequestContext,
    ) -> OccurrenceView:
        current = await self._require(occurrence_id)
        now = utc_now()

        if patch.status is not None and patch.status != current.status:
            await self._history.record(HistoryEntry(
                occurrence_id=current.id,
                previous_status=current.status,
                new_status=patch.status,
                note=patch.note,
                actor_id=context.actor_id,
                created_at=now,
            ))

        changes = patch.supplied()
        changes.update(self._milestones(current, patch.status, now))
        changes["updated_at"] = now
        updated = current.model_copy(update=changes)

        stored = await self._occurrences.save(updated)
        await self._audit.record(AuditEntry.for_request(
            context,
            AuditAction.UPDATE,
            str(stored.id),
            patch.model_dump(mode="json", exclude_unset=True),
        ))
        logger.info("Updated occurrence %s by %s: %s", stored.id, context.actor_id, sorted(changes))

        view = await self._view(stored)
        self._publisher.publish(OCCURRENCE_UPDATED, view)
        return view

    @staticmethod
    def _milestones(
        current: Occurrence,
        status: OccurrenceStatus | None,
        now: datetime,
    ) -> dict[str, Any]:
        """Timestamp fields to set for *status*, each only if not already set."""
        changes: dict[str, Any] = {}
        if status == OccurrenceStatus.IN_PROGRESS and current.responded_at is None:
            changes["responded_at"] = now
            changes["response_time_minutes"] = (now - current.occurred_at) // timedelta(minutes=1)
        if status == OccurrenceStatus.RESOLVED and current.resolved_at is None:
            changes["resolved_at"] = now
        return changes

    async def attach_photos(
        self,
        occurrence_id: UUID,
        photos: list[str],
        context: RequestContext,
    ) -> OccurrenceView:
        """Append stored-file references.  Existing references are never removed."""
        current = await self._require(occurrence_id)
        updated = current.model_copy(update={
            "photos": current.photos + list(photos),
            "updated_at": utc_now(),
        })
        stored = await self._occurrences.save(updated)
        await self._audit.record(AuditEntry.for_request(
            context,
            AuditAction.UPDATE,
            str(stored.id),
            {"photos_added": len(photos)},
        ))

        view = await self._view(stored)
        self._publisher.publish(OCCURRENCE_UPDATED, view)
        return view

    # ── Delete ───────────────────────────────────────────────────────────

    async def delete(self, occurrence_id: UUID, context: RequestContext) -> None:
        """Remove unconditionally.  Status history for the id is retained."""
        current = await self._require(occurrence_id)
        if not await self._occurrences.delete(occurrence_id):
            raise OccurrenceNotFoundError(occurrence_id)
        await self._audit.record(AuditEntry.for_request(
            context,
            AuditAction.DELETE,
            str(occurrence_id),
            {"type": current.type.value, "location": current.location},
        ))
        logger.info("Deleted occurrence %s by %s", occurrence_id, context.actor_id)
        self._publisher.publish(OCCURRENCE_DELETED, {"id": str(occurrence_id)})

    # ── Internals ────────────────────────────────────────────────────────

    async def _require(self, occurrence_id: UUID) -> Occurrence:
        occurrence = await self._occurrences.get(occurrence_id)
        if occurrence is None:
            raise OccurrenceNotFoundError(occurrence_id)
        return occurrence

    async def _view(
        self,
        occurrence: Occurrence,
        contact: bool = False,
        history: list[HistoryEntry] | None = None,
    ) -> OccurrenceView:
        created_by = await self._profile(occurrence.created_by, contact)
        assignee = await self._profile(occurrence.assignee_id, contact)
        return OccurrenceView(
            **occurrence.model_dump(),
            created_by_actor=created_by,
            assignee_actor=assignee,
            history=history,
        )

    async def _profile(self, actor_id: str | None, contact: bool) -> ActorProfile | None:
        if actor_id is None or self._actors is None:
            return None
        profile = await self._actors.get(actor_id)
        if profile is None or contact:
            return profile
        return profile.summary()
