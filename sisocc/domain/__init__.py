from sisocc.domain.audit import AuditEntry, RequestContext
from sisocc.domain.enums import AuditAction, OccurrenceStatus, OccurrenceType, Priority
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

__all__ = [
    "ActorProfile",
    "AuditAction",
    "AuditEntry",
    "Coordinates",
    "HistoryEntry",
    "Occurrence",
    "OccurrenceCreate",
    "OccurrenceFilter",
    "OccurrencePatch",
    "OccurrenceStatus",
    "OccurrenceType",
    "OccurrenceView",
    "Priority",
    "RequestContext",
]
