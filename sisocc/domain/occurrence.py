"""Occurrence models: the stored record, its inputs, and its views.

The stored Occurrence is mutable and owned by the LifecycleManager.
Inputs (OccurrenceCreate, OccurrencePatch) are validated at the boundary
so nothing downstream has to re-check field constraints, and validation
always happens before any side effect.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from sisocc.domain.enums import OccurrenceStatus, OccurrenceType, Priority
from sisocc.domain.errors import OccurrenceValidationError
from sisocc.domain.history import HistoryEntry
from sisocc.foundation.identifiers import new_id


# ── Value objects ────────────────────────────────────────────────────────────

class Coordinates(BaseModel):
    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)

    model_config = {"frozen": True}


class ActorProfile(BaseModel):
    """Display data for a user, as provided by the actor directory."""

    id: str
    name: str
    email: Optional[str] = None
    role: Optional[str] = None
    phone: Optional[str] = None

    def summary(self) -> "ActorProfile":
        """Same profile without contact details."""
        return self.model_copy(update={"phone": None})


# ── Stored record ────────────────────────────────────────────────────────────

class Occurrence(BaseModel):
    """A tracked incident.

    id, created_by and occurred_at never change after creation.
    responded_at/response_time_minutes and resolved_at are each set at most
    once, the first time the matching status is entered.
    """

    id: UUID = Field(default_factory=new_id)
    type: OccurrenceType
    location: str
    address: str
    latitude: float
    longitude: float
    status: OccurrenceStatus = OccurrenceStatus.NEW
    priority: Priority = Priority.MEDIUM
    description: Optional[str] = None
    notes: Optional[str] = None
    created_by: str
    assignee_id: Optional[str] = None
    occurred_at: datetime
    responded_at: Optional[datetime] = None
    resolved_at: Optional[datetime] = None
    response_time_minutes: Optional[int] = None
    photos: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class OccurrenceView(Occurrence):
    """An occurrence enriched with actor display data and, optionally, history."""

    created_by_actor: Optional[ActorProfile] = None
    assignee_actor: Optional[ActorProfile] = None
    history: Optional[list[HistoryEntry]] = None


# ── Inputs ───────────────────────────────────────────────────────────────────

_REQUIRED_ON_CREATE = ("type", "location", "address")


def _error_lines(exc: ValidationError) -> list[str]:
    lines = []
    for err in exc.errors():
        field = ".".join(str(p) for p in err["loc"]) or "body"
        lines.append(f"{field}: {err['msg']}")
    return lines


class OccurrenceCreate(BaseModel):
    """Input for creating an occurrence."""

    type: OccurrenceType
    location: str = Field(..., min_length=1, max_length=255)
    address: str = Field(..., min_length=1, max_length=500)
    latitude: Optional[float] = Field(default=None, ge=-90.0, le=90.0)
    longitude: Optional[float] = Field(default=None, ge=-180.0, le=180.0)
    status: Optional[OccurrenceStatus] = None
    priority: Optional[Priority] = None
    description: Optional[str] = None
    assignee_id: Optional[str] = None
    photos: list[str] = Field(default_factory=list)

    model_config = {"str_strip_whitespace": True}

    @property
    def coordinates(self) -> Coordinates | None:
        """Caller-supplied coordinates, or None unless both are present."""
        if self.latitude is None or self.longitude is None:
            return None
        return Coordinates(latitude=self.latitude, longitude=self.longitude)

    @classmethod
    def parse(cls, raw: Any) -> "OccurrenceCreate":
        """Validate raw request data, raising OccurrenceValidationError."""
        try:
            return cls.model_validate(raw)
        except ValidationError as exc:
            missing = {
                str(err["loc"][0])
                for err in exc.errors()
                if err["loc"]
                and (
                    err["type"] in ("missing", "string_too_short")
                    or err.get("input") in (None, "")
                )
            }
            if missing & set(_REQUIRED_ON_CREATE):
                message = "type, location and address are required"
            else:
                message = "Invalid occurrence data"
            raise OccurrenceValidationError(message, _error_lines(exc)) from exc


class OccurrencePatch(BaseModel):
    """Partial update.  Only fields the caller actually supplied are applied.

    ``note`` is recorded on the history entry when the status changes and is
    also kept as the occurrence's latest notes.
    """

    status: Optional[OccurrenceStatus] = None
    priority: Optional[Priority] = None
    description: Optional[str] = None
    assignee_id: Optional[str] = None
    note: Optional[str] = None

    model_config = {"extra": "forbid", "str_strip_whitespace": True}

    @model_validator(mode="after")
    def classifications_not_null(self) -> "OccurrencePatch":
        for name in ("status", "priority"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} may not be null")
        return self

    def supplied(self) -> dict[str, Any]:
        """Supplied fields keyed by the occurrence attribute they update."""
        changes: dict[str, Any] = {}
        for name in self.model_fields_set:
            target = "notes" if name == "note" else name
            changes[target] = getattr(self, name)
        return changes

    @classmethod
    def parse(cls, raw: Any) -> "OccurrencePatch":
        try:
            return cls.model_validate(raw)
        except ValidationError as exc:
            raise OccurrenceValidationError(
                "Invalid occurrence update", _error_lines(exc)
            ) from exc


class OccurrenceFilter(BaseModel):
    """Optional narrowing criteria; date bounds apply to occurred_at, inclusive."""

    status: Optional[OccurrenceStatus] = None
    type: Optional[OccurrenceType] = None
    priority: Optional[Priority] = None
    date_from: Optional[datetime] = None
    date_to: Optional[datetime] = None

    @field_validator("date_from", "date_to")
    @classmethod
    def bounds_must_be_aware(cls, v: datetime | None) -> datetime | None:
        # Naive query-string dates are taken as UTC
        if v is not None and v.tzinfo is None:
            v = v.replace(tzinfo=timezone.utc)
        return v

    def matches(self, occurrence: Occurrence) -> bool:
        if self.status is not None and occurrence.status != self.status:
            return False
        if self.type is not None and occurrence.type != self.type:
            return False
        if self.priority is not None and occurrence.priority != self.priority:
            return False
        if self.date_from is not None and occurrence.occurred_at < self.date_from:
            return False
        if self.date_to is not None and occurrence.occurred_at > self.date_to:
            return False
        return True
