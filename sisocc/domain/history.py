"""HistoryEntry — an immutable record of one observed status change."""

from __future__ import annotations

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from sisocc.domain.enums import OccurrenceStatus
from sisocc.foundation.clock import utc_now
from sisocc.foundation.identifiers import new_id


class HistoryEntry(BaseModel):
    """Created once per status change; never updated or deleted."""

    id: UUID = Field(default_factory=new_id)
    occurrence_id: UUID
    previous_status: OccurrenceStatus
    new_status: OccurrenceStatus
    note: Optional[str] = None
    actor_id: str = Field(..., min_length=1, description="Who made the change")
    created_at: datetime = Field(default_factory=utc_now)

    model_config = {"frozen": True}
