"""Audit trail records and the request context they are built from.

Audit entries are independent of status history: every create, update
and delete produces one, whether or not the status moved.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from sisocc.domain.enums import AuditAction
from sisocc.foundation.clock import utc_now

OCCURRENCE_ENTITY = "OCCURRENCE"


class RequestContext(BaseModel):
    """Who is acting, and from where."""

    actor_id: str = Field(..., min_length=1)
    ip: Optional[str] = None
    user_agent: Optional[str] = None

    model_config = {"frozen": True}


class AuditEntry(BaseModel):
    actor_id: str
    action: AuditAction
    entity_type: str = OCCURRENCE_ENTITY
    entity_id: str
    details: dict[str, Any] = Field(default_factory=dict)
    ip: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: datetime = Field(default_factory=utc_now)

    model_config = {"frozen": True}

    @classmethod
    def for_request(
        cls,
        context: RequestContext,
        action: AuditAction,
        entity_id: str,
        details: dict[str, Any],
    ) -> "AuditEntry":
        return cls(
            actor_id=context.actor_id,
            action=action,
            entity_id=entity_id,
            details=details,
            ip=context.ip,
            user_agent=context.user_agent,
        )
