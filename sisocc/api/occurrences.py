"""REST endpoints for occurrences.

Path prefix: /api/occurrences

Routes translate HTTP into LifecycleManager / StatsAggregator calls and
wrap results in the standard envelope.  They contain no lifecycle rules.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from sisocc.api.dependencies import DELETE_PERMISSION, get_request_context, require_permission
from sisocc.api.errors import envelope
from sisocc.core.lifecycle import LifecycleManager
from sisocc.core.stats import StatsAggregator
from sisocc.domain.audit import RequestContext
from sisocc.domain.enums import OccurrenceStatus, OccurrenceType, Priority
from sisocc.domain.errors import OccurrenceNotFoundError
from sisocc.domain.occurrence import (
    OccurrenceCreate,
    OccurrenceFilter,
    OccurrencePatch,
    OccurrenceView,
)


class PhotoAttachment(BaseModel):
    photos: list[str] = Field(..., min_length=1, description="Stored file names to append")


def _parse_id(raw: str) -> UUID:
    # Malformed ids cannot exist, so they are reported like unknown ones
    try:
        return UUID(raw)
    except ValueError:
        raise OccurrenceNotFoundError(raw) from None


def _dump(view: OccurrenceView) -> dict[str, Any]:
    return view.model_dump(mode="json")


def create_occurrence_router(
    manager: LifecycleManager,
    stats: StatsAggregator,
    default_page_size: int = 50,
) -> APIRouter:
    """Factory that wires the occurrence endpoints to a concrete engine."""

    router = APIRouter(prefix="/api/occurrences", tags=["occurrences"])

    @router.get("")
    async def list_occurrences(
        status: OccurrenceStatus | None = None,
        occurrence_type: OccurrenceType | None = Query(default=None, alias="type"),
        priority: Priority | None = None,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
        page: int = Query(default=1, ge=1),
        limit: int = Query(default=default_page_size, ge=1),
        context: RequestContext = Depends(get_request_context),
    ) -> dict[str, Any]:
        criteria = OccurrenceFilter(
            status=status,
            type=occurrence_type,
            priority=priority,
            date_from=date_from,
            date_to=date_to,
        )
        views, total = await manager.list(criteria, page=page, limit=limit)
        return envelope(
            data=[_dump(v) for v in views],
            pagination={
                "page": page,
                "limit": limit,
                "total": total,
                "total_pages": math.ceil(total / limit),
            },
        )

    @router.get("/stats")
    async def occurrence_stats(
        context: RequestContext = Depends(get_request_context),
    ) -> dict[str, Any]:
        summary = await stats.summarize()
        return envelope(data=summary.model_dump(mode="json"))

    @router.get("/{occurrence_id}")
    async def get_occurrence(
        occurrence_id: str,
        context: RequestContext = Depends(get_request_context),
    ) -> dict[str, Any]:
        view = await manager.get(_parse_id(occurrence_id))
        return envelope(data=_dump(view))

    @router.post("", status_code=201)
    async def create_occurrence(
        raw: dict[str, Any] = Body(...),
        context: RequestContext = Depends(get_request_context),
    ) -> JSONResponse:
        data = OccurrenceCreate.parse(raw)
        view = await manager.create(data, context)
        return JSONResponse(
            status_code=201,
            content=envelope(data=_dump(view), message="Occurrence created successfully"),
        )

    @router.put("/{occurrence_id}")
    async def update_occurrence(
        occurrence_id: str,
        raw: dict[str, Any] = Body(...),
        context: RequestContext = Depends(get_request_context),
    ) -> dict[str, Any]:
        patch = OccurrencePatch.parse(raw)
        view = await manager.update(_parse_id(occurrence_id), patch, context)
        return envelope(data=_dump(view), message="Occurrence updated successfully")

    @router.post("/{occurrence_id}/photos")
    async def attach_photos(
        occurrence_id: str,
        body: PhotoAttachment,
        context: RequestContext = Depends(get_request_context),
    ) -> dict[str, Any]:
        view = await manager.attach_photos(_parse_id(occurrence_id), body.photos, context)
        return envelope(data=_dump(view), message="Photos attached successfully")

    @router.delete(
        "/{occurrence_id}",
        dependencies=[Depends(require_permission(DELETE_PERMISSION))],
    )
    async def delete_occurrence(
        occurrence_id: str,
        context: RequestContext = Depends(get_request_context),
    ) -> dict[str, Any]:
        await manager.delete(_parse_id(occurrence_id), context)
        return envelope(message="Occurrence deleted successfully")

    return router
