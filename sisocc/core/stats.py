"""StatsAggregator — point-in-time counts and average response time.

Every call re-queries the repository; nothing is cached.  The queries run
concurrently and are not isolated from concurrent writes, so a summary is
a best-effort snapshot.
"""

from __future__ import annotations

import asyncio
import math

from pydantic import BaseModel, Field

from sisocc.domain.enums import OccurrenceStatus, OccurrenceType, Priority
from sisocc.domain.occurrence import OccurrenceFilter
from sisocc.store.protocols import OccurrenceRepository


class StatsSummary(BaseModel):
    total: int = 0
    by_status: dict[str, int] = Field(default_factory=dict)
    by_type: dict[str, int] = Field(default_factory=dict)
    by_priority: dict[str, int] = Field(default_factory=dict)
    average_response_time: int = Field(
        0, description="Mean response time in whole minutes (0 when none recorded)"
    )


def _with_zeroes(counts: dict[str, int], values) -> dict[str, int]:
    return {v.value: counts.get(v.value, 0) for v in values}


def average_minutes(samples: list[int]) -> int:
    """Mean of *samples* rounded half up; 0 for an empty list."""
    if not samples:
        return 0
    return math.floor(sum(samples) / len(samples) + 0.5)


class StatsAggregator:
    def __init__(self, repository: OccurrenceRepository) -> None:
        self._repository = repository

    async def summarize(self, criteria: OccurrenceFilter | None = None) -> StatsSummary:
        total, by_status, by_type, by_priority, response_times = await asyncio.gather(
            self._repository.count(criteria),
            self._repository.count_by("status", criteria),
            self._repository.count_by("type", criteria),
            self._repository.count_by("priority", criteria),
            self._repository.response_times(criteria),
        )
        return StatsSummary(
            total=total,
            by_status=_with_zeroes(by_status, OccurrenceStatus),
            by_type=_with_zeroes(by_type, OccurrenceType),
            by_priority=_with_zeroes(by_priority, Priority),
            average_response_time=average_minutes(response_times),
        )
