"""Tests for the StatsAggregator."""

import pytest

from sisocc.core.stats import StatsAggregator, average_minutes
from sisocc.domain.enums import OccurrenceStatus, OccurrenceType, Priority
from sisocc.domain.occurrence import OccurrenceFilter
from sisocc.store.occurrence_store import InMemoryOccurrenceStore

from tests.test_occurrence import _stored


class TestAverageMinutes:
    def test_empty_is_zero(self) -> None:
        assert average_minutes([]) == 0

    def test_rounds_half_up(self) -> None:
        assert average_minutes([1, 2]) == 2
        assert average_minutes([2, 3]) == 3

    def test_rounds_down_below_half(self) -> None:
        assert average_minutes([10, 10, 11]) == 10


class TestStatsAggregator:
    @pytest.mark.asyncio
    async def test_empty_set(self) -> None:
        summary = await StatsAggregator(InMemoryOccurrenceStore()).summarize()
        assert summary.total == 0
        assert summary.average_response_time == 0
        assert set(summary.by_status.values()) == {0}

    @pytest.mark.asyncio
    async def test_counts_and_average(self) -> None:
        store = InMemoryOccurrenceStore()
        await store.add(_stored(status=OccurrenceStatus.IN_PROGRESS, response_time_minutes=15))
        await store.add(_stored(status=OccurrenceStatus.RESOLVED, response_time_minutes=20,
                                type=OccurrenceType.RESCUE, priority=Priority.HIGH))
        await store.add(_stored())

        summary = await StatsAggregator(store).summarize()
        assert summary.total == 3
        assert summary.by_status["NEW"] == 1
        assert summary.by_status["IN_PROGRESS"] == 1
        assert summary.by_status["RESOLVED"] == 1
        assert summary.by_status["UNDER_REVIEW"] == 0
        assert summary.by_type["FIRE"] == 2
        assert summary.by_type["RESCUE"] == 1
        assert summary.by_priority == {"LOW": 0, "MEDIUM": 2, "HIGH": 1, "CRITICAL": 0}
        # (15 + 20) / 2 = 17.5 → 18
        assert summary.average_response_time == 18

    @pytest.mark.asyncio
    async def test_filtered_summary(self) -> None:
        store = InMemoryOccurrenceStore()
        await store.add(_stored(type=OccurrenceType.FLOOD, response_time_minutes=30))
        await store.add(_stored(type=OccurrenceType.FIRE, response_time_minutes=2))

        summary = await StatsAggregator(store).summarize(
            OccurrenceFilter(type=OccurrenceType.FLOOD)
        )
        assert summary.total == 1
        assert summary.average_response_time == 30

    @pytest.mark.asyncio
    async def test_every_call_rescans(self) -> None:
        store = InMemoryOccurrenceStore()
        aggregator = StatsAggregator(store)
        assert (await aggregator.summarize()).total == 0
        await store.add(_stored())
        assert (await aggregator.summarize()).total == 1
