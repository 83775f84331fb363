"""Tests for the HistoryRecorder."""

from datetime import timedelta
from uuid import uuid4

import pytest

from sisocc.core.history import HistoryRecorder
from sisocc.domain.enums import OccurrenceStatus
from sisocc.domain.history import HistoryEntry
from sisocc.store.append_only import InMemoryHistoryStore

from tests.test_occurrence import _BASE


def _entry(occurrence_id, new_status, at, previous=OccurrenceStatus.NEW) -> HistoryEntry:
    return HistoryEntry(
        occurrence_id=occurrence_id,
        previous_status=previous,
        new_status=new_status,
        actor_id="user-1",
        created_at=at,
    )


class TestHistoryRecorder:
    @pytest.mark.asyncio
    async def test_list_is_newest_first(self) -> None:
        recorder = HistoryRecorder(InMemoryHistoryStore())
        oid = uuid4()
        await recorder.record(_entry(oid, OccurrenceStatus.UNDER_REVIEW, _BASE))
        await recorder.record(_entry(oid, OccurrenceStatus.IN_PROGRESS, _BASE + timedelta(minutes=5)))
        await recorder.record(_entry(oid, OccurrenceStatus.RESOLVED, _BASE + timedelta(minutes=9)))

        statuses = [e.new_status for e in await recorder.list(oid)]
        assert statuses == [
            OccurrenceStatus.RESOLVED,
            OccurrenceStatus.IN_PROGRESS,
            OccurrenceStatus.UNDER_REVIEW,
        ]

    @pytest.mark.asyncio
    async def test_equal_timestamps_latest_append_first(self) -> None:
        recorder = HistoryRecorder(InMemoryHistoryStore())
        oid = uuid4()
        await recorder.record(_entry(oid, OccurrenceStatus.IN_PROGRESS, _BASE))
        await recorder.record(_entry(oid, OccurrenceStatus.RESOLVED, _BASE))
        first = (await recorder.list(oid))[0]
        assert first.new_status == OccurrenceStatus.RESOLVED

    @pytest.mark.asyncio
    async def test_list_is_a_fresh_query(self) -> None:
        recorder = HistoryRecorder(InMemoryHistoryStore())
        oid = uuid4()
        await recorder.record(_entry(oid, OccurrenceStatus.IN_PROGRESS, _BASE))
        listed = await recorder.list(oid)
        listed.clear()
        assert len(await recorder.list(oid)) == 1

    def test_entries_are_immutable(self) -> None:
        entry = _entry(uuid4(), OccurrenceStatus.IN_PROGRESS, _BASE)
        with pytest.raises(Exception):
            entry.note = "rewritten"

    @pytest.mark.asyncio
    async def test_repository_failure_propagates(self) -> None:
        class BrokenRepository:
            async def append(self, entry):
                raise RuntimeError("disk full")

            async def list_for(self, occurrence_id):
                return []

        recorder = HistoryRecorder(BrokenRepository())
        with pytest.raises(RuntimeError):
            await recorder.record(_entry(uuid4(), OccurrenceStatus.RESOLVED, _BASE))
