"""Tests for occurrence input models and filters."""

from datetime import datetime, timedelta, timezone

import pytest

from sisocc.domain.enums import OccurrenceStatus, OccurrenceType, Priority
from sisocc.domain.errors import ErrorKind, OccurrenceValidationError
from sisocc.domain.occurrence import (
    Occurrence,
    OccurrenceCreate,
    OccurrenceFilter,
    OccurrencePatch,
)

_BASE = datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)


def _valid_occurrence(**overrides) -> dict:
    """Return a valid create payload, with optional overrides."""
    base = {
        "type": "FIRE",
        "location": "Warehouse",
        "address": "100 Main St",
        "latitude": -8.06,
        "longitude": -34.88,
        "description": "Smoke seen from the loading bay",
    }
    base.update(overrides)
    return base


def _stored(**overrides) -> Occurrence:
    """A stored occurrence as the engine would have persisted it."""
    base = {
        "type": OccurrenceType.FIRE,
        "location": "Warehouse",
        "address": "100 Main St",
        "latitude": -8.06,
        "longitude": -34.88,
        "created_by": "user-1",
        "occurred_at": _BASE,
        "created_at": _BASE,
        "updated_at": _BASE,
    }
    base.update(overrides)
    return Occurrence(**base)


class TestOccurrenceCreate:
    def test_valid_payload_parses(self) -> None:
        data = OccurrenceCreate.parse(_valid_occurrence())
        assert data.type == OccurrenceType.FIRE
        assert data.coordinates is not None
        assert data.coordinates.latitude == -8.06

    def test_status_and_priority_are_optional(self) -> None:
        data = OccurrenceCreate.parse(_valid_occurrence())
        assert data.status is None
        assert data.priority is None

    @pytest.mark.parametrize("field", ["type", "location", "address"])
    def test_missing_required_field_rejected(self, field: str) -> None:
        raw = _valid_occurrence()
        del raw[field]
        with pytest.raises(OccurrenceValidationError) as info:
            OccurrenceCreate.parse(raw)
        assert info.value.kind == ErrorKind.VALIDATION
        assert info.value.message == "type, location and address are required"

    def test_blank_address_counts_as_missing(self) -> None:
        with pytest.raises(OccurrenceValidationError) as info:
            OccurrenceCreate.parse(_valid_occurrence(address="   "))
        assert info.value.message == "type, location and address are required"

    def test_unknown_type_rejected(self) -> None:
        with pytest.raises(OccurrenceValidationError) as info:
            OccurrenceCreate.parse(_valid_occurrence(type="ALIEN_INVASION"))
        assert info.value.message == "Invalid occurrence data"
        assert any(line.startswith("type") for line in info.value.errors)

    def test_out_of_range_latitude_rejected(self) -> None:
        with pytest.raises(OccurrenceValidationError):
            OccurrenceCreate.parse(_valid_occurrence(latitude=123.0))

    def test_numeric_strings_are_coerced(self) -> None:
        data = OccurrenceCreate.parse(_valid_occurrence(latitude="-8.05", longitude="-34.9"))
        assert data.latitude == -8.05
        assert data.longitude == -34.9

    def test_single_coordinate_is_not_enough(self) -> None:
        data = OccurrenceCreate.parse(_valid_occurrence(longitude=None))
        assert data.coordinates is None

    def test_non_object_payload_rejected(self) -> None:
        with pytest.raises(OccurrenceValidationError):
            OccurrenceCreate.parse(["FIRE"])


class TestOccurrencePatch:
    def test_only_supplied_fields_are_reported(self) -> None:
        patch = OccurrencePatch.parse({"priority": "HIGH"})
        assert patch.supplied() == {"priority": Priority.HIGH}

    def test_note_maps_to_notes(self) -> None:
        patch = OccurrencePatch.parse({"status": "IN_PROGRESS", "note": "crew dispatched"})
        assert patch.supplied() == {
            "status": OccurrenceStatus.IN_PROGRESS,
            "notes": "crew dispatched",
        }

    def test_explicit_null_clears_assignee(self) -> None:
        patch = OccurrencePatch.parse({"assignee_id": None})
        assert patch.supplied() == {"assignee_id": None}

    def test_null_status_rejected(self) -> None:
        with pytest.raises(OccurrenceValidationError):
            OccurrencePatch.parse({"status": None})

    def test_unknown_field_rejected(self) -> None:
        with pytest.raises(OccurrenceValidationError):
            OccurrencePatch.parse({"occurred_at": "2020-01-01T00:00:00Z"})

    def test_invalid_status_rejected(self) -> None:
        with pytest.raises(OccurrenceValidationError):
            OccurrencePatch.parse({"status": "DONE"})

    def test_empty_patch_is_valid(self) -> None:
        assert OccurrencePatch.parse({}).supplied() == {}


class TestOccurrenceFilter:
    def test_empty_filter_matches_everything(self) -> None:
        assert OccurrenceFilter().matches(_stored())

    def test_status_filter(self) -> None:
        criteria = OccurrenceFilter(status=OccurrenceStatus.RESOLVED)
        assert not criteria.matches(_stored())
        assert criteria.matches(_stored(status=OccurrenceStatus.RESOLVED))

    def test_date_bounds_are_inclusive(self) -> None:
        criteria = OccurrenceFilter(date_from=_BASE, date_to=_BASE)
        assert criteria.matches(_stored())

    def test_date_range_excludes_outside(self) -> None:
        criteria = OccurrenceFilter(date_from=_BASE + timedelta(days=1))
        assert not criteria.matches(_stored())

    def test_naive_bounds_get_utc(self) -> None:
        criteria = OccurrenceFilter(date_to=datetime(2024, 1, 2))
        assert criteria.date_to.tzinfo is not None
        assert criteria.matches(_stored())
