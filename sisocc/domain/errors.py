"""Typed error taxonomy for the lifecycle engine.

Errors carry an ErrorKind instead of a transport status code.  The API
layer is the only place that maps kinds to HTTP responses.
"""

from __future__ import annotations

from enum import Enum
from uuid import UUID


class ErrorKind(str, Enum):
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    RESOLVER_UNAVAILABLE = "resolver_unavailable"
    ADDRESS_NOT_FOUND = "address_not_found"
    INTERNAL = "internal"


class OccurrenceError(Exception):
    """Base class for every error the engine raises on purpose."""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class OccurrenceValidationError(OccurrenceError):
    """Raised when input is missing required fields or is malformed."""

    kind = ErrorKind.VALIDATION

    def __init__(self, message: str, errors: list[str] | None = None) -> None:
        self.errors = errors or []
        super().__init__(message)


class CoordinatesRequiredError(OccurrenceValidationError):
    """Raised under the reject policy when an address cannot be resolved.

    The caller can correct this by supplying latitude and longitude.
    """

    def __init__(self, address: str) -> None:
        self.address = address
        super().__init__(
            "Could not locate the coordinates of this address automatically. "
            "Please enter latitude and longitude manually."
        )


class OccurrenceNotFoundError(OccurrenceError):
    kind = ErrorKind.NOT_FOUND

    def __init__(self, occurrence_id: UUID | str) -> None:
        self.occurrence_id = occurrence_id
        super().__init__("Occurrence not found")


class GeocodingError(OccurrenceError):
    """Base for address resolution failures."""


class ResolverUnavailableError(GeocodingError):
    """The lookup service is unreachable, timed out, or not configured."""

    kind = ErrorKind.RESOLVER_UNAVAILABLE


class AddressNotFoundError(GeocodingError):
    """The lookup service answered but returned no match."""

    kind = ErrorKind.ADDRESS_NOT_FOUND

    def __init__(self, address: str) -> None:
        self.address = address
        super().__init__(f"Address not found: {address}")
