"""Controlled enumerations for the occurrence domain.

Every categorical field on an occurrence MUST reference an enum defined
here.  Free-form strings are not acceptable for classification fields.
"""

from __future__ import annotations

from enum import Enum


class OccurrenceType(str, Enum):
    """Incident categories handled by the fire brigade."""

    FIRE = "FIRE"
    RESCUE = "RESCUE"
    MEDICAL_EMERGENCY = "MEDICAL_EMERGENCY"
    TRAFFIC_ACCIDENT = "TRAFFIC_ACCIDENT"
    FLOOD = "FLOOD"
    HAZARDOUS_MATERIALS = "HAZARDOUS_MATERIALS"
    STRUCTURAL_COLLAPSE = "STRUCTURAL_COLLAPSE"
    TREE_FALL = "TREE_FALL"
    OTHER = "OTHER"


class OccurrenceStatus(str, Enum):
    """Lifecycle stage of an occurrence.

    Transitions between any two values are allowed.  Only entry into
    IN_PROGRESS and RESOLVED carries timestamp side effects.
    """

    NEW = "NEW"
    UNDER_REVIEW = "UNDER_REVIEW"
    IN_PROGRESS = "IN_PROGRESS"
    RESOLVED = "RESOLVED"
    CANCELLED = "CANCELLED"


class Priority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    CRITICAL = "CRITICAL"


class AuditAction(str, Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
