from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Optional

from ..models import EventType

MIN_ATTENDEES = 1
MAX_ATTENDEES = 50

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
_PHONE_RE = re.compile(r"^[0-9]{10,11}$")
# V = citizen, E = resident
_NATIONAL_ID_RE = re.compile(r"^[VE][0-9]{7,8}$")
_NON_DIGIT_RE = re.compile(r"\D")
_WHITESPACE_RE = re.compile(r"\s")


@dataclass(frozen=True)
class ApplicantFields:
    full_name: str
    national_id: str
    email: str
    phone: str
    event_type: str
    attendee_count: Any
    description: str
    requires_equipment: bool = False
    equipment_requested: Optional[str] = None


@dataclass(frozen=True)
class ValidationResult:
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors


def _visible_length(value: Any) -> int:
    if not isinstance(value, str):
        return 0
    return len(_WHITESPACE_RE.sub("", value))


def _attendee_count_error(value: Any) -> str | None:
    # bool is an int subclass; True must not count as one attendee
    if isinstance(value, bool) or not isinstance(value, int):
        return "attendee count must be a whole number"
    if not MIN_ATTENDEES <= value <= MAX_ATTENDEES:
        return f"attendee count must be between {MIN_ATTENDEES} and {MAX_ATTENDEES}"
    return None


def validate_applicant(fields: ApplicantFields) -> ValidationResult:
    """Check every applicant field independently and collect all failures."""
    errors: dict[str, str] = {}

    if _visible_length(fields.full_name) < 3:
        errors["full_name"] = "name must have at least 3 characters"
    if not isinstance(fields.email, str) or not _EMAIL_RE.match(fields.email.strip()):
        errors["email"] = "email must look like local@domain"
    if not isinstance(fields.phone, str) or not _PHONE_RE.match(_NON_DIGIT_RE.sub("", fields.phone)):
        errors["phone"] = "phone must have 10 or 11 digits"
    if not isinstance(fields.national_id, str) or not _NATIONAL_ID_RE.match(fields.national_id.strip().upper()):
        errors["national_id"] = "document must be V or E followed by 7-8 digits"
    count_error = _attendee_count_error(fields.attendee_count)
    if count_error:
        errors["attendee_count"] = count_error
    if fields.event_type not in {e.value for e in EventType}:
        errors["event_type"] = "event type must be one of: " + ", ".join(e.value for e in EventType)
    if _visible_length(fields.description) < 10:
        errors["description"] = "description must have at least 10 characters"
    if fields.requires_equipment and _visible_length(fields.equipment_requested) == 0:
        errors["equipment_requested"] = "describe the equipment you need"

    return ValidationResult(errors=errors)


def normalize_applicant(fields: ApplicantFields) -> dict[str, Any]:
    """Column values for an already validated applicant."""
    return {
        "full_name": fields.full_name.strip(),
        "national_id": fields.national_id.strip().upper(),
        "email": fields.email.strip(),
        "phone": fields.phone.strip(),
        "event_type": EventType(fields.event_type),
        "attendee_count": fields.attendee_count,
        "description": fields.description.strip(),
        "requires_equipment": fields.requires_equipment,
        "equipment_requested": (fields.equipment_requested or "").strip() or None,
    }
