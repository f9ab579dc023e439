from __future__ import annotations

from typing import Mapping


class RoomBookingError(Exception):
    """Base class for every error the booking engine reports."""


class ValidationError(RoomBookingError):
    """One or more applicant fields failed validation; nothing was persisted."""

    def __init__(self, errors: Mapping[str, str]) -> None:
        self.errors = dict(errors)
        super().__init__("invalid fields: " + ", ".join(sorted(self.errors)))


class ConflictError(RoomBookingError):
    """The requested interval is no longer free at commit time."""


class DomainRuleError(RoomBookingError):
    """A scheduling rule was broken (date not bookable, interval outside hours, malformed interval)."""


class RequestNotFoundError(RoomBookingError):
    pass


class TransitionError(RoomBookingError):
    """A status change was attempted on a request that is already decided."""


class InfrastructureError(RoomBookingError):
    """The persistence layer failed or answered with something unexpected."""
