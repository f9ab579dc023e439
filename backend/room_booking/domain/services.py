from dataclasses import dataclass
from datetime import date
from typing import Collection, Iterable

from ..models import RequestStatus
from .availability import BlockedWindow, date_rejection
from .errors import ConflictError, DomainRuleError, TransitionError
from .intervals import OperatingWindow, TimeInterval, overlaps


@dataclass(frozen=True)
class BookingPolicy:
    window: OperatingWindow
    horizon_days: int
    closed_weekdays: Collection[int]


def ensure_requestable(
    interval: TimeInterval,
    policy: BookingPolicy,
    *,
    today: date,
    blocked_windows: Iterable[BlockedWindow],
) -> None:
    """
    Pure validation: the interval sits inside opening hours on a bookable date.
    Raises DomainRuleError naming the rule that failed.
    """
    if not policy.window.contains(interval):
        raise DomainRuleError(
            f"interval must fall within opening hours "
            f"{policy.window.opens_at:%H:%M}-{policy.window.closes_at:%H:%M}"
        )
    rejection = date_rejection(
        interval.date,
        today=today,
        horizon_days=policy.horizon_days,
        blocked_windows=blocked_windows,
        closed_weekdays=policy.closed_weekdays,
    )
    if rejection is not None:
        raise DomainRuleError(f"date {interval.date.isoformat()} is not bookable ({rejection.value})")


def ensure_interval_free(
    requested: TimeInterval,
    *,
    blocked_windows: Iterable[BlockedWindow],
    claimed_intervals: Iterable[TimeInterval],
) -> None:
    """
    Pure conflict check run inside the guarded transaction.
    Raises ConflictError if a block or an existing claim overlaps ``requested``.
    """
    for window in blocked_windows:
        if window.blocks_whole(requested.date):
            raise ConflictError(f"room is blocked on {requested.date.isoformat()}")
        blocked = window.interval_on(requested.date)
        if blocked is not None and overlaps(requested, blocked):
            raise ConflictError(f"room is blocked during {blocked}")
    for claimed in claimed_intervals:
        if overlaps(requested, claimed):
            raise ConflictError(f"{requested} overlaps an existing request ({claimed})")


def decide_status(current: RequestStatus, *, approve: bool) -> RequestStatus:
    """Pending is the only state that accepts a decision; both outcomes are terminal."""
    if current != RequestStatus.PENDING:
        raise TransitionError(f"request is already {current.value}")
    return RequestStatus.APPROVED if approve else RequestStatus.REJECTED
