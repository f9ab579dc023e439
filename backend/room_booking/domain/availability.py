from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time, timedelta
from enum import StrEnum
from typing import Collection, Iterable, Iterator, Optional

from .intervals import TimeInterval


@dataclass(frozen=True)
class BlockedWindow:
    """An administrator-declared period during which the room cannot be booked.

    Whole-day windows ignore ``start``/``end``. Permanent windows recur every
    year on the month/day of ``date``; a permanent 29 February only applies in
    leap years.
    """

    date: date
    start: Optional[time] = None
    end: Optional[time] = None
    whole_day: bool = False
    permanent: bool = False
    reason: str = ""

    def applies_to(self, day: date) -> bool:
        if self.permanent:
            return (self.date.month, self.date.day) == (day.month, day.day)
        return self.date == day

    def blocks_whole(self, day: date) -> bool:
        return self.whole_day and self.applies_to(day)

    def interval_on(self, day: date) -> Optional[TimeInterval]:
        """The partial-day interval this window blocks on ``day``, if any."""
        if self.whole_day or not self.applies_to(day):
            return None
        if self.start is None or self.end is None:
            return None
        return TimeInterval(day, self.start, self.end)


class DateRejection(StrEnum):
    PAST = "past"
    BEYOND_HORIZON = "beyond_horizon"
    CLOSED_WEEKDAY = "closed_weekday"
    BLOCKED = "blocked"


def date_rejection(
    day: date,
    *,
    today: date,
    horizon_days: int,
    blocked_windows: Iterable[BlockedWindow],
    closed_weekdays: Collection[int],
) -> DateRejection | None:
    """Return the first rule ``day`` fails, or None when it is bookable.

    ``closed_weekdays`` holds ISO weekday numbers (Monday=1 .. Sunday=7).
    Only whole-day windows are considered; partial ones are the slot resolver's job.
    """
    if day < today:
        return DateRejection.PAST
    if day > today + timedelta(days=horizon_days):
        return DateRejection.BEYOND_HORIZON
    if day.isoweekday() in closed_weekdays:
        return DateRejection.CLOSED_WEEKDAY
    if any(window.blocks_whole(day) for window in blocked_windows):
        return DateRejection.BLOCKED
    return None


def is_date_bookable(
    day: date,
    *,
    today: date,
    horizon_days: int,
    blocked_windows: Iterable[BlockedWindow],
    closed_weekdays: Collection[int],
) -> bool:
    return (
        date_rejection(
            day,
            today=today,
            horizon_days=horizon_days,
            blocked_windows=blocked_windows,
            closed_weekdays=closed_weekdays,
        )
        is None
    )


def candidate_dates(today: date, horizon_days: int) -> Iterator[date]:
    for offset in range(horizon_days + 1):
        yield today + timedelta(days=offset)
