from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterator

from .errors import DomainRuleError


def _require_whole_minutes(value: time, name: str) -> None:
    if value.second or value.microsecond:
        raise DomainRuleError(f"{name} must be a whole minute")
    if value.tzinfo is not None:
        raise DomainRuleError(f"{name} must be a local wall-clock time")


@dataclass(frozen=True)
class TimeInterval:
    """A half-open ``[start, end)`` range of wall-clock time on one date."""

    date: date
    start: time
    end: time

    def __post_init__(self) -> None:
        _require_whole_minutes(self.start, "start")
        _require_whole_minutes(self.end, "end")
        # start < end on a single date also rules out spanning midnight
        if self.start >= self.end:
            raise DomainRuleError("start must be earlier than end")

    def __str__(self) -> str:
        return f"{self.date.isoformat()} {self.start:%H:%M}-{self.end:%H:%M}"


def overlaps(a: TimeInterval, b: TimeInterval) -> bool:
    return a.date == b.date and a.start < b.end and b.start < a.end


def is_within(interval: TimeInterval, window_start: time, window_end: time) -> bool:
    return interval.start >= window_start and interval.end <= window_end


@dataclass(frozen=True)
class OperatingWindow:
    opens_at: time
    closes_at: time

    def __post_init__(self) -> None:
        if self.opens_at >= self.closes_at:
            raise DomainRuleError("operating window must open before it closes")

    def contains(self, interval: TimeInterval) -> bool:
        return is_within(interval, self.opens_at, self.closes_at)

    def partition(self, day: date, slot_length: timedelta) -> Iterator[TimeInterval]:
        """Yield consecutive ``slot_length`` intervals covering the window on ``day``."""
        if slot_length <= timedelta(0):
            raise DomainRuleError("slot length must be positive")
        cursor = datetime.combine(day, self.opens_at)
        closing = datetime.combine(day, self.closes_at)
        while cursor < closing:
            nxt = min(cursor + slot_length, closing)
            yield TimeInterval(day, cursor.time(), nxt.time())
            cursor = nxt
