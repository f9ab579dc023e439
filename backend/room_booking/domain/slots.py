from __future__ import annotations

from dataclasses import dataclass
from datetime import date, time, timedelta
from typing import Iterable, Iterator, Sequence

from .availability import BlockedWindow
from .intervals import OperatingWindow, TimeInterval, overlaps

_LABELS: Sequence[tuple[time, str]] = (
    (time(10, 0), "Early morning"),
    (time(12, 0), "Mid-morning"),
    (time(14, 0), "Midday"),
    (time(16, 0), "Early afternoon"),
    (time(18, 0), "Afternoon"),
)


@dataclass(frozen=True)
class SlotOccupancy:
    interval: TimeInterval
    available: bool
    label: str


def slot_label(start: time) -> str:
    for bound, label in _LABELS:
        if start < bound:
            return label
    return "Evening"


def resolve_slots(
    day: date,
    window: OperatingWindow,
    slot_length: timedelta,
    blocked_windows: Iterable[BlockedWindow],
    approved_intervals: Iterable[TimeInterval],
) -> Iterator[SlotOccupancy]:
    """Partition the operating window on ``day`` and mark each slot free or occupied.

    Blocked windows that do not apply to ``day`` and approved intervals on other
    dates are ignored. A whole-day block occupies every slot. Slots come out in
    ascending order; call again for a fresh view.
    """
    blocked = list(blocked_windows)
    whole_day = any(w.blocks_whole(day) for w in blocked)
    busy = [iv for iv in (w.interval_on(day) for w in blocked) if iv is not None]
    busy.extend(iv for iv in approved_intervals if iv.date == day)

    for slot in window.partition(day, slot_length):
        occupied = whole_day or any(overlaps(slot, iv) for iv in busy)
        yield SlotOccupancy(interval=slot, available=not occupied, label=slot_label(slot.start))
