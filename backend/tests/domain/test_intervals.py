from datetime import date, time, timedelta

import pytest
from room_booking.domain.errors import DomainRuleError
from room_booking.domain.intervals import OperatingWindow, TimeInterval, is_within, overlaps

DAY = date(2026, 10, 20)


def _iv(start: str, end: str, day: date = DAY) -> TimeInterval:
    return TimeInterval(day, time.fromisoformat(start), time.fromisoformat(end))


def test_rejects_start_not_before_end() -> None:
    with pytest.raises(DomainRuleError):
        _iv("10:00", "10:00")
    with pytest.raises(DomainRuleError):
        _iv("12:00", "10:00")


def test_rejects_seconds() -> None:
    with pytest.raises(DomainRuleError):
        TimeInterval(DAY, time(10, 0, 30), time(11, 0))


def test_touching_intervals_do_not_overlap() -> None:
    assert overlaps(_iv("08:00", "10:00"), _iv("10:00", "12:00")) is False


def test_overlap_is_symmetric() -> None:
    pairs = [
        (_iv("08:00", "10:00"), _iv("09:00", "11:00")),
        (_iv("08:00", "18:00"), _iv("12:00", "13:00")),
        (_iv("08:00", "10:00"), _iv("14:00", "16:00")),
        (_iv("10:00", "12:00"), _iv("08:00", "10:00")),
    ]
    for a, b in pairs:
        assert overlaps(a, b) == overlaps(b, a)


def test_interval_overlaps_itself() -> None:
    iv = _iv("10:00", "12:00")
    assert overlaps(iv, iv)


def test_different_dates_never_overlap() -> None:
    assert overlaps(_iv("10:00", "12:00"), _iv("10:00", "12:00", DAY + timedelta(days=1))) is False


def test_is_within_bounds_inclusive() -> None:
    assert is_within(_iv("08:00", "18:00"), time(8, 0), time(18, 0))
    assert not is_within(_iv("07:30", "09:00"), time(8, 0), time(18, 0))
    assert not is_within(_iv("17:00", "18:30"), time(8, 0), time(18, 0))


def test_partition_covers_window_without_gaps() -> None:
    window = OperatingWindow(time(8, 0), time(18, 0))
    slots = list(window.partition(DAY, timedelta(hours=2)))
    assert [(s.start, s.end) for s in slots] == [
        (time(8, 0), time(10, 0)),
        (time(10, 0), time(12, 0)),
        (time(12, 0), time(14, 0)),
        (time(14, 0), time(16, 0)),
        (time(16, 0), time(18, 0)),
    ]
    for prev, nxt in zip(slots, slots[1:]):
        assert prev.end == nxt.start
        assert not overlaps(prev, nxt)


def test_partition_rejects_non_positive_length() -> None:
    window = OperatingWindow(time(8, 0), time(18, 0))
    with pytest.raises(DomainRuleError):
        list(window.partition(DAY, timedelta(0)))
