from datetime import date, datetime, time, timedelta
from typing import List

import pytest
from room_booking.domain.availability import BlockedWindow
from room_booking.domain.errors import DomainRuleError
from room_booking.domain.services import BookingPolicy
from room_booking.models import EventType, RequestStatus, RoomRequest
from room_booking.usecases import availability as uc

TODAY = date(2026, 10, 19)  # Monday
TWO_HOURS = timedelta(hours=2)


class FakeBlockedRepo:
    def __init__(self, windows: List[BlockedWindow]) -> None:
        self.windows = windows

    async def list_for_range(self, start: date, end: date) -> List[BlockedWindow]:
        return self.windows


class FakeRequestRepo:
    def __init__(self, approved: List[RoomRequest]) -> None:
        self.approved = approved

    async def list_approved(self, start: date, end: date) -> List[RoomRequest]:
        return [r for r in self.approved if start <= r.event_date <= end]


def _approved(day: date, start: int, end: int) -> RoomRequest:
    now = datetime(2026, 10, 1)
    return RoomRequest(
        request_number=f"PS-{day.isoformat()}-{start}",
        event_date=day,
        start_time=time(start, 0),
        end_time=time(end, 0),
        full_name="Ana Pérez",
        national_id="V12345678",
        email="ana@example.org",
        phone="04141234567",
        event_type=EventType.MEETING,
        attendee_count=5,
        description="Board meeting of the friends society",
        requires_equipment=False,
        status=RequestStatus.APPROVED,
        created_at=now,
        updated_at=now,
    )


@pytest.mark.asyncio
async def test_bookable_dates_skip_sundays_and_blocks(policy: BookingPolicy) -> None:
    blocked = FakeBlockedRepo([BlockedWindow(date=TODAY + timedelta(days=2), whole_day=True)])
    dates = await uc.get_bookable_dates(
        blocked, FakeRequestRepo([]), policy=policy, slot_length=TWO_HOURS, today=TODAY, horizon_days=7
    )
    assert dates == [
        date(2026, 10, 19),
        date(2026, 10, 20),
        date(2026, 10, 22),
        date(2026, 10, 23),
        date(2026, 10, 24),
        date(2026, 10, 26),
    ]


@pytest.mark.asyncio
async def test_bookable_dates_hide_fully_occupied_days(policy: BookingPolicy) -> None:
    day = TODAY + timedelta(days=1)
    requests = FakeRequestRepo([_approved(day, 8, 14), _approved(day, 14, 18)])
    dates = await uc.get_bookable_dates(
        FakeBlockedRepo([]), requests, policy=policy, slot_length=TWO_HOURS, today=TODAY, horizon_days=1
    )
    assert dates == [TODAY]

    shown = await uc.get_bookable_dates(
        FakeBlockedRepo([]),
        requests,
        policy=policy,
        slot_length=TWO_HOURS,
        today=TODAY,
        horizon_days=1,
        hide_full_days=False,
    )
    assert shown == [TODAY, day]


@pytest.mark.asyncio
async def test_requested_horizon_is_capped_by_policy(policy: BookingPolicy) -> None:
    dates = await uc.get_bookable_dates(
        FakeBlockedRepo([]), FakeRequestRepo([]), policy=policy, slot_length=TWO_HOURS, today=TODAY, horizon_days=400
    )
    assert max(dates) <= TODAY + timedelta(days=policy.horizon_days)


@pytest.mark.asyncio
async def test_slots_reflect_blocks_and_approved(policy: BookingPolicy) -> None:
    day = TODAY + timedelta(days=1)
    blocked = FakeBlockedRepo([BlockedWindow(date=day, start=time(10, 0), end=time(12, 0), reason="cleaning")])
    requests = FakeRequestRepo([_approved(day, 16, 18)])
    slots = await uc.get_slots_for_date(blocked, requests, policy=policy, slot_length=TWO_HOURS, day=day, today=TODAY)
    assert [(s.interval.start.hour, s.available) for s in slots] == [
        (8, True),
        (10, False),
        (12, True),
        (14, True),
        (16, False),
    ]


@pytest.mark.asyncio
async def test_slots_for_unbookable_date_raise(policy: BookingPolicy) -> None:
    with pytest.raises(DomainRuleError):
        await uc.get_slots_for_date(
            FakeBlockedRepo([]),
            FakeRequestRepo([]),
            policy=policy,
            slot_length=TWO_HOURS,
            day=date(2026, 10, 25),
            today=TODAY,
        )
