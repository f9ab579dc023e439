from datetime import date, timedelta
from typing import List

from ..domain.availability import candidate_dates, date_rejection
from ..domain.errors import DomainRuleError
from ..domain.repositories import BlockedWindowRepository, RoomRequestRepository
from ..domain.services import BookingPolicy
from ..domain.slots import SlotOccupancy, resolve_slots


async def get_bookable_dates(
    blocked_repo: BlockedWindowRepository,
    request_repo: RoomRequestRepository,
    *,
    policy: BookingPolicy,
    slot_length: timedelta,
    today: date,
    horizon_days: int,
    hide_full_days: bool = True,
) -> List[date]:
    """Dates from ``today`` to ``today + horizon_days`` a caller may pick."""
    if horizon_days < 0:
        raise DomainRuleError("horizon_days must be >= 0")
    horizon_days = min(horizon_days, policy.horizon_days)
    last = today + timedelta(days=horizon_days)
    blocked = await blocked_repo.list_for_range(today, last)
    approved = [req.interval for req in await request_repo.list_approved(today, last)] if hide_full_days else []

    dates: List[date] = []
    for day in candidate_dates(today, horizon_days):
        rejection = date_rejection(
            day,
            today=today,
            horizon_days=policy.horizon_days,
            blocked_windows=blocked,
            closed_weekdays=policy.closed_weekdays,
        )
        if rejection is not None:
            continue
        if hide_full_days and not any(
            slot.available for slot in resolve_slots(day, policy.window, slot_length, blocked, approved)
        ):
            continue
        dates.append(day)
    return dates


async def get_slots_for_date(
    blocked_repo: BlockedWindowRepository,
    request_repo: RoomRequestRepository,
    *,
    policy: BookingPolicy,
    slot_length: timedelta,
    day: date,
    today: date,
) -> List[SlotOccupancy]:
    blocked = await blocked_repo.list_for_range(day, day)
    rejection = date_rejection(
        day,
        today=today,
        horizon_days=policy.horizon_days,
        blocked_windows=blocked,
        closed_weekdays=policy.closed_weekdays,
    )
    if rejection is not None:
        raise DomainRuleError(f"date {day.isoformat()} is not bookable ({rejection.value})")
    approved = [req.interval for req in await request_repo.list_approved(day, day)]
    return list(resolve_slots(day, policy.window, slot_length, blocked, approved))
