from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import Settings, get_settings
from ..deps import get_policy, get_session, get_today
from ..domain.errors import DomainRuleError, InfrastructureError
from ..domain.services import BookingPolicy
from ..infrastructure.repositories import SqlAlchemyBlockedWindowRepository, SqlAlchemyRoomRequestRepository
from ..schemas import SlotRead
from ..usecases import availability as availability_usecase

router = APIRouter(prefix="/room", tags=["availability"])


@router.get("/bookable-dates", response_model=List[date])
async def list_bookable_dates(
    horizon_days: Optional[int] = Query(default=None, ge=0),
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
    policy: BookingPolicy = Depends(get_policy),
    today: date = Depends(get_today),
) -> list[date]:
    try:
        return await availability_usecase.get_bookable_dates(
            SqlAlchemyBlockedWindowRepository(session),
            SqlAlchemyRoomRequestRepository(session),
            policy=policy,
            slot_length=settings.slot_length,
            today=today,
            horizon_days=settings.horizon_days if horizon_days is None else horizon_days,
            hide_full_days=settings.hide_full_days,
        )
    except InfrastructureError:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="storage unavailable")


@router.get("/dates/{day}/slots", response_model=List[SlotRead])
async def list_slots(
    day: date,
    session: AsyncSession = Depends(get_session),
    settings: Settings = Depends(get_settings),
    policy: BookingPolicy = Depends(get_policy),
    today: date = Depends(get_today),
) -> list[SlotRead]:
    try:
        slots = await availability_usecase.get_slots_for_date(
            SqlAlchemyBlockedWindowRepository(session),
            SqlAlchemyRoomRequestRepository(session),
            policy=policy,
            slot_length=settings.slot_length,
            day=day,
            today=today,
        )
    except DomainRuleError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    except InfrastructureError:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="storage unavailable")
    return [SlotRead.from_domain(slot) for slot in slots]
