from datetime import date
from functools import lru_cache
from typing import AsyncIterator
from zoneinfo import ZoneInfo

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from .config import Settings, get_settings
from .database import async_session
from .domain.intervals import OperatingWindow
from .domain.services import BookingPolicy
from .utils.auth import Principal, decode_access_token
from .utils.request_number import RequestNumberGenerator
from .utils.time import today_in


async def get_session() -> AsyncIterator[AsyncSession]:
    async with async_session() as session:
        yield session


def get_policy(settings: Settings = Depends(get_settings)) -> BookingPolicy:
    return BookingPolicy(
        window=OperatingWindow(settings.opens_at, settings.closes_at),
        horizon_days=settings.horizon_days,
        closed_weekdays=frozenset(settings.closed_weekdays),
    )


def get_zone(settings: Settings = Depends(get_settings)) -> ZoneInfo:
    return ZoneInfo(settings.timezone)


def get_today(zone: ZoneInfo = Depends(get_zone)) -> date:
    return today_in(zone)


@lru_cache
def _number_generator(prefix: str) -> RequestNumberGenerator:
    return RequestNumberGenerator(prefix)


def get_request_number_generator(settings: Settings = Depends(get_settings)) -> RequestNumberGenerator:
    return _number_generator(settings.request_number_prefix)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_principal(
    authorization: str | None = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> Principal:
    if authorization is None:
        raise _unauthorized("Authorization header required")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        raise _unauthorized("Bearer token required")
    try:
        return decode_access_token(token, secret=settings.auth_secret, algorithms=[settings.auth_algorithm])
    except ValueError as exc:
        raise _unauthorized("Invalid or expired token") from exc


async def require_admin(principal: Principal = Depends(get_current_principal)) -> Principal:
    if not principal.is_admin:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="administrator role required")
    return principal
