from __future__ import annotations

import functools
from datetime import date, timedelta
from typing import Any, Awaitable, Callable, List, Mapping, Optional, TypeVar

from sqlalchemy import Select, or_, select
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.dml import Insert

from ..domain.availability import BlockedWindow
from ..domain.errors import ConflictError, InfrastructureError
from ..domain.intervals import TimeInterval
from ..domain.repositories import BlockedWindowRepository, RoomRequestRepository
from ..domain.services import ensure_interval_free
from ..models import BlockedSchedule, RequestStatus, RoomDay, RoomRequest
from ..utils.time import utc_now_naive

T = TypeVar("T")

_room_days = RoomDay.__table__

# MySQL ER_LOCK_DEADLOCK
_MYSQL_DEADLOCK = 1213


def _translate_db_errors(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> T:
        try:
            return await func(*args, **kwargs)
        except SQLAlchemyError as exc:
            raise InfrastructureError(f"{func.__name__} failed: {exc.__class__.__name__}") from exc

    return wrapper


def is_deadlock(exc: OperationalError) -> bool:
    args = getattr(exc.orig, "args", ())
    return bool(args) and args[0] == _MYSQL_DEADLOCK


def lock_day_stmt(dialect_name: str, day: date) -> Insert:
    """Single-statement upsert that creates or bumps the lock row for ``day``.

    The statement leaves the row exclusively locked until the transaction ends.
    """
    bumped = _room_days.c.lock_version + 1
    if dialect_name in ("mysql", "mariadb"):
        stmt = mysql.insert(_room_days).values(event_date=day, lock_version=1)
        return stmt.on_duplicate_key_update(lock_version=bumped)
    if dialect_name == "postgresql":
        pg_stmt = postgresql.insert(_room_days).values(event_date=day, lock_version=1)
        return pg_stmt.on_conflict_do_update(index_elements=[_room_days.c.event_date], set_={"lock_version": bumped})
    if dialect_name == "sqlite":
        lite_stmt = sqlite.insert(_room_days).values(event_date=day, lock_version=1)
        return lite_stmt.on_conflict_do_update(index_elements=[_room_days.c.event_date], set_={"lock_version": bumped})
    raise InfrastructureError(f"no day lock statement for dialect {dialect_name!r}")


def blocked_windows_stmt(start: date, end: date, *, for_update: bool = False) -> Select[tuple[BlockedSchedule]]:
    stmt = select(BlockedSchedule).where(
        or_(
            BlockedSchedule.event_date.between(start, end),
            BlockedSchedule.permanent.is_(True),
        )
    )
    return stmt.with_for_update() if for_update else stmt


def claimed_intervals_stmt(day: date) -> Select[Any]:
    # locking read: sees the latest committed claims whatever the isolation level
    return (
        select(RoomRequest.start_time, RoomRequest.end_time)
        .where(
            RoomRequest.event_date == day,
            RoomRequest.status != RequestStatus.REJECTED,
        )
        .with_for_update()
    )


def _to_window(row: BlockedSchedule) -> BlockedWindow:
    return BlockedWindow(
        date=row.event_date,
        start=row.start_time,
        end=row.end_time,
        whole_day=row.whole_day,
        permanent=row.permanent,
        reason=row.reason,
    )


class SqlAlchemyBlockedWindowRepository(BlockedWindowRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @_translate_db_errors
    async def list_for_range(self, start: date, end: date, *, for_update: bool = False) -> List[BlockedWindow]:
        rows = (await self.session.scalars(blocked_windows_stmt(start, end, for_update=for_update))).all()
        days = [start + timedelta(days=n) for n in range((end - start).days + 1)]
        windows = [_to_window(row) for row in rows]
        return [w for w in windows if any(w.applies_to(day) for day in days)]


class SqlAlchemyRoomRequestRepository(RoomRequestRepository):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @_translate_db_errors
    async def list_approved(self, start: date, end: date) -> List[RoomRequest]:
        stmt = (
            select(RoomRequest)
            .where(
                RoomRequest.status == RequestStatus.APPROVED,
                RoomRequest.event_date.between(start, end),
            )
            .order_by(RoomRequest.event_date, RoomRequest.start_time)
        )
        return list((await self.session.scalars(stmt)).all())

    async def _lock_day(self, day: date) -> None:
        dialect_name = self.session.get_bind().dialect.name
        await self.session.execute(lock_day_stmt(dialect_name, day))

    async def _claimed_intervals(self, day: date) -> List[TimeInterval]:
        rows = await self.session.execute(claimed_intervals_stmt(day))
        return [TimeInterval(day, start, end) for start, end in rows.all()]

    @_translate_db_errors
    async def insert_request_if_free(
        self,
        interval: TimeInterval,
        fields: Mapping[str, Any],
        *,
        request_number: str,
    ) -> RoomRequest:
        try:
            await self._lock_day(interval.date)
            blocked = await SqlAlchemyBlockedWindowRepository(self.session).list_for_range(
                interval.date, interval.date, for_update=True
            )
            claimed = await self._claimed_intervals(interval.date)
        except OperationalError as exc:
            if is_deadlock(exc):
                raise ConflictError(f"{interval} is being claimed by another request") from exc
            raise
        ensure_interval_free(interval, blocked_windows=blocked, claimed_intervals=claimed)

        now = utc_now_naive()
        request = RoomRequest(
            request_number=request_number,
            event_date=interval.date,
            start_time=interval.start,
            end_time=interval.end,
            status=RequestStatus.PENDING,
            created_at=now,
            updated_at=now,
            **fields,
        )
        self.session.add(request)
        await self.session.flush()
        return request

    @_translate_db_errors
    async def get_by_number(self, request_number: str) -> Optional[RoomRequest]:
        stmt = select(RoomRequest).where(RoomRequest.request_number == request_number)
        return await self.session.scalar(stmt)

    @_translate_db_errors
    async def get_by_number_for_update(self, request_number: str) -> Optional[RoomRequest]:
        stmt = select(RoomRequest).where(RoomRequest.request_number == request_number).with_for_update()
        stmt = stmt.execution_options(populate_existing=True)
        return await self.session.scalar(stmt)

    @_translate_db_errors
    async def update_status(
        self,
        request: RoomRequest,
        status: RequestStatus,
        comment: str | None,
    ) -> RoomRequest:
        now = utc_now_naive()
        request.status = status
        request.admin_comment = comment
        request.responded_at = now
        request.updated_at = now
        self.session.add(request)
        await self.session.flush()
        return request

    @_translate_db_errors
    async def list_by_status(self, status: RequestStatus | None = None) -> List[RoomRequest]:
        stmt = select(RoomRequest).order_by(RoomRequest.event_date, RoomRequest.start_time)
        if status is not None:
            stmt = stmt.where(RoomRequest.status == status)
        return list((await self.session.scalars(stmt)).all())
