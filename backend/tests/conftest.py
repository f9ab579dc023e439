from datetime import date, time
from pathlib import Path
from typing import AsyncIterator, Awaitable, Callable, Optional

import pytest
import pytest_asyncio
from room_booking.database import build_engine, build_sessionmaker
from room_booking.domain.intervals import OperatingWindow
from room_booking.domain.services import BookingPolicy
from room_booking.domain.validation import ApplicantFields
from room_booking.models import Base, BlockedSchedule
from room_booking.utils.time import utc_now_naive
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker


@pytest.fixture
def policy() -> BookingPolicy:
    return BookingPolicy(
        window=OperatingWindow(time(8, 0), time(18, 0)),
        horizon_days=90,
        closed_weekdays=frozenset({7}),
    )


@pytest.fixture
def applicant() -> ApplicantFields:
    return ApplicantFields(
        full_name="Ana Pérez",
        national_id="V12345678",
        email="ana@example.org",
        phone="0414-123-4567",
        event_type="workshop",
        attendee_count=20,
        description="Reading club monthly workshop",
    )


@pytest_asyncio.fixture
async def engine(tmp_path: Path) -> AsyncIterator[AsyncEngine]:
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'room.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return build_sessionmaker(engine)


AddBlocked = Callable[..., Awaitable[None]]


@pytest.fixture
def add_blocked(session_factory: async_sessionmaker[AsyncSession]) -> AddBlocked:
    async def _add(
        event_date: date,
        start: Optional[time] = None,
        end: Optional[time] = None,
        *,
        whole_day: bool = False,
        permanent: bool = False,
        reason: str = "maintenance",
    ) -> None:
        now = utc_now_naive()
        async with session_factory() as session:
            async with session.begin():
                session.add(
                    BlockedSchedule(
                        event_date=event_date,
                        start_time=start,
                        end_time=end,
                        whole_day=whole_day,
                        permanent=permanent,
                        reason=reason,
                        created_at=now,
                        updated_at=now,
                    )
                )

    return _add
