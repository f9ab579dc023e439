from datetime import date, datetime, time, timezone
from typing import Any, cast
from zoneinfo import ZoneInfo

import pytest
from fastapi import HTTPException
from room_booking.domain.errors import ConflictError, TransitionError, ValidationError
from room_booking.domain.services import BookingPolicy
from room_booking.models import EventType, RequestStatus, RoomRequest
from room_booking.routers import admin as admin_router
from room_booking.routers import reservations as router
from room_booking.schemas import RoomRequestCreate, RoomRequestDecision
from sqlalchemy.ext.asyncio import AsyncSession

ZONE = ZoneInfo("America/Caracas")
TODAY = date(2026, 10, 19)


class DummySession:
    """Minimal async session stub that supports `async with session.begin()`."""

    async def __aenter__(self) -> "DummySession":
        return self

    async def __aexit__(self, exc_type: object, exc: object, tb: object) -> bool:
        return False

    def begin(self) -> "DummySession":
        return self


def _request(status: RequestStatus = RequestStatus.PENDING) -> RoomRequest:
    now = datetime.now(timezone.utc).replace(tzinfo=None)
    return RoomRequest(
        id=7,
        request_number="PS-01J9Z3Q4S8M2XK7T1V0B6C5D4E",
        event_date=date(2026, 10, 21),
        start_time=time(10, 0),
        end_time=time(12, 0),
        full_name="Ana Pérez",
        national_id="V12345678",
        email="ana@example.org",
        phone="04141234567",
        event_type=EventType.WORKSHOP,
        attendee_count=20,
        description="Reading club monthly workshop",
        requires_equipment=False,
        equipment_requested=None,
        status=status,
        admin_comment=None,
        responded_at=None,
        created_at=now,
        updated_at=now,
    )


def _payload(**overrides: Any) -> RoomRequestCreate:
    data: dict[str, Any] = {
        "event_date": "2026-10-21",
        "start_time": "10:00",
        "end_time": "12:00",
        "full_name": "Ana Pérez",
        "national_id": "V12345678",
        "email": "ana@example.org",
        "phone": "04141234567",
        "event_type": "workshop",
        "attendee_count": 20,
        "description": "Reading club monthly workshop",
    }
    data.update(overrides)
    return RoomRequestCreate(**data)


async def _call_submit(payload: RoomRequestCreate, policy: BookingPolicy):
    return await router.submit_room_request(
        payload=payload,
        session=cast(AsyncSession, DummySession()),
        policy=policy,
        today=TODAY,
        zone=ZONE,
        next_number=lambda: "PS-X",  # type: ignore[arg-type]
    )


@pytest.mark.asyncio
async def test_submit_emits_audit(monkeypatch: pytest.MonkeyPatch, policy: BookingPolicy) -> None:
    request = _request()

    async def fake_submit(*args: object, **kwargs: object) -> RoomRequest:
        return request

    calls: list[dict[str, Any]] = []

    monkeypatch.setattr(router, "SqlAlchemyBlockedWindowRepository", lambda s: s)
    monkeypatch.setattr(router, "SqlAlchemyRoomRequestRepository", lambda s: s)
    monkeypatch.setattr(router.reservation_usecase, "submit_reservation", fake_submit)
    monkeypatch.setattr(router, "emit_audit_log", lambda **kwargs: calls.append(kwargs))

    result = await _call_submit(_payload(), policy)

    assert result.request_number == request.request_number
    assert result.status == RequestStatus.PENDING
    assert len(calls) == 1
    assert calls[0]["action"] == "room_request.submitted"
    assert calls[0]["status_to"] == RequestStatus.PENDING


@pytest.mark.asyncio
async def test_submit_maps_validation_error_to_422(monkeypatch: pytest.MonkeyPatch, policy: BookingPolicy) -> None:
    async def fake_submit(*args: object, **kwargs: object) -> RoomRequest:
        raise ValidationError({"attendee_count": "attendee count must be between 1 and 50"})

    monkeypatch.setattr(router, "SqlAlchemyBlockedWindowRepository", lambda s: s)
    monkeypatch.setattr(router, "SqlAlchemyRoomRequestRepository", lambda s: s)
    monkeypatch.setattr(router.reservation_usecase, "submit_reservation", fake_submit)

    with pytest.raises(HTTPException) as excinfo:
        await _call_submit(_payload(attendee_count=0), policy)
    assert excinfo.value.status_code == 422
    assert "attendee_count" in excinfo.value.detail["errors"]


@pytest.mark.asyncio
async def test_submit_maps_conflict_to_409(monkeypatch: pytest.MonkeyPatch, policy: BookingPolicy) -> None:
    async def fake_submit(*args: object, **kwargs: object) -> RoomRequest:
        raise ConflictError("taken")

    monkeypatch.setattr(router, "SqlAlchemyBlockedWindowRepository", lambda s: s)
    monkeypatch.setattr(router, "SqlAlchemyRoomRequestRepository", lambda s: s)
    monkeypatch.setattr(router.reservation_usecase, "submit_reservation", fake_submit)

    with pytest.raises(HTTPException) as excinfo:
        await _call_submit(_payload(), policy)
    assert excinfo.value.status_code == 409


@pytest.mark.asyncio
async def test_submit_rejects_malformed_interval(policy: BookingPolicy) -> None:
    with pytest.raises(HTTPException) as excinfo:
        await _call_submit(_payload(start_time="12:00", end_time="10:00"), policy)
    assert excinfo.value.status_code == 400


@pytest.mark.asyncio
async def test_decision_log_failure_returns_500(monkeypatch: pytest.MonkeyPatch) -> None:
    request = _request(status=RequestStatus.APPROVED)

    async def fake_decide(*args: object, **kwargs: object) -> tuple[RoomRequest, RequestStatus]:
        return request, RequestStatus.PENDING

    def fake_emit(**kwargs: Any) -> None:
        raise RuntimeError("fail log")

    monkeypatch.setattr(admin_router, "SqlAlchemyRoomRequestRepository", lambda s: s)
    monkeypatch.setattr(admin_router.reservation_usecase, "decide_reservation", fake_decide)
    monkeypatch.setattr(admin_router, "emit_audit_log", fake_emit)

    with pytest.raises(HTTPException) as excinfo:
        await admin_router.decide_room_request(
            payload=RoomRequestDecision(approve=True),
            request_number=request.request_number,
            session=cast(AsyncSession, DummySession()),
            zone=ZONE,
        )
    assert excinfo.value.status_code == 500


@pytest.mark.asyncio
async def test_second_decision_returns_409(monkeypatch: pytest.MonkeyPatch) -> None:
    async def fake_decide(*args: object, **kwargs: object) -> tuple[RoomRequest, RequestStatus]:
        raise TransitionError("request is already approved")

    monkeypatch.setattr(admin_router, "SqlAlchemyRoomRequestRepository", lambda s: s)
    monkeypatch.setattr(admin_router.reservation_usecase, "decide_reservation", fake_decide)

    with pytest.raises(HTTPException) as excinfo:
        await admin_router.decide_room_request(
            payload=RoomRequestDecision(approve=False, comment="too late"),
            request_number="PS-X",
            session=cast(AsyncSession, DummySession()),
            zone=ZONE,
        )
    assert excinfo.value.status_code == 409
