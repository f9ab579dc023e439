from typing import List, Optional
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import get_session, get_zone, require_admin
from ..domain.errors import InfrastructureError, RequestNotFoundError, TransitionError
from ..models import RequestStatus
from ..schemas import RoomRequestDecision, RoomRequestRead
from ..infrastructure.repositories import SqlAlchemyRoomRequestRepository
from ..usecases import reservations as reservation_usecase
from ..utils.audit_log import emit_audit_log

router = APIRouter(prefix="/admin/room", tags=["admin"], dependencies=[Depends(require_admin)])


@router.get("/requests", response_model=List[RoomRequestRead])
async def list_room_requests(
    status_filter: Optional[RequestStatus] = Query(default=None, alias="status"),
    session: AsyncSession = Depends(get_session),
    zone: ZoneInfo = Depends(get_zone),
) -> list[RoomRequestRead]:
    try:
        rows = await reservation_usecase.list_reservations(
            SqlAlchemyRoomRequestRepository(session),
            status=status_filter,
        )
    except InfrastructureError:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="storage unavailable")
    return [RoomRequestRead.from_db(row, zone=zone) for row in rows]


@router.post("/requests/{request_number}/decision", response_model=RoomRequestRead)
async def decide_room_request(
    payload: RoomRequestDecision,
    request_number: str = Path(..., min_length=1, max_length=64),
    session: AsyncSession = Depends(get_session),
    zone: ZoneInfo = Depends(get_zone),
) -> RoomRequestRead:
    request_repo = SqlAlchemyRoomRequestRepository(session)
    try:
        async with session.begin():
            updated, previous = await reservation_usecase.decide_reservation(
                request_repo,
                request_number=request_number,
                approve=payload.approve,
                comment=payload.comment,
            )
    except RequestNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="request not found")
    except TransitionError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    except InfrastructureError:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="storage unavailable")

    try:
        emit_audit_log(
            action="room_request.approved" if payload.approve else "room_request.rejected",
            initiator="admin",
            request_number=updated.request_number,
            event_date=updated.event_date,
            start_time=updated.start_time,
            end_time=updated.end_time,
            status_from=previous,
            status_to=updated.status,
            comment=updated.admin_comment,
        )
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="audit log failed") from exc

    return RoomRequestRead.from_db(updated, zone=zone)
