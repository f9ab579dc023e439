from datetime import date
from zoneinfo import ZoneInfo

from fastapi import APIRouter, Depends, HTTPException, Path, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..deps import get_policy, get_request_number_generator, get_session, get_today, get_zone
from ..domain.errors import ConflictError, DomainRuleError, InfrastructureError, RequestNotFoundError, ValidationError
from ..domain.services import BookingPolicy
from ..infrastructure.repositories import SqlAlchemyBlockedWindowRepository, SqlAlchemyRoomRequestRepository
from ..models import RequestStatus
from ..schemas import RoomRequestCreate, RoomRequestRead
from ..usecases import reservations as reservation_usecase
from ..utils.audit_log import emit_audit_log
from ..utils.request_number import RequestNumberGenerator

router = APIRouter(prefix="/room", tags=["room-requests"])


@router.post("/requests", response_model=RoomRequestRead, status_code=status.HTTP_201_CREATED)
async def submit_room_request(
    payload: RoomRequestCreate,
    session: AsyncSession = Depends(get_session),
    policy: BookingPolicy = Depends(get_policy),
    today: date = Depends(get_today),
    zone: ZoneInfo = Depends(get_zone),
    next_number: RequestNumberGenerator = Depends(get_request_number_generator),
) -> RoomRequestRead:
    blocked_repo = SqlAlchemyBlockedWindowRepository(session)
    request_repo = SqlAlchemyRoomRequestRepository(session)
    try:
        async with session.begin():
            request = await reservation_usecase.submit_reservation(
                blocked_repo,
                request_repo,
                fields=payload.applicant(),
                event_date=payload.event_date,
                start_time=payload.start_time,
                end_time=payload.end_time,
                policy=policy,
                today=today,
                next_number=next_number,
            )
    except ValidationError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": "invalid applicant data", "errors": exc.errors},
        )
    except DomainRuleError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
    except ConflictError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    except InfrastructureError:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="storage unavailable")

    try:
        emit_audit_log(
            action="room_request.submitted",
            initiator="applicant",
            request_number=request.request_number,
            event_date=request.event_date,
            start_time=request.start_time,
            end_time=request.end_time,
            status_from=None,
            status_to=RequestStatus.PENDING,
        )
    except RuntimeError as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="audit log failed") from exc

    return RoomRequestRead.from_db(request, zone=zone)


@router.get("/requests/{request_number}", response_model=RoomRequestRead)
async def get_room_request(
    request_number: str = Path(..., min_length=1, max_length=64),
    session: AsyncSession = Depends(get_session),
    zone: ZoneInfo = Depends(get_zone),
) -> RoomRequestRead:
    try:
        request = await reservation_usecase.get_reservation(
            SqlAlchemyRoomRequestRepository(session),
            request_number=request_number,
        )
    except RequestNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="request not found")
    except InfrastructureError:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="storage unavailable")
    return RoomRequestRead.from_db(request, zone=zone)
