import logging
from datetime import date, time
from typing import Callable

from ..domain.errors import ConflictError, RequestNotFoundError, ValidationError
from ..domain.intervals import TimeInterval
from ..domain.repositories import BlockedWindowRepository, RoomRequestRepository
from ..domain.services import BookingPolicy, decide_status, ensure_requestable
from ..domain.validation import ApplicantFields, normalize_applicant, validate_applicant
from ..models import RequestStatus, RoomRequest

logger = logging.getLogger(__name__)


async def submit_reservation(
    blocked_repo: BlockedWindowRepository,
    request_repo: RoomRequestRepository,
    *,
    fields: ApplicantFields,
    event_date: date,
    start_time: time,
    end_time: time,
    policy: BookingPolicy,
    today: date,
    next_number: Callable[[], str],
) -> RoomRequest:
    """Validate, re-check and store a new pending request.

    Applicant fields are checked before the interval, so a request with bad
    fields always gets the full error map. Must run inside the caller's
    transaction so that a raised error leaves nothing behind.
    """
    result = validate_applicant(fields)
    if not result.ok:
        raise ValidationError(result.errors)
    interval = TimeInterval(event_date, start_time, end_time)

    blocked = await blocked_repo.list_for_range(interval.date, interval.date)
    ensure_requestable(interval, policy, today=today, blocked_windows=blocked)

    try:
        request = await request_repo.insert_request_if_free(
            interval,
            normalize_applicant(fields),
            request_number=next_number(),
        )
    except ConflictError as exc:
        logger.info("Rejected room request for %s: %s", interval, exc)
        raise
    logger.info("Accepted room request %s for %s", request.request_number, interval)
    return request


async def decide_reservation(
    request_repo: RoomRequestRepository,
    *,
    request_number: str,
    approve: bool,
    comment: str | None,
) -> tuple[RoomRequest, RequestStatus]:
    """Approve or reject a pending request. Returns the request and its previous status."""
    request = await request_repo.get_by_number_for_update(request_number)
    if request is None:
        raise RequestNotFoundError(f"request {request_number} not found")
    previous = request.status
    new_status = decide_status(previous, approve=approve)
    updated = await request_repo.update_status(request, new_status, (comment or "").strip() or None)
    logger.info("Room request %s moved %s -> %s", request_number, previous.value, new_status.value)
    return updated, previous


async def get_reservation(
    request_repo: RoomRequestRepository,
    *,
    request_number: str,
) -> RoomRequest:
    request = await request_repo.get_by_number(request_number)
    if request is None:
        raise RequestNotFoundError(f"request {request_number} not found")
    return request


async def list_reservations(
    request_repo: RoomRequestRepository,
    *,
    status: RequestStatus | None = None,
) -> list[RoomRequest]:
    return await request_repo.list_by_status(status)
