from __future__ import annotations

from datetime import date
from typing import Any, Mapping, Protocol

from ..models import RequestStatus, RoomRequest
from .availability import BlockedWindow
from .intervals import TimeInterval


class BlockedWindowRepository(Protocol):
    async def list_for_range(self, start: date, end: date) -> list[BlockedWindow]:
        """Windows that apply to any date in ``[start, end]``, permanent ones included."""
        ...


class RoomRequestRepository(Protocol):
    async def list_approved(self, start: date, end: date) -> list[RoomRequest]: ...

    async def insert_request_if_free(
        self,
        interval: TimeInterval,
        fields: Mapping[str, Any],
        *,
        request_number: str,
    ) -> RoomRequest:
        """Atomically re-check ``interval`` and store a pending request. Raises ConflictError."""
        ...

    async def get_by_number(self, request_number: str) -> RoomRequest | None: ...

    async def get_by_number_for_update(self, request_number: str) -> RoomRequest | None: ...

    async def update_status(
        self,
        request: RoomRequest,
        status: RequestStatus,
        comment: str | None,
    ) -> RoomRequest: ...

    async def list_by_status(self, status: RequestStatus | None = None) -> list[RoomRequest]: ...
