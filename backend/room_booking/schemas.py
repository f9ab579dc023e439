from datetime import date, datetime, time
from typing import Any, Optional
from zoneinfo import ZoneInfo

from pydantic import BaseModel, Field, field_serializer

from .domain.slots import SlotOccupancy
from .domain.validation import ApplicantFields
from .models import EventType, RequestStatus, RoomRequest
from .utils.time import format_hhmm, utc_naive_to_local


class SlotRead(BaseModel):
    start: time
    end: time
    available: bool
    label: str

    @field_serializer("start", "end")
    def _ser_time(self, value: time) -> str:
        return format_hhmm(value)

    @classmethod
    def from_domain(cls, slot: SlotOccupancy) -> "SlotRead":
        return cls(
            start=slot.interval.start,
            end=slot.interval.end,
            available=slot.available,
            label=slot.label,
        )


class RoomRequestCreate(BaseModel):
    # Field rules live in the domain validator so every failing field is reported together.
    event_date: date
    start_time: time
    end_time: time
    full_name: str
    national_id: str
    email: str
    phone: str
    event_type: str
    attendee_count: Any
    description: str
    requires_equipment: bool = False
    equipment_requested: Optional[str] = None

    def applicant(self) -> ApplicantFields:
        return ApplicantFields(
            full_name=self.full_name,
            national_id=self.national_id,
            email=self.email,
            phone=self.phone,
            event_type=self.event_type,
            attendee_count=self.attendee_count,
            description=self.description,
            requires_equipment=self.requires_equipment,
            equipment_requested=self.equipment_requested,
        )


class RoomRequestDecision(BaseModel):
    approve: bool
    comment: Optional[str] = Field(default=None, max_length=2000)


class RoomRequestRead(BaseModel):
    request_number: str
    event_date: date
    start_time: time
    end_time: time
    full_name: str
    national_id: str
    email: str
    phone: str
    event_type: EventType
    attendee_count: int
    description: str
    requires_equipment: bool
    equipment_requested: Optional[str]
    status: RequestStatus
    admin_comment: Optional[str]
    responded_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    @field_serializer("start_time", "end_time")
    def _ser_time(self, value: time) -> str:
        return format_hhmm(value)

    @classmethod
    def from_db(cls, request: RoomRequest, *, zone: ZoneInfo) -> "RoomRequestRead":
        return cls(
            request_number=request.request_number,
            event_date=request.event_date,
            start_time=request.start_time,
            end_time=request.end_time,
            full_name=request.full_name,
            national_id=request.national_id,
            email=request.email,
            phone=request.phone,
            event_type=request.event_type,
            attendee_count=request.attendee_count,
            description=request.description,
            requires_equipment=request.requires_equipment,
            equipment_requested=request.equipment_requested,
            status=request.status,
            admin_comment=request.admin_comment,
            responded_at=utc_naive_to_local(request.responded_at, zone) if request.responded_at else None,
            created_at=utc_naive_to_local(request.created_at, zone),
            updated_at=utc_naive_to_local(request.updated_at, zone),
        )
