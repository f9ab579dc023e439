from __future__ import annotations

from datetime import date, datetime, time
from enum import StrEnum
from typing import Optional

from sqlalchemy import CheckConstraint, Enum, Index, UniqueConstraint
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.sql.sqltypes import BigInteger, Boolean, Date, DateTime, Integer, String, Text, Time

from .domain.intervals import TimeInterval


class Base(DeclarativeBase):
    pass


class RequestStatus(StrEnum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class EventType(StrEnum):
    MEETING = "meeting"
    CONFERENCE = "conference"
    WORKSHOP = "workshop"
    SEMINAR = "seminar"
    CULTURAL_EVENT = "cultural_event"
    TRAINING = "training"
    OTHER = "other"


def _enum_column(enum_cls: type[StrEnum]) -> Enum:
    return Enum(
        enum_cls,
        values_callable=lambda members: [e.value for e in members],
        native_enum=False,
    )


class BlockedSchedule(Base):
    __tablename__ = "blocked_schedules"
    __table_args__ = (
        CheckConstraint(
            "whole_day = 1 OR (start_time IS NOT NULL AND end_time IS NOT NULL AND start_time < end_time)",
            name="chk_blocked_time",
        ),
        Index("idx_blocked_date", "event_date"),
    )

    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    event_date: Mapped[date] = mapped_column(Date, nullable=False)
    start_time: Mapped[Optional[time]] = mapped_column(Time, nullable=True)
    end_time: Mapped[Optional[time]] = mapped_column(Time, nullable=True)
    whole_day: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    permanent: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    reason: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)


class RoomDay(Base):
    """One row per calendar date, locked while a submission for that date is checked."""

    __tablename__ = "room_days"

    event_date: Mapped[date] = mapped_column(Date, primary_key=True)
    lock_version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)


class RoomRequest(Base):
    __tablename__ = "room_requests"
    __table_args__ = (
        CheckConstraint("start_time < end_time", name="chk_req_time"),
        CheckConstraint("attendee_count >= 1 AND attendee_count <= 50", name="chk_req_attendees"),
        UniqueConstraint("request_number", name="uq_req_number"),
        Index("idx_req_date_status", "event_date", "status"),
    )

    id: Mapped[int] = mapped_column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)
    request_number: Mapped[str] = mapped_column(String(64), nullable=False)
    event_date: Mapped[date] = mapped_column(Date, nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    national_id: Mapped[str] = mapped_column(String(16), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str] = mapped_column(String(50), nullable=False)
    event_type: Mapped[EventType] = mapped_column(_enum_column(EventType), nullable=False)
    attendee_count: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    requires_equipment: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    equipment_requested: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[RequestStatus] = mapped_column(
        _enum_column(RequestStatus),
        nullable=False,
        default=RequestStatus.PENDING,
    )
    admin_comment: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    responded_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=False), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)

    @property
    def interval(self) -> TimeInterval:
        return TimeInterval(self.event_date, self.start_time, self.end_time)
