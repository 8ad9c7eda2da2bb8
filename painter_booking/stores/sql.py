"""
SQLAlchemy store backend.

Table models for painters, time slots, booking requests and bookings, plus
store implementations that run each operation in its own transaction.
Atomic state changes are single conditional statements checked by rowcount,
so concurrent server instances cannot double-book a slot.
"""

import logging
import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    delete,
    select,
    update,
)
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import relationship, sessionmaker
from sqlalchemy.types import TypeDecorator

from painter_booking.db import Base, session_scope
from painter_booking.errors import StoreError
from painter_booking.schemas import (
    Booking,
    BookingRequest,
    BookingStatus,
    Candidate,
    Painter,
    TimeSlot,
)
from painter_booking.stores.base import AvailabilityStore, BookingStore
from painter_booking.utils import to_naive_utc, to_utc, utcnow

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return uuid.uuid4().hex


class UTCDateTime(TypeDecorator):
    """Stores naive UTC, returns aware UTC."""

    impl = DateTime
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return to_naive_utc(value) if value is not None else None

    def process_result_value(self, value, dialect):
        return to_utc(value) if value is not None else None


class PainterRow(Base):
    __tablename__ = "painters"

    id = Column(String(32), primary_key=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    rating = Column(Float, nullable=False, default=0.0)
    total_ratings = Column(Integer, nullable=False, default=0)
    hourly_rate = Column(Float, nullable=True)
    specialties = Column(JSON, nullable=False, default=list)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)

    slots = relationship("TimeSlotRow", back_populates="painter")


class TimeSlotRow(Base):
    __tablename__ = "time_slots"

    id = Column(String(32), primary_key=True)
    painter_id = Column(String(32), ForeignKey("painters.id"), nullable=False, index=True)
    start_time = Column(UTCDateTime, nullable=False, index=True)
    end_time = Column(UTCDateTime, nullable=False)
    booked = Column(Boolean, nullable=False, default=False, index=True)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow)

    painter = relationship("PainterRow", back_populates="slots")


class BookingRequestRow(Base):
    __tablename__ = "booking_requests"

    id = Column(String(32), primary_key=True)
    user_id = Column(String(64), nullable=False, index=True)
    requested_start = Column(UTCDateTime, nullable=False)
    requested_end = Column(UTCDateTime, nullable=False)
    address = Column(String(500), nullable=False)
    description = Column(Text, nullable=True)
    estimated_hours = Column(Integer, nullable=True)
    status = Column(String(20), nullable=False, default=BookingStatus.PENDING.value)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow, index=True)

    booking = relationship("BookingRow", back_populates="booking_request", uselist=False)


class BookingRow(Base):
    __tablename__ = "bookings"

    id = Column(String(32), primary_key=True)
    booking_request_id = Column(
        String(32), ForeignKey("booking_requests.id"), nullable=False, unique=True
    )
    painter_id = Column(String(32), ForeignKey("painters.id"), nullable=False, index=True)
    time_slot_id = Column(String(32), ForeignKey("time_slots.id"), nullable=False)
    scheduled_start = Column(UTCDateTime, nullable=False)
    scheduled_end = Column(UTCDateTime, nullable=False)
    status = Column(String(20), nullable=False, default=BookingStatus.CONFIRMED.value)
    created_at = Column(UTCDateTime, nullable=False, default=utcnow, index=True)

    booking_request = relationship("BookingRequestRow", back_populates="booking")


def _to_painter(row: PainterRow) -> Painter:
    return Painter(
        id=row.id,
        first_name=row.first_name,
        last_name=row.last_name,
        rating=row.rating,
        total_ratings=row.total_ratings,
        hourly_rate=row.hourly_rate,
        specialties=list(row.specialties or []),
        is_active=row.is_active,
    )


def _to_slot(row: TimeSlotRow) -> TimeSlot:
    return TimeSlot(
        id=row.id,
        painter_id=row.painter_id,
        start_time=row.start_time,
        end_time=row.end_time,
        booked=row.booked,
        created_at=row.created_at,
    )


def _to_request(row: BookingRequestRow) -> BookingRequest:
    return BookingRequest(
        id=row.id,
        user_id=row.user_id,
        requested_start=row.requested_start,
        requested_end=row.requested_end,
        address=row.address,
        description=row.description,
        estimated_hours=row.estimated_hours,
        status=BookingStatus(row.status),
        created_at=row.created_at,
    )


def _to_booking(row: BookingRow) -> Booking:
    return Booking(
        id=row.id,
        booking_request_id=row.booking_request_id,
        painter_id=row.painter_id,
        time_slot_id=row.time_slot_id,
        scheduled_start=row.scheduled_start,
        scheduled_end=row.scheduled_end,
        status=BookingStatus(row.status),
        created_at=row.created_at,
    )


class SqlAvailabilityStore(AvailabilityStore):
    """Painters and slots in a relational database."""

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def save_painter(self, painter: Painter) -> Painter:
        with session_scope(self._session_factory) as db:
            db.merge(PainterRow(
                id=painter.id,
                first_name=painter.first_name,
                last_name=painter.last_name,
                rating=painter.rating,
                total_ratings=painter.total_ratings,
                hourly_rate=painter.hourly_rate,
                specialties=list(painter.specialties),
                is_active=painter.is_active,
            ))
        return painter

    def get_painter(self, painter_id: str) -> Optional[Painter]:
        with session_scope(self._session_factory) as db:
            row = db.get(PainterRow, painter_id)
            return _to_painter(row) if row else None

    def create_slot_if_free(
        self, painter_id: str, start: datetime, end: datetime
    ) -> Optional[TimeSlot]:
        with session_scope(self._session_factory) as db:
            # Serializes concurrent declarations for the same painter
            db.execute(
                select(PainterRow.id).where(PainterRow.id == painter_id).with_for_update()
            )
            clash = db.execute(
                select(TimeSlotRow.id).where(
                    TimeSlotRow.painter_id == painter_id,
                    TimeSlotRow.start_time < end,
                    TimeSlotRow.end_time > start,
                ).limit(1)
            ).first()
            if clash is not None:
                return None
            row = TimeSlotRow(
                id=_new_id(),
                painter_id=painter_id,
                start_time=start,
                end_time=end,
                booked=False,
                created_at=utcnow(),
            )
            db.add(row)
            db.flush()
            return _to_slot(row)

    def get_slot(self, slot_id: str) -> Optional[TimeSlot]:
        with session_scope(self._session_factory) as db:
            row = db.get(TimeSlotRow, slot_id)
            return _to_slot(row) if row else None

    def list_painter_slots(self, painter_id: str, since: datetime) -> list[TimeSlot]:
        with session_scope(self._session_factory) as db:
            rows = db.scalars(
                select(TimeSlotRow)
                .where(TimeSlotRow.painter_id == painter_id, TimeSlotRow.start_time >= since)
                .order_by(TimeSlotRow.start_time, TimeSlotRow.id)
            ).all()
            return [_to_slot(r) for r in rows]

    def find_covering(self, start: datetime, end: datetime) -> list[Candidate]:
        with session_scope(self._session_factory) as db:
            rows = db.execute(
                select(TimeSlotRow, PainterRow)
                .join(PainterRow, TimeSlotRow.painter_id == PainterRow.id)
                .where(
                    TimeSlotRow.booked.is_(False),
                    TimeSlotRow.start_time <= start,
                    TimeSlotRow.end_time >= end,
                )
                .order_by(TimeSlotRow.start_time, TimeSlotRow.id)
            ).all()
            return [Candidate(painter=_to_painter(p), slot=_to_slot(s)) for s, p in rows]

    def find_open_starting_between(
        self, window_start: datetime, window_end: datetime
    ) -> list[Candidate]:
        with session_scope(self._session_factory) as db:
            rows = db.execute(
                select(TimeSlotRow, PainterRow)
                .join(PainterRow, TimeSlotRow.painter_id == PainterRow.id)
                .where(
                    TimeSlotRow.booked.is_(False),
                    TimeSlotRow.start_time >= window_start,
                    TimeSlotRow.start_time <= window_end,
                )
                .order_by(TimeSlotRow.start_time, TimeSlotRow.id)
            ).all()
            return [Candidate(painter=_to_painter(p), slot=_to_slot(s)) for s, p in rows]

    def reserve(self, slot_id: str) -> bool:
        return self._swap_booked(slot_id, expected=False)

    def release(self, slot_id: str) -> bool:
        return self._swap_booked(slot_id, expected=True)

    def delete_if_unbooked(self, slot_id: str, painter_id: str) -> bool:
        with session_scope(self._session_factory) as db:
            result = db.execute(
                delete(TimeSlotRow)
                .where(
                    TimeSlotRow.id == slot_id,
                    TimeSlotRow.painter_id == painter_id,
                    TimeSlotRow.booked.is_(False),
                )
                .execution_options(synchronize_session=False)
            )
            return result.rowcount == 1

    def _swap_booked(self, slot_id: str, expected: bool) -> bool:
        with session_scope(self._session_factory) as db:
            result = db.execute(
                update(TimeSlotRow)
                .where(TimeSlotRow.id == slot_id, TimeSlotRow.booked.is_(expected))
                .values(booked=not expected)
                .execution_options(synchronize_session=False)
            )
            return result.rowcount == 1


class SqlBookingStore(BookingStore):
    """Booking requests and bookings in a relational database."""

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    def create_request(
        self,
        user_id: str,
        requested_start: datetime,
        requested_end: datetime,
        address: str,
        description: Optional[str] = None,
        estimated_hours: Optional[int] = None,
    ) -> BookingRequest:
        with session_scope(self._session_factory) as db:
            row = BookingRequestRow(
                id=_new_id(),
                user_id=user_id,
                requested_start=requested_start,
                requested_end=requested_end,
                address=address,
                description=description,
                estimated_hours=estimated_hours,
                status=BookingStatus.PENDING.value,
                created_at=utcnow(),
            )
            db.add(row)
            db.flush()
            return _to_request(row)

    def get_request(self, request_id: str) -> Optional[BookingRequest]:
        with session_scope(self._session_factory) as db:
            row = db.get(BookingRequestRow, request_id)
            return _to_request(row) if row else None

    def update_request_status(
        self, request_id: str, status: BookingStatus
    ) -> Optional[BookingRequest]:
        with session_scope(self._session_factory) as db:
            row = db.get(BookingRequestRow, request_id)
            if row is None:
                return None
            row.status = status.value
            db.flush()
            return _to_request(row)

    def confirm_request(
        self,
        booking_request_id: str,
        painter_id: str,
        time_slot_id: str,
        scheduled_start: datetime,
        scheduled_end: datetime,
    ) -> tuple[BookingRequest, Booking]:
        with session_scope(self._session_factory) as db:
            request_row = db.get(BookingRequestRow, booking_request_id)
            if request_row is None:
                raise StoreError(f"Booking request {booking_request_id} not found")
            booking_row = BookingRow(
                id=_new_id(),
                booking_request_id=booking_request_id,
                painter_id=painter_id,
                time_slot_id=time_slot_id,
                scheduled_start=scheduled_start,
                scheduled_end=scheduled_end,
                status=BookingStatus.CONFIRMED.value,
                created_at=utcnow(),
            )
            db.add(booking_row)
            request_row.status = BookingStatus.CONFIRMED.value
            try:
                db.flush()
            except IntegrityError as exc:
                raise StoreError(
                    f"Booking request {booking_request_id} is already booked"
                ) from exc
            return _to_request(request_row), _to_booking(booking_row)

    def get_booking(self, booking_id: str) -> Optional[Booking]:
        with session_scope(self._session_factory) as db:
            row = db.get(BookingRow, booking_id)
            return _to_booking(row) if row else None

    def get_booking_for_request(self, booking_request_id: str) -> Optional[Booking]:
        with session_scope(self._session_factory) as db:
            row = db.scalars(
                select(BookingRow).where(BookingRow.booking_request_id == booking_request_id)
            ).first()
            return _to_booking(row) if row else None

    def transition_booking(
        self, booking_id: str, from_statuses: frozenset, to_status: BookingStatus
    ) -> Optional[Booking]:
        with session_scope(self._session_factory) as db:
            result = db.execute(
                update(BookingRow)
                .where(
                    BookingRow.id == booking_id,
                    BookingRow.status.in_([s.value for s in from_statuses]),
                )
                .values(status=to_status.value)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                return None
            row = db.get(BookingRow, booking_id)
            return _to_booking(row)

    def list_requests_for_user(
        self, user_id: str
    ) -> list[tuple[BookingRequest, Optional[Booking]]]:
        with session_scope(self._session_factory) as db:
            rows = db.execute(
                select(BookingRequestRow, BookingRow)
                .outerjoin(BookingRow, BookingRow.booking_request_id == BookingRequestRow.id)
                .where(BookingRequestRow.user_id == user_id)
                .order_by(BookingRequestRow.created_at.desc(), BookingRequestRow.id.desc())
            ).all()
            return [
                (_to_request(req), _to_booking(bk) if bk is not None else None)
                for req, bk in rows
            ]

    def list_bookings_for_painter(
        self, painter_id: str
    ) -> list[tuple[Booking, BookingRequest]]:
        with session_scope(self._session_factory) as db:
            rows = db.execute(
                select(BookingRow, BookingRequestRow)
                .join(BookingRequestRow, BookingRow.booking_request_id == BookingRequestRow.id)
                .where(BookingRow.painter_id == painter_id)
                .order_by(BookingRow.created_at.desc(), BookingRow.id.desc())
            ).all()
            return [(_to_booking(bk), _to_request(req)) for bk, req in rows]
