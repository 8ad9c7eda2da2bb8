"""Booking request, booking and suggestion data models."""

from enum import Enum
from typing import Optional

from pydantic import Field, field_validator

from painter_booking.schemas.base import Record, UtcDatetime
from painter_booking.schemas.painter_schema import PainterSummary


class BookingStatus(str, Enum):
    """Lifecycle status shared by booking requests and bookings."""
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class BookingRequestCreate(Record):
    """Validated booking request payload from the HTTP layer."""
    requested_start: UtcDatetime
    requested_end: UtcDatetime
    address: str = Field(min_length=1)
    description: Optional[str] = None
    estimated_hours: Optional[int] = Field(default=None, ge=1)

    @field_validator("address")
    @classmethod
    def address_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("address must not be blank")
        return v.strip()


class BookingRequest(Record):
    """A customer's desired window, persisted before matching."""
    id: str
    user_id: str
    requested_start: UtcDatetime
    requested_end: UtcDatetime
    address: str
    description: Optional[str] = None
    estimated_hours: Optional[int] = None
    status: BookingStatus = BookingStatus.PENDING
    created_at: Optional[UtcDatetime] = None


class Booking(Record):
    """Confirmed pairing of a booking request with a reserved slot."""
    id: str
    booking_request_id: str
    painter_id: str
    time_slot_id: str
    scheduled_start: UtcDatetime
    scheduled_end: UtcDatetime
    status: BookingStatus = BookingStatus.CONFIRMED
    created_at: Optional[UtcDatetime] = None


class BookingView(Record):
    """Booking request joined with its booking and painter summary, if any."""
    id: str
    requested_start: UtcDatetime
    requested_end: UtcDatetime
    scheduled_start: Optional[UtcDatetime] = None
    scheduled_end: Optional[UtcDatetime] = None
    status: BookingStatus
    painter: Optional[PainterSummary] = None
    address: str
    description: Optional[str] = None
    estimated_hours: Optional[int] = None
    booking_id: Optional[str] = None

    @classmethod
    def build(
        cls,
        request: BookingRequest,
        booking: Optional[Booking] = None,
        painter: Optional[PainterSummary] = None,
    ) -> "BookingView":
        return cls(
            id=request.id,
            requested_start=request.requested_start,
            requested_end=request.requested_end,
            scheduled_start=booking.scheduled_start if booking else None,
            scheduled_end=booking.scheduled_end if booking else None,
            status=request.status,
            painter=painter if booking else None,
            address=request.address,
            description=request.description,
            estimated_hours=request.estimated_hours,
            booking_id=booking.id if booking else None,
        )


class AppointmentView(Record):
    """A painter-facing view of one assigned booking."""
    id: str
    booking_request_id: str
    customer_id: str
    scheduled_start: UtcDatetime
    scheduled_end: UtcDatetime
    status: BookingStatus
    address: str
    description: Optional[str] = None
    estimated_hours: Optional[int] = None


class AlternativeSlot(Record):
    """Advisory near-match: a proposed window inside an open slot. Never reserves."""
    painter: PainterSummary
    time_slot_id: str
    start_time: UtcDatetime
    end_time: UtcDatetime
    time_difference: int


class NoMatchPayload(Record):
    """Data carried by the no-match soft failure."""
    booking_request: BookingView
    alternatives: list[AlternativeSlot] = Field(default_factory=list)
