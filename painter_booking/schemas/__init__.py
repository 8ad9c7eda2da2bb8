from painter_booking.schemas.availability_schema import AvailabilityCreate, Candidate, TimeSlot
from painter_booking.schemas.booking_schema import (
    AlternativeSlot,
    AppointmentView,
    Booking,
    BookingRequest,
    BookingRequestCreate,
    BookingStatus,
    BookingView,
    NoMatchPayload,
)
from painter_booking.schemas.painter_schema import Painter, PainterSummary

__all__ = [
    "AlternativeSlot",
    "AppointmentView",
    "AvailabilityCreate",
    "Booking",
    "BookingRequest",
    "BookingRequestCreate",
    "BookingStatus",
    "BookingView",
    "Candidate",
    "NoMatchPayload",
    "Painter",
    "PainterSummary",
    "TimeSlot",
]
