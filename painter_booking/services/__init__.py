from painter_booking.services.alternatives import AlternativeSlotSearch
from painter_booking.services.availability_service import AvailabilityService
from painter_booking.services.booking_flow import BookingFlow, FlowState, FlowTrigger
from painter_booking.services.booking_service import BookingService
from painter_booking.services.scoring import ScoredCandidate, score, select_best

__all__ = [
    "AlternativeSlotSearch",
    "AvailabilityService",
    "BookingFlow",
    "BookingService",
    "FlowState",
    "FlowTrigger",
    "ScoredCandidate",
    "score",
    "select_best",
]
