"""
Booking orchestrator: match a requested window to the best available painter.

Validates the window, persists the request as PENDING, scores the painters
whose open slots cover the window, reserves the winner's slot with an atomic
compare-and-set and records the Booking. When nobody fits, the request stays
PENDING and the caller gets ranked alternatives as a soft failure.
"""

from datetime import datetime
from typing import Optional

from painter_booking.config import MatchingConfig, ScoringConfig, settings
from painter_booking.errors import ErrorCode, ServiceResult
from painter_booking.logging_context import get_request_logger, reset_request_id, set_request_id
from painter_booking.schemas import (
    AppointmentView,
    BookingRequest,
    BookingRequestCreate,
    BookingStatus,
    BookingView,
    NoMatchPayload,
    PainterSummary,
)
from painter_booking.services.alternatives import AlternativeSlotSearch
from painter_booking.services.availability_service import AvailabilityService
from painter_booking.services.booking_flow import BookingFlow, FlowTrigger
from painter_booking.services.scoring import ScoredCandidate, select_best
from painter_booking.stores.base import BookingStore
from painter_booking.utils import to_utc

logger = get_request_logger(__name__)

# Allowed source statuses for each target status of an existing booking
BOOKING_STATUS_SOURCES: dict[BookingStatus, frozenset] = {
    BookingStatus.IN_PROGRESS: frozenset({BookingStatus.CONFIRMED}),
    BookingStatus.COMPLETED: frozenset({BookingStatus.IN_PROGRESS}),
    BookingStatus.CANCELLED: frozenset({BookingStatus.CONFIRMED, BookingStatus.IN_PROGRESS}),
}


class BookingService:
    """Creates booking requests and drives each one through matching."""

    def __init__(
        self,
        bookings: BookingStore,
        availability: AvailabilityService,
        alternatives: Optional[AlternativeSlotSearch] = None,
        scoring: Optional[ScoringConfig] = None,
        matching: Optional[MatchingConfig] = None,
    ) -> None:
        self._bookings = bookings
        self._availability = availability
        self._matching = matching or settings.matching
        self._alternatives = alternatives or AlternativeSlotSearch(availability, self._matching)
        self._scoring = scoring or settings.scoring

    def submit(self, user_id: str, payload: BookingRequestCreate) -> ServiceResult:
        """Entry point for the HTTP layer with an already-parsed payload."""
        return self.create_booking_request(
            user_id,
            payload.requested_start,
            payload.requested_end,
            payload.address,
            description=payload.description,
            estimated_hours=payload.estimated_hours,
        )

    def create_booking_request(
        self,
        user_id: str,
        requested_start: datetime,
        requested_end: datetime,
        address: str,
        description: Optional[str] = None,
        estimated_hours: Optional[int] = None,
    ) -> ServiceResult:
        """Persist a request and try to confirm it with the best-scoring painter.

        Returns:
            ``ok(BookingView)`` when confirmed, ``fail(INVALID_WINDOW)`` for a
            bad window, or ``fail(NO_MATCH, data=NoMatchPayload)`` carrying the
            PENDING request and up to ``MAX_ALTERNATIVES`` suggestions.
        """
        flow = BookingFlow(max_retries=self._matching.reservation_retries)
        start, end = to_utc(requested_start), to_utc(requested_end)

        if start >= end:
            flow.transition(FlowTrigger.WINDOW_INVALID)
            return ServiceResult.fail(
                ErrorCode.INVALID_WINDOW, "Start time must be before end time"
            )
        if start <= self._availability.now():
            flow.transition(FlowTrigger.WINDOW_INVALID)
            return ServiceResult.fail(ErrorCode.INVALID_WINDOW, "Cannot book in the past")

        request = self._bookings.create_request(
            user_id=user_id,
            requested_start=start,
            requested_end=end,
            address=address,
            description=description,
            estimated_hours=estimated_hours,
        )
        token = set_request_id(request.id)
        try:
            logger.info("Booking request %s submitted by %s", request.id, user_id)
            flow.transition(FlowTrigger.WINDOW_VALID)
            return self._match(request, flow)
        finally:
            reset_request_id(token)

    def _match(self, request: BookingRequest, flow: BookingFlow) -> ServiceResult:
        start, end = request.requested_start, request.requested_end
        while True:
            best = select_best(self._availability.find_candidates(start, end), self._scoring)
            if best is None:
                flow.transition(FlowTrigger.NO_CANDIDATES)
                return self._no_match(request)

            flow.transition(FlowTrigger.CANDIDATE_SELECTED)
            reservation = self._availability.reserve(best.slot.id)
            if reservation.success:
                flow.transition(FlowTrigger.RESERVED)
                return ServiceResult.ok(self._confirm(request, best))

            logger.warning(
                "Request %s lost reservation of slot %s (%s)",
                request.id, best.slot.id, reservation.error.value,
            )
            if flow.can_retry():
                flow.transition(FlowTrigger.RACE_LOST)
                continue
            flow.transition(FlowTrigger.RETRIES_EXHAUSTED)
            return self._no_match(request)

    def get_user_bookings(self, user_id: str) -> ServiceResult:
        """All of the user's requests with booking and painter, newest first."""
        views = []
        for request, booking in self._bookings.list_requests_for_user(user_id):
            views.append(BookingView.build(request, booking, self._painter_summary(booking)))
        return ServiceResult.ok(views)

    def get_booking_request(self, request_id: str, user_id: str) -> ServiceResult:
        request = self._bookings.get_request(request_id)
        if request is None or request.user_id != user_id:
            return ServiceResult.fail(ErrorCode.NOT_FOUND, "Booking request not found")
        booking = self._bookings.get_booking_for_request(request_id)
        return ServiceResult.ok(
            BookingView.build(request, booking, self._painter_summary(booking))
        )

    def get_painter_appointments(self, painter_id: str) -> ServiceResult:
        """Bookings assigned to the painter, newest first."""
        appointments = [
            AppointmentView(
                id=booking.id,
                booking_request_id=request.id,
                customer_id=request.user_id,
                scheduled_start=booking.scheduled_start,
                scheduled_end=booking.scheduled_end,
                status=booking.status,
                address=request.address,
                description=request.description,
                estimated_hours=request.estimated_hours,
            )
            for booking, request in self._bookings.list_bookings_for_painter(painter_id)
        ]
        return ServiceResult.ok(appointments)

    def update_booking_status(self, booking_id: str, status: BookingStatus) -> ServiceResult:
        """Advance a booking's lifecycle. Cancelling frees the reserved slot."""
        sources = BOOKING_STATUS_SOURCES.get(status)
        current = self._bookings.get_booking(booking_id)
        if current is None:
            return ServiceResult.fail(ErrorCode.NOT_FOUND, f"Booking {booking_id} not found")
        if sources is None:
            return ServiceResult.fail(
                ErrorCode.INVALID_STATUS_TRANSITION,
                f"Cannot move booking {booking_id} to {status.value}",
            )

        booking = self._bookings.transition_booking(booking_id, sources, status)
        if booking is None:
            latest = self._bookings.get_booking(booking_id) or current
            return ServiceResult.fail(
                ErrorCode.INVALID_STATUS_TRANSITION,
                f"Cannot move booking {booking_id} from {latest.status.value} to {status.value}",
            )

        self._bookings.update_request_status(booking.booking_request_id, status)
        if status == BookingStatus.CANCELLED:
            self._availability.release(booking.time_slot_id)
        logger.info("Booking %s moved to %s", booking_id, status.value)
        return ServiceResult.ok(booking)

    def _confirm(self, request: BookingRequest, best: ScoredCandidate) -> BookingView:
        try:
            request, booking = self._bookings.confirm_request(
                booking_request_id=request.id,
                painter_id=best.painter.id,
                time_slot_id=best.slot.id,
                scheduled_start=request.requested_start,
                scheduled_end=request.requested_end,
            )
        except Exception:
            logger.exception(
                "Failed to record booking for request %s; releasing slot %s",
                request.id, best.slot.id,
            )
            self._availability.release(best.slot.id)
            raise

        logger.info(
            "Booking %s confirmed: request %s with painter %s (score %.1f)",
            booking.id, request.id, best.painter.id, best.score,
        )
        return BookingView.build(request, booking, PainterSummary.from_painter(best.painter))

    def _no_match(self, request: BookingRequest) -> ServiceResult:
        alternatives = self._alternatives.search(request.requested_start, request.requested_end)
        logger.info(
            "No painter available for request %s; %d alternatives offered",
            request.id, len(alternatives),
        )
        return ServiceResult.fail(
            ErrorCode.NO_MATCH,
            "No painters available for the requested time",
            data=NoMatchPayload(
                booking_request=BookingView.build(request),
                alternatives=alternatives,
            ),
        )

    def _painter_summary(self, booking) -> Optional[PainterSummary]:
        if booking is None:
            return None
        painter = self._availability.get_painter(booking.painter_id)
        return PainterSummary.from_painter(painter) if painter else None
