"""Abstract persistence collaborators for the booking engine.

Defines the data-access interface the services consume. Any backend
(in-memory, SQLAlchemy, a document store with conditional writes)
implements these ABCs. Every mutation that guards an invariant is a
single conditional operation so concurrent callers cannot both win.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from painter_booking.schemas import (
    Booking,
    BookingRequest,
    BookingStatus,
    Candidate,
    Painter,
    TimeSlot,
)


class AvailabilityStore(ABC):
    """Painters and their declared time slots."""

    @abstractmethod
    def save_painter(self, painter: Painter) -> Painter:
        """Insert or replace a painter profile."""

    @abstractmethod
    def get_painter(self, painter_id: str) -> Optional[Painter]:
        """Return the painter, or None."""

    @abstractmethod
    def create_slot_if_free(
        self, painter_id: str, start: datetime, end: datetime
    ) -> Optional[TimeSlot]:
        """Create an unbooked slot unless it overlaps one of the painter's slots.

        The overlap check and the insert happen atomically.

        Returns:
            The new slot, or None when ``[start, end)`` overlaps an existing
            slot for ``painter_id``.
        """

    @abstractmethod
    def get_slot(self, slot_id: str) -> Optional[TimeSlot]:
        """Return the slot, or None."""

    @abstractmethod
    def list_painter_slots(self, painter_id: str, since: datetime) -> list[TimeSlot]:
        """Slots of ``painter_id`` with ``start_time >= since``, ascending by start."""

    @abstractmethod
    def find_covering(self, start: datetime, end: datetime) -> list[Candidate]:
        """Unbooked slots with ``slot.start <= start`` and ``slot.end >= end``.

        Ordered by slot start, then slot id.
        """

    @abstractmethod
    def find_open_starting_between(
        self, window_start: datetime, window_end: datetime
    ) -> list[Candidate]:
        """Unbooked slots whose start lies in ``[window_start, window_end]``, ascending by start."""

    @abstractmethod
    def reserve(self, slot_id: str) -> bool:
        """Compare-and-set ``booked: False -> True``. True only for the single winner."""

    @abstractmethod
    def release(self, slot_id: str) -> bool:
        """Compare-and-set ``booked: True -> False``."""

    @abstractmethod
    def delete_if_unbooked(self, slot_id: str, painter_id: str) -> bool:
        """Delete the painter's slot only while it is unbooked."""


class BookingStore(ABC):
    """Booking requests and confirmed bookings."""

    @abstractmethod
    def create_request(
        self,
        user_id: str,
        requested_start: datetime,
        requested_end: datetime,
        address: str,
        description: Optional[str] = None,
        estimated_hours: Optional[int] = None,
    ) -> BookingRequest:
        """Persist a new request with status PENDING."""

    @abstractmethod
    def get_request(self, request_id: str) -> Optional[BookingRequest]:
        """Return the request, or None."""

    @abstractmethod
    def update_request_status(
        self, request_id: str, status: BookingStatus
    ) -> Optional[BookingRequest]:
        """Set the request status. Returns None if the request does not exist."""

    @abstractmethod
    def confirm_request(
        self,
        booking_request_id: str,
        painter_id: str,
        time_slot_id: str,
        scheduled_start: datetime,
        scheduled_end: datetime,
    ) -> tuple[BookingRequest, Booking]:
        """Insert the CONFIRMED booking and mark its request CONFIRMED in one write.

        Either both changes are stored or neither is.

        Raises:
            StoreError: If the request does not exist or already has a booking.
        """

    @abstractmethod
    def get_booking(self, booking_id: str) -> Optional[Booking]:
        """Return the booking, or None."""

    @abstractmethod
    def get_booking_for_request(self, booking_request_id: str) -> Optional[Booking]:
        """Return the booking attached to a request, or None."""

    @abstractmethod
    def transition_booking(
        self, booking_id: str, from_statuses: frozenset, to_status: BookingStatus
    ) -> Optional[Booking]:
        """Conditionally move a booking to ``to_status`` if its status is in ``from_statuses``.

        Returns the updated booking, or None when the booking is missing or
        its current status is not an allowed source.
        """

    @abstractmethod
    def list_requests_for_user(
        self, user_id: str
    ) -> list[tuple[BookingRequest, Optional[Booking]]]:
        """All of a user's requests with their booking, newest first."""

    @abstractmethod
    def list_bookings_for_painter(
        self, painter_id: str
    ) -> list[tuple[Booking, BookingRequest]]:
        """All bookings assigned to a painter with their request, newest first."""
