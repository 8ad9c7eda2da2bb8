"""
In-memory store backend.

Dict-backed implementation of the store interfaces for tests, the CLI demo
and single-process deployments. One lock per store makes every
check-and-mutate operation atomic within the process.
"""

import logging
import threading
import uuid
from datetime import datetime
from typing import Optional

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
from painter_booking.utils import overlaps, to_utc, utcnow

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return uuid.uuid4().hex


def _newest_first(record) -> tuple:
    # Same ordering as the SQL backend: created_at, then id
    return (record.created_at, record.id)


class InMemoryAvailabilityStore(AvailabilityStore):
    """Painters and slots held in dicts guarded by a single lock."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._painters: dict[str, Painter] = {}
        self._slots: dict[str, TimeSlot] = {}

    def save_painter(self, painter: Painter) -> Painter:
        with self._lock:
            self._painters[painter.id] = painter
        return painter

    def get_painter(self, painter_id: str) -> Optional[Painter]:
        return self._painters.get(painter_id)

    def create_slot_if_free(
        self, painter_id: str, start: datetime, end: datetime
    ) -> Optional[TimeSlot]:
        start, end = to_utc(start), to_utc(end)
        with self._lock:
            for slot in self._slots.values():
                if slot.painter_id == painter_id and overlaps(
                    slot.start_time, slot.end_time, start, end
                ):
                    return None
            slot = TimeSlot(
                id=_new_id(),
                painter_id=painter_id,
                start_time=start,
                end_time=end,
                booked=False,
                created_at=utcnow(),
            )
            self._slots[slot.id] = slot
        return slot

    def get_slot(self, slot_id: str) -> Optional[TimeSlot]:
        return self._slots.get(slot_id)

    def list_painter_slots(self, painter_id: str, since: datetime) -> list[TimeSlot]:
        since = to_utc(since)
        with self._lock:
            slots = [
                s for s in self._slots.values()
                if s.painter_id == painter_id and s.start_time >= since
            ]
        return sorted(slots, key=lambda s: (s.start_time, s.id))

    def find_covering(self, start: datetime, end: datetime) -> list[Candidate]:
        start, end = to_utc(start), to_utc(end)
        with self._lock:
            slots = [
                s for s in self._slots.values()
                if not s.booked and s.contains(start, end)
            ]
        return self._with_painters(sorted(slots, key=lambda s: (s.start_time, s.id)))

    def find_open_starting_between(
        self, window_start: datetime, window_end: datetime
    ) -> list[Candidate]:
        window_start, window_end = to_utc(window_start), to_utc(window_end)
        with self._lock:
            slots = [
                s for s in self._slots.values()
                if not s.booked and window_start <= s.start_time <= window_end
            ]
        return self._with_painters(sorted(slots, key=lambda s: (s.start_time, s.id)))

    def reserve(self, slot_id: str) -> bool:
        return self._swap_booked(slot_id, expected=False)

    def release(self, slot_id: str) -> bool:
        return self._swap_booked(slot_id, expected=True)

    def delete_if_unbooked(self, slot_id: str, painter_id: str) -> bool:
        with self._lock:
            slot = self._slots.get(slot_id)
            if slot is None or slot.painter_id != painter_id or slot.booked:
                return False
            del self._slots[slot_id]
        return True

    def reset(self) -> None:
        """Clear all painters and slots. Used by test fixtures for isolation."""
        with self._lock:
            self._painters.clear()
            self._slots.clear()

    def _swap_booked(self, slot_id: str, expected: bool) -> bool:
        with self._lock:
            slot = self._slots.get(slot_id)
            if slot is None or slot.booked != expected:
                return False
            self._slots[slot_id] = slot.model_copy(update={"booked": not expected})
        return True

    def _with_painters(self, slots: list[TimeSlot]) -> list[Candidate]:
        candidates = []
        for slot in slots:
            painter = self._painters.get(slot.painter_id)
            if painter is None:
                logger.debug("Slot %s references unknown painter %s", slot.id, slot.painter_id)
                continue
            candidates.append(Candidate(painter=painter, slot=slot))
        return candidates


class InMemoryBookingStore(BookingStore):
    """Booking requests and bookings held in dicts guarded by a single lock."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._requests: dict[str, BookingRequest] = {}
        self._bookings: dict[str, Booking] = {}

    def create_request(
        self,
        user_id: str,
        requested_start: datetime,
        requested_end: datetime,
        address: str,
        description: Optional[str] = None,
        estimated_hours: Optional[int] = None,
    ) -> BookingRequest:
        request = BookingRequest(
            id=_new_id(),
            user_id=user_id,
            requested_start=requested_start,
            requested_end=requested_end,
            address=address,
            description=description,
            estimated_hours=estimated_hours,
            status=BookingStatus.PENDING,
            created_at=utcnow(),
        )
        with self._lock:
            self._requests[request.id] = request
        return request

    def get_request(self, request_id: str) -> Optional[BookingRequest]:
        return self._requests.get(request_id)

    def update_request_status(
        self, request_id: str, status: BookingStatus
    ) -> Optional[BookingRequest]:
        with self._lock:
            request = self._requests.get(request_id)
            if request is None:
                return None
            request = request.model_copy(update={"status": status})
            self._requests[request_id] = request
        return request

    def confirm_request(
        self,
        booking_request_id: str,
        painter_id: str,
        time_slot_id: str,
        scheduled_start: datetime,
        scheduled_end: datetime,
    ) -> tuple[BookingRequest, Booking]:
        with self._lock:
            request = self._requests.get(booking_request_id)
            if request is None:
                raise StoreError(f"Booking request {booking_request_id} not found")
            if any(b.booking_request_id == booking_request_id for b in self._bookings.values()):
                raise StoreError(f"Booking request {booking_request_id} is already booked")
            booking = Booking(
                id=_new_id(),
                booking_request_id=booking_request_id,
                painter_id=painter_id,
                time_slot_id=time_slot_id,
                scheduled_start=scheduled_start,
                scheduled_end=scheduled_end,
                status=BookingStatus.CONFIRMED,
                created_at=utcnow(),
            )
            request = request.model_copy(update={"status": BookingStatus.CONFIRMED})
            self._bookings[booking.id] = booking
            self._requests[request.id] = request
        return request, booking

    def get_booking(self, booking_id: str) -> Optional[Booking]:
        return self._bookings.get(booking_id)

    def get_booking_for_request(self, booking_request_id: str) -> Optional[Booking]:
        with self._lock:
            bookings = list(self._bookings.values())
        for booking in bookings:
            if booking.booking_request_id == booking_request_id:
                return booking
        return None

    def transition_booking(
        self, booking_id: str, from_statuses: frozenset, to_status: BookingStatus
    ) -> Optional[Booking]:
        with self._lock:
            booking = self._bookings.get(booking_id)
            if booking is None or booking.status not in from_statuses:
                return None
            booking = booking.model_copy(update={"status": to_status})
            self._bookings[booking_id] = booking
        return booking

    def list_requests_for_user(
        self, user_id: str
    ) -> list[tuple[BookingRequest, Optional[Booking]]]:
        with self._lock:
            requests = [r for r in self._requests.values() if r.user_id == user_id]
        requests.sort(key=_newest_first, reverse=True)
        return [(r, self.get_booking_for_request(r.id)) for r in requests]

    def list_bookings_for_painter(
        self, painter_id: str
    ) -> list[tuple[Booking, BookingRequest]]:
        with self._lock:
            bookings = [b for b in self._bookings.values() if b.painter_id == painter_id]
        bookings.sort(key=_newest_first, reverse=True)
        return [(b, self._requests[b.booking_request_id]) for b in bookings]

    def reset(self) -> None:
        """Clear all requests and bookings. Used by test fixtures for isolation."""
        with self._lock:
            self._requests.clear()
            self._bookings.clear()
