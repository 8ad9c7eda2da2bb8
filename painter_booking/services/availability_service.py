"""
Availability service: slot invariants and slot queries/mutations.

Enforces that slots have a positive length, start strictly in the future and
never overlap another slot of the same painter. Reservation is delegated to
the store's compare-and-set so concurrent reservations have one winner.
"""

from datetime import datetime
from typing import Callable, Optional

from painter_booking.config import MatchingConfig, settings
from painter_booking.errors import ErrorCode, ServiceResult
from painter_booking.logging_context import get_request_logger
from painter_booking.schemas import Candidate, Painter, TimeSlot
from painter_booking.stores.base import AvailabilityStore
from painter_booking.utils import to_utc, utcnow

logger = get_request_logger(__name__)


class AvailabilityService:
    """Slot declaration, queries and atomic booked-flag transitions."""

    def __init__(
        self,
        store: AvailabilityStore,
        clock: Callable[[], datetime] = utcnow,
        matching: Optional[MatchingConfig] = None,
    ) -> None:
        self._store = store
        self._clock = clock
        self._matching = matching or settings.matching

    def now(self) -> datetime:
        return to_utc(self._clock())

    def register_painter(self, painter: Painter) -> Painter:
        """Insert or update the profile the engine matches against."""
        return self._store.save_painter(painter)

    def get_painter(self, painter_id: str) -> Optional[Painter]:
        return self._store.get_painter(painter_id)

    def declare(self, painter_id: str, start: datetime, end: datetime) -> ServiceResult:
        """Declare a new open slot ``[start, end)`` for ``painter_id``."""
        start, end = to_utc(start), to_utc(end)
        if start >= end:
            return ServiceResult.fail(
                ErrorCode.INVALID_RANGE, "Start time must be before end time"
            )
        if start <= self.now():
            return ServiceResult.fail(
                ErrorCode.PAST_TIME, "Cannot create availability in the past"
            )
        if self._store.get_painter(painter_id) is None:
            return ServiceResult.fail(ErrorCode.NOT_FOUND, f"Painter {painter_id} not found")

        slot = self._store.create_slot_if_free(painter_id, start, end)
        if slot is None:
            return ServiceResult.fail(
                ErrorCode.OVERLAP, "Availability overlaps with existing slot"
            )
        logger.info(
            "Slot declared: %s for painter %s [%s, %s)",
            slot.id, painter_id, start.isoformat(), end.isoformat(),
        )
        return ServiceResult.ok(slot)

    def list_upcoming(self, painter_id: str) -> list[TimeSlot]:
        """The painter's slots starting at or after now, ascending by start."""
        return self._store.list_painter_slots(painter_id, since=self.now())

    def find_candidates(self, start: datetime, end: datetime) -> list[Candidate]:
        """All unbooked slots fully containing ``[start, end)``, in store order."""
        candidates = self._store.find_covering(to_utc(start), to_utc(end))
        return self._bookable(candidates)

    def find_open_slots(self, window_start: datetime, window_end: datetime) -> list[Candidate]:
        """Unbooked slots starting inside ``[window_start, window_end]``."""
        candidates = self._store.find_open_starting_between(
            to_utc(window_start), to_utc(window_end)
        )
        return self._bookable(candidates)

    def reserve(self, slot_id: str) -> ServiceResult:
        """Atomically flip ``booked`` from False to True."""
        if self._store.reserve(slot_id):
            slot = self._store.get_slot(slot_id)
            logger.info("Slot reserved: %s", slot_id)
            return ServiceResult.ok(slot)
        if self._store.get_slot(slot_id) is None:
            return ServiceResult.fail(ErrorCode.NOT_FOUND, f"Slot {slot_id} not found")
        return ServiceResult.fail(ErrorCode.ALREADY_BOOKED, f"Slot {slot_id} is already booked")

    def release(self, slot_id: str) -> ServiceResult:
        """Flip ``booked`` back to False. Releasing an open slot is a no-op."""
        released = self._store.release(slot_id)
        slot = self._store.get_slot(slot_id)
        if slot is None:
            return ServiceResult.fail(ErrorCode.NOT_FOUND, f"Slot {slot_id} not found")
        if released:
            logger.info("Slot released: %s", slot_id)
        return ServiceResult.ok(slot)

    def delete(self, slot_id: str, painter_id: str) -> ServiceResult:
        """Delete one of the painter's slots while it is still unbooked."""
        slot = self._store.get_slot(slot_id)
        if slot is None or slot.painter_id != painter_id:
            return ServiceResult.fail(ErrorCode.NOT_FOUND, "Availability not found")
        if slot.booked:
            return ServiceResult.fail(
                ErrorCode.ALREADY_BOOKED, "Cannot delete booked availability"
            )
        if not self._store.delete_if_unbooked(slot_id, painter_id):
            # Lost to a concurrent reservation or deletion
            if self._store.get_slot(slot_id) is None:
                return ServiceResult.fail(ErrorCode.NOT_FOUND, "Availability not found")
            return ServiceResult.fail(
                ErrorCode.ALREADY_BOOKED, "Cannot delete booked availability"
            )
        logger.info("Slot deleted: %s by painter %s", slot_id, painter_id)
        return ServiceResult.ok({"message": "Availability deleted successfully"})

    def _bookable(self, candidates: list[Candidate]) -> list[Candidate]:
        if not self._matching.skip_inactive_painters:
            return candidates
        return [c for c in candidates if c.painter.is_active]
