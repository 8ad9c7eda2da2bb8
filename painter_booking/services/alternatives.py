"""
Alternative-slot search for requests with no exact-fit painter.

Scans open slots starting between 24 hours before and 7 days after the
requested start, keeps those long enough for the requested duration and
proposes a window at each slot's start. Results are advisory: nothing is
reserved or persisted.
"""

from datetime import datetime, timedelta
from typing import Iterable, Optional

from painter_booking.config import MatchingConfig, settings
from painter_booking.logging_context import get_request_logger
from painter_booking.schemas import AlternativeSlot, PainterSummary
from painter_booking.services.availability_service import AvailabilityService
from painter_booking.utils import minutes_between, to_utc

logger = get_request_logger(__name__)


def rank_alternatives(
    alternatives: Iterable[AlternativeSlot], limit: int
) -> list[AlternativeSlot]:
    """The ``limit`` alternatives closest to the requested start, ascending by distance."""
    return sorted(alternatives, key=lambda a: a.time_difference)[:limit]


class AlternativeSlotSearch:
    """Bounded fallback search over open slots around a rejected window."""

    def __init__(
        self,
        availability: AvailabilityService,
        matching: Optional[MatchingConfig] = None,
    ) -> None:
        self._availability = availability
        self._matching = matching or settings.matching

    def search_window(self, requested_start: datetime) -> tuple[datetime, datetime]:
        requested_start = to_utc(requested_start)
        return (
            requested_start - timedelta(hours=self._matching.lookback_hours),
            requested_start + timedelta(days=self._matching.lookahead_days),
        )

    def search(self, requested_start: datetime, requested_end: datetime) -> list[AlternativeSlot]:
        requested_start, requested_end = to_utc(requested_start), to_utc(requested_end)
        duration = requested_end - requested_start
        window_start, window_end = self.search_window(requested_start)
        now = self._availability.now()

        proposals = []
        for candidate in self._availability.find_open_slots(window_start, window_end):
            slot = candidate.slot
            if slot.duration < duration or slot.start_time <= now:
                continue
            proposals.append(AlternativeSlot(
                painter=PainterSummary.from_painter(candidate.painter),
                time_slot_id=slot.id,
                start_time=slot.start_time,
                end_time=slot.start_time + duration,
                time_difference=minutes_between(slot.start_time, requested_start),
            ))

        ranked = rank_alternatives(proposals, self._matching.max_alternatives)
        logger.debug(
            "Alternative search [%s, %s]: %d proposals, returning %d",
            window_start.isoformat(), window_end.isoformat(), len(proposals), len(ranked),
        )
        return ranked
