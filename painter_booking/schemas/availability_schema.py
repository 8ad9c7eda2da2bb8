"""Time slot data models."""

from datetime import datetime, timedelta
from typing import Optional

from pydantic import BaseModel, ConfigDict

from painter_booking.schemas.base import Record, UtcDatetime
from painter_booking.schemas.painter_schema import Painter


class AvailabilityCreate(Record):
    """Payload for declaring a new slot: ``{startTime, endTime}`` as ISO-8601."""
    start_time: UtcDatetime
    end_time: UtcDatetime


class TimeSlot(Record):
    """A painter's declared half-open interval ``[start_time, end_time)``."""
    id: str
    painter_id: str
    start_time: UtcDatetime
    end_time: UtcDatetime
    booked: bool = False
    created_at: Optional[UtcDatetime] = None

    @property
    def duration(self) -> timedelta:
        return self.end_time - self.start_time

    def contains(self, start: datetime, end: datetime) -> bool:
        """True if this slot fully covers ``[start, end)``."""
        return self.start_time <= start and self.end_time >= end


class Candidate(BaseModel):
    """A (painter, slot) pair whose slot covers a requested window."""

    model_config = ConfigDict(frozen=True)

    painter: Painter
    slot: TimeSlot
