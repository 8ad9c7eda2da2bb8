"""Painter profile data models."""

from typing import Optional

from pydantic import Field

from painter_booking.schemas.base import Record


class Painter(Record):
    """Painter profile as seen by the matching engine."""
    id: str
    first_name: str
    last_name: str
    rating: float = Field(default=0.0, ge=0.0, le=5.0)
    total_ratings: int = Field(default=0, ge=0)
    hourly_rate: Optional[float] = None
    specialties: list[str] = Field(default_factory=list)
    is_active: bool = True


class PainterSummary(Record):
    """Public subset of a painter profile attached to bookings and suggestions."""
    id: str
    first_name: str
    last_name: str
    rating: float

    @classmethod
    def from_painter(cls, painter: Painter) -> "PainterSummary":
        return cls(
            id=painter.id,
            first_name=painter.first_name,
            last_name=painter.last_name,
            rating=painter.rating,
        )
