"""
Service wiring.

Builds the stores and services once at startup and hands them out; the
HTTP layer (or CLI) owns the container and calls ``close()`` at shutdown.
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from painter_booking import db
from painter_booking.config import AppConfig, settings
from painter_booking.services import AlternativeSlotSearch, AvailabilityService, BookingService
from painter_booking.stores import AvailabilityStore, BookingStore, create_stores
from painter_booking.utils import utcnow

logger = logging.getLogger(__name__)


@dataclass
class Container:
    """Process-wide collaborators, constructed once."""

    availability_store: AvailabilityStore
    booking_store: BookingStore
    availability: AvailabilityService
    alternatives: AlternativeSlotSearch
    bookings: BookingService
    owns_engine: bool = False

    def close(self) -> None:
        if self.owns_engine:
            db.dispose_engine()


def build_container(
    backend: Optional[str] = None,
    database_url: Optional[str] = None,
    clock: Callable[[], datetime] = utcnow,
    config: Optional[AppConfig] = None,
    create_tables: bool = True,
) -> Container:
    """Create stores for ``backend`` and wire the services around them."""
    config = config or settings
    backend = backend or config.storage.backend

    owns_engine = False
    if backend == "sql":
        engine = db.init_engine(database_url or config.storage.database_url)
        if create_tables:
            db.create_schema(engine)
        owns_engine = True

    availability_store, booking_store = create_stores(backend)
    availability = AvailabilityService(availability_store, clock=clock, matching=config.matching)
    alternatives = AlternativeSlotSearch(availability, matching=config.matching)
    bookings = BookingService(
        booking_store,
        availability,
        alternatives=alternatives,
        scoring=config.scoring,
        matching=config.matching,
    )
    logger.info("Container built with '%s' store backend", backend)
    return Container(
        availability_store=availability_store,
        booking_store=booking_store,
        availability=availability,
        alternatives=alternatives,
        bookings=bookings,
        owns_engine=owns_engine,
    )
