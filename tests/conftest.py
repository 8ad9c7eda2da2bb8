"""Shared test fixtures and helpers."""

from datetime import datetime, timezone
from typing import Optional

import pytest
from sqlalchemy.orm import sessionmaker

from painter_booking import db
from painter_booking.config import MatchingConfig, ScoringConfig
from painter_booking.schemas import Candidate, Painter, TimeSlot
from painter_booking.services import AlternativeSlotSearch, AvailabilityService, BookingService
from painter_booking.stores.memory import InMemoryAvailabilityStore, InMemoryBookingStore
from painter_booking.stores.sql import SqlAvailabilityStore, SqlBookingStore

NOW = datetime(2025, 1, 1, 0, 0, tzinfo=timezone.utc)


def at(value: str) -> datetime:
    """Parse ``YYYY-MM-DDTHH:MM`` as a UTC instant."""
    return datetime.fromisoformat(value).replace(tzinfo=timezone.utc)


class FixedClock:
    """Injectable clock that tests can move forward."""

    def __init__(self, now: datetime = NOW) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


def make_painter(
    painter_id: str = "painter-1",
    rating: float = 4.0,
    total_ratings: int = 10,
    is_active: bool = True,
    first_name: Optional[str] = None,
) -> Painter:
    return Painter(
        id=painter_id,
        first_name=first_name or painter_id.title(),
        last_name="Painter",
        rating=rating,
        total_ratings=total_ratings,
        is_active=is_active,
    )


def make_candidate(
    painter: Painter,
    slot_id: str = "slot-1",
    start: str = "2025-01-10T09:00",
    end: str = "2025-01-10T17:00",
) -> Candidate:
    slot = TimeSlot(id=slot_id, painter_id=painter.id, start_time=at(start), end_time=at(end))
    return Candidate(painter=painter, slot=slot)


def make_sql_session_factory(url: str = "sqlite://") -> sessionmaker:
    engine = db.build_engine(url, echo=False)
    db.create_schema(engine)
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def matching_config():
    return MatchingConfig(
        lookback_hours=24,
        lookahead_days=7,
        max_alternatives=5,
        reservation_retries=1,
        skip_inactive_painters=True,
    )


@pytest.fixture
def scoring_config():
    return ScoringConfig(
        rating_weight=20,
        experience_weight=2,
        experience_cap=40,
        availability_bonus=40,
    )


@pytest.fixture
def sql_session_factory():
    factory = make_sql_session_factory()
    yield factory
    factory.kw["bind"].dispose()


@pytest.fixture(params=["memory", "sql"])
def stores(request):
    """(availability store, booking store) for each backend."""
    if request.param == "memory":
        yield InMemoryAvailabilityStore(), InMemoryBookingStore()
        return
    factory = make_sql_session_factory()
    yield SqlAvailabilityStore(factory), SqlBookingStore(factory)
    factory.kw["bind"].dispose()


@pytest.fixture
def availability(stores, clock, matching_config):
    return AvailabilityService(stores[0], clock=clock, matching=matching_config)


@pytest.fixture
def booking_service(stores, availability, scoring_config, matching_config):
    return BookingService(
        stores[1],
        availability,
        alternatives=AlternativeSlotSearch(availability, matching=matching_config),
        scoring=scoring_config,
        matching=matching_config,
    )
