"""
Command-line entry point for local development and operations.

Usage:
    python main.py init-db
    python main.py seed
    python main.py declare --painter painter-jane --start 2025-01-10T09:00Z --end 2025-01-10T17:00Z
    python main.py book --user customer-ammar --start 2025-01-10T10:00Z \
        --end 2025-01-10T14:00Z --address "123 Main St"
    python main.py bookings --user customer-ammar
"""

import argparse
import json
import logging
import sys
from datetime import datetime, time, timedelta, timezone
from typing import Optional

from pydantic import ValidationError

from painter_booking.config import STORE_BACKENDS
from painter_booking.container import Container, build_container
from painter_booking.errors import ServiceResult
from painter_booking.logging_context import set_request_id
from painter_booking.schemas import (
    AvailabilityCreate,
    BookingRequestCreate,
    BookingStatus,
    Painter,
)
from painter_booking.utils import utcnow

logger = logging.getLogger(__name__)

SEED_PAINTERS = [
    Painter(
        id="painter-jane",
        first_name="Jane",
        last_name="Smith",
        rating=4.5,
        total_ratings=25,
        hourly_rate=35.0,
        specialties=["Interior", "Exterior", "Commercial"],
    ),
    Painter(
        id="painter-bob",
        first_name="Bob",
        last_name="Wilson",
        rating=4.8,
        total_ratings=40,
        hourly_rate=45.0,
        specialties=["Interior", "Decorative", "Restoration"],
    ),
]


def _emit(result: ServiceResult) -> int:
    sys.stdout.write(json.dumps(result.to_response(), indent=2) + "\n")
    return 0 if result.success or result.is_soft_failure else 1


def _seed(container: Container) -> ServiceResult:
    """Two painters, each open tomorrow 09:00-17:00 UTC."""
    tomorrow = (utcnow() + timedelta(days=1)).date()
    start = datetime.combine(tomorrow, time(9, 0), tzinfo=timezone.utc)
    end = datetime.combine(tomorrow, time(17, 0), tzinfo=timezone.utc)
    declared = []
    for painter in SEED_PAINTERS:
        container.availability.register_painter(painter)
        result = container.availability.declare(painter.id, start, end)
        if result.success:
            declared.append(result.data)
        else:
            logger.info("Seed slot for %s skipped: %s", painter.id, result.message)
    return ServiceResult.ok({"painters": [p.id for p in SEED_PAINTERS], "slots": declared})


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Match painting requests to painters with open time slots."
    )
    parser.add_argument(
        "--backend",
        choices=STORE_BACKENDS,
        default=None,
        help="Store backend (default: STORE_BACKEND).",
    )
    parser.add_argument(
        "--database-url",
        default=None,
        help="SQLAlchemy database URL (default: DATABASE_URL).",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create database tables.")
    sub.add_parser("seed", help="Insert sample painters and slots.")

    declare = sub.add_parser("declare", help="Declare an open slot for a painter.")
    declare.add_argument("--painter", required=True)
    declare.add_argument("--start", required=True, help="ISO-8601 start time.")
    declare.add_argument("--end", required=True, help="ISO-8601 end time.")

    slots = sub.add_parser("slots", help="List a painter's upcoming slots.")
    slots.add_argument("--painter", required=True)

    delete = sub.add_parser("delete-slot", help="Delete an unbooked slot.")
    delete.add_argument("--painter", required=True)
    delete.add_argument("--slot", required=True)

    book = sub.add_parser("book", help="Submit a booking request.")
    book.add_argument("--user", required=True)
    book.add_argument("--start", required=True, help="ISO-8601 requested start.")
    book.add_argument("--end", required=True, help="ISO-8601 requested end.")
    book.add_argument("--address", required=True)
    book.add_argument("--description", default=None)
    book.add_argument("--hours", type=int, default=None, help="Estimated hours (>= 1).")

    bookings = sub.add_parser("bookings", help="List a customer's booking requests.")
    bookings.add_argument("--user", required=True)

    appointments = sub.add_parser("appointments", help="List a painter's appointments.")
    appointments.add_argument("--painter", required=True)

    status = sub.add_parser("status", help="Move a booking to a new status.")
    status.add_argument("--booking", required=True)
    status.add_argument("--to", required=True, choices=[s.value for s in BookingStatus])

    return parser


def _run(container: Container, args: argparse.Namespace) -> ServiceResult:
    if args.command == "init-db":
        return ServiceResult.ok({"message": "Database ready"})
    if args.command == "seed":
        return _seed(container)
    if args.command == "declare":
        payload = AvailabilityCreate(start_time=args.start, end_time=args.end)
        return container.availability.declare(args.painter, payload.start_time, payload.end_time)
    if args.command == "slots":
        return ServiceResult.ok(container.availability.list_upcoming(args.painter))
    if args.command == "delete-slot":
        return container.availability.delete(args.slot, args.painter)
    if args.command == "book":
        payload = BookingRequestCreate(
            requested_start=args.start,
            requested_end=args.end,
            address=args.address,
            description=args.description,
            estimated_hours=args.hours,
        )
        set_request_id(f"cli-{args.user}")
        return container.bookings.submit(args.user, payload)
    if args.command == "bookings":
        return container.bookings.get_user_bookings(args.user)
    if args.command == "appointments":
        return container.bookings.get_painter_appointments(args.painter)
    if args.command == "status":
        return container.bookings.update_booking_status(args.booking, BookingStatus(args.to))
    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[list[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    container = build_container(backend=args.backend, database_url=args.database_url)
    try:
        return _emit(_run(container, args))
    except ValidationError as exc:
        logger.error("Invalid input: %s", exc)
        return 2
    finally:
        container.close()


if __name__ == "__main__":
    sys.exit(main())
