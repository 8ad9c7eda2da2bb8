from painter_booking.stores.base import AvailabilityStore, BookingStore
from painter_booking.stores.registry import create_stores, get_registered_backends, register_backend

__all__ = [
    "AvailabilityStore",
    "BookingStore",
    "create_stores",
    "get_registered_backends",
    "register_backend",
]
