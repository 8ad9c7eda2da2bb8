"""
Store backend registry.

Backends are registered by name so the container can resolve the configured
``STORE_BACKEND`` without importing every implementation up front.
"""

import logging
from typing import Any, Callable

from painter_booking.errors import UnknownBackendError
from painter_booking.stores.base import AvailabilityStore, BookingStore

logger = logging.getLogger(__name__)

StorePair = tuple[AvailabilityStore, BookingStore]

_BACKEND_REGISTRY: dict[str, Callable[..., StorePair]] = {}


def register_backend(name: str, factory: Callable[..., StorePair]) -> None:
    """Register a store factory by name."""
    _BACKEND_REGISTRY[name] = factory
    logger.debug("Store backend registered: %s", name)


def create_stores(name: str, **kwargs: Any) -> StorePair:
    """Create an (availability, booking) store pair by registered backend name.

    Raises:
        UnknownBackendError: If the backend name is not registered.
    """
    if name not in _BACKEND_REGISTRY:
        registered = list(_BACKEND_REGISTRY.keys())
        raise UnknownBackendError(f"Store backend '{name}' not registered. Available: {registered}")
    return _BACKEND_REGISTRY[name](**kwargs)


def get_registered_backends() -> list[str]:
    """Return names of all registered backends."""
    return list(_BACKEND_REGISTRY.keys())


def _memory_backend(**kwargs: Any) -> StorePair:
    from painter_booking.stores.memory import InMemoryAvailabilityStore, InMemoryBookingStore

    return InMemoryAvailabilityStore(), InMemoryBookingStore()


def _sql_backend(session_factory=None, **kwargs: Any) -> StorePair:
    from painter_booking import db
    from painter_booking.stores.sql import SqlAvailabilityStore, SqlBookingStore

    factory = session_factory or db.get_session_factory()
    return SqlAvailabilityStore(factory), SqlBookingStore(factory)


def _auto_register() -> None:
    """Register the built-in backends. Called once at import time."""
    register_backend("memory", _memory_backend)
    register_backend("sql", _sql_backend)


_auto_register()
