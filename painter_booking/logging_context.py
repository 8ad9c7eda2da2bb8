"""Correlation ID logging context for tracing requests across modules.

Provides a request_id-aware logger that attaches a correlation ID to every
log message, making it easy to trace a single booking request through
matching, reservation and alternative search.

Usage:
    from painter_booking.logging_context import get_request_logger, set_request_id

    set_request_id("REQ-abc123")
    logger = get_request_logger(__name__)
    logger.info("Matching painter")  # → [REQ-abc123] Matching painter
"""

import logging
from contextvars import ContextVar, Token

NO_REQUEST_ID = "NO_REQUEST_ID"

LOG_FORMAT = "%(asctime)s [%(name)s] [%(request_id)s] %(levelname)s: %(message)s"

_request_id: ContextVar[str] = ContextVar("request_id", default=NO_REQUEST_ID)


def set_request_id(request_id: str) -> Token:
    """Set the correlation ID for the current context.

    Returns the token that restores the previous ID via ``reset_request_id``.
    """
    return _request_id.set(request_id)


def get_request_id() -> str:
    """Retrieve the current correlation ID."""
    return _request_id.get()


def reset_request_id(token: Token) -> None:
    _request_id.reset(token)


class RequestIdFilter(logging.Filter):
    """Injects request_id into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id()  # type: ignore[attr-defined]
        return True


def get_request_logger(name: str) -> logging.Logger:
    """Return a logger with the RequestIdFilter attached.

    The filter adds ``request_id`` to each record so formatters can
    include ``%(request_id)s`` in their format string.
    """
    logger = logging.getLogger(name)
    if not any(isinstance(f, RequestIdFilter) for f in logger.filters):
        logger.addFilter(RequestIdFilter())
    return logger


def configure_logging(level: str) -> None:
    """Configure the root logger once and attach the request-id filter to its handlers."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    for handler in logging.getLogger().handlers:
        if not any(isinstance(f, RequestIdFilter) for f in handler.filters):
            handler.addFilter(RequestIdFilter())
