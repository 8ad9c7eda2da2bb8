"""Error codes, the service result envelope and store-level exceptions.

Expected business outcomes (validation failures, conflicts, no match) are
returned as a failed ``ServiceResult``. Only infrastructure failures raise.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict


class ErrorCode(str, Enum):
    """Machine-readable failure reasons returned to the HTTP layer."""

    INVALID_WINDOW = "INVALID_WINDOW"
    INVALID_RANGE = "INVALID_RANGE"
    PAST_TIME = "PAST_TIME"
    OVERLAP = "OVERLAP"
    ALREADY_BOOKED = "ALREADY_BOOKED"
    NOT_FOUND = "NOT_FOUND"
    NO_MATCH = "NO_MATCH"
    INVALID_STATUS_TRANSITION = "INVALID_STATUS_TRANSITION"


class ServiceResult(BaseModel):
    """Discriminated result: ``success`` with ``data``, or ``error`` with optional ``data``."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    success: bool
    data: Optional[Any] = None
    error: Optional[ErrorCode] = None
    message: str = ""

    @classmethod
    def ok(cls, data: Any = None, message: str = "") -> "ServiceResult":
        return cls(success=True, data=data, message=message)

    @classmethod
    def fail(cls, error: ErrorCode, message: str, data: Any = None) -> "ServiceResult":
        return cls(success=False, error=error, message=message, data=data)

    @property
    def is_soft_failure(self) -> bool:
        """True for the informative no-match outcome (carries alternatives)."""
        return not self.success and self.error == ErrorCode.NO_MATCH

    def to_response(self) -> dict:
        """Render the JSON-safe ``{success, data?, error?}`` payload."""
        payload: dict[str, Any] = {"success": self.success}
        if self.data is not None:
            payload["data"] = _jsonable(self.data)
        if not self.success:
            payload["error"] = self.error.value if self.error else None
            if self.message:
                payload["message"] = self.message
        return payload


def _jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", by_alias=True)
    if isinstance(value, dict):
        return {k: _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


class StoreError(Exception):
    """Base exception for persistence failures that are not business outcomes."""


class UnknownBackendError(StoreError):
    """Raised when a store backend name is not registered."""


class InvalidTransitionError(Exception):
    """Raised when a booking flow transition is not valid from the current state."""
