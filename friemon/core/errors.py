"""Error types raised by the battle engine.

Every failure is reported synchronously to the caller as a subclass of
``FriemonError``. The ``kind`` attribute lets the command layer translate
errors to user-facing text without matching on concrete classes.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorKind(str, Enum):
    """Coarse error categories exposed to callers."""

    INVALID_STATE = "invalid_state"  # Action outside the phase that permits it
    VALIDATION_FAILED = "validation_failed"  # Bad move, bad switch, team rule violation
    ALREADY_SUBMITTED = "already_submitted"  # Second action in the same turn
    NOT_FOUND = "not_found"  # Battle, challenge or player missing
    EXPIRED = "expired"  # Challenge accepted after its TTL
    UNAVAILABLE = "unavailable"  # Counterpart already engaged elsewhere


class FriemonError(Exception):
    """Base exception for all engine errors."""

    kind: ErrorKind = ErrorKind.INVALID_STATE

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


class InvalidStateError(FriemonError):
    kind = ErrorKind.INVALID_STATE


class ValidationFailedError(FriemonError):
    kind = ErrorKind.VALIDATION_FAILED


class AlreadySubmittedError(FriemonError):
    kind = ErrorKind.ALREADY_SUBMITTED


class NotFoundError(FriemonError):
    kind = ErrorKind.NOT_FOUND


class ExpiredError(FriemonError):
    kind = ErrorKind.EXPIRED


class UnavailableError(FriemonError):
    kind = ErrorKind.UNAVAILABLE
