"""
Domain: error taxonomy for sale application operations.

Every failure an operation can report is one of the classes below. Each carries
a stable `code` so callers never have to pattern-match on message text; the
dispatcher is the only place that flattens an error into a plain string.
"""

from __future__ import annotations


class ApplicationError(Exception):
    """Base class for all sale application failures."""

    code: str = "APPLICATION_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ArgumentCountError(ApplicationError):
    """Wrong number of positional arguments for an operation."""

    code = "ARGUMENT_COUNT"


class DecodeError(ApplicationError):
    """Input or stored bytes could not be decoded into a SaleApplication."""

    code = "DECODE"


class MissingFieldError(ApplicationError):
    """A required field is absent or blank."""

    code = "MISSING_FIELD"


class NotFound(ApplicationError):
    """No application is stored under the requested identifier."""

    code = "NOT_FOUND"


class InvalidTransition(ApplicationError):
    """The requested status change is not allowed from the current status."""

    code = "INVALID_TRANSITION"


class Conflict(ApplicationError):
    """The record already exists, or a concurrent write changed it first."""

    code = "CONFLICT"


class StoreError(ApplicationError):
    """The ledger store failed to read or write."""

    code = "STORE"


__all__ = [
    "ApplicationError",
    "ArgumentCountError",
    "DecodeError",
    "MissingFieldError",
    "NotFound",
    "InvalidTransition",
    "Conflict",
    "StoreError",
]
