from __future__ import annotations

from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules.

    `field` names the offending field (if any); `issues` carries one entry per
    problem so callers can report field-level detail.
    """

    def __init__(self, message: str, *, field: Optional[str] = None, issues: Optional[list[dict]] = None):
        super().__init__(message)
        self.message = message
        self.field = field
        self.issues = issues if issues is not None else [{"path": field, "message": message}]

    def describe(self) -> str:
        if self.field:
            return f"{self.field}: {self.message}"
        return self.message


class InvalidDate(ValidationError):
    """Date is not in canonical YYYY-MM-DD form."""


class InvalidDateFormat(ValidationError):
    """Free-text date matches neither ISO nor the short D/M/YYYY form."""


class InvalidEnum(ValidationError):
    """Value is outside a closed set (e.g. shift type)."""


class InvalidTime(ValidationError):
    """Clock time is not HH:MM in 24-hour notation."""


class ConflictingState(ValidationError):
    """Record declares a shift and a vacation at the same time."""


class IncompleteTimeRange(ValidationError):
    """Only one of start/end time was provided."""


class InvalidTimeOrder(ValidationError):
    """Start time is not before end time (and the shift does not end at midnight)."""


class NotFoundError(DomainError):
    """Raised when no record exists at the requested key."""


class ReadOnlyModeError(DomainError):
    """Raised when a mutation is attempted against the read-only snapshot backend."""


class StorageError(DomainError):
    """Raised when the storage backend fails in a way not otherwise classified."""


class StorageUnavailableError(StorageError):
    """Raised when the backend cannot be reached at all (aborts bulk operations)."""
