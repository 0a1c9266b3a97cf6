"""Errors raised by the scheduling engine and its adapters."""


class SchedulingError(Exception):
    """Base class for scheduling failures surfaced to callers."""


class ValidationError(SchedulingError):
    """Raised when a request is rejected before any write happens."""


class LimitExceeded(SchedulingError):
    """Raised when a recurrence would generate too many occurrences."""


class NotFound(SchedulingError):
    """Raised when a session is absent for the requesting owner."""


class Forbidden(SchedulingError):
    """Raised when a caller references a record owned by another provider."""


class PersistenceError(SchedulingError):
    """Raised when the underlying store fails."""


class SlotOccupiedError(PersistenceError):
    """Raised by a store when an insert hits an already booked slot."""
