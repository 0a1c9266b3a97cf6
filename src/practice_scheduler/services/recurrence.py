"""Occurrence date generation for recurring sessions."""

from datetime import date, timedelta

from practice_scheduler.domain.errors import LimitExceeded, ValidationError
from practice_scheduler.domain.sessions import RecurringFrequency

MAX_OCCURRENCES = 100


def generate_occurrences(
    start_date: date,
    frequency: RecurringFrequency,
    end_date: date,
    limit: int = MAX_OCCURRENCES,
) -> list[date]:
    """Return every occurrence date from start_date up to end_date inclusive.

    The first element is always start_date. Raises LimitExceeded when the
    series would hold more than ``limit`` dates; no partial list is returned.
    """
    if end_date < start_date:
        raise ValidationError("Recurring end date must be on or after the start date")
    step = frequency.step_days
    count = (end_date - start_date).days // step + 1
    if count > limit:
        raise LimitExceeded(
            f"Too many recurring sessions. Maximum is {limit} occurrences."
        )
    return [start_date + timedelta(days=step * index) for index in range(count)]
