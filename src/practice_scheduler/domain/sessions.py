"""Domain models for scheduled sessions."""

from dataclasses import dataclass
from datetime import date, time
from enum import Enum
from uuid import UUID


class RecurringFrequency(str, Enum):
    """How often a recurring session repeats."""

    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    EVERY_4_WEEKS = "every4weeks"

    @property
    def step_days(self) -> int:
        """Number of days between two consecutive occurrences."""
        return _STEP_DAYS[self]


_STEP_DAYS = {
    RecurringFrequency.WEEKLY: 7,
    RecurringFrequency.BIWEEKLY: 14,
    RecurringFrequency.EVERY_4_WEEKS: 28,
}


class UpdateScope(str, Enum):
    """How many occurrences an update or delete affects."""

    SINGLE = "single"
    ALL_FUTURE = "all_future"


@dataclass(frozen=True)
class SessionRecord:
    """Represents a persisted session occurrence."""

    id: UUID
    owner_id: UUID
    client_id: UUID
    date: date
    start_time: time
    end_time: time
    status: str = "scheduled"
    recurring_group_id: UUID | None = None
    recurring_frequency: RecurringFrequency | None = None
    recurring_end_date: date | None = None
    notes: str | None = None
    synced_to_ehr: bool = False
    has_progress_note: bool = False

    @property
    def is_recurring(self) -> bool:
        """Whether the occurrence belongs to a recurring group."""
        return self.recurring_group_id is not None


@dataclass(frozen=True)
class SessionDraft:
    """Caller-supplied fields for creating or editing a session.

    ``None`` on ``status`` or ``notes`` means the caller left the field out:
    edits keep the stored value and new rows start as ``scheduled``.
    """

    client_id: UUID
    date: date
    start_time: time
    end_time: time
    status: str | None = None
    notes: str | None = None
    recurring_frequency: RecurringFrequency | None = None
    recurring_end_date: date | None = None
