"""Pydantic models for session API payloads."""

import re
from datetime import date, time
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from practice_scheduler.domain.sessions import (
    RecurringFrequency,
    SessionDraft,
    SessionRecord,
    UpdateScope,
)

_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_HH_MM = re.compile(r"^\d{2}:\d{2}$")
_HH_MM_SS = re.compile(r"^\d{2}:\d{2}:\d{2}$")
_H_MM = re.compile(r"^\d:\d{2}$")


def normalize_time(value: object) -> object:
    """Accept H:MM, HH:MM or HH:MM:SS and return an HH:MM string.

    Sessions are booked to the minute, so HH:MM:SS is only accepted with
    zero seconds.
    """
    if not isinstance(value, str):
        return value
    cleaned = value.strip()
    if _HH_MM_SS.match(cleaned):
        if not cleaned.endswith(":00"):
            raise ValueError("Time must be in HH:MM format without seconds")
        cleaned = cleaned[:5]
    elif _H_MM.match(cleaned):
        cleaned = f"0{cleaned}"
    if not _HH_MM.match(cleaned):
        raise ValueError("Time must be in HH:MM format")
    return cleaned


def require_iso_date(value: object) -> object:
    """Reject anything but YYYY-MM-DD strings."""
    if isinstance(value, str) and not _DATE_PATTERN.match(value.strip()):
        raise ValueError("Date must be in YYYY-MM-DD format")
    return value


class SessionFields(BaseModel):
    """Fields shared by create and update payloads."""

    client_id: UUID
    date: date
    start_time: time
    end_time: time
    status: str | None = None
    notes: str | None = None
    recurring_frequency: RecurringFrequency | None = None
    recurring_end_date: date | None = None

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def check_times(cls, value: object) -> object:
        """Normalise accepted time spellings."""
        return normalize_time(value)

    @field_validator("date", "recurring_end_date", mode="before")
    @classmethod
    def check_dates(cls, value: object) -> object:
        """Require ISO calendar dates."""
        return require_iso_date(value)

    def to_draft(self) -> SessionDraft:
        """Convert the payload into an engine draft."""
        return SessionDraft(
            client_id=self.client_id,
            date=self.date,
            start_time=self.start_time,
            end_time=self.end_time,
            status=self.status,
            notes=self.notes,
            recurring_frequency=self.recurring_frequency,
            recurring_end_date=self.recurring_end_date,
        )


class SessionCreateRequest(SessionFields):
    """Payload for creating one session or a recurring series."""

    status: str = "scheduled"
    is_recurring: bool = False

    @property
    def wants_recurrence(self) -> bool:
        """Whether the caller asked for a recurring series."""
        return self.is_recurring or self.recurring_frequency is not None


class SessionUpdateRequest(SessionFields):
    """Payload for editing a session with a scope.

    Leaving out ``status`` or ``notes`` keeps the stored values.
    """

    update_scope: UpdateScope = UpdateScope.SINGLE


class ConvertToRecurringRequest(BaseModel):
    """Payload for turning a one-time session into a series.

    Session fields are optional; any that are given replace the stored
    session's values for every occurrence of the new series.
    """

    recurring_frequency: RecurringFrequency
    recurring_end_date: date
    client_id: UUID | None = None
    session_date: date | None = Field(default=None, alias="date")
    start_time: time | None = None
    end_time: time | None = None
    status: str | None = None
    notes: str | None = None

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def check_times(cls, value: object) -> object:
        """Normalise accepted time spellings."""
        return normalize_time(value)

    @field_validator("session_date", "recurring_end_date", mode="before")
    @classmethod
    def check_dates(cls, value: object) -> object:
        """Require ISO calendar dates."""
        return require_iso_date(value)

    def to_draft(self, session: SessionRecord) -> SessionDraft:
        """Overlay the supplied fields on the stored session."""
        return SessionDraft(
            client_id=self.client_id or session.client_id,
            date=self.session_date or session.date,
            start_time=self.start_time or session.start_time,
            end_time=self.end_time or session.end_time,
            status=self.status or session.status,
            notes=session.notes if self.notes is None else self.notes,
            recurring_frequency=self.recurring_frequency,
            recurring_end_date=self.recurring_end_date,
        )
