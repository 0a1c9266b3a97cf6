"""Scheduling engine for one-time and recurring sessions."""

import logging
from dataclasses import dataclass, replace
from datetime import date, time
from typing import Protocol
from uuid import UUID, uuid4

from practice_scheduler.domain.errors import NotFound, SlotOccupiedError, ValidationError
from practice_scheduler.domain.sessions import (
    RecurringFrequency,
    SessionDraft,
    SessionRecord,
    UpdateScope,
)
from practice_scheduler.services.conflicts import ConflictGuard
from practice_scheduler.services.recurrence import MAX_OCCURRENCES, generate_occurrences

_logger = logging.getLogger(__name__)

DEFAULT_STATUS = "scheduled"

_CLEARED_RECURRENCE = {
    "recurring_group_id": None,
    "recurring_frequency": None,
    "recurring_end_date": None,
}


class SessionRepository(Protocol):
    """Persistence interface for sessions, always scoped to one owner."""

    def create_session(
        self, owner_id: UUID, payload: dict[str, object]
    ) -> SessionRecord:
        """Insert a session row and return it."""

    def get_session(self, owner_id: UUID, session_id: UUID) -> SessionRecord | None:
        """Return a session by id, if the owner has it."""

    def list_sessions(
        self, owner_id: UUID, day: date | None = None
    ) -> list[SessionRecord]:
        """Return sessions ordered by date and start time."""

    def update_session(
        self, owner_id: UUID, session_id: UUID, payload: dict[str, object]
    ) -> SessionRecord | None:
        """Update one session and return it, if present."""

    def delete_session(self, owner_id: UUID, session_id: UUID) -> int:
        """Delete one session and return the number of removed rows."""

    def slot_exists(
        self, owner_id: UUID, client_id: UUID, day: date, start_time: time
    ) -> bool:
        """Return whether a session occupies the slot."""

    def update_group_from(
        self,
        owner_id: UUID,
        group_id: UUID,
        from_date: date,
        payload: dict[str, object],
    ) -> list[SessionRecord]:
        """Update group rows dated on or after from_date and return them."""

    def delete_group_from(
        self, owner_id: UUID, group_id: UUID, from_date: date, inclusive: bool
    ) -> int:
        """Delete group rows dated after (or on, if inclusive) from_date."""


@dataclass(frozen=True)
class _SeriesPlan:
    frequency: RecurringFrequency
    end_date: date
    dates: list[date]


@dataclass
class SchedulingEngine:
    """Creates, edits, converts and deletes sessions and their recurrences.

    A session is either non-recurring or a member of a recurring group
    (rows sharing ``recurring_group_id``). Scoped edits touch the target
    alone or the target plus every later sibling in its group.
    """

    repository: SessionRepository
    conflict_guard: ConflictGuard
    max_occurrences: int = MAX_OCCURRENCES

    def get_session(self, owner_id: UUID, session_id: UUID) -> SessionRecord:
        """Return the owner's session or raise NotFound."""
        session = self.repository.get_session(owner_id, session_id)
        if session is None:
            raise NotFound(f"Session {session_id} not found")
        return session

    def list_sessions(
        self, owner_id: UUID, day: date | None = None
    ) -> list[SessionRecord]:
        """Return the owner's sessions, optionally for a single day."""
        return self.repository.list_sessions(owner_id, day)

    def create_session(self, owner_id: UUID, draft: SessionDraft) -> SessionRecord:
        """Insert a single non-recurring session."""
        _validate_times(draft)
        payload = _content_fields(draft)
        payload.setdefault("status", DEFAULT_STATUS)
        payload.update(_CLEARED_RECURRENCE)
        return self.repository.create_session(owner_id, payload)

    def create_recurring_sessions(
        self, owner_id: UUID, draft: SessionDraft
    ) -> list[SessionRecord]:
        """Insert every free occurrence of the draft's pattern under a new group."""
        plan = self._plan_series(draft)
        return self._insert_series(owner_id, draft, plan)

    def update_session_with_scope(
        self,
        owner_id: UUID,
        session_id: UUID,
        scope: UpdateScope,
        draft: SessionDraft,
    ) -> list[SessionRecord]:
        """Apply an edit to one occurrence or to it and all later siblings."""
        _validate_times(draft)
        session = self.get_session(owner_id, session_id)
        group_id = session.recurring_group_id
        if scope is UpdateScope.ALL_FUTURE and group_id is not None:
            if _pattern_changed(session, draft):
                return self._regenerate_tail(owner_id, session, draft)
            payload = _content_fields(draft)
            del payload["date"]
            payload.pop("status", None)
            return self.repository.update_group_from(
                owner_id, group_id, session.date, payload
            )

        updated = self.repository.update_session(
            owner_id, session_id, _content_fields(draft)
        )
        if updated is None:
            raise NotFound(f"Session {session_id} not found")
        return [updated]

    def delete_session_with_scope(
        self, owner_id: UUID, session_id: UUID, scope: UpdateScope
    ) -> int:
        """Delete one occurrence or it and all later siblings."""
        session = self.get_session(owner_id, session_id)
        if scope is UpdateScope.ALL_FUTURE and session.recurring_group_id is not None:
            removed = self.repository.delete_group_from(
                owner_id, session.recurring_group_id, session.date, inclusive=True
            )
            _logger.info(
                "Deleted recurring tail: group_id=%s from=%s removed=%s",
                session.recurring_group_id,
                session.date,
                removed,
            )
            return removed
        return self.repository.delete_session(owner_id, session_id)

    def delete_future_sessions(self, owner_id: UUID, session_id: UUID) -> int:
        """Delete siblings strictly after the session, keeping the session itself."""
        session = self.get_session(owner_id, session_id)
        if session.recurring_group_id is None:
            return 0
        return self.repository.delete_group_from(
            owner_id, session.recurring_group_id, session.date, inclusive=False
        )

    def convert_to_recurring(
        self,
        owner_id: UUID,
        session_id: UUID,
        frequency: RecurringFrequency,
        end_date: date,
        draft: SessionDraft | None = None,
    ) -> list[SessionRecord]:
        """Replace a single session with a recurring series starting on its date."""
        session = self.get_session(owner_id, session_id)
        if session.is_recurring:
            raise ValidationError("Session is already part of a recurring series")
        series_draft = replace(
            _keep_stored_fields(draft, session) if draft else _draft_from(session),
            recurring_frequency=frequency,
            recurring_end_date=end_date,
        )
        plan = self._plan_series(series_draft)
        self.repository.delete_session(owner_id, session_id)
        _logger.info(
            "Converting session to recurring: session_id=%s frequency=%s",
            session_id,
            frequency.value,
        )
        return self._insert_series(owner_id, series_draft, plan)

    def convert_from_recurring(
        self, owner_id: UUID, session_id: UUID
    ) -> SessionRecord:
        """Drop later siblings and strip recurrence fields from the session."""
        session = self.get_session(owner_id, session_id)
        if not session.is_recurring:
            return session
        removed = self.delete_future_sessions(owner_id, session_id)
        updated = self.repository.update_session(
            owner_id, session_id, dict(_CLEARED_RECURRENCE)
        )
        if updated is None:
            raise NotFound(f"Session {session_id} not found")
        _logger.info(
            "Converted session to one-time: session_id=%s removed_siblings=%s",
            session_id,
            removed,
        )
        return updated

    def _plan_series(self, draft: SessionDraft) -> _SeriesPlan:
        if draft.recurring_frequency is None or draft.recurring_end_date is None:
            raise ValidationError(
                "Recurring frequency and end date are required for recurring sessions"
            )
        _validate_times(draft)
        dates = generate_occurrences(
            draft.date,
            draft.recurring_frequency,
            draft.recurring_end_date,
            limit=self.max_occurrences,
        )
        return _SeriesPlan(
            frequency=draft.recurring_frequency,
            end_date=draft.recurring_end_date,
            dates=dates,
        )

    def _insert_series(
        self, owner_id: UUID, draft: SessionDraft, plan: _SeriesPlan
    ) -> list[SessionRecord]:
        group_id = uuid4()
        created: list[SessionRecord] = []
        for day in plan.dates:
            if self.conflict_guard.is_occupied(
                owner_id, draft.client_id, day, draft.start_time
            ):
                _logger.info(
                    "Skipping occupied slot: client_id=%s date=%s start=%s",
                    draft.client_id,
                    day,
                    draft.start_time,
                )
                continue
            payload = _content_fields(draft)
            payload.setdefault("status", DEFAULT_STATUS)
            payload.update(
                {
                    "date": day,
                    "recurring_group_id": group_id,
                    "recurring_frequency": plan.frequency,
                    "recurring_end_date": plan.end_date,
                }
            )
            try:
                created.append(self.repository.create_session(owner_id, payload))
            except SlotOccupiedError:
                _logger.info(
                    "Slot taken during insert, skipping: client_id=%s date=%s",
                    draft.client_id,
                    day,
                )
        _logger.info(
            "Created recurring series: group_id=%s planned=%s created=%s",
            group_id,
            len(plan.dates),
            len(created),
        )
        return created

    def _regenerate_tail(
        self, owner_id: UUID, session: SessionRecord, draft: SessionDraft
    ) -> list[SessionRecord]:
        # The new tail gets a fresh group id; earlier rows keep the old one.
        series_draft = replace(
            draft,
            recurring_frequency=draft.recurring_frequency
            or session.recurring_frequency,
            recurring_end_date=draft.recurring_end_date or session.recurring_end_date,
            notes=session.notes if draft.notes is None else draft.notes,
        )
        plan = self._plan_series(series_draft)
        removed = self.repository.delete_group_from(
            owner_id, session.recurring_group_id, session.date, inclusive=True
        )
        _logger.info(
            "Regenerating recurring tail: old_group_id=%s from=%s removed=%s",
            session.recurring_group_id,
            session.date,
            removed,
        )
        return self._insert_series(owner_id, series_draft, plan)


def _validate_times(draft: SessionDraft) -> None:
    if draft.end_time <= draft.start_time:
        raise ValidationError("Start time must be before end time")


def _content_fields(draft: SessionDraft) -> dict[str, object]:
    """Return the draft's row fields, leaving out status and notes when unset."""
    fields: dict[str, object] = {
        "client_id": draft.client_id,
        "date": draft.date,
        "start_time": draft.start_time,
        "end_time": draft.end_time,
    }
    if draft.status is not None:
        fields["status"] = draft.status
    if draft.notes is not None:
        fields["notes"] = draft.notes
    return fields


def _pattern_changed(session: SessionRecord, draft: SessionDraft) -> bool:
    """Return whether an all-future edit needs the tail regenerated.

    Pattern fields left empty on the draft keep the session's values.
    """
    frequency = draft.recurring_frequency or session.recurring_frequency
    end_date = draft.recurring_end_date or session.recurring_end_date
    return (
        draft.date != session.date
        or frequency != session.recurring_frequency
        or end_date != session.recurring_end_date
    )


def _draft_from(session: SessionRecord) -> SessionDraft:
    return SessionDraft(
        client_id=session.client_id,
        date=session.date,
        start_time=session.start_time,
        end_time=session.end_time,
        status=session.status,
        notes=session.notes,
    )


def _keep_stored_fields(draft: SessionDraft, session: SessionRecord) -> SessionDraft:
    return replace(
        draft,
        status=session.status if draft.status is None else draft.status,
        notes=session.notes if draft.notes is None else draft.notes,
    )
