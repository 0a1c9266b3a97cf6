"""Supabase-backed session repository."""

from dataclasses import dataclass
from datetime import UTC, date, datetime, time
from enum import Enum
from uuid import UUID

from postgrest import APIError
from supabase import Client

from practice_scheduler.domain.errors import PersistenceError, SlotOccupiedError
from practice_scheduler.domain.sessions import RecurringFrequency, SessionRecord
from practice_scheduler.services.scheduling import SessionRepository

_COLUMNS = (
    "id, therapist_id, client_id, date, start_time, end_time, status, notes, "
    "recurring_group_id, recurring_frequency, recurring_end_date, "
    "synced_to_ehr, has_progress_note"
)
_UNIQUE_VIOLATION = "23505"


@dataclass
class SupabaseSessionRepository(SessionRepository):
    """Supabase implementation for session rows.

    Every query is filtered by ``therapist_id`` so one provider can never
    read or change another provider's sessions.
    """

    client: Client
    table: str = "sessions"

    def create_session(
        self, owner_id: UUID, payload: dict[str, object]
    ) -> SessionRecord:
        """Insert a session row and return it."""
        row = _serialize(payload)
        row["therapist_id"] = str(owner_id)
        response = _execute(
            self.client.table(self.table).insert(row), "create session"
        )
        if not response.data:
            raise PersistenceError("Failed to create session")
        return _parse_session(response.data[0])

    def get_session(self, owner_id: UUID, session_id: UUID) -> SessionRecord | None:
        """Return a session by id, if the owner has it."""
        response = _execute(
            self.client.table(self.table)
            .select(_COLUMNS)
            .eq("therapist_id", str(owner_id))
            .eq("id", str(session_id))
            .limit(1),
            "get session",
        )
        if not response.data:
            return None
        return _parse_session(response.data[0])

    def list_sessions(
        self, owner_id: UUID, day: date | None = None
    ) -> list[SessionRecord]:
        """Return sessions ordered by date and start time."""
        query = (
            self.client.table(self.table)
            .select(_COLUMNS)
            .eq("therapist_id", str(owner_id))
        )
        if day is not None:
            query = query.eq("date", day.isoformat())
        query = query.order("date", desc=False).order("start_time", desc=False)
        response = _execute(query, "get sessions")
        return [_parse_session(row) for row in response.data or []]

    def update_session(
        self, owner_id: UUID, session_id: UUID, payload: dict[str, object]
    ) -> SessionRecord | None:
        """Update one session and return it, if present."""
        row = _serialize(payload)
        row["updated_at"] = datetime.now(tz=UTC).isoformat()
        response = _execute(
            self.client.table(self.table)
            .update(row)
            .eq("therapist_id", str(owner_id))
            .eq("id", str(session_id)),
            "update session",
        )
        if not response.data:
            return None
        return _parse_session(response.data[0])

    def delete_session(self, owner_id: UUID, session_id: UUID) -> int:
        """Delete one session and return the number of removed rows."""
        response = _execute(
            self.client.table(self.table)
            .delete()
            .eq("therapist_id", str(owner_id))
            .eq("id", str(session_id)),
            "delete session",
        )
        return len(response.data or [])

    def slot_exists(
        self, owner_id: UUID, client_id: UUID, day: date, start_time: time
    ) -> bool:
        """Return whether a session occupies the slot."""
        response = _execute(
            self.client.table(self.table)
            .select("id")
            .eq("therapist_id", str(owner_id))
            .eq("client_id", str(client_id))
            .eq("date", day.isoformat())
            .eq("start_time", _format_time(start_time))
            .limit(1),
            "check session slot",
        )
        return bool(response.data)

    def update_group_from(
        self,
        owner_id: UUID,
        group_id: UUID,
        from_date: date,
        payload: dict[str, object],
    ) -> list[SessionRecord]:
        """Update group rows dated on or after from_date and return them."""
        row = _serialize(payload)
        row["updated_at"] = datetime.now(tz=UTC).isoformat()
        response = _execute(
            self.client.table(self.table)
            .update(row)
            .eq("therapist_id", str(owner_id))
            .eq("recurring_group_id", str(group_id))
            .gte("date", from_date.isoformat()),
            "update sessions",
        )
        sessions = [_parse_session(item) for item in response.data or []]
        return sorted(sessions, key=lambda session: session.date)

    def delete_group_from(
        self, owner_id: UUID, group_id: UUID, from_date: date, inclusive: bool
    ) -> int:
        """Delete group rows dated after (or on, if inclusive) from_date."""
        query = (
            self.client.table(self.table)
            .delete()
            .eq("therapist_id", str(owner_id))
            .eq("recurring_group_id", str(group_id))
        )
        if inclusive:
            query = query.gte("date", from_date.isoformat())
        else:
            query = query.gt("date", from_date.isoformat())
        response = _execute(query, "delete sessions")
        return len(response.data or [])


def _execute(query, action: str):  # type: ignore[no-untyped-def]
    """Run a query, translating PostgREST failures into domain errors."""
    try:
        return query.execute()
    except APIError as exc:
        if exc.code == _UNIQUE_VIOLATION:
            raise SlotOccupiedError(
                f"Session slot already booked: {exc.message}"
            ) from exc
        raise PersistenceError(f"Failed to {action}: {exc.message}") from exc


def _serialize(payload: dict[str, object]) -> dict[str, object]:
    row: dict[str, object] = {}
    for key, value in payload.items():
        if isinstance(value, UUID):
            row[key] = str(value)
        elif isinstance(value, Enum):
            row[key] = value.value
        elif isinstance(value, time):
            row[key] = _format_time(value)
        elif isinstance(value, date):
            row[key] = value.isoformat()
        else:
            row[key] = value
    return row


def _format_time(value: time) -> str:
    """Format a minute-resolution time; seconds are not stored."""
    return value.strftime("%H:%M")


def _parse_session(row: dict[str, object]) -> SessionRecord:
    frequency = row.get("recurring_frequency")
    end_date = row.get("recurring_end_date")
    group_id = row.get("recurring_group_id")
    return SessionRecord(
        id=UUID(str(row["id"])),
        owner_id=UUID(str(row["therapist_id"])),
        client_id=UUID(str(row["client_id"])),
        date=date.fromisoformat(str(row["date"])),
        start_time=time.fromisoformat(str(row["start_time"])),
        end_time=time.fromisoformat(str(row["end_time"])),
        status=str(row.get("status") or "scheduled"),
        recurring_group_id=UUID(str(group_id)) if group_id else None,
        recurring_frequency=RecurringFrequency(frequency) if frequency else None,
        recurring_end_date=date.fromisoformat(str(end_date)) if end_date else None,
        notes=row.get("notes"),
        synced_to_ehr=bool(row.get("synced_to_ehr", False)),
        has_progress_note=bool(row.get("has_progress_note", False)),
    )
