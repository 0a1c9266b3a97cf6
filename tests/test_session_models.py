"""Tests for session API payload models."""

from datetime import date, time
from uuid import uuid4

import pytest
from pydantic import ValidationError

from practice_scheduler.api.session_models import (
    ConvertToRecurringRequest,
    SessionCreateRequest,
    SessionUpdateRequest,
    normalize_time,
)
from practice_scheduler.domain.sessions import (
    RecurringFrequency,
    SessionRecord,
    UpdateScope,
)
from tests.conftest import CLIENT_ID, OWNER_ID


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("09:30", "09:30"), ("9:30", "09:30"), ("09:30:00", "09:30")],
)
def test_normalize_time_accepts_known_spellings(raw: str, expected: str) -> None:
    assert normalize_time(raw) == expected


@pytest.mark.parametrize("raw", ["930", "9.30", "noon", "123:00", "09:30:45"])
def test_normalize_time_rejects_other_spellings(raw: str) -> None:
    with pytest.raises(ValueError, match="HH:MM"):
        normalize_time(raw)


def test_create_request_builds_recurring_draft() -> None:
    request = SessionCreateRequest(
        client_id=CLIENT_ID,
        date="2024-01-01",
        start_time="9:00",
        end_time="9:50",
        recurring_frequency="biweekly",
        recurring_end_date="2024-03-01",
    )

    draft = request.to_draft()

    assert request.wants_recurrence
    assert draft.start_time == time(9, 0)
    assert draft.recurring_frequency is RecurringFrequency.BIWEEKLY
    assert draft.recurring_end_date == date(2024, 3, 1)


def test_create_request_defaults_to_single() -> None:
    request = SessionCreateRequest(
        client_id=CLIENT_ID,
        date="2024-01-01",
        start_time="09:00",
        end_time="09:50",
    )

    assert not request.wants_recurrence
    assert request.to_draft().status == "scheduled"


def test_update_request_defaults_to_single_scope() -> None:
    request = SessionUpdateRequest(
        client_id=CLIENT_ID,
        date="2024-01-01",
        start_time="09:00",
        end_time="09:50",
    )

    assert request.update_scope is UpdateScope.SINGLE
    assert request.to_draft().status is None
    assert request.to_draft().notes is None


def test_request_rejects_non_iso_dates() -> None:
    with pytest.raises(ValidationError):
        SessionCreateRequest(
            client_id=CLIENT_ID,
            date="2024-1-1",
            start_time="09:00",
            end_time="09:50",
        )


def test_convert_request_overlays_supplied_fields() -> None:
    stored = SessionRecord(
        id=uuid4(),
        owner_id=OWNER_ID,
        client_id=CLIENT_ID,
        date=date(2024, 1, 1),
        start_time=time(9, 0),
        end_time=time(9, 50),
        status="completed",
        notes="intake",
    )
    request = ConvertToRecurringRequest(
        recurring_frequency="weekly",
        recurring_end_date="2024-02-01",
        date="2024-01-04",
        start_time="13:00",
        end_time="13:50",
    )

    draft = request.to_draft(stored)

    assert draft.date == date(2024, 1, 4)
    assert (draft.start_time, draft.end_time) == (time(13, 0), time(13, 50))
    assert draft.client_id == CLIENT_ID
    assert draft.status == "completed"
    assert draft.notes == "intake"
    assert draft.recurring_frequency is RecurringFrequency.WEEKLY
