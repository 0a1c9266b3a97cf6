"""Session API endpoints scoped to the calling provider."""

from __future__ import annotations

from datetime import date  # noqa: TC003
from typing import TYPE_CHECKING
from uuid import UUID  # noqa: TC003

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request, status

from practice_scheduler.api.session_models import (  # noqa: TC001
    ConvertToRecurringRequest,
    SessionCreateRequest,
    SessionUpdateRequest,
)
from practice_scheduler.domain.sessions import SessionRecord, UpdateScope

if TYPE_CHECKING:
    from practice_scheduler.containers import AppContainer


def _get_api_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.api_token


async def require_api_token(
    x_api_token: str | None = Header(default=None),
    api_token: str = Depends(_get_api_token),
) -> None:
    """Ensure requests include the shared API token."""
    if not x_api_token or x_api_token != api_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


async def current_owner_id(x_owner_id: str | None = Header(default=None)) -> UUID:
    """Return the provider id forwarded by the upstream auth layer."""
    if not x_owner_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    try:
        return UUID(x_owner_id)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED) from exc


router = APIRouter(
    prefix="/sessions",
    tags=["sessions"],
    dependencies=[Depends(require_api_token)],
)


@router.get("")
async def list_sessions(
    request: Request,
    owner_id: UUID = Depends(current_owner_id),
    day: date | None = Query(default=None, alias="date"),
) -> dict[str, object]:
    """Return the provider's sessions, optionally for one day."""
    container: AppContainer = request.app.state.container
    sessions = container.scheduling_engine.list_sessions(owner_id, day)
    return {"data": [session_payload(session) for session in sessions]}


@router.get("/{session_id}")
async def get_session(
    session_id: UUID,
    request: Request,
    owner_id: UUID = Depends(current_owner_id),
) -> dict[str, object]:
    """Return a single session."""
    container: AppContainer = request.app.state.container
    session = container.scheduling_engine.get_session(owner_id, session_id)
    return {"data": session_payload(session)}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_session(
    body: SessionCreateRequest,
    request: Request,
    owner_id: UUID = Depends(current_owner_id),
) -> dict[str, object]:
    """Create a one-time session or a recurring series."""
    container: AppContainer = request.app.state.container
    container.client_service.require_client(owner_id, body.client_id)
    engine = container.scheduling_engine
    if body.wants_recurrence:
        sessions = engine.create_recurring_sessions(owner_id, body.to_draft())
    else:
        sessions = [engine.create_session(owner_id, body.to_draft())]
    return {"data": [session_payload(session) for session in sessions]}


@router.put("/{session_id}")
async def update_session(
    session_id: UUID,
    body: SessionUpdateRequest,
    request: Request,
    owner_id: UUID = Depends(current_owner_id),
) -> dict[str, object]:
    """Edit one occurrence or it and every later occurrence."""
    container: AppContainer = request.app.state.container
    container.client_service.require_client(owner_id, body.client_id)
    sessions = container.scheduling_engine.update_session_with_scope(
        owner_id, session_id, body.update_scope, body.to_draft()
    )
    return {"data": [session_payload(session) for session in sessions]}


@router.delete("/{session_id}")
async def delete_session(
    session_id: UUID,
    request: Request,
    owner_id: UUID = Depends(current_owner_id),
    scope: UpdateScope = UpdateScope.SINGLE,
    delete_future: bool = False,
) -> dict[str, object]:
    """Delete with a scope, or drop only the later occurrences."""
    container: AppContainer = request.app.state.container
    engine = container.scheduling_engine
    if delete_future:
        removed = engine.delete_future_sessions(owner_id, session_id)
    else:
        removed = engine.delete_session_with_scope(owner_id, session_id, scope)
    return {"deleted": removed}


@router.post("/{session_id}/convert-to-recurring", status_code=status.HTTP_201_CREATED)
async def convert_to_recurring(
    session_id: UUID,
    body: ConvertToRecurringRequest,
    request: Request,
    owner_id: UUID = Depends(current_owner_id),
) -> dict[str, object]:
    """Replace a one-time session with a recurring series, optionally edited."""
    container: AppContainer = request.app.state.container
    engine = container.scheduling_engine
    draft = body.to_draft(engine.get_session(owner_id, session_id))
    container.client_service.require_client(owner_id, draft.client_id)
    sessions = engine.convert_to_recurring(
        owner_id,
        session_id,
        body.recurring_frequency,
        body.recurring_end_date,
        draft,
    )
    return {"data": [session_payload(session) for session in sessions]}


@router.post("/{session_id}/convert-from-recurring")
async def convert_from_recurring(
    session_id: UUID,
    request: Request,
    owner_id: UUID = Depends(current_owner_id),
) -> dict[str, object]:
    """Detach a session from its series and drop later occurrences."""
    container: AppContainer = request.app.state.container
    session = container.scheduling_engine.convert_from_recurring(owner_id, session_id)
    return {"data": session_payload(session)}


def session_payload(session: SessionRecord) -> dict[str, object]:
    """Serialize a session for JSON responses."""
    return {
        "id": str(session.id),
        "client_id": str(session.client_id),
        "date": session.date.isoformat(),
        "start_time": session.start_time.strftime("%H:%M"),
        "end_time": session.end_time.strftime("%H:%M"),
        "status": session.status,
        "notes": session.notes,
        "is_recurring": session.is_recurring,
        "recurring_group_id": (
            str(session.recurring_group_id) if session.recurring_group_id else None
        ),
        "recurring_frequency": (
            session.recurring_frequency.value if session.recurring_frequency else None
        ),
        "recurring_end_date": (
            session.recurring_end_date.isoformat()
            if session.recurring_end_date
            else None
        ),
        "synced_to_ehr": session.synced_to_ehr,
        "has_progress_note": session.has_progress_note,
    }
