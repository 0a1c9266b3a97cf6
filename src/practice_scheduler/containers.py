"""Dependency container wiring for the application."""

from dataclasses import dataclass

from supabase import create_client

from practice_scheduler.adapters.supabase_client_directory import (
    SupabaseClientDirectory,
)
from practice_scheduler.adapters.supabase_session_repository import (
    SupabaseSessionRepository,
)
from practice_scheduler.config import Settings
from practice_scheduler.services.clients import ClientService
from practice_scheduler.services.conflicts import ConflictGuard
from practice_scheduler.services.scheduling import SchedulingEngine


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    client_service: ClientService
    scheduling_engine: SchedulingEngine


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    session_repository = SupabaseSessionRepository(
        supabase_client, table=resolved_settings.sessions_table
    )
    client_directory = SupabaseClientDirectory(
        supabase_client, table=resolved_settings.clients_table
    )
    scheduling_engine = SchedulingEngine(
        repository=session_repository,
        conflict_guard=ConflictGuard(session_repository),
        max_occurrences=resolved_settings.max_occurrences,
    )
    return AppContainer(
        settings=resolved_settings,
        client_service=ClientService(client_directory),
        scheduling_engine=scheduling_engine,
    )
