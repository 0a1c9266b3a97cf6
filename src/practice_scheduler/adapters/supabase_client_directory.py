"""Supabase-backed client directory."""

from dataclasses import dataclass
from uuid import UUID

from supabase import Client

from practice_scheduler.domain.clients import ClientRecord
from practice_scheduler.services.clients import ClientDirectory


@dataclass
class SupabaseClientDirectory(ClientDirectory):
    """Read-only lookups against the clients table."""

    client: Client
    table: str = "clients"

    def get_client(self, client_id: UUID) -> ClientRecord | None:
        """Return a client by id, if present."""
        response = (
            self.client.table(self.table)
            .select("id, therapist_id, name")
            .eq("id", str(client_id))
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        row = response.data[0]
        return ClientRecord(
            id=UUID(row["id"]),
            owner_id=UUID(row["therapist_id"]),
            name=str(row.get("name", "")),
        )
