"""Client directory lookups."""

from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from practice_scheduler.domain.clients import ClientRecord
from practice_scheduler.domain.errors import Forbidden, NotFound


class ClientDirectory(Protocol):
    """Read-only access to client records."""

    def get_client(self, client_id: UUID) -> ClientRecord | None:
        """Return a client by id regardless of owner, if present.

        The lookup is not filtered by owner so that ClientService can tell a
        foreign client (Forbidden) from a missing one (NotFound).
        """


@dataclass
class ClientService:
    """Vets client ids before they reach the scheduling engine."""

    directory: ClientDirectory

    def require_client(self, owner_id: UUID, client_id: UUID) -> ClientRecord:
        """Return the client if the owner may book it."""
        client = self.directory.get_client(client_id)
        if client is None:
            raise NotFound(f"Client {client_id} not found")
        if client.owner_id != owner_id:
            raise Forbidden(f"Client {client_id} belongs to another provider")
        return client
