"""Domain models for the client directory."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class ClientRecord:
    """A client that belongs to a provider."""

    id: UUID
    owner_id: UUID
    name: str
