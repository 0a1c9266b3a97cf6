"""Occupied-slot detection for batch session creation."""

from dataclasses import dataclass
from datetime import date, time
from typing import Protocol
from uuid import UUID


class SlotLookup(Protocol):
    """Store capability needed to detect booked slots."""

    def slot_exists(
        self, owner_id: UUID, client_id: UUID, day: date, start_time: time
    ) -> bool:
        """Return whether a session already occupies the slot."""


@dataclass
class ConflictGuard:
    """Checks candidate slots against existing bookings."""

    lookup: SlotLookup

    def is_occupied(
        self, owner_id: UUID, client_id: UUID, day: date, start_time: time
    ) -> bool:
        """Return True when the owner already has this client booked at the slot."""
        return self.lookup.slot_exists(owner_id, client_id, day, start_time)
