"""Repository interfaces.

Services depend on these, never on the ORM. Implementations return
pydantic read schemas.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

from app.schemas.event import Event
from app.schemas.ticket import Ticket


class EventRepository(ABC):
    """Persistence operations for events."""

    @abstractmethod
    async def list_events(self) -> List[Event]:
        """Return all events ordered by id."""
        ...

    @abstractmethod
    async def get_event(self, event_id: int) -> Optional[Event]:
        """Return an event by id, or None if not found."""
        ...

    @abstractmethod
    async def create_event(self, name: str, date: datetime) -> Event:
        ...

    @abstractmethod
    async def update_event(
        self, event_id: int, name: str, date: datetime
    ) -> Optional[Event]:
        """Return the updated event, or None if it does not exist."""
        ...

    @abstractmethod
    async def delete_event(self, event_id: int) -> bool:
        """Delete an event and its tickets. Returns whether a row was removed."""
        ...


class TicketRepository(ABC):
    """Persistence operations for tickets."""

    @abstractmethod
    async def list_tickets(self, event_id: int) -> List[Ticket]:
        """Return the tickets of an event ordered by id."""
        ...

    @abstractmethod
    async def get_ticket(self, ticket_id: int) -> Optional[Ticket]:
        ...

    @abstractmethod
    async def find_ticket_by_code(self, event_id: int, code: str) -> Optional[Ticket]:
        ...

    @abstractmethod
    async def create_ticket(self, event_id: int, owner: str, code: str) -> Ticket:
        """Insert an unused ticket.

        Raises:
            TicketCodeTakenError: If the code is already registered for the event.
        """
        ...

    @abstractmethod
    async def mark_used(self, ticket_id: int) -> bool:
        """Flip an unused ticket to used. Returns False if it was missing or already used."""
        ...
