"""Ticket service: sale and admission rules for tickets."""

import logging
from datetime import datetime, timezone
from typing import Callable, List

from app.core.errors import (
    EventExpiredError,
    EventNotFoundError,
    TicketAlreadyUsedError,
    TicketCodeTakenError,
    TicketNotFoundError,
)
from app.repositories.interfaces import EventRepository, TicketRepository
from app.schemas.ticket import Ticket, TicketCreate

logger = logging.getLogger(__name__)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class TicketService:
    """Service for ticket operations.

    A ticket may only be sold for an event that has not happened yet, its code
    must be unique within the event, and it can be used exactly once.
    """

    def __init__(
        self,
        tickets: TicketRepository,
        events: EventRepository,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self._tickets = tickets
        self._events = events
        self._clock = clock

    async def list_tickets(self, event_id: int) -> List[Ticket]:
        return await self._tickets.list_tickets(event_id)

    async def create_ticket(self, data: TicketCreate) -> Ticket:
        """Sell a ticket.

        Raises:
            EventNotFoundError: If the event does not exist.
            EventExpiredError: If the event date is in the past.
            TicketCodeTakenError: If the code is already registered for the event.
        """
        event = await self._events.get_event(data.event_id)
        if event is None:
            raise EventNotFoundError(data.event_id)

        if event.is_expired(self._clock()):
            raise EventExpiredError(event.id)

        # The unique constraint still guards concurrent inserts
        if await self._tickets.find_ticket_by_code(event.id, data.code) is not None:
            raise TicketCodeTakenError(event.id, data.code)

        ticket = await self._tickets.create_ticket(
            event_id=event.id, owner=data.owner, code=data.code
        )
        logger.info(
            "Ticket created", extra={"ticket_id": ticket.id, "event_id": event.id}
        )
        return ticket

    async def use_ticket(self, ticket_id: int) -> None:
        """Mark a ticket as used.

        Raises:
            TicketNotFoundError: If the ticket does not exist.
            TicketAlreadyUsedError: If the ticket was used before.
        """
        ticket = await self._tickets.get_ticket(ticket_id)
        if ticket is None:
            raise TicketNotFoundError(ticket_id)
        if ticket.used or not await self._tickets.mark_used(ticket_id):
            raise TicketAlreadyUsedError(ticket_id)
        logger.info("Ticket used", extra={"ticket_id": ticket_id})
