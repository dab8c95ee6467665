from typing import Annotated

from fastapi import Path, Request

from app.schemas.common import MAX_ID
from app.services.event_service import EventService
from app.services.ticket_service import TicketService

EventId = Annotated[int, Path(ge=1, le=MAX_ID, description="Event id")]
TicketId = Annotated[int, Path(ge=1, le=MAX_ID, description="Ticket id")]


def get_event_service(request: Request) -> EventService:
    service: EventService = request.app.state.event_service
    return service


def get_ticket_service(request: Request) -> TicketService:
    service: TicketService = request.app.state.ticket_service
    return service
