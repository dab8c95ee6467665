from typing import List

from fastapi import APIRouter, Depends, Response, status

from app.api import deps
from app.middleware.monitoring import metrics
from app.schemas.ticket import Ticket, TicketCreate
from app.services.ticket_service import TicketService

router = APIRouter()


@router.get("/{event_id}", response_model=List[Ticket], summary="List Event Tickets")  # type: ignore[misc]
async def read_tickets(
    *,
    service: TicketService = Depends(deps.get_ticket_service),
    event_id: deps.EventId,
) -> List[Ticket]:
    """
    **Retrieve the tickets of an event**, ordered by id.
    """
    return await service.list_tickets(event_id)


@router.post(
    "",
    response_model=Ticket,
    status_code=status.HTTP_201_CREATED,
    summary="Create Ticket",
)  # type: ignore[misc]
async def create_ticket(
    *,
    service: TicketService = Depends(deps.get_ticket_service),
    ticket_in: TicketCreate,
) -> Ticket:
    """
    **Create a ticket for an upcoming event**

    **Example Request:**
    ```json
    {
        "eventId": 1,
        "owner": "Regular",
        "code": "1234"
    }
    ```

    **Errors:**
    - `403`: The event has already happened
    - `404`: Event not found
    - `409`: Code already registered for the event
    - `422`: Invalid ticket data
    """
    ticket = await service.create_ticket(ticket_in)
    metrics.tickets_created_total.inc()
    return ticket


@router.put(
    "/use/{ticket_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Use Ticket",
)  # type: ignore[misc]
async def use_ticket(
    *,
    service: TicketService = Depends(deps.get_ticket_service),
    ticket_id: deps.TicketId,
) -> Response:
    """
    **Mark a ticket as used**

    **Errors:**
    - `404`: Ticket not found
    - `409`: Ticket already used
    """
    await service.use_ticket(ticket_id)
    metrics.tickets_used_total.inc()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
