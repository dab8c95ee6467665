from typing import List

from fastapi import APIRouter, Depends, Response, status

from app.api import deps
from app.middleware.monitoring import metrics
from app.schemas.event import Event as EventSchema
from app.schemas.event import EventCreate, EventUpdate
from app.services.event_service import EventService

router = APIRouter()


@router.get("", response_model=List[EventSchema], summary="List Events")  # type: ignore[misc]
async def read_events(
    service: EventService = Depends(deps.get_event_service),
) -> List[EventSchema]:
    """
    **Retrieve all events**, ordered by id.
    """
    return await service.list_events()


@router.get("/{event_id}", response_model=EventSchema, summary="Get Event Details")  # type: ignore[misc]
async def read_event(
    *,
    service: EventService = Depends(deps.get_event_service),
    event_id: deps.EventId,
) -> EventSchema:
    """
    **Get Event by ID**

    **Errors:**
    - `404`: Event not found
    """
    return await service.get_event(event_id)


@router.post(
    "",
    response_model=EventSchema,
    status_code=status.HTTP_201_CREATED,
    summary="Create New Event",
)  # type: ignore[misc]
async def create_event(
    *,
    service: EventService = Depends(deps.get_event_service),
    event_in: EventCreate,
) -> EventSchema:
    """
    **Create New Event**

    **Example Request:**
    ```json
    {
        "name": "Tech Conference",
        "date": "2030-06-15T09:00:00Z"
    }
    ```

    **Errors:**
    - `422`: `name` or `date` missing
    """
    event = await service.create_event(event_in)
    metrics.events_created_total.inc()
    return event


@router.put("/{event_id}", response_model=EventSchema, summary="Update Event")  # type: ignore[misc]
async def update_event(
    *,
    service: EventService = Depends(deps.get_event_service),
    event_id: deps.EventId,
    event_in: EventUpdate,
) -> EventSchema:
    """
    **Update Event Details**

    Both `name` and `date` must be provided.

    **Errors:**
    - `404`: Event not found
    - `422`: `name` or `date` is null
    """
    return await service.update_event(event_id, event_in)


@router.delete(
    "/{event_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete Event"
)  # type: ignore[misc]
async def delete_event(
    *,
    service: EventService = Depends(deps.get_event_service),
    event_id: deps.EventId,
) -> Response:
    """
    **Delete Event**

    Tickets of the event are deleted with it. Deleting an event that
    does not exist is not an error.
    """
    await service.delete_event(event_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
