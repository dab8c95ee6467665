"""Event service: field validation and not-found mapping on top of the event repository."""

import logging
from datetime import datetime
from typing import List, Tuple

from app.core.errors import EventNotFoundError, MissingEventFieldsError
from app.repositories.interfaces import EventRepository
from app.schemas.event import Event, EventBase

logger = logging.getLogger(__name__)


def _require_name_and_date(data: EventBase) -> Tuple[str, datetime]:
    if data.name is None or data.date is None:
        missing = [field for field in ("name", "date") if getattr(data, field) is None]
        raise MissingEventFieldsError(missing)
    return data.name, data.date


class EventService:
    """Service for event operations."""

    def __init__(self, events: EventRepository) -> None:
        self._events = events

    async def list_events(self) -> List[Event]:
        return await self._events.list_events()

    async def get_event(self, event_id: int) -> Event:
        """Return an event by id.

        Raises:
            EventNotFoundError: If the event does not exist.
        """
        event = await self._events.get_event(event_id)
        if event is None:
            raise EventNotFoundError(event_id)
        return event

    async def create_event(self, data: EventBase) -> Event:
        """Persist a new event.

        Raises:
            MissingEventFieldsError: If name or date is missing.
        """
        name, date = _require_name_and_date(data)
        event = await self._events.create_event(name=name, date=date)
        logger.info("Event created", extra={"event_id": event.id})
        return event

    async def update_event(self, event_id: int, data: EventBase) -> Event:
        """Replace name and date of an event.

        Raises:
            MissingEventFieldsError: If name or date is null.
            EventNotFoundError: If the event does not exist.
        """
        name, date = _require_name_and_date(data)
        event = await self._events.update_event(event_id, name=name, date=date)
        if event is None:
            raise EventNotFoundError(event_id)
        logger.info("Event updated", extra={"event_id": event_id})
        return event

    async def delete_event(self, event_id: int) -> None:
        if await self._events.delete_event(event_id):
            logger.info("Event deleted", extra={"event_id": event_id})
        else:
            logger.info("Event already absent", extra={"event_id": event_id})
