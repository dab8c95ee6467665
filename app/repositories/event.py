from datetime import datetime
from typing import List, Optional

from sqlalchemy import delete, select

from app.core.database_manager import DatabaseManager
from app.models.event import Event as EventModel
from app.repositories.interfaces import EventRepository
from app.schemas.event import Event


class SqlAlchemyEventRepository(EventRepository):
    """Event repository backed by SQLAlchemy; one session per call."""

    def __init__(self, db: DatabaseManager) -> None:
        self._db = db

    async def list_events(self) -> List[Event]:
        async with self._db.get_session() as session:
            result = await session.execute(select(EventModel).order_by(EventModel.id))
            return [Event.model_validate(row) for row in result.scalars().all()]

    async def get_event(self, event_id: int) -> Optional[Event]:
        async with self._db.get_session() as session:
            db_event = await session.get(EventModel, event_id)
            return Event.model_validate(db_event) if db_event else None

    async def create_event(self, name: str, date: datetime) -> Event:
        async with self._db.get_session() as session:
            db_event = EventModel(name=name, date=date)
            session.add(db_event)
            await session.flush()
            await session.refresh(db_event)
            return Event.model_validate(db_event)

    async def update_event(
        self, event_id: int, name: str, date: datetime
    ) -> Optional[Event]:
        async with self._db.get_session() as session:
            db_event = await session.get(EventModel, event_id)
            if db_event is None:
                return None
            db_event.name = name
            db_event.date = date
            await session.flush()
            await session.refresh(db_event)
            return Event.model_validate(db_event)

    async def delete_event(self, event_id: int) -> bool:
        async with self._db.get_session() as session:
            # Tickets go with it through ON DELETE CASCADE
            result = await session.execute(
                delete(EventModel).where(EventModel.id == event_id)
            )
            return bool(result.rowcount)
