import logging
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError

from app.core.database_manager import DatabaseManager
from app.core.errors import TicketCodeTakenError
from app.models.ticket import Ticket as TicketModel
from app.repositories.interfaces import TicketRepository
from app.schemas.ticket import Ticket

logger = logging.getLogger(__name__)


class SqlAlchemyTicketRepository(TicketRepository):
    """Ticket repository backed by SQLAlchemy; one session per call."""

    def __init__(self, db: DatabaseManager) -> None:
        self._db = db

    async def list_tickets(self, event_id: int) -> List[Ticket]:
        async with self._db.get_session() as session:
            result = await session.execute(
                select(TicketModel)
                .filter(TicketModel.event_id == event_id)
                .order_by(TicketModel.id)
            )
            return [Ticket.model_validate(row) for row in result.scalars().all()]

    async def get_ticket(self, ticket_id: int) -> Optional[Ticket]:
        async with self._db.get_session() as session:
            db_ticket = await session.get(TicketModel, ticket_id)
            return Ticket.model_validate(db_ticket) if db_ticket else None

    async def find_ticket_by_code(self, event_id: int, code: str) -> Optional[Ticket]:
        async with self._db.get_session() as session:
            result = await session.execute(
                select(TicketModel).filter(
                    TicketModel.event_id == event_id, TicketModel.code == code
                )
            )
            db_ticket = result.scalars().first()
            return Ticket.model_validate(db_ticket) if db_ticket else None

    async def create_ticket(self, event_id: int, owner: str, code: str) -> Ticket:
        try:
            async with self._db.get_session() as session:
                db_ticket = TicketModel(
                    event_id=event_id, owner=owner, code=code, used=False
                )
                session.add(db_ticket)
                await session.flush()
                await session.refresh(db_ticket)
                ticket = Ticket.model_validate(db_ticket)
        except IntegrityError as e:
            # Lost a race against a concurrent insert of the same code
            logger.warning(
                "Unique constraint rejected ticket code %s for event %s: %s",
                code,
                event_id,
                e.orig,
            )
            raise TicketCodeTakenError(event_id, code) from e
        return ticket

    async def mark_used(self, ticket_id: int) -> bool:
        async with self._db.get_session() as session:
            result = await session.execute(
                update(TicketModel)
                .where(TicketModel.id == ticket_id, TicketModel.used.is_(False))
                .values(used=True)
            )
            return bool(result.rowcount)
