"""Pytest configuration and shared fixtures."""
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import AsyncGenerator, Dict, List, Optional, Tuple

# Settings are read once on import; point them at SQLite before the app loads
os.environ.setdefault("TESTING", "true")
os.environ.setdefault("DB_AUTO_CREATE", "false")

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    # Insert at front so local package imports resolve
    sys.path.insert(0, str(REPO_ROOT))

import httpx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from fastapi import FastAPI  # noqa: E402

from app.core.database_manager import DatabaseManager  # noqa: E402
from app.core.errors import TicketCodeTakenError  # noqa: E402
from app.main import create_app  # noqa: E402
from app.repositories.event import SqlAlchemyEventRepository  # noqa: E402
from app.repositories.interfaces import EventRepository, TicketRepository  # noqa: E402
from app.repositories.ticket import SqlAlchemyTicketRepository  # noqa: E402
from app.schemas.event import Event  # noqa: E402
from app.schemas.ticket import Ticket  # noqa: E402


@pytest_asyncio.fixture
async def db() -> AsyncGenerator[DatabaseManager, None]:
    manager = DatabaseManager("sqlite+aiosqlite:///:memory:")
    await manager.create_all()
    yield manager
    await manager.close()


@pytest.fixture
def app(db: DatabaseManager) -> FastAPI:
    return create_app(db)


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[httpx.AsyncClient, None]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest.fixture
def event_repository(db: DatabaseManager) -> SqlAlchemyEventRepository:
    return SqlAlchemyEventRepository(db)


@pytest.fixture
def ticket_repository(db: DatabaseManager) -> SqlAlchemyTicketRepository:
    return SqlAlchemyTicketRepository(db)


class InMemoryEventRepository(EventRepository):
    def __init__(self) -> None:
        self.rows: Dict[int, Event] = {}
        self._next_id = 1

    async def list_events(self) -> List[Event]:
        return [self.rows[key] for key in sorted(self.rows)]

    async def get_event(self, event_id: int) -> Optional[Event]:
        return self.rows.get(event_id)

    async def create_event(self, name: str, date: datetime) -> Event:
        event = Event(id=self._next_id, name=name, date=date)
        self.rows[event.id] = event
        self._next_id += 1
        return event

    async def update_event(
        self, event_id: int, name: str, date: datetime
    ) -> Optional[Event]:
        if event_id not in self.rows:
            return None
        self.rows[event_id] = Event(id=event_id, name=name, date=date)
        return self.rows[event_id]

    async def delete_event(self, event_id: int) -> bool:
        return self.rows.pop(event_id, None) is not None


class InMemoryTicketRepository(TicketRepository):
    def __init__(self) -> None:
        self.rows: Dict[int, Ticket] = {}
        self._next_id = 1
        # Simulates a row the uniqueness lookup cannot see yet
        self.hidden_codes: List[Tuple[int, str]] = []
        self.mark_used_calls = 0

    async def list_tickets(self, event_id: int) -> List[Ticket]:
        return [t for _, t in sorted(self.rows.items()) if t.event_id == event_id]

    async def get_ticket(self, ticket_id: int) -> Optional[Ticket]:
        return self.rows.get(ticket_id)

    async def find_ticket_by_code(self, event_id: int, code: str) -> Optional[Ticket]:
        for ticket in self.rows.values():
            if ticket.event_id == event_id and ticket.code == code:
                return ticket
        return None

    async def create_ticket(self, event_id: int, owner: str, code: str) -> Ticket:
        taken = await self.find_ticket_by_code(event_id, code)
        if taken is not None or (event_id, code) in self.hidden_codes:
            raise TicketCodeTakenError(event_id, code)
        ticket = Ticket(
            id=self._next_id, event_id=event_id, owner=owner, code=code, used=False
        )
        self.rows[ticket.id] = ticket
        self._next_id += 1
        return ticket

    async def mark_used(self, ticket_id: int) -> bool:
        self.mark_used_calls += 1
        ticket = self.rows.get(ticket_id)
        if ticket is None or ticket.used:
            return False
        self.rows[ticket_id] = ticket.model_copy(update={"used": True})
        return True


@pytest.fixture
def fake_events() -> InMemoryEventRepository:
    return InMemoryEventRepository()


@pytest.fixture
def fake_tickets() -> InMemoryTicketRepository:
    return InMemoryTicketRepository()
