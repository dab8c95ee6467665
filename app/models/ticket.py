from sqlalchemy import (
    Boolean,
    Column,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
    false,
)

from app.core.database_manager import Base


class Ticket(Base):
    __tablename__ = "tickets"

    id = Column(Integer, primary_key=True, index=True)
    event_id = Column(
        Integer, ForeignKey("events.id", ondelete="CASCADE"), nullable=False
    )
    owner = Column(String(255), nullable=False)
    code = Column(String(255), nullable=False)
    used = Column(Boolean, nullable=False, default=False, server_default=false())

    # A code identifies a ticket only within its event
    __table_args__ = (
        UniqueConstraint("event_id", "code", name="uq_ticket_event_code"),
        Index("idx_ticket_event_used", "event_id", "used"),
    )
