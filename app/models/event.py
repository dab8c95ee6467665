from sqlalchemy import Column, DateTime, Integer, String

from app.core.database_manager import Base


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    date = Column(DateTime(timezone=True), nullable=False, index=True)
