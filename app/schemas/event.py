from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.schemas.common import MAX_TEXT_LENGTH


def as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC; aware ones are converted to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class EventBase(BaseModel):
    name: Optional[str] = Field(None, max_length=MAX_TEXT_LENGTH)
    date: Optional[datetime] = None

    @field_validator("date")  # type: ignore[misc]
    @classmethod
    def normalize_date(cls, v: Optional[datetime]) -> Optional[datetime]:
        return as_utc(v) if v is not None else None


class EventCreate(EventBase):
    pass


class EventUpdate(EventBase):
    pass


class Event(BaseModel):
    id: int
    name: str
    date: datetime

    model_config = ConfigDict(from_attributes=True)

    @field_validator("date")  # type: ignore[misc]
    @classmethod
    def normalize_date(cls, v: datetime) -> datetime:
        # SQLite hands back naive values
        return as_utc(v)

    def is_expired(self, now: datetime) -> bool:
        return self.date < as_utc(now)
