from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.schemas.common import MAX_ID, MAX_TEXT_LENGTH


class TicketBase(BaseModel):
    event_id: int = Field(..., ge=1, le=MAX_ID)
    owner: str = Field(..., min_length=1, max_length=MAX_TEXT_LENGTH)
    code: str = Field(..., min_length=1, max_length=MAX_TEXT_LENGTH)

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TicketCreate(TicketBase):
    pass


class Ticket(TicketBase):
    id: int
    used: bool = False

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )
