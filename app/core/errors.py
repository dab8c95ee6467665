"""Application error kinds and their HTTP status mapping."""

import enum
from typing import Dict, Iterable

from fastapi import status


class ErrorKind(str, enum.Enum):
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    UNPROCESSABLE_ENTITY = "unprocessable_entity"


STATUS_CODES: Dict[ErrorKind, int] = {
    ErrorKind.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    # Literal: the starlette constant name changed between releases
    ErrorKind.UNPROCESSABLE_ENTITY: 422,
}


class AppError(Exception):
    """Base error with a kind and a user-facing message."""

    kind: ErrorKind

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    @property
    def status_code(self) -> int:
        return status_code_for(self)


class UnauthorizedError(AppError):
    kind = ErrorKind.UNAUTHORIZED


class ForbiddenError(AppError):
    kind = ErrorKind.FORBIDDEN


class ConflictError(AppError):
    kind = ErrorKind.CONFLICT


class NotFoundError(AppError):
    kind = ErrorKind.NOT_FOUND


class UnprocessableEntityError(AppError):
    kind = ErrorKind.UNPROCESSABLE_ENTITY


class EventNotFoundError(NotFoundError):
    def __init__(self, event_id: int) -> None:
        super().__init__(f"Event with id {event_id} not found.")
        self.event_id = event_id


class TicketNotFoundError(NotFoundError):
    def __init__(self, ticket_id: int) -> None:
        super().__init__(f"Ticket with id {ticket_id} not found.")
        self.ticket_id = ticket_id


class EventExpiredError(ForbiddenError):
    """Raised when selling a ticket for an event whose date has passed."""

    def __init__(self, event_id: int) -> None:
        super().__init__("The event has already happened.")
        self.event_id = event_id


class TicketCodeTakenError(ConflictError):
    """Raised when a ticket code is already registered for the event."""

    def __init__(self, event_id: int, code: str) -> None:
        super().__init__(
            f"Ticket with code {code} for event id {event_id} already registered."
        )
        self.event_id = event_id
        self.code = code


class TicketAlreadyUsedError(ConflictError):
    def __init__(self, ticket_id: int) -> None:
        super().__init__(f"Ticket with id {ticket_id} has already been used.")
        self.ticket_id = ticket_id


class MissingEventFieldsError(UnprocessableEntityError):
    def __init__(self, fields: Iterable[str]) -> None:
        self.fields = tuple(fields)
        super().__init__(
            f"Fields name and date are required; missing: {', '.join(self.fields)}."
        )


def status_code_for(error: Exception) -> int:
    """Return the HTTP status for an error; anything without a known kind is a 500."""
    kind = getattr(error, "kind", None)
    if not isinstance(kind, ErrorKind):
        return status.HTTP_500_INTERNAL_SERVER_ERROR
    return STATUS_CODES.get(kind, status.HTTP_500_INTERNAL_SERVER_ERROR)
