"""HTTP tests for /tickets, /health and /metrics."""
import warnings
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from app.repositories.event import SqlAlchemyEventRepository
from app.repositories.ticket import SqlAlchemyTicketRepository


def _future(days: int = 30) -> datetime:
    return datetime.now(timezone.utc) + timedelta(days=days)


def _past(days: int = 30) -> datetime:
    return datetime.now(timezone.utc) - timedelta(days=days)


@pytest.mark.asyncio
async def test_health_returns_plain_text(client: httpx.AsyncClient) -> None:
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.text == "I'm okay!"
    assert response.headers["content-type"].startswith("text/plain")


@pytest.mark.asyncio
async def test_list_tickets_for_event(
    client: httpx.AsyncClient,
    event_repository: SqlAlchemyEventRepository,
    ticket_repository: SqlAlchemyTicketRepository,
) -> None:
    event = await event_repository.create_event("Concert", _future())
    other = await event_repository.create_event("Other", _future())
    await ticket_repository.create_ticket(event.id, "Ana", "001")
    await ticket_repository.create_ticket(event.id, "Bruno", "002")
    await ticket_repository.create_ticket(other.id, "Carla", "001")

    response = await client.get(f"/tickets/{event.id}")

    assert response.status_code == 200
    body = response.json()
    assert [ticket["code"] for ticket in body] == ["001", "002"]
    assert body[0] == {
        "id": body[0]["id"],
        "eventId": event.id,
        "owner": "Ana",
        "code": "001",
        "used": False,
    }


@pytest.mark.asyncio
async def test_list_tickets_for_unknown_event_is_empty(
    client: httpx.AsyncClient,
) -> None:
    response = await client.get("/tickets/1")

    assert response.status_code == 200
    assert response.json() == []


@pytest.mark.asyncio
async def test_create_ticket(
    client: httpx.AsyncClient,
    event_repository: SqlAlchemyEventRepository,
    ticket_repository: SqlAlchemyTicketRepository,
) -> None:
    event = await event_repository.create_event("Theatre", _future())
    payload = {"eventId": event.id, "owner": "Regular", "code": "200"}

    response = await client.post("/tickets", json=payload)

    assert response.status_code == 201
    body = response.json()
    assert body["owner"] == "Regular"
    assert body["code"] == "200"
    assert body["eventId"] == event.id
    assert body["used"] is False
    stored = await ticket_repository.get_ticket(body["id"])
    assert stored is not None
    assert stored.code == "200"


@pytest.mark.asyncio
async def test_create_ticket_for_past_event_returns_403(
    client: httpx.AsyncClient,
    event_repository: SqlAlchemyEventRepository,
    ticket_repository: SqlAlchemyTicketRepository,
) -> None:
    event = await event_repository.create_event("Expired Event", _past())

    response = await client.post(
        "/tickets", json={"eventId": event.id, "owner": "Regular", "code": "5678"}
    )

    assert response.status_code == 403
    assert response.text == "The event has already happened."
    assert await ticket_repository.list_tickets(event.id) == []


@pytest.mark.asyncio
async def test_create_ticket_with_duplicate_code_returns_409(
    client: httpx.AsyncClient, event_repository: SqlAlchemyEventRepository
) -> None:
    event = await event_repository.create_event("New Event", _future())
    first = await client.post(
        "/tickets", json={"eventId": event.id, "owner": "VIP", "code": "1234"}
    )
    assert first.status_code == 201

    second = await client.post(
        "/tickets", json={"eventId": event.id, "owner": "Regular", "code": "1234"}
    )

    assert second.status_code == 409
    assert (
        second.text
        == f"Ticket with code 1234 for event id {event.id} already registered."
    )


@pytest.mark.asyncio
async def test_same_code_is_allowed_for_different_events(
    client: httpx.AsyncClient, event_repository: SqlAlchemyEventRepository
) -> None:
    one = await event_repository.create_event("One", _future())
    two = await event_repository.create_event("Two", _future())

    for event in (one, two):
        response = await client.post(
            "/tickets", json={"eventId": event.id, "owner": "Guest", "code": "SAME"}
        )
        assert response.status_code == 201


@pytest.mark.asyncio
async def test_create_ticket_for_unknown_event_returns_404(
    client: httpx.AsyncClient,
) -> None:
    response = await client.post(
        "/tickets", json={"eventId": 77, "owner": "Nobody", "code": "X"}
    )

    assert response.status_code == 404
    assert response.text == "Event with id 77 not found."


@pytest.mark.asyncio
async def test_create_ticket_with_missing_fields_returns_422(
    client: httpx.AsyncClient,
) -> None:
    response = await client.post("/tickets", json={"owner": "Regular"})

    assert response.status_code == 422
    assert "eventId" in response.text
    assert "code" in response.text


@pytest.mark.asyncio
async def test_use_ticket(
    client: httpx.AsyncClient,
    event_repository: SqlAlchemyEventRepository,
    ticket_repository: SqlAlchemyTicketRepository,
) -> None:
    event = await event_repository.create_event("Event Test", _future(1))
    ticket = await ticket_repository.create_ticket(event.id, "Test Owner", "12345")

    response = await client.put(f"/tickets/use/{ticket.id}")

    assert response.status_code == 204
    assert response.content == b""
    updated = await ticket_repository.get_ticket(ticket.id)
    assert updated is not None
    assert updated.used is True


@pytest.mark.asyncio
async def test_use_ticket_twice_returns_409(
    client: httpx.AsyncClient,
    event_repository: SqlAlchemyEventRepository,
    ticket_repository: SqlAlchemyTicketRepository,
) -> None:
    event = await event_repository.create_event("Event Test", _future())
    ticket = await ticket_repository.create_ticket(event.id, "Owner", "ONCE")
    assert (await client.put(f"/tickets/use/{ticket.id}")).status_code == 204

    response = await client.put(f"/tickets/use/{ticket.id}")

    assert response.status_code == 409
    assert response.text == f"Ticket with id {ticket.id} has already been used."


@pytest.mark.asyncio
async def test_use_missing_ticket_returns_404(client: httpx.AsyncClient) -> None:
    response = await client.put("/tickets/use/31337")

    assert response.status_code == 404
    assert response.text == "Ticket with id 31337 not found."


@pytest.mark.asyncio
async def test_responses_carry_request_tracking_headers(
    client: httpx.AsyncClient,
) -> None:
    response = await client.get("/health", headers={"X-Request-ID": "abc-123"})

    assert response.headers["X-Request-ID"] == "abc-123"
    assert response.headers["X-Response-Time"].endswith("s")


@pytest.mark.asyncio
async def test_metrics_count_created_tickets(
    client: httpx.AsyncClient, event_repository: SqlAlchemyEventRepository
) -> None:
    event = await event_repository.create_event("Metered", _future())
    await client.post(
        "/tickets", json={"eventId": event.id, "owner": "Counted", "code": "M1"}
    )

    response = await client.get("/metrics")

    assert response.status_code == 200
    assert "tickets_created_total" in response.text
    assert "http_requests_total" in response.text


@pytest.mark.asyncio
async def test_out_of_range_event_id_in_body_returns_422(
    client: httpx.AsyncClient,
) -> None:
    response = await client.post(
        "/tickets",
        json={"eventId": 99999999999999999999, "owner": "Big", "code": "N"},
    )

    assert response.status_code == 422
    assert "eventId" in response.text


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "path", ["/tickets/99999999999999999999", f"/tickets/{2**31}", "/tickets/0"]
)
async def test_out_of_range_event_id_in_path_returns_422(
    client: httpx.AsyncClient, path: str
) -> None:
    response = await client.get(path)

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_out_of_range_ticket_id_returns_422(client: httpx.AsyncClient) -> None:
    response = await client.put("/tickets/use/99999999999999999999")

    assert response.status_code == 422
    assert "ticket_id" in response.text


@pytest.mark.asyncio
@pytest.mark.parametrize("field", ["owner", "code"])
async def test_ticket_text_longer_than_column_returns_422(
    client: httpx.AsyncClient,
    event_repository: SqlAlchemyEventRepository,
    ticket_repository: SqlAlchemyTicketRepository,
    field: str,
) -> None:
    event = await event_repository.create_event("Limits", _future())
    payload = {"eventId": event.id, "owner": "Owner", "code": "C-1"}
    payload[field] = "y" * 256

    response = await client.post("/tickets", json=payload)

    assert response.status_code == 422
    assert field in response.text
    assert await ticket_repository.list_tickets(event.id) == []


@pytest.mark.asyncio
async def test_validation_errors_do_not_touch_deprecated_status_names(
    client: httpx.AsyncClient,
) -> None:
    with warnings.catch_warnings():
        warnings.filterwarnings("error", message=".*HTTP_422_UNPROCESSABLE_ENTITY.*")
        response = await client.post("/tickets", json={})

    assert response.status_code == 422
