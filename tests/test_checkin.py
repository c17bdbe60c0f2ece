"""Tests de check-in de tickets"""
from shared.database.models import Event, Inscription, INSCRIPTION_CANCELLED, INSCRIPTION_CHECKED_IN
from tests.conftest import auth_headers


async def _check_in(client, user, ticket_code, event):
    return await client.post(
        "/api/v1/tickets/check-in",
        json={"ticket_code": ticket_code, "event_id": str(event.id)},
        headers=auth_headers(user)
    )


async def test_check_in_is_idempotent(client, factory):
    organizer = await factory.organizer()
    event = await factory.event(organizer)
    participant = await factory.user(name="Maria Participante")
    inscription = await factory.inscription(participant, event)

    first = await _check_in(client, organizer, inscription.ticket_code, event)

    assert first.status_code == 200
    data = first.json()
    assert data["status"] == "SUCCESS"
    assert data["inscription_id"] == str(inscription.id)
    assert data["attendee_name"] == "Maria Participante"
    assert data["checked_in_at"] is not None

    second = await _check_in(client, organizer, inscription.ticket_code.lower(), event)

    assert second.json()["status"] == "ALREADY_CHECKED_IN"
    stored = await factory.get(Inscription, inscription.id)
    assert stored.status == INSCRIPTION_CHECKED_IN
    # El check-in conserva el cupo
    assert (await factory.get(Event, event.id)).available_spots == 9


async def test_check_in_wrong_event_is_invalid(client, factory):
    organizer = await factory.organizer()
    event = await factory.event(organizer)
    other_event = await factory.event(organizer)
    inscription = await factory.inscription(await factory.user(), event)

    response = await _check_in(client, organizer, inscription.ticket_code, other_event)

    assert response.json()["status"] == "INVALID"


async def test_check_in_unknown_or_cancelled_ticket(client, factory):
    organizer = await factory.organizer()
    event = await factory.event(organizer)
    cancelled = await factory.inscription(await factory.user(), event, take_seat=False, status=INSCRIPTION_CANCELLED)

    assert (await _check_in(client, organizer, "TICKET-NADA", event)).json()["status"] == "INVALID"
    assert (await _check_in(client, organizer, cancelled.ticket_code, event)).json()["status"] == "INVALID"


async def test_check_in_requires_event_owner_or_admin(client, factory):
    organizer = await factory.organizer()
    event = await factory.event(organizer)
    inscription = await factory.inscription(await factory.user(), event)

    response = await _check_in(client, await factory.organizer(), inscription.ticket_code, event)
    assert response.status_code == 403

    response = await _check_in(client, await factory.admin(), inscription.ticket_code, event)
    assert response.json()["status"] == "SUCCESS"
