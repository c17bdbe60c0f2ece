"""Tests del ciclo de vida de inscripciones"""
import uuid
from datetime import timedelta

from shared.database.models import (
    Event, Inscription,
    EVENT_DRAFT, EVENT_CANCELLED, INSCRIPTION_CANCELLED, INSCRIPTION_CONFIRMED, INSCRIPTION_CHECKED_IN,
    PAYMENT_PENDING
)
from shared.utils.dates import utcnow
from tests.conftest import auth_headers


async def _inscribe(client, user, event, **body):
    return await client.post(
        "/api/v1/inscriptions",
        json={"event_id": str(event.id), **body},
        headers=auth_headers(user)
    )


# ==================== CREATE ====================

async def test_free_event_capacity_one(client, factory):
    organizer = await factory.organizer()
    event = await factory.event(organizer, max_participants=1)
    first = await factory.user()
    second = await factory.user()

    response = await _inscribe(client, first, event)
    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "ACTIVE"
    assert data["paid"] is True
    assert data["payment_status"] == "FREE"
    assert data["ticket_code"].startswith("TICKET-")
    assert data["event"]["available_spots"] == 0

    response = await _inscribe(client, second, event)
    assert response.status_code == 400
    assert "lleno" in response.json()["error"]

    stored = await factory.get(Event, event.id)
    assert stored.available_spots == 0
    assert await factory.count(Inscription) == 1


async def test_paid_event_payment_outcomes(client, factory):
    organizer = await factory.organizer()
    event = await factory.event(organizer, price=89.90)

    paid = await _inscribe(client, await factory.user(), event, payment_status="PAID")
    pending = await _inscribe(client, await factory.user(), event, payment_status="PENDING")
    no_outcome = await _inscribe(client, await factory.user(), event)

    assert (paid.json()["status"], paid.json()["paid"]) == ("ACTIVE", True)
    assert (pending.json()["status"], pending.json()["paid"]) == ("CONFIRMED", False)
    assert pending.json()["payment_status"] == "PENDING"
    assert (no_outcome.json()["status"], no_outcome.json()["paid"]) == ("ACTIVE", False)
    assert no_outcome.json()["payment_status"] == "UNPAID"

    # CONFIRMED no ocupa cupo
    stored = await factory.get(Event, event.id)
    assert stored.available_spots == 8


async def test_invalid_payment_status(client, factory):
    event = await factory.event(await factory.organizer(), price=10)

    response = await _inscribe(client, await factory.user(), event, payment_status="FREE")

    assert response.status_code == 400


async def test_duplicate_inscription_rejected(client, factory):
    event = await factory.event(await factory.organizer())
    participant = await factory.user()

    assert (await _inscribe(client, participant, event)).status_code == 201
    response = await _inscribe(client, participant, event)

    assert response.status_code == 400
    assert response.json()["error"] == "Ya estás inscrito en este evento"
    assert (await factory.get(Event, event.id)).available_spots == 9


async def test_reactivation_reuses_inscription(client, factory):
    event = await factory.event(await factory.organizer())
    participant = await factory.user()

    created = (await _inscribe(client, participant, event)).json()
    cancel = await client.delete(f"/api/v1/inscriptions/{created['id']}", headers=auth_headers(participant))
    assert cancel.status_code == 200
    assert (await factory.get(Event, event.id)).available_spots == 10

    response = await _inscribe(client, participant, event)

    assert response.status_code == 201
    data = response.json()
    assert data["id"] == created["id"]
    assert data["status"] == "ACTIVE"
    assert data["inscription_date"] >= created["inscription_date"]
    assert await factory.count(Inscription) == 1
    assert (await factory.get(Event, event.id)).available_spots == 9


async def test_inscription_rejected_for_unavailable_events(client, factory):
    organizer = await factory.organizer()
    participant = await factory.user()
    draft = await factory.event(organizer, status=EVENT_DRAFT)
    private = await factory.event(organizer, is_public=False)
    started = await factory.event(organizer, start_date=utcnow() - timedelta(hours=1))

    for event in (draft, private, started):
        response = await _inscribe(client, participant, event)
        assert response.status_code == 400

    assert await factory.count(Inscription) == 0


async def test_inscription_unknown_event(client, factory):
    participant = await factory.user()

    response = await client.post(
        "/api/v1/inscriptions",
        json={"event_id": str(uuid.uuid4())},
        headers=auth_headers(participant)
    )

    assert response.status_code == 404


# ==================== LIST ====================

async def test_list_own_inscriptions(client, factory):
    organizer = await factory.organizer()
    participant = await factory.user()
    first = await factory.event(organizer)
    second = await factory.event(organizer, price=20)
    cancelled = await factory.event(organizer)
    await factory.inscription(participant, first)
    await factory.inscription(
        participant, second, take_seat=False,
        status=INSCRIPTION_CONFIRMED, paid=False, payment_status=PAYMENT_PENDING
    )
    await factory.inscription(participant, cancelled, take_seat=False, status=INSCRIPTION_CANCELLED)

    response = await client.get("/api/v1/inscriptions", headers=auth_headers(participant))

    assert response.status_code == 200
    data = response.json()
    assert {i["event_id"] for i in data} == {str(first.id), str(second.id)}
    assert all(i["event"]["category"] is not None for i in data)


async def test_list_other_user_requires_admin(client, factory):
    participant = await factory.user()
    other = await factory.user()
    admin = await factory.admin()
    await factory.inscription(other, await factory.event(await factory.organizer()))

    response = await client.get(
        "/api/v1/inscriptions", params={"user_id": str(other.id)}, headers=auth_headers(participant)
    )
    assert response.status_code == 403

    response = await client.get(
        "/api/v1/inscriptions", params={"user_id": str(other.id)}, headers=auth_headers(admin)
    )
    assert response.status_code == 200
    assert len(response.json()) == 1


# ==================== CANCEL ====================

async def test_cancel_releases_seat(client, factory):
    event = await factory.event(await factory.organizer(), max_participants=1)
    participant = await factory.user()
    inscription = await factory.inscription(participant, event)

    response = await client.delete(f"/api/v1/inscriptions/{inscription.id}", headers=auth_headers(participant))

    assert response.status_code == 200
    assert response.json()["status"] == "CANCELLED"
    assert (await factory.get(Event, event.id)).available_spots == 1
    assert (await factory.get(Inscription, inscription.id)).status == INSCRIPTION_CANCELLED


async def test_cancel_pending_inscription_keeps_spots(client, factory):
    event = await factory.event(await factory.organizer(), price=30)
    participant = await factory.user()
    inscription = await factory.inscription(
        participant, event, take_seat=False,
        status=INSCRIPTION_CONFIRMED, paid=False, payment_status=PAYMENT_PENDING
    )

    response = await client.delete(f"/api/v1/inscriptions/{inscription.id}", headers=auth_headers(participant))

    assert response.status_code == 200
    assert (await factory.get(Event, event.id)).available_spots == 10


async def test_cancel_rules(client, factory):
    organizer = await factory.organizer()
    participant = await factory.user()
    other = await factory.user()
    event = await factory.event(organizer)
    inscription = await factory.inscription(participant, event)
    url = f"/api/v1/inscriptions/{inscription.id}"

    assert (await client.delete(url, headers=auth_headers(other))).status_code == 403
    response = await client.delete(url, params={"user_id": str(other.id)}, headers=auth_headers(participant))
    assert response.status_code == 403

    assert (await client.delete(url, headers=auth_headers(participant))).status_code == 200
    response = await client.delete(url, headers=auth_headers(participant))
    assert response.status_code == 400
    assert response.json()["error"] == "La inscripción ya está cancelada"


async def test_cancel_after_event_started(client, factory):
    event = await factory.event(await factory.organizer(), start_date=utcnow() - timedelta(minutes=5))
    participant = await factory.user()
    inscription = await factory.inscription(participant, event)

    response = await client.delete(f"/api/v1/inscriptions/{inscription.id}", headers=auth_headers(participant))

    assert response.status_code == 400


async def test_cancel_unknown_inscription(client, factory):
    participant = await factory.user()

    response = await client.delete(f"/api/v1/inscriptions/{uuid.uuid4()}", headers=auth_headers(participant))

    assert response.status_code == 404


# ==================== CONFIRM PAYMENT / QR ====================

async def test_confirm_payment_by_organizer(client, factory):
    organizer = await factory.organizer()
    event = await factory.event(organizer, price=50)
    participant = await factory.user()
    inscription = await factory.inscription(
        participant, event, take_seat=False,
        status=INSCRIPTION_CONFIRMED, paid=False, payment_status=PAYMENT_PENDING
    )
    url = f"/api/v1/inscriptions/{inscription.id}/confirm-payment"

    assert (await client.post(url, headers=auth_headers(participant))).status_code == 403

    response = await client.post(url, headers=auth_headers(organizer))

    assert response.status_code == 200
    data = response.json()
    assert (data["status"], data["paid"], data["payment_status"]) == ("ACTIVE", True, "PAID")
    assert data["event"]["available_spots"] == 9

    response = await client.post(url, headers=auth_headers(organizer))
    assert response.status_code == 400


async def test_confirm_payment_when_event_full(client, factory):
    organizer = await factory.organizer()
    event = await factory.event(organizer, price=50, max_participants=1)
    await factory.inscription(await factory.user(), event, payment_status="PAID")
    pending = await factory.inscription(
        await factory.user(), event, take_seat=False,
        status=INSCRIPTION_CONFIRMED, paid=False, payment_status=PAYMENT_PENDING
    )

    response = await client.post(
        f"/api/v1/inscriptions/{pending.id}/confirm-payment", headers=auth_headers(organizer)
    )

    assert response.status_code == 400
    assert (await factory.get(Inscription, pending.id)).status == INSCRIPTION_CONFIRMED


async def test_ticket_qr_png(client, factory):
    participant = await factory.user()
    inscription = await factory.inscription(participant, await factory.event(await factory.organizer()))

    response = await client.get(f"/api/v1/inscriptions/{inscription.id}/qr", headers=auth_headers(participant))

    assert response.status_code == 200
    assert response.headers["content-type"] == "image/png"
    assert response.content.startswith(b"\x89PNG")

    other = await factory.user()
    response = await client.get(f"/api/v1/inscriptions/{inscription.id}/qr", headers=auth_headers(other))
    assert response.status_code == 403


async def test_checked_in_inscription_counts_as_inscribed(client, factory):
    event = await factory.event(await factory.organizer())
    participant = await factory.user()
    await factory.inscription(participant, event, status=INSCRIPTION_CHECKED_IN)

    response = await _inscribe(client, participant, event)

    assert response.status_code == 400


async def test_confirm_payment_rejected_for_closed_events(client, factory):
    organizer = await factory.organizer()
    cancelled = await factory.event(organizer, price=50, status=EVENT_CANCELLED)
    started = await factory.event(organizer, price=50, start_date=utcnow() - timedelta(hours=1))

    for event in (cancelled, started):
        pending = await factory.inscription(
            await factory.user(), event, take_seat=False,
            status=INSCRIPTION_CONFIRMED, paid=False, payment_status=PAYMENT_PENDING
        )

        response = await client.post(
            f"/api/v1/inscriptions/{pending.id}/confirm-payment", headers=auth_headers(organizer)
        )

        assert response.status_code == 400
        assert (await factory.get(Inscription, pending.id)).status == INSCRIPTION_CONFIRMED
        assert (await factory.get(Event, event.id)).available_spots == 10
