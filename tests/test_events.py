"""Tests del catálogo de eventos"""
import uuid
from datetime import timedelta

from shared.database.models import (
    Event, Inscription, EventReview,
    EVENT_DRAFT, INSCRIPTION_CANCELLED, INSCRIPTION_CONFIRMED, PAYMENT_PENDING
)
from shared.utils.dates import utcnow
from tests.conftest import auth_headers


def _event_payload(category_id, **overrides):
    start = utcnow() + timedelta(days=10)
    payload = {
        "title": "Conferência de IA",
        "description": "Tendências em IA",
        "start_date": start.isoformat(),
        "end_date": (start + timedelta(hours=8)).isoformat(),
        "location": "São Paulo, SP",
        "max_participants": 50,
        "category_id": str(category_id),
    }
    payload.update(overrides)
    return payload


# ==================== LIST / DETAIL ====================

async def test_list_only_published_public_events(client, factory):
    organizer = await factory.organizer()
    visible = await factory.event(organizer, title="Meetup JS")
    await factory.event(organizer, status=EVENT_DRAFT)
    await factory.event(organizer, is_public=False)

    response = await client.get("/api/v1/events")

    assert response.status_code == 200
    data = response.json()
    assert [e["id"] for e in data] == [str(visible.id)]
    assert data[0]["organizer"]["name"] == organizer.name
    assert data[0]["inscription_count"] == 0
    assert data[0]["available_spots"] == 10


async def test_list_filters_by_search_and_category(client, factory):
    organizer = await factory.organizer()
    tech = await factory.category("Tecnologia")
    business = await factory.category("Negócios")
    ai = await factory.event(organizer, tech, title="Conferência de IA")
    await factory.event(organizer, business, title="Workshop de Vendas")

    response = await client.get("/api/v1/events", params={"search": "ia"})
    assert [e["id"] for e in response.json()] == [str(ai.id)]

    response = await client.get("/api/v1/events", params={"category": "negócios"})
    assert [e["title"] for e in response.json()] == ["Workshop de Vendas"]


async def test_list_by_organizer_includes_drafts(client, factory):
    organizer = await factory.organizer()
    draft = await factory.event(organizer, status=EVENT_DRAFT)

    response = await client.get("/api/v1/events", params={"organizer_id": str(organizer.id)})

    assert [e["id"] for e in response.json()] == [str(draft.id)]


async def test_get_event_detail(client, factory):
    organizer = await factory.organizer()
    participant = await factory.user()
    event = await factory.event(organizer)
    await factory.inscription(participant, event)

    response = await client.get(f"/api/v1/events/{event.id}", headers=auth_headers(participant))

    assert response.status_code == 200
    data = response.json()
    assert data["inscription_count"] == 1
    assert data["available_spots"] == 9
    assert data["inscriptions"][0]["participant"]["id"] == str(participant.id)
    assert data["is_user_registered"] is True
    assert data["start_date"].endswith("+00:00")


async def test_get_event_not_found(client, factory):
    response = await client.get(f"/api/v1/events/{uuid.uuid4()}")
    assert response.status_code == 404
    assert response.json() == {"error": "Evento no encontrado"}

    response = await client.get("/api/v1/events/no-es-un-uuid")
    assert response.status_code == 404


# ==================== CREATE ====================

async def test_create_event_as_organizer(client, factory):
    organizer = await factory.organizer()
    category = await factory.category()

    response = await client.post(
        "/api/v1/events",
        json=_event_payload(category.id),
        headers=auth_headers(organizer)
    )

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "PUBLISHED"
    assert data["available_spots"] == 50
    assert data["organizer_id"] == str(organizer.id)


async def test_create_event_as_draft(client, factory):
    organizer = await factory.organizer()
    category = await factory.category()

    response = await client.post(
        "/api/v1/events",
        json=_event_payload(category.id, status="DRAFT"),
        headers=auth_headers(organizer)
    )

    assert response.status_code == 201
    assert response.json()["status"] == "DRAFT"


async def test_create_event_rejects_start_after_end(client, factory):
    organizer = await factory.organizer()
    category = await factory.category()
    start = utcnow() + timedelta(days=5)

    response = await client.post(
        "/api/v1/events",
        json=_event_payload(
            category.id,
            start_date=start.isoformat(),
            end_date=start.isoformat()
        ),
        headers=auth_headers(organizer)
    )

    assert response.status_code == 400
    assert await factory.count(Event) == 0


async def test_create_event_rejects_past_start(client, factory):
    organizer = await factory.organizer()
    category = await factory.category()
    start = utcnow() - timedelta(days=1)

    response = await client.post(
        "/api/v1/events",
        json=_event_payload(
            category.id,
            start_date=start.isoformat(),
            end_date=(start + timedelta(days=2)).isoformat()
        ),
        headers=auth_headers(organizer)
    )

    assert response.status_code == 400


async def test_create_event_requires_manager_role(client, factory):
    participant = await factory.user()
    category = await factory.category()

    response = await client.post(
        "/api/v1/events",
        json=_event_payload(category.id),
        headers=auth_headers(participant)
    )

    assert response.status_code == 403


async def test_create_event_unknown_category(client, factory):
    organizer = await factory.organizer()

    response = await client.post(
        "/api/v1/events",
        json=_event_payload(uuid.uuid4()),
        headers=auth_headers(organizer)
    )

    assert response.status_code == 404
    assert response.json()["error"] == "Categoría no encontrada"


async def test_create_event_requires_token(client, factory):
    category = await factory.category()

    response = await client.post("/api/v1/events", json=_event_payload(category.id))

    assert response.status_code == 401


async def test_create_event_missing_fields(client, factory):
    organizer = await factory.organizer()

    response = await client.post(
        "/api/v1/events",
        json={"title": "Sin fechas"},
        headers=auth_headers(organizer)
    )

    assert response.status_code == 400
    body = response.json()
    assert body["error"] == "Campos faltantes o inválidos"
    assert {d["field"] for d in body["details"]} >= {"start_date", "end_date", "category_id"}


# ==================== UPDATE ====================

async def test_update_event_by_owner(client, factory):
    organizer = await factory.organizer()
    event = await factory.event(organizer)

    response = await client.put(
        f"/api/v1/events/{event.id}",
        json={"title": "Nuevo título", "max_participants": 20},
        headers=auth_headers(organizer)
    )

    assert response.status_code == 200
    data = response.json()
    assert data["title"] == "Nuevo título"
    assert data["max_participants"] == 20
    assert data["available_spots"] == 20


async def test_update_event_by_other_user_is_forbidden(client, factory):
    organizer = await factory.organizer()
    other = await factory.organizer()
    event = await factory.event(organizer)

    response = await client.put(
        f"/api/v1/events/{event.id}",
        json={"title": "Ajeno"},
        headers=auth_headers(other)
    )

    assert response.status_code == 403


async def test_update_rejects_capacity_below_inscriptions(client, factory):
    organizer = await factory.organizer()
    event = await factory.event(organizer, max_participants=5)
    for _ in range(3):
        await factory.inscription(await factory.user(), event)

    response = await client.put(
        f"/api/v1/events/{event.id}",
        json={"max_participants": 2},
        headers=auth_headers(organizer)
    )

    assert response.status_code == 400
    stored = await factory.get(Event, event.id)
    assert stored.max_participants == 5
    assert stored.available_spots == 2


async def test_update_capacity_keeps_taken_seats(client, factory):
    organizer = await factory.organizer()
    event = await factory.event(organizer, max_participants=5)
    for _ in range(3):
        await factory.inscription(await factory.user(), event)

    response = await client.put(
        f"/api/v1/events/{event.id}",
        json={"max_participants": 3},
        headers=auth_headers(organizer)
    )

    assert response.status_code == 200
    assert response.json()["available_spots"] == 0
    assert response.json()["inscription_count"] == 3


async def test_update_validates_merged_dates(client, factory):
    organizer = await factory.organizer()
    event = await factory.event(organizer)

    response = await client.put(
        f"/api/v1/events/{event.id}",
        json={"end_date": (event.start_date - timedelta(hours=1)).isoformat()},
        headers=auth_headers(organizer)
    )

    assert response.status_code == 400


# ==================== DELETE ====================

async def test_delete_event_blocked_by_active_inscription(client, factory):
    organizer = await factory.organizer()
    event = await factory.event(organizer)
    await factory.inscription(await factory.user(), event)

    response = await client.delete(f"/api/v1/events/{event.id}", headers=auth_headers(organizer))

    assert response.status_code == 400
    assert await factory.get(Event, event.id) is not None


async def test_delete_event_blocked_by_pending_inscription(client, factory):
    organizer = await factory.organizer()
    event = await factory.event(organizer, price=50)
    await factory.inscription(
        await factory.user(), event, take_seat=False,
        status=INSCRIPTION_CONFIRMED, paid=False, payment_status=PAYMENT_PENDING
    )

    response = await client.delete(f"/api/v1/events/{event.id}", headers=auth_headers(organizer))

    assert response.status_code == 400


async def test_delete_event_removes_cancelled_inscriptions_and_reviews(client, factory):
    organizer = await factory.organizer()
    participant = await factory.user()
    event = await factory.event(organizer)
    await factory.inscription(participant, event, take_seat=False, status=INSCRIPTION_CANCELLED)
    await client.post(
        f"/api/v1/events/{event.id}/reviews",
        json={"rating": 4},
        headers=auth_headers(participant)
    )

    response = await client.delete(f"/api/v1/events/{event.id}", headers=auth_headers(organizer))

    assert response.status_code == 200
    assert response.json()["event_id"] == str(event.id)
    assert await factory.get(Event, event.id) is None
    assert await factory.count(Inscription) == 0
    assert await factory.count(EventReview) == 0


async def test_delete_event_by_other_user_is_forbidden(client, factory):
    organizer = await factory.organizer()
    event = await factory.event(organizer)
    admin = await factory.admin()

    response = await client.delete(f"/api/v1/events/{event.id}", headers=auth_headers(admin))

    assert response.status_code == 403


# ==================== STATS ====================

async def test_event_stats_for_owner(client, factory):
    organizer = await factory.organizer()
    event = await factory.event(organizer, price=100)
    await factory.inscription(await factory.user(), event, paid=True, payment_status="PAID")
    await factory.inscription(
        await factory.user(), event, take_seat=False,
        status=INSCRIPTION_CONFIRMED, paid=False, payment_status=PAYMENT_PENDING
    )
    await factory.inscription(await factory.user(), event, take_seat=False, status=INSCRIPTION_CANCELLED)

    response = await client.get(f"/api/v1/events/{event.id}/stats", headers=auth_headers(organizer))

    assert response.status_code == 200
    data = response.json()
    assert data["total_registrations"] == 2
    assert data["active_registrations"] == 1
    assert data["pending_payments"] == 1
    assert data["total_revenue"] == 100.0
    assert sum(day["count"] for day in data["registrations_by_day"]) == 2


async def test_event_stats_forbidden_for_participant(client, factory):
    organizer = await factory.organizer()
    event = await factory.event(organizer)
    participant = await factory.user()

    response = await client.get(f"/api/v1/events/{event.id}/stats", headers=auth_headers(participant))

    assert response.status_code == 403


async def test_search_treats_wildcards_literally(client, factory):
    organizer = await factory.organizer()
    discount = await factory.event(organizer, title="Promo 100% online")
    await factory.event(organizer, title="Maratón 1000 metros")
    underscore = await factory.event(organizer, title="Taller", location="sala_a")
    await factory.event(organizer, title="Charla", location="salaba")

    response = await client.get("/api/v1/events", params={"search": "100%"})
    assert [e["id"] for e in response.json()] == [str(discount.id)]

    response = await client.get("/api/v1/events", params={"location": "sala_"})
    assert [e["id"] for e in response.json()] == [str(underscore.id)]
