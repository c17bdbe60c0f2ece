"""Fixtures comunes: base SQLite en memoria, cliente HTTP y factories"""
import os

# Antes de importar la app: la configuración se lee al importar
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["DB_AUTO_CREATE"] = "false"
os.environ["APP_ENV"] = "test"

from datetime import timedelta
from decimal import Decimal

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import select, func

from main import app
from shared.auth.jwt_handler import create_access_token, hash_password
from shared.database import connection
from shared.database.models import (
    User, EventCategory, Event, Inscription,
    ROLE_ADMIN, ROLE_ORGANIZER, ROLE_PARTICIPANT,
    EVENT_PUBLISHED, INSCRIPTION_ACTIVE, PAYMENT_FREE
)
from shared.utils.dates import utcnow
from shared.utils.ticket_codes import generate_ticket_code

PASSWORD = "secret123"
PASSWORD_HASH = hash_password(PASSWORD)


class Factory:
    """Crea filas directamente en la BD, cada una en su propia sesión"""

    def __init__(self):
        self._counter = 0

    def _next(self) -> int:
        self._counter += 1
        return self._counter

    async def _save(self, obj):
        async with connection.async_session_maker() as db:
            db.add(obj)
            await db.commit()
        return obj

    async def user(self, role: str = ROLE_PARTICIPANT, name: str = None, email: str = None) -> User:
        n = self._next()
        return await self._save(User(
            name=name or f"Usuario {n}",
            email=email or f"user{n}@test.com",
            password_hash=PASSWORD_HASH,
            role=role
        ))

    async def admin(self) -> User:
        return await self.user(role=ROLE_ADMIN)

    async def organizer(self) -> User:
        return await self.user(role=ROLE_ORGANIZER)

    async def category(self, name: str = None) -> EventCategory:
        return await self._save(EventCategory(name=name or f"Categoría {self._next()}"))

    async def event(self, organizer: User, category: EventCategory = None, **overrides) -> Event:
        if category is None:
            category = await self.category()
        start = overrides.pop("start_date", utcnow() + timedelta(days=7))
        max_participants = overrides.pop("max_participants", 10)
        data = dict(
            title=f"Evento {self._next()}",
            description="Descripción del evento",
            start_date=start,
            end_date=overrides.pop("end_date", start + timedelta(hours=4)),
            location="São Paulo, SP",
            max_participants=max_participants,
            available_spots=max_participants,
            price=Decimal(str(overrides.pop("price", 0))),
            is_public=True,
            status=EVENT_PUBLISHED,
            organizer_id=organizer.id,
            category_id=category.id
        )
        data.update(overrides)
        return await self._save(Event(**data))

    async def inscription(self, participant: User, event: Event, take_seat: bool = True, **overrides) -> Inscription:
        data = dict(
            participant_id=participant.id,
            event_id=event.id,
            status=INSCRIPTION_ACTIVE,
            paid=True,
            payment_status=PAYMENT_FREE,
            ticket_code=generate_ticket_code(str(event.id), str(participant.id))
        )
        data.update(overrides)
        inscription = Inscription(**data)
        async with connection.async_session_maker() as db:
            db.add(inscription)
            if take_seat:
                stored = await db.get(Event, event.id)
                stored.available_spots -= 1
            await db.commit()
        return inscription

    async def get(self, model, obj_id):
        async with connection.async_session_maker() as db:
            return await db.get(model, obj_id)

    async def count(self, model, *conditions) -> int:
        async with connection.async_session_maker() as db:
            stmt = select(func.count()).select_from(model)
            if conditions:
                stmt = stmt.where(*conditions)
            return (await db.execute(stmt)).scalar()


def auth_headers(user: User) -> dict:
    token = create_access_token({"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def database():
    await connection.init_db()
    await connection.create_schema()
    yield
    await connection.drop_schema()
    await connection.close_db()


@pytest.fixture
async def client(database):
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def factory(database) -> Factory:
    return Factory()
