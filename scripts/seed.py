#!/usr/bin/env python3
"""Script para poblar la base de datos con datos de demo

Uso:
    python scripts/seed.py            # agrega datos si la base está vacía
    python scripts/seed.py --reset    # borra todo y vuelve a crear
"""
import asyncio
import os
import sys
from datetime import timedelta
from decimal import Decimal

# Agregar directorio raíz al path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import select, delete, func

from shared.auth.jwt_handler import hash_password
from shared.database import connection
from shared.database.models import (
    User, EventCategory, Event, Inscription, EventReview,
    ROLE_ADMIN, ROLE_ORGANIZER, ROLE_PARTICIPANT,
    EVENT_PUBLISHED, INSCRIPTION_ACTIVE, PAYMENT_FREE
)
from shared.utils.dates import utcnow
from shared.utils.ticket_codes import generate_ticket_code


USERS = [
    ("Admin Sistema", "admin@test.com", "admin123", ROLE_ADMIN),
    ("João Organizador", "org@test.com", "org123", ROLE_ORGANIZER),
    ("Maria Participante", "user@test.com", "user123", ROLE_PARTICIPANT),
]

CATEGORIES = [
    ("Tecnologia", "Eventos relacionados a tecnologia e inovação", "#3B82F6", "tech"),
    ("Negócios", "Eventos sobre empreendedorismo e negócios", "#10B981", "business"),
    ("Educação", "Workshops e cursos educacionais", "#F59E0B", "education"),
    ("Networking", "Eventos para networking e relacionamento", "#8B5CF6", "networking"),
]


def _events(now):
    next_week = now + timedelta(days=7)
    tomorrow = now + timedelta(days=1)
    next_month = now + timedelta(days=30)
    meetup = next_week + timedelta(days=3)

    return [
        {
            "title": "Conferência de IA e Machine Learning",
            "description": "Explore as últimas tendências em Inteligência Artificial e Machine Learning.",
            "start_date": next_week,
            "end_date": next_week + timedelta(hours=8),
            "location": "Centro de Convenções Anhembi - São Paulo, SP",
            "address": "Av. Olavo Fontoura, 1209 - Santana, São Paulo - SP",
            "latitude": -23.5154,
            "longitude": -46.6154,
            "max_participants": 500,
            "price": Decimal("89.90"),
            "category": "Tecnologia",
        },
        {
            "title": "Workshop de Empreendedorismo Digital",
            "description": "Estratégias para criar e escalar um negócio digital. Inclui cases práticos e networking.",
            "start_date": tomorrow,
            "end_date": tomorrow + timedelta(hours=4),
            "location": "Espaço de Coworking CUBO - São Paulo, SP",
            "address": "R. Consolação, 247 - República, São Paulo - SP",
            "latitude": -23.5505,
            "longitude": -46.6333,
            "max_participants": 50,
            "price": Decimal("0"),
            "category": "Negócios",
        },
        {
            "title": "Curso de Desenvolvimento Web Full Stack",
            "description": "Curso intensivo de 3 dias: React, Node.js, PostgreSQL e deploy na nuvem.",
            "start_date": next_month,
            "end_date": next_month + timedelta(days=3),
            "location": "Campus da USP - São Paulo, SP",
            "address": "Av. Prof. Luciano Gualberto, 403 - Cidade Universitária, São Paulo - SP",
            "latitude": -23.5587,
            "longitude": -46.7317,
            "max_participants": 30,
            "price": Decimal("299.90"),
            "category": "Educação",
        },
        {
            "title": "Meetup de Desenvolvedores JavaScript",
            "description": "Encontro mensal da comunidade JavaScript de São Paulo. Palestras técnicas e networking.",
            "start_date": meetup,
            "end_date": meetup + timedelta(hours=3),
            "location": "Google Campus São Paulo - SP",
            "address": "R. Elvira Ferraz, 250 - Vila Olímpia, São Paulo - SP",
            "latitude": -23.5958,
            "longitude": -46.6869,
            "max_participants": 100,
            "price": Decimal("0"),
            "category": "Networking",
        },
    ]


async def seed(reset: bool = False):
    await connection.init_db()
    await connection.create_schema()

    async with connection.async_session_maker() as db:
        if reset:
            for model in (EventReview, Inscription, Event, EventCategory, User):
                await db.execute(delete(model))
            await db.commit()
            print("Datos existentes eliminados")
        elif (await db.execute(select(func.count(User.id)))).scalar():
            print("La base ya tiene usuarios, nada que hacer (usa --reset para recrear)")
            await connection.close_db()
            return

        users = {}
        for name, email, password, role in USERS:
            user = User(name=name, email=email, password_hash=hash_password(password), role=role)
            db.add(user)
            users[role] = user

        categories = {}
        for name, description, color, icon in CATEGORIES:
            category = EventCategory(name=name, description=description, color=color, icon=icon)
            db.add(category)
            categories[name] = category

        await db.flush()
        print("Usuarios y categorías creados")

        events = []
        for data in _events(utcnow()):
            category = categories[data.pop("category")]
            event = Event(
                **data,
                available_spots=data["max_participants"],
                is_public=True,
                status=EVENT_PUBLISHED,
                organizer_id=users[ROLE_ORGANIZER].id,
                category_id=category.id
            )
            db.add(event)
            events.append(event)

        await db.flush()
        print(f"{len(events)} eventos creados")

        # La participante inscrita en los dos eventos gratuitos
        participant = users[ROLE_PARTICIPANT]
        for event in (e for e in events if e.price == 0):
            db.add(Inscription(
                participant_id=participant.id,
                event_id=event.id,
                status=INSCRIPTION_ACTIVE,
                paid=True,
                payment_status=PAYMENT_FREE,
                ticket_code=generate_ticket_code(str(event.id), str(participant.id))
            ))
            event.available_spots -= 1

        await db.commit()
        print("Inscripciones creadas")

    await connection.close_db()

    print("\nSeed completado. Usuarios de prueba:")
    for _, email, password, role in USERS:
        print(f"  {role:<12} {email} / {password}")


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Poblar la base con datos de demo")
    parser.add_argument("--reset", action="store_true", help="Eliminar datos existentes antes de crear")

    args = parser.parse_args()

    asyncio.run(seed(reset=args.reset))
