"""Servicio de gestión de eventos"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete, func, or_, and_
from sqlalchemy.orm import selectinload
from typing import List, Optional, Dict
from datetime import datetime
from decimal import Decimal
import logging

from shared.database.models import (
    Event, EventCategory, EventReview, Inscription,
    EVENT_MANAGER_ROLES, EVENT_STATUSES, EVENT_DRAFT, EVENT_PUBLISHED,
    INSCRIPTION_CANCELLED, INSCRIPTION_CONFIRMED, INSCRIPTION_CHECKED_IN,
    SEAT_HOLDING_STATUSES, ROLE_ADMIN
)
from shared.utils.dates import utcnow, to_utc_naive
from shared.utils.exceptions import NotFound, PermissionDenied, StateConflict, ValidationFailed
from shared.utils.ids import parse_id, parse_reference

logger = logging.getLogger(__name__)

# Campos que se copian tal cual en un update
_UPDATABLE_FIELDS = ("title", "description", "location", "is_public")
_NULLABLE_FIELDS = ("address", "latitude", "longitude", "image_url")


class EventService:
    """Servicio para gestionar eventos"""

    @staticmethod
    async def get_events(
        db: AsyncSession,
        search: Optional[str] = None,
        category: Optional[str] = None,
        location: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        organizer_id: Optional[str] = None,
        limit: int = 50,
        offset: int = 0
    ) -> List[Event]:
        """
        Obtener lista de eventos con filtros

        Sin organizer_id solo se listan eventos publicados y públicos; con
        organizer_id se listan todos los eventos de ese organizador.
        """
        stmt = select(Event).options(
            selectinload(Event.category),
            selectinload(Event.organizer)
        )

        conditions = []

        if organizer_id:
            conditions.append(Event.organizer_id == parse_reference(organizer_id, "organizer_id"))
        else:
            conditions.append(Event.status == EVENT_PUBLISHED)
            conditions.append(Event.is_public.is_(True))

        if search:
            conditions.append(
                or_(
                    Event.title.icontains(search, autoescape=True),
                    Event.description.icontains(search, autoescape=True),
                    Event.location.icontains(search, autoescape=True)
                )
            )

        if category:
            stmt = stmt.join(Event.category)
            conditions.append(func.lower(EventCategory.name) == category.lower())

        if location:
            conditions.append(Event.location.icontains(location, autoescape=True))

        if start_date:
            conditions.append(Event.start_date >= to_utc_naive(start_date))

        if end_date:
            conditions.append(Event.start_date <= to_utc_naive(end_date))

        stmt = stmt.where(and_(*conditions))
        stmt = stmt.order_by(Event.start_date.asc()).limit(limit).offset(offset)

        result = await db.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def get_event_by_id(
        db: AsyncSession,
        event_id: str,
        with_details: bool = False
    ) -> Optional[Event]:
        """
        Obtener evento por ID

        with_details carga además inscripciones (con participante) y reseñas (con autor).
        """
        try:
            event_uuid = parse_id(event_id, "Evento")
        except NotFound:
            return None

        options = [selectinload(Event.category), selectinload(Event.organizer)]
        if with_details:
            options.append(selectinload(Event.inscriptions).selectinload(Inscription.participant))
            options.append(selectinload(Event.reviews).selectinload(EventReview.user))

        stmt = (
            select(Event)
            .options(*options)
            .where(Event.id == event_uuid)
            .execution_options(populate_existing=True)
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def _get_owned_event(db: AsyncSession, event_id: str, current_user: Dict, action: str) -> Event:
        """Cargar el evento bloqueando la fila y verificar que el usuario sea su organizador"""
        stmt = (
            select(Event)
            .where(Event.id == parse_id(event_id, "Evento"))
            .with_for_update()
        )
        result = await db.execute(stmt)
        event = result.scalar_one_or_none()

        if not event:
            raise NotFound("Evento no encontrado")

        if str(event.organizer_id) != current_user.get("user_id"):
            raise PermissionDenied(f"Solo el organizador del evento puede {action}")

        return event

    @staticmethod
    async def _ensure_category(db: AsyncSession, category_id: str) -> EventCategory:
        category = await db.get(EventCategory, parse_reference(category_id, "category_id"))
        if not category:
            raise NotFound("Categoría no encontrada")
        return category

    @staticmethod
    async def create_event(
        db: AsyncSession,
        event_data: dict,
        current_user: Dict
    ) -> Event:
        """
        Crear nuevo evento

        Requiere: rol ADMIN u ORGANIZER. El organizador es el usuario actual.
        """
        start = to_utc_naive(event_data["start_date"])
        end = to_utc_naive(event_data["end_date"])

        if start >= end:
            raise ValidationFailed("La fecha de inicio debe ser anterior a la fecha de término")

        if start < utcnow():
            raise ValidationFailed("La fecha de inicio debe estar en el futuro")

        if current_user.get("role") not in EVENT_MANAGER_ROLES:
            raise PermissionDenied("Organizador inválido o permisos insuficientes")

        category = await EventService._ensure_category(db, event_data["category_id"])

        status = event_data.get("status") or EVENT_PUBLISHED
        if status not in (EVENT_DRAFT, EVENT_PUBLISHED):
            raise ValidationFailed("Un evento nuevo solo puede crearse como DRAFT o PUBLISHED")

        event = Event(
            title=event_data["title"],
            description=event_data["description"],
            start_date=start,
            end_date=end,
            location=event_data["location"],
            address=event_data.get("address"),
            latitude=event_data.get("latitude"),
            longitude=event_data.get("longitude"),
            max_participants=event_data["max_participants"],
            available_spots=event_data["max_participants"],
            price=Decimal(str(event_data.get("price") or 0)),
            is_public=event_data.get("is_public", True),
            status=status,
            image_url=event_data.get("image_url"),
            organizer_id=parse_reference(current_user["user_id"], "organizer_id"),
            category_id=category.id
        )

        db.add(event)
        await db.commit()

        logger.info(f"Evento {event.id} creado por {current_user.get('user_id')}")

        return await EventService.get_event_by_id(db, str(event.id))

    @staticmethod
    async def update_event(
        db: AsyncSession,
        event_id: str,
        event_data: dict,
        current_user: Dict
    ) -> Event:
        """
        Actualizar evento

        Requiere: ser el organizador del evento
        """
        event = await EventService._get_owned_event(db, event_id, current_user, "modificarlo")

        start = to_utc_naive(event_data.get("start_date")) or event.start_date
        end = to_utc_naive(event_data.get("end_date")) or event.end_date
        if start >= end:
            raise ValidationFailed("La fecha de inicio debe ser anterior a la fecha de término")

        category = None
        if event_data.get("category_id"):
            category = await EventService._ensure_category(db, event_data["category_id"])

        status = event_data.get("status")
        if status is not None and status not in EVENT_STATUSES:
            raise ValidationFailed(f"Estado inválido. Debe ser uno de: {', '.join(EVENT_STATUSES)}")

        new_max = event_data.get("max_participants")
        if new_max is not None and new_max != event.max_participants:
            current_count = event.inscription_count
            # Cambio de cupo atómico: solo si las inscripciones actuales caben
            taken = Event.max_participants - Event.available_spots
            stmt = (
                update(Event)
                .where(Event.id == event.id, taken <= new_max)
                .values(
                    available_spots=Event.available_spots + (new_max - Event.max_participants),
                    max_participants=new_max
                )
                .execution_options(synchronize_session=False)
            )
            result = await db.execute(stmt)
            if result.rowcount == 0:
                await db.rollback()
                raise ValidationFailed(
                    "No se puede reducir el cupo por debajo de las inscripciones actuales "
                    f"({current_count})"
                )

        if category is not None:
            event.category_id = category.id
        if status is not None:
            event.status = status

        if "start_date" in event_data and event_data["start_date"] is not None:
            event.start_date = start
        if "end_date" in event_data and event_data["end_date"] is not None:
            event.end_date = end

        for field in _UPDATABLE_FIELDS:
            if event_data.get(field) is not None:
                setattr(event, field, event_data[field])

        for field in _NULLABLE_FIELDS:
            if field in event_data:
                setattr(event, field, event_data[field])

        if event_data.get("price") is not None:
            event.price = Decimal(str(event_data["price"]))

        await db.commit()

        logger.info(f"Evento {event.id} actualizado por {current_user.get('user_id')}")

        return await EventService.get_event_by_id(db, str(event.id))

    @staticmethod
    async def delete_event(
        db: AsyncSession,
        event_id: str,
        current_user: Dict
    ) -> None:
        """
        Eliminar evento

        Requiere: ser el organizador del evento. No se permite con inscripciones
        vigentes; las canceladas y las reseñas se eliminan en la misma transacción.
        """
        event = await EventService._get_owned_event(db, event_id, current_user, "eliminarlo")

        stmt_count = select(func.count(Inscription.id)).where(
            Inscription.event_id == event.id,
            Inscription.status != INSCRIPTION_CANCELLED
        )
        open_inscriptions = (await db.execute(stmt_count)).scalar() or 0

        if open_inscriptions > 0:
            await db.rollback()
            raise StateConflict("No se puede eliminar un evento con inscripciones activas")

        await db.execute(delete(EventReview).where(EventReview.event_id == event.id))
        await db.execute(delete(Inscription).where(
            Inscription.event_id == event.id,
            Inscription.status == INSCRIPTION_CANCELLED
        ))
        await db.execute(delete(Event).where(Event.id == event.id))
        await db.commit()

        logger.info(f"Evento {event.id} eliminado por {current_user.get('user_id')}")

    @staticmethod
    async def get_event_stats(
        db: AsyncSession,
        event_id: str,
        current_user: Dict
    ) -> Dict:
        """
        Estadísticas del evento

        Requiere: ser el organizador del evento o admin
        """
        event = await db.get(Event, parse_id(event_id, "Evento"))
        if not event:
            raise NotFound("Evento no encontrado")

        if current_user.get("role") != ROLE_ADMIN and str(event.organizer_id) != current_user.get("user_id"):
            raise PermissionDenied("Solo el organizador del evento puede ver sus estadísticas")

        stmt_status = (
            select(Inscription.status, Inscription.paid, func.count(Inscription.id))
            .where(Inscription.event_id == event.id)
            .group_by(Inscription.status, Inscription.paid)
        )
        rows = (await db.execute(stmt_status)).all()

        total_registrations = sum(count for status, _, count in rows if status != INSCRIPTION_CANCELLED)
        active_registrations = sum(count for status, _, count in rows if status in SEAT_HOLDING_STATUSES)
        pending_payments = sum(count for status, _, count in rows if status == INSCRIPTION_CONFIRMED)
        checked_in_count = sum(count for status, _, count in rows if status == INSCRIPTION_CHECKED_IN)
        paid_seats = sum(count for status, paid, count in rows if status in SEAT_HOLDING_STATUSES and paid)

        stmt_reviews = select(func.avg(EventReview.rating), func.count(EventReview.id)).where(
            EventReview.event_id == event.id
        )
        avg_rating, total_reviews = (await db.execute(stmt_reviews)).one()

        day = func.date(Inscription.inscription_date)
        stmt_days = (
            select(day, func.count(Inscription.id))
            .where(
                Inscription.event_id == event.id,
                Inscription.status != INSCRIPTION_CANCELLED
            )
            .group_by(day)
            .order_by(day)
        )
        days = (await db.execute(stmt_days)).all()

        return {
            "event_id": str(event.id),
            "total_registrations": total_registrations,
            "active_registrations": active_registrations,
            "pending_payments": pending_payments,
            "checked_in_count": checked_in_count,
            "total_revenue": float(event.price) * paid_seats if event.price else 0.0,
            "average_rating": round(float(avg_rating), 1) if avg_rating is not None else 0.0,
            "total_reviews": total_reviews or 0,
            "registrations_by_day": [
                {"date": str(date_value), "count": count}
                for date_value, count in days
            ]
        }
