"""Servicio de inscripciones a eventos"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import selectinload
from typing import List, Optional, Dict
import logging

from shared.database.models import (
    Event, Inscription,
    EVENT_PUBLISHED, ROLE_ADMIN,
    INSCRIPTION_ACTIVE, INSCRIPTION_CONFIRMED, INSCRIPTION_CANCELLED,
    SEAT_HOLDING_STATUSES, LISTED_STATUSES,
    PAYMENT_FREE, PAYMENT_PAID, PAYMENT_PENDING, PAYMENT_UNPAID
)
from shared.utils.dates import utcnow
from shared.utils.exceptions import NotFound, PermissionDenied, StateConflict, ValidationFailed
from shared.utils.ids import parse_id, parse_reference
from shared.utils.ticket_codes import generate_ticket_code, generate_qr_png

logger = logging.getLogger(__name__)

EVENT_FULL_MESSAGE = "Evento lleno: no hay cupos disponibles"
ALREADY_INSCRIBED_MESSAGE = "Ya estás inscrito en este evento"


async def take_seat(db: AsyncSession, event_id) -> bool:
    """Descontar un cupo solo si queda alguno. False si el evento está lleno."""
    stmt = (
        update(Event)
        .where(Event.id == event_id, Event.available_spots > 0)
        .values(available_spots=Event.available_spots - 1)
        .execution_options(synchronize_session=False)
    )
    result = await db.execute(stmt)
    return result.rowcount == 1


async def release_seat(db: AsyncSession, event_id) -> None:
    """Devolver un cupo sin superar max_participants"""
    stmt = (
        update(Event)
        .where(Event.id == event_id, Event.available_spots < Event.max_participants)
        .values(available_spots=Event.available_spots + 1)
        .execution_options(synchronize_session=False)
    )
    await db.execute(stmt)


def _registration_state(event: Event, payment_status: Optional[str]):
    """(status, paid, payment_status) de una inscripción nueva o reactivada"""
    if not event.price or event.price <= 0:
        return INSCRIPTION_ACTIVE, True, PAYMENT_FREE
    if payment_status == PAYMENT_PAID:
        return INSCRIPTION_ACTIVE, True, PAYMENT_PAID
    if payment_status == PAYMENT_PENDING:
        return INSCRIPTION_CONFIRMED, False, PAYMENT_PENDING
    return INSCRIPTION_ACTIVE, False, PAYMENT_UNPAID


class InscriptionService:
    """Servicio para gestionar inscripciones"""

    @staticmethod
    async def get_inscription(db: AsyncSession, inscription_id) -> Optional[Inscription]:
        """Inscripción con su evento, categoría y organizador"""
        stmt = (
            select(Inscription)
            .options(
                selectinload(Inscription.event).selectinload(Event.category),
                selectinload(Inscription.event).selectinload(Event.organizer)
            )
            .where(Inscription.id == inscription_id)
            .execution_options(populate_existing=True)
        )
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def create_inscription(
        db: AsyncSession,
        event_id: str,
        current_user: Dict,
        payment_status: Optional[str] = None
    ) -> Inscription:
        """
        Inscribir al usuario actual en un evento

        Si ya existe una inscripción CANCELLED del mismo par se reactiva en lugar
        de crear otra fila. El cupo se descuenta con un update condicional dentro
        de la misma transacción que el insert.
        """
        if payment_status is not None and payment_status not in (PAYMENT_PAID, PAYMENT_PENDING):
            raise ValidationFailed("payment_status debe ser PAID o PENDING")

        participant_id = parse_reference(current_user["user_id"], "user_id")

        stmt = select(Event).where(Event.id == parse_reference(event_id, "event_id")).with_for_update()
        event = (await db.execute(stmt)).scalar_one_or_none()

        if not event:
            raise NotFound("Evento no encontrado")

        if event.status != EVENT_PUBLISHED:
            raise StateConflict("El evento no está abierto a inscripciones")

        if not event.is_public:
            raise StateConflict("El evento no es público")

        if event.start_date <= utcnow():
            raise StateConflict("El evento ya comenzó")

        stmt_existing = select(Inscription).where(
            Inscription.participant_id == participant_id,
            Inscription.event_id == event.id
        )
        existing = (await db.execute(stmt_existing)).scalar_one_or_none()

        if existing and existing.status != INSCRIPTION_CANCELLED:
            raise StateConflict(ALREADY_INSCRIBED_MESSAGE)

        if event.available_spots <= 0:
            raise StateConflict(EVENT_FULL_MESSAGE)

        status, paid, payment = _registration_state(event, payment_status)

        if status in SEAT_HOLDING_STATUSES and not await take_seat(db, event.id):
            await db.rollback()
            raise StateConflict(EVENT_FULL_MESSAGE)

        ticket_code = generate_ticket_code(str(event.id), str(participant_id))

        if existing:
            inscription = existing
            inscription.status = status
            inscription.paid = paid
            inscription.payment_status = payment
            inscription.ticket_code = ticket_code
            inscription.inscription_date = utcnow()
            inscription.checked_in_at = None
        else:
            inscription = Inscription(
                participant_id=participant_id,
                event_id=event.id,
                status=status,
                paid=paid,
                payment_status=payment,
                ticket_code=ticket_code,
                inscription_date=utcnow()
            )
            db.add(inscription)

        try:
            await db.commit()
        except IntegrityError:
            # Inscripción concurrente del mismo par: se descarta todo, incluido el cupo
            await db.rollback()
            logger.warning(f"Inscripción duplicada de {participant_id} en evento {event_id}")
            raise StateConflict(ALREADY_INSCRIBED_MESSAGE)

        await db.refresh(event)

        logger.info(
            f"Inscripción {inscription.id} {'reactivada' if existing else 'creada'}: "
            f"evento={event.id} participante={participant_id} status={status} pago={payment}"
        )

        return await InscriptionService.get_inscription(db, inscription.id)

    @staticmethod
    async def list_inscriptions(
        db: AsyncSession,
        current_user: Dict,
        user_id: Optional[str] = None
    ) -> List[Inscription]:
        """
        Inscripciones vigentes de un usuario, más recientes primero

        Por defecto las del usuario actual; las de otro usuario solo para ADMIN.
        """
        target = user_id or current_user["user_id"]
        if target != current_user["user_id"] and current_user.get("role") != ROLE_ADMIN:
            raise PermissionDenied("No puedes ver inscripciones de otros usuarios")

        stmt = (
            select(Inscription)
            .options(
                selectinload(Inscription.event).selectinload(Event.category),
                selectinload(Inscription.event).selectinload(Event.organizer)
            )
            .where(
                Inscription.participant_id == parse_reference(target, "user_id"),
                Inscription.status.in_(LISTED_STATUSES)
            )
            .order_by(Inscription.inscription_date.desc())
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def cancel_inscription(
        db: AsyncSession,
        inscription_id: str,
        current_user: Dict,
        user_id: Optional[str] = None
    ) -> Inscription:
        """
        Cancelar inscripción propia

        Devuelve el cupo si la inscripción ocupaba uno.
        """
        if user_id and user_id != current_user["user_id"]:
            raise PermissionDenied("Solo puedes cancelar tus propias inscripciones")

        stmt = (
            select(Inscription)
            .where(Inscription.id == parse_id(inscription_id, "Inscripción"))
            .with_for_update()
        )
        inscription = (await db.execute(stmt)).scalar_one_or_none()

        if not inscription:
            raise NotFound("Inscripción no encontrada")

        if str(inscription.participant_id) != current_user["user_id"]:
            raise PermissionDenied("Solo puedes cancelar tus propias inscripciones")

        if inscription.status == INSCRIPTION_CANCELLED:
            raise StateConflict("La inscripción ya está cancelada")

        event = await db.get(Event, inscription.event_id)
        if event.start_date <= utcnow():
            raise StateConflict("No se puede cancelar: el evento ya comenzó")

        held_seat = inscription.status in SEAT_HOLDING_STATUSES
        inscription.status = INSCRIPTION_CANCELLED

        if held_seat:
            await release_seat(db, event.id)

        await db.commit()

        logger.info(f"Inscripción {inscription.id} cancelada (cupo liberado: {held_seat})")

        return inscription

    @staticmethod
    async def confirm_payment(
        db: AsyncSession,
        inscription_id: str,
        current_user: Dict
    ) -> Inscription:
        """
        Confirmar manualmente un pago pendiente

        Requiere: organizador del evento o admin. La inscripción pasa a ACTIVE
        y toma un cupo con el mismo guard atómico que la creación.
        """
        stmt = (
            select(Inscription)
            .options(selectinload(Inscription.event))
            .where(Inscription.id == parse_id(inscription_id, "Inscripción"))
            .with_for_update()
        )
        inscription = (await db.execute(stmt)).scalar_one_or_none()

        if not inscription:
            raise NotFound("Inscripción no encontrada")

        event = inscription.event
        if current_user.get("role") != ROLE_ADMIN and str(event.organizer_id) != current_user["user_id"]:
            raise PermissionDenied("Solo el organizador del evento puede confirmar pagos")

        if inscription.status != INSCRIPTION_CONFIRMED:
            raise StateConflict("Solo se pueden confirmar inscripciones con pago pendiente")

        if event.status != EVENT_PUBLISHED:
            raise StateConflict("El evento no está abierto a inscripciones")

        if event.start_date <= utcnow():
            raise StateConflict("El evento ya comenzó")

        if not await take_seat(db, event.id):
            await db.rollback()
            raise StateConflict(EVENT_FULL_MESSAGE)

        inscription.status = INSCRIPTION_ACTIVE
        inscription.paid = True
        inscription.payment_status = PAYMENT_PAID
        await db.commit()
        await db.refresh(event)

        logger.info(f"Pago de inscripción {inscription.id} confirmado por {current_user['user_id']}")

        return await InscriptionService.get_inscription(db, inscription.id)

    @staticmethod
    async def get_ticket_qr(
        db: AsyncSession,
        inscription_id: str,
        current_user: Dict
    ) -> bytes:
        """PNG con el QR del ticket (dueño de la inscripción o admin)"""
        inscription = await db.get(Inscription, parse_id(inscription_id, "Inscripción"))

        if not inscription:
            raise NotFound("Inscripción no encontrada")

        if current_user.get("role") != ROLE_ADMIN and str(inscription.participant_id) != current_user["user_id"]:
            raise PermissionDenied("No puedes ver el ticket de otro usuario")

        if inscription.status == INSCRIPTION_CANCELLED:
            raise StateConflict("La inscripción está cancelada")

        return generate_qr_png(inscription.ticket_code)
