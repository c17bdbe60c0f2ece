"""Servicio de check-in de tickets en la puerta del evento"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import selectinload
from typing import Dict
import logging

from shared.database.models import (
    Event, Inscription, ROLE_ADMIN,
    INSCRIPTION_ACTIVE, INSCRIPTION_CHECKED_IN
)
from shared.utils.dates import utcnow
from shared.utils.exceptions import NotFound, PermissionDenied
from shared.utils.ids import parse_reference

logger = logging.getLogger(__name__)

CHECKIN_SUCCESS = "SUCCESS"
CHECKIN_ALREADY = "ALREADY_CHECKED_IN"
CHECKIN_INVALID = "INVALID"


class CheckInService:
    """Valida el código de ticket y marca la inscripción como CHECKED_IN"""

    @staticmethod
    async def check_in(
        db: AsyncSession,
        ticket_code: str,
        event_id: str,
        current_user: Dict
    ) -> dict:
        """
        Hacer check-in de un ticket

        Requiere: organizador del evento o admin. Un segundo escaneo del
        mismo ticket devuelve ALREADY_CHECKED_IN sin modificar nada.

        Returns:
            dict con status, message, inscription_id, attendee_name, checked_in_at
        """
        event = await db.get(Event, parse_reference(event_id, "event_id"))
        if not event:
            raise NotFound("Evento no encontrado")

        if current_user.get("role") != ROLE_ADMIN and str(event.organizer_id) != current_user["user_id"]:
            raise PermissionDenied("Solo el organizador del evento puede hacer check-in")

        stmt = (
            select(Inscription)
            .options(selectinload(Inscription.participant))
            .where(Inscription.ticket_code == ticket_code.strip().upper())
            .with_for_update()
        )
        inscription = (await db.execute(stmt)).scalar_one_or_none()

        if not inscription or inscription.event_id != event.id:
            logger.warning(f"Check-in rechazado: ticket desconocido para evento {event.id}")
            return {
                "status": CHECKIN_INVALID,
                "message": "Ticket no válido para este evento"
            }

        base = {
            "inscription_id": str(inscription.id),
            "attendee_name": inscription.participant.name,
        }

        if inscription.status == INSCRIPTION_CHECKED_IN:
            return {
                **base,
                "status": CHECKIN_ALREADY,
                "message": "El ticket ya fue utilizado",
                "checked_in_at": inscription.checked_in_at
            }

        if inscription.status != INSCRIPTION_ACTIVE:
            return {
                **base,
                "status": CHECKIN_INVALID,
                "message": f"Inscripción en estado inválido: {inscription.status}"
            }

        inscription.status = INSCRIPTION_CHECKED_IN
        inscription.checked_in_at = utcnow()
        await db.commit()

        logger.info(f"Check-in de inscripción {inscription.id} en evento {event.id}")

        return {
            **base,
            "status": CHECKIN_SUCCESS,
            "message": "Check-in realizado",
            "checked_in_at": inscription.checked_in_at
        }
