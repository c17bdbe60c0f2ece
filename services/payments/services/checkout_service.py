"""Checkout: cobro simulado + inscripción"""
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Dict, Optional
import logging

from shared.database.models import Event, PAYMENT_PAID, PAYMENT_PENDING
from shared.utils.exceptions import NotFound, PaymentDeclined
from shared.utils.ids import parse_reference
from services.inscriptions.services.inscription_service import InscriptionService
from services.payments.services.payment_simulator import (
    PaymentSimulator,
    OUTCOME_SUCCESS,
    OUTCOME_PENDING,
    OUTCOME_ERROR
)

logger = logging.getLogger(__name__)


class CheckoutService:
    """Orquesta el pago simulado y la inscripción resultante"""

    def __init__(self, simulator: Optional[PaymentSimulator] = None):
        self.simulator = simulator or PaymentSimulator()

    async def checkout(
        self,
        db: AsyncSession,
        event_id: str,
        method: str,
        current_user: Dict,
        card_number: Optional[str] = None
    ) -> Dict:
        """
        Pagar e inscribirse

        Eventos gratuitos no pasan por el simulador. Un pago rechazado no
        crea inscripción y lanza PaymentDeclined (402).
        """
        event = await db.get(Event, parse_reference(event_id, "event_id"))
        if not event:
            raise NotFound("Evento no encontrado")

        if not event.price or event.price <= 0:
            inscription = await InscriptionService.create_inscription(db, event_id, current_user)
            return {
                "outcome": OUTCOME_SUCCESS,
                "message": "Evento gratuito: inscripción confirmada",
                "transaction_id": None,
                "inscription": inscription,
            }

        result = self.simulator.process(method, card_number)

        if result["outcome"] == OUTCOME_ERROR:
            logger.warning(f"Pago rechazado para usuario {current_user['user_id']} en evento {event_id}")
            raise PaymentDeclined(result["message"])

        payment_status = PAYMENT_PAID if result["outcome"] == OUTCOME_SUCCESS else PAYMENT_PENDING
        inscription = await InscriptionService.create_inscription(
            db, event_id, current_user, payment_status=payment_status
        )

        message = result["message"]
        if result["outcome"] == OUTCOME_PENDING:
            message = f"{message} Tu inscripción queda pendiente de pago."
        else:
            message = f"{message}. Fuiste inscrito en el evento."

        return {
            "outcome": result["outcome"],
            "message": message,
            "transaction_id": result["transaction_id"],
            "inscription": inscription,
        }
