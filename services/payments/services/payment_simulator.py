"""Simulador de pagos

No hay pasarela real: el resultado depende del número de tarjeta. Las
tarjetas de prueba tienen un resultado fijo; cualquier otra tarjeta se
aprueba si pasa el dígito verificador (Luhn) y se rechaza si no. Pix,
boleto y PayPal siempre se aprueban.
"""
from typing import Dict, Optional
import logging
import uuid

from shared.utils.exceptions import ValidationFailed

logger = logging.getLogger(__name__)

OUTCOME_SUCCESS = "success"
OUTCOME_PENDING = "pending"
OUTCOME_ERROR = "error"

CARD_METHODS = ("credit_card", "debit_card")
PAYMENT_METHODS = CARD_METHODS + ("pix", "boleto", "paypal")

TEST_CARDS = {
    "4111111111111111": OUTCOME_SUCCESS,  # VISA
    "5555555555554444": OUTCOME_PENDING,  # MASTERCARD, queda en análisis
    "4000000000000002": OUTCOME_ERROR,    # VISA rechazada
}

_MESSAGES = {
    OUTCOME_SUCCESS: "Pago aprobado",
    OUTCOME_PENDING: "Pago en análisis. Recibirás la confirmación en breve.",
    OUTCOME_ERROR: "Pago rechazado. Intenta nuevamente con otra tarjeta.",
}


def normalize_card_number(number: str) -> str:
    """Quitar espacios y guiones"""
    return "".join(ch for ch in number if ch not in " -")


def luhn_valid(number: str) -> bool:
    """Verificar el dígito de control de una tarjeta"""
    if not number.isdigit() or not 12 <= len(number) <= 19:
        return False

    total = 0
    for i, ch in enumerate(reversed(number)):
        digit = int(ch)
        if i % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return total % 10 == 0


class PaymentSimulator:
    """Procesa pagos simulados"""

    def process(self, method: str, card_number: Optional[str] = None) -> Dict:
        """
        Simular un cobro

        Returns:
            Dict con outcome (success, pending o error), transaction_id y message
        """
        if method not in PAYMENT_METHODS:
            raise ValidationFailed(f"Método de pago inválido. Debe ser uno de: {', '.join(PAYMENT_METHODS)}")

        if method in CARD_METHODS:
            if not card_number:
                raise ValidationFailed("Datos de tarjeta requeridos para pagos con tarjeta")
            outcome = self._card_outcome(normalize_card_number(card_number))
        else:
            outcome = OUTCOME_SUCCESS

        transaction_id = None if outcome == OUTCOME_ERROR else f"SIM-{uuid.uuid4().hex[:12].upper()}"

        logger.info(f"Pago simulado: método={method} resultado={outcome} transacción={transaction_id}")

        return {
            "outcome": outcome,
            "transaction_id": transaction_id,
            "message": _MESSAGES[outcome],
        }

    def _card_outcome(self, number: str) -> str:
        if number in TEST_CARDS:
            return TEST_CARDS[number]
        return OUTCOME_SUCCESS if luhn_valid(number) else OUTCOME_ERROR
