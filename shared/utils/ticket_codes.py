"""Utilidades para generar códigos de ticket e imágenes QR"""
import hashlib
import hmac
from io import BytesIO
from typing import Optional
import uuid

import qrcode

from shared.core.config import settings


def generate_ticket_code(event_id: str, participant_id: str, secret: Optional[str] = None) -> str:
    """
    Generar código de ticket único para una inscripción

    Formato: TICKET-{evento[-8:]}-{participante[-8:]}-{firma[:12]}

    La firma es un HMAC-SHA256 sobre evento, participante y un nonce aleatorio,
    así dos reactivaciones del mismo par nunca repiten código.
    """
    if secret is None:
        secret = settings.TICKET_SECRET

    event_clean = str(event_id).replace("-", "")
    participant_clean = str(participant_id).replace("-", "")
    nonce = uuid.uuid4().hex

    message = f"ticket:{event_clean}:{participant_clean}:{nonce}"
    signature = hmac.new(
        secret.encode("utf-8"),
        message.encode("utf-8"),
        hashlib.sha256
    ).hexdigest()

    return f"TICKET-{event_clean[-8:].upper()}-{participant_clean[-8:].upper()}-{signature[:12].upper()}"


def generate_qr_png(data: str) -> bytes:
    """Generar imagen PNG del código QR"""
    qr = qrcode.QRCode(
        version=1,
        error_correction=qrcode.constants.ERROR_CORRECT_L,
        box_size=10,
        border=4,
    )
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")

    buf = BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()
