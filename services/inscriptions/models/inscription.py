"""Modelos Pydantic para inscripciones"""
from pydantic import BaseModel, Field, field_serializer
from typing import Optional
from datetime import datetime

from services.event_management.models.event import EventResponse, _serialize_utc


class InscriptionCreate(BaseModel):
    event_id: str = Field(..., min_length=1)
    # Resultado del pago para eventos pagos: PAID o PENDING
    payment_status: Optional[str] = None


class InscriptionResponse(BaseModel):
    id: str
    participant_id: str
    event_id: str
    status: str
    paid: bool
    payment_status: str
    ticket_code: str
    inscription_date: datetime
    checked_in_at: Optional[datetime] = None
    event: Optional[EventResponse] = None

    @field_serializer('inscription_date', 'checked_in_at')
    def serialize_datetime(self, dt: Optional[datetime], _info) -> Optional[str]:
        return _serialize_utc(dt)


class CancelInscriptionResponse(BaseModel):
    message: str
    inscription_id: str
    status: str
