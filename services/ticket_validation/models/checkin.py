"""Modelos Pydantic para check-in de tickets"""
from pydantic import BaseModel, Field, field_serializer
from typing import Optional
from datetime import datetime

from services.event_management.models.event import _serialize_utc


class CheckInRequest(BaseModel):
    ticket_code: str = Field(..., min_length=1)
    event_id: str = Field(..., min_length=1)


class CheckInResponse(BaseModel):
    status: str  # SUCCESS | ALREADY_CHECKED_IN | INVALID
    message: str
    inscription_id: Optional[str] = None
    attendee_name: Optional[str] = None
    checked_in_at: Optional[datetime] = None

    @field_serializer('checked_in_at')
    def serialize_datetime(self, dt: Optional[datetime], _info) -> Optional[str]:
        return _serialize_utc(dt)
