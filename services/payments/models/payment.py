"""Modelos Pydantic para el checkout simulado"""
from pydantic import BaseModel, Field
from typing import Optional

from services.inscriptions.models.inscription import InscriptionResponse


class CardData(BaseModel):
    number: str = Field(..., min_length=1, max_length=30)
    holder_name: Optional[str] = Field(None, max_length=120)
    expiry: Optional[str] = Field(None, max_length=7)  # MM/YY
    cvv: Optional[str] = Field(None, max_length=4)


class CheckoutRequest(BaseModel):
    event_id: str = Field(..., min_length=1)
    method: str = Field(..., description="credit_card, debit_card, pix, boleto o paypal")
    card: Optional[CardData] = None


class CheckoutResponse(BaseModel):
    outcome: str  # success | pending
    message: str
    transaction_id: Optional[str] = None
    inscription: InscriptionResponse
