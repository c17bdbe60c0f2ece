"""Rutas de pago simulado"""
from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Dict

from shared.database.session import get_db
from shared.auth.dependencies import get_current_user
from shared.utils.exceptions import ServiceError, to_http_exception
from shared.utils.rate_limiter import limiter, RATE_LIMITS
from services.inscriptions.routes.inscriptions import inscription_response
from services.payments.models.payment import CheckoutRequest, CheckoutResponse
from services.payments.services.checkout_service import CheckoutService


router = APIRouter()


@router.post("/checkout", response_model=CheckoutResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(RATE_LIMITS["payment"])  # 10 intentos por minuto
async def checkout(
    request: Request,  # Necesario para rate limiter
    checkout_request: CheckoutRequest,
    db: AsyncSession = Depends(get_db),
    current_user: Dict = Depends(get_current_user)
):
    """
    Pagar e inscribirse en un evento

    Tarjetas de prueba:
    - 4111 1111 1111 1111: aprobado (ACTIVE, pagado)
    - 5555 5555 5555 4444: pendiente (CONFIRMED, sin pagar)
    - 4000 0000 0000 0002: rechazado (402, sin inscripción)
    """
    service = CheckoutService()

    try:
        result = await service.checkout(
            db=db,
            event_id=checkout_request.event_id,
            method=checkout_request.method,
            current_user=current_user,
            card_number=checkout_request.card.number if checkout_request.card else None
        )
    except ServiceError as e:
        raise to_http_exception(e)

    return CheckoutResponse(
        outcome=result["outcome"],
        message=result["message"],
        transaction_id=result["transaction_id"],
        inscription=inscription_response(result["inscription"])
    )
