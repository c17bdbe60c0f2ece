"""Rutas de check-in de tickets"""
from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Dict

from shared.database.session import get_db
from shared.auth.dependencies import get_current_user
from shared.utils.exceptions import ServiceError, to_http_exception
from shared.utils.rate_limiter import limiter, RATE_LIMITS
from services.ticket_validation.models.checkin import CheckInRequest, CheckInResponse
from services.ticket_validation.services.checkin_service import CheckInService


router = APIRouter()


@router.post("/check-in", response_model=CheckInResponse)
@limiter.limit(RATE_LIMITS["checkin"])
async def check_in_ticket(
    request: Request,  # Necesario para rate limiter
    checkin_request: CheckInRequest,
    db: AsyncSession = Depends(get_db),
    current_user: Dict = Depends(get_current_user)
):
    """
    Check-in de un ticket en la puerta

    Requiere ser organizador del evento o admin
    """
    try:
        result = await CheckInService.check_in(
            db=db,
            ticket_code=checkin_request.ticket_code,
            event_id=checkin_request.event_id,
            current_user=current_user
        )
    except ServiceError as e:
        raise to_http_exception(e)

    return CheckInResponse(**result)
