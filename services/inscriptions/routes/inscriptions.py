"""Rutas de inscripciones"""
from fastapi import APIRouter, Depends, Query, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional, Dict

from shared.database.session import get_db
from shared.auth.dependencies import get_current_user
from shared.utils.exceptions import ServiceError, to_http_exception
from shared.utils.rate_limiter import limiter, RATE_LIMITS
from services.event_management.routes.events import event_response
from services.inscriptions.models.inscription import (
    InscriptionCreate,
    InscriptionResponse,
    CancelInscriptionResponse
)
from services.inscriptions.services.inscription_service import InscriptionService


router = APIRouter()


def inscription_response(inscription, include_event: bool = True) -> InscriptionResponse:
    return InscriptionResponse(
        id=str(inscription.id),
        participant_id=str(inscription.participant_id),
        event_id=str(inscription.event_id),
        status=inscription.status,
        paid=inscription.paid,
        payment_status=inscription.payment_status,
        ticket_code=inscription.ticket_code,
        inscription_date=inscription.inscription_date,
        checked_in_at=inscription.checked_in_at,
        event=event_response(inscription.event) if include_event else None
    )


@router.get("", response_model=List[InscriptionResponse])
async def get_inscriptions(
    user_id: Optional[str] = Query(None, description="Usuario (solo ADMIN puede consultar otros)"),
    db: AsyncSession = Depends(get_db),
    current_user: Dict = Depends(get_current_user)
):
    """
    Listar inscripciones vigentes (ACTIVE, CONFIRMED, CHECKED_IN)

    Por defecto las del usuario autenticado
    """
    try:
        inscriptions = await InscriptionService.list_inscriptions(
            db=db,
            current_user=current_user,
            user_id=user_id
        )
    except ServiceError as e:
        raise to_http_exception(e)

    return [inscription_response(i) for i in inscriptions]


@router.post("", response_model=InscriptionResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(RATE_LIMITS["inscription"])
async def create_inscription(
    request: Request,  # Necesario para rate limiter
    inscription_data: InscriptionCreate,
    db: AsyncSession = Depends(get_db),
    current_user: Dict = Depends(get_current_user)
):
    """
    Inscribirse en un evento

    Eventos gratuitos quedan ACTIVE y pagados. En eventos pagos el estado
    depende de payment_status (PAID → ACTIVE, PENDING → CONFIRMED).
    """
    try:
        inscription = await InscriptionService.create_inscription(
            db=db,
            event_id=inscription_data.event_id,
            current_user=current_user,
            payment_status=inscription_data.payment_status
        )
    except ServiceError as e:
        raise to_http_exception(e)

    return inscription_response(inscription)


@router.delete("/{inscription_id}", response_model=CancelInscriptionResponse)
async def cancel_inscription(
    inscription_id: str,
    user_id: Optional[str] = Query(None),
    db: AsyncSession = Depends(get_db),
    current_user: Dict = Depends(get_current_user)
):
    """Cancelar inscripción propia antes del inicio del evento"""
    try:
        inscription = await InscriptionService.cancel_inscription(
            db=db,
            inscription_id=inscription_id,
            current_user=current_user,
            user_id=user_id
        )
    except ServiceError as e:
        raise to_http_exception(e)

    return CancelInscriptionResponse(
        message="Inscripción cancelada correctamente",
        inscription_id=str(inscription.id),
        status=inscription.status
    )


@router.post("/{inscription_id}/confirm-payment", response_model=InscriptionResponse)
async def confirm_payment(
    inscription_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Dict = Depends(get_current_user)
):
    """
    Confirmar pago pendiente (CONFIRMED → ACTIVE)

    Requiere ser organizador del evento o admin
    """
    try:
        inscription = await InscriptionService.confirm_payment(
            db=db,
            inscription_id=inscription_id,
            current_user=current_user
        )
    except ServiceError as e:
        raise to_http_exception(e)

    return inscription_response(inscription)


@router.get("/{inscription_id}/qr")
async def get_inscription_qr(
    inscription_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Dict = Depends(get_current_user)
):
    """Imagen PNG con el QR del ticket"""
    try:
        png = await InscriptionService.get_ticket_qr(
            db=db,
            inscription_id=inscription_id,
            current_user=current_user
        )
    except ServiceError as e:
        raise to_http_exception(e)

    return Response(content=png, media_type="image/png")
