"""Rutas de gestión de eventos"""
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional, Dict
from datetime import datetime

from shared.database.session import get_db
from shared.database.models import SEAT_HOLDING_STATUSES, INSCRIPTION_CANCELLED
from shared.auth.dependencies import get_current_user, get_optional_user
from shared.utils.exceptions import ServiceError, to_http_exception
from services.event_management.models.event import (
    CategoryResponse,
    UserSummary,
    EventResponse,
    EventDetailResponse,
    EventInscriptionInfo,
    ReviewResponse,
    ReviewCreate,
    EventCreate,
    EventUpdate,
    DeleteEventResponse,
    EventStatsResponse
)
from services.event_management.services.event_service import EventService
from services.event_management.services.review_service import ReviewService


router = APIRouter()


def _user_summary(user) -> UserSummary:
    return UserSummary(id=str(user.id), name=user.name, email=user.email)


def _category_response(category) -> CategoryResponse:
    return CategoryResponse(
        id=str(category.id),
        name=category.name,
        description=category.description,
        color=category.color,
        icon=category.icon
    )


def _review_response(review) -> ReviewResponse:
    return ReviewResponse(
        id=str(review.id),
        event_id=str(review.event_id),
        rating=review.rating,
        comment=review.comment,
        user=UserSummary(id=str(review.user.id), name=review.user.name),
        created_at=review.created_at
    )


def _event_fields(event) -> Dict:
    """Campos comunes a listado y detalle (requiere category y organizer cargados)"""
    return dict(
        id=str(event.id),
        title=event.title,
        description=event.description,
        start_date=event.start_date,
        end_date=event.end_date,
        location=event.location,
        address=event.address,
        latitude=event.latitude,
        longitude=event.longitude,
        max_participants=event.max_participants,
        available_spots=event.available_spots,
        inscription_count=event.inscription_count,
        price=float(event.price),
        is_public=event.is_public,
        status=event.status,
        image_url=event.image_url,
        organizer_id=str(event.organizer_id),
        category_id=str(event.category_id),
        category=_category_response(event.category) if event.category else None,
        organizer=_user_summary(event.organizer) if event.organizer else None,
        created_at=event.created_at,
        updated_at=event.updated_at
    )


def event_response(event) -> EventResponse:
    return EventResponse(**_event_fields(event))


def _event_detail_response(event, current_user: Optional[Dict]) -> EventDetailResponse:
    active = [i for i in event.inscriptions if i.status in SEAT_HOLDING_STATUSES]
    reviews = sorted(event.reviews, key=lambda r: r.created_at, reverse=True)
    total_reviews = len(reviews)
    average_rating = round(sum(r.rating for r in reviews) / total_reviews, 1) if total_reviews else 0.0

    is_user_registered = False
    if current_user:
        is_user_registered = any(
            str(i.participant_id) == current_user.get("user_id") and i.status != INSCRIPTION_CANCELLED
            for i in event.inscriptions
        )

    return EventDetailResponse(
        **_event_fields(event),
        inscriptions=[
            EventInscriptionInfo(
                id=str(i.id),
                status=i.status,
                inscription_date=i.inscription_date,
                participant=_user_summary(i.participant)
            )
            for i in active
        ],
        reviews=[_review_response(r) for r in reviews],
        average_rating=average_rating,
        total_reviews=total_reviews,
        is_user_registered=is_user_registered
    )


@router.get("", response_model=List[EventResponse])
async def get_events(
    search: Optional[str] = Query(None, description="Búsqueda por título, descripción o ubicación"),
    category: Optional[str] = Query(None, description="Nombre de la categoría"),
    location: Optional[str] = Query(None, description="Ubicación (contiene)"),
    start_date: Optional[datetime] = Query(None, description="Inicio desde"),
    end_date: Optional[datetime] = Query(None, description="Inicio hasta"),
    organizer_id: Optional[str] = Query(None, description="Eventos de un organizador (incluye borradores)"),
    limit: int = Query(50, ge=1, le=100),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db)
):
    """
    Listar eventos con filtros

    Endpoint público (no requiere autenticación)
    """
    try:
        events = await EventService.get_events(
            db=db,
            search=search,
            category=category,
            location=location,
            start_date=start_date,
            end_date=end_date,
            organizer_id=organizer_id,
            limit=limit,
            offset=offset
        )
    except ServiceError as e:
        raise to_http_exception(e)

    return [event_response(event) for event in events]


@router.post("", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
async def create_event(
    event_data: EventCreate,
    db: AsyncSession = Depends(get_db),
    current_user: Dict = Depends(get_current_user)
):
    """
    Crear evento

    Requiere rol ADMIN u ORGANIZER
    """
    try:
        event = await EventService.create_event(
            db=db,
            event_data=event_data.model_dump(),
            current_user=current_user
        )
    except ServiceError as e:
        raise to_http_exception(e)

    return event_response(event)


@router.get("/{event_id}", response_model=EventDetailResponse)
async def get_event(
    event_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Optional[Dict] = Depends(get_optional_user)
):
    """
    Obtener detalle de un evento con inscripciones activas y reseñas
    """
    event = await EventService.get_event_by_id(db, event_id, with_details=True)

    if not event:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Evento no encontrado"
        )

    return _event_detail_response(event, current_user)


@router.put("/{event_id}", response_model=EventResponse)
async def update_event(
    event_id: str,
    event_data: EventUpdate,
    db: AsyncSession = Depends(get_db),
    current_user: Dict = Depends(get_current_user)
):
    """
    Actualizar evento

    Solo el organizador del evento
    """
    try:
        event = await EventService.update_event(
            db=db,
            event_id=event_id,
            event_data=event_data.model_dump(exclude_unset=True),
            current_user=current_user
        )
    except ServiceError as e:
        raise to_http_exception(e)

    return event_response(event)


@router.delete("/{event_id}", response_model=DeleteEventResponse)
async def delete_event(
    event_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Dict = Depends(get_current_user)
):
    """
    Eliminar evento

    Solo el organizador del evento, y solo si no tiene inscripciones vigentes
    """
    try:
        await EventService.delete_event(db=db, event_id=event_id, current_user=current_user)
    except ServiceError as e:
        raise to_http_exception(e)

    return DeleteEventResponse(message="Evento eliminado correctamente", event_id=event_id)


# ==================== REVIEWS ====================

@router.get("/{event_id}/reviews", response_model=List[ReviewResponse])
async def get_event_reviews(
    event_id: str,
    db: AsyncSession = Depends(get_db)
):
    """Reseñas del evento, más recientes primero"""
    try:
        reviews = await ReviewService.get_reviews(db, event_id)
    except ServiceError as e:
        raise to_http_exception(e)

    return [_review_response(review) for review in reviews]


@router.post("/{event_id}/reviews", response_model=ReviewResponse, status_code=status.HTTP_201_CREATED)
async def add_event_review(
    event_id: str,
    review_data: ReviewCreate,
    db: AsyncSession = Depends(get_db),
    current_user: Dict = Depends(get_current_user)
):
    """Agregar reseña (rating de 1 a 5)"""
    try:
        review = await ReviewService.add_review(
            db=db,
            event_id=event_id,
            rating=review_data.rating,
            comment=review_data.comment,
            current_user=current_user
        )
    except ServiceError as e:
        raise to_http_exception(e)

    return _review_response(review)


# ==================== STATS ====================

@router.get("/{event_id}/stats", response_model=EventStatsResponse)
async def get_event_stats(
    event_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Dict = Depends(get_current_user)
):
    """
    Estadísticas del evento

    Solo el organizador del evento o un admin
    """
    try:
        stats = await EventService.get_event_stats(db=db, event_id=event_id, current_user=current_user)
    except ServiceError as e:
        raise to_http_exception(e)

    return EventStatsResponse(**stats)
