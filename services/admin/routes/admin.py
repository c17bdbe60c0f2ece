"""Rutas de administración"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Dict, Optional

from shared.database.session import get_db
from shared.auth.dependencies import get_current_admin
from shared.utils.exceptions import ServiceError, to_http_exception
from services.admin.models.admin import (
    AdminUserResponse,
    UsersListResponse,
    UpdateUserRoleRequest,
    DeleteUserResponse,
    DashboardStatsResponse,
    AdminEventResponse,
    AdminEventsListResponse
)
from services.admin.services.user_management_service import UserManagementService
from services.admin.services.stats_service import StatsService
from services.admin.services.admin_events_service import AdminEventsService
from services.event_management.models.event import UserSummary


router = APIRouter()


# ==================== USERS ====================

@router.get("/users", response_model=UsersListResponse)
async def get_users(
    db: AsyncSession = Depends(get_db),
    current_user: Dict = Depends(get_current_admin)
):
    """
    Listar usuarios con cantidad de eventos organizados e inscripciones

    Requiere autenticación de admin
    """
    service = UserManagementService()

    users = await service.get_users(db=db)

    return UsersListResponse(
        users=[
            AdminUserResponse(
                id=str(user.id),
                name=user.name,
                email=user.email,
                role=user.role,
                phone=user.phone,
                created_at=user.created_at,
                organized_events_count=events_count,
                inscriptions_count=inscriptions_count
            )
            for user, events_count, inscriptions_count in users
        ],
        total=len(users)
    )


@router.patch("/users/{user_id}", response_model=AdminUserResponse)
async def update_user_role(
    user_id: str,
    request: UpdateUserRoleRequest,
    db: AsyncSession = Depends(get_db),
    current_user: Dict = Depends(get_current_admin)
):
    """
    Cambiar el rol de un usuario

    Requiere autenticación de admin
    No permite cambiar el propio rol
    """
    service = UserManagementService()

    try:
        user = await service.update_user_role(
            db=db,
            user_id=user_id,
            new_role=request.role,
            current_user_id=current_user.get("user_id")
        )
    except ServiceError as e:
        raise to_http_exception(e)

    return AdminUserResponse(
        id=str(user.id),
        name=user.name,
        email=user.email,
        role=user.role,
        phone=user.phone,
        created_at=user.created_at
    )


@router.delete("/users/{user_id}", response_model=DeleteUserResponse)
async def delete_user(
    user_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: Dict = Depends(get_current_admin)
):
    """
    Eliminar usuario junto con sus inscripciones, reseñas y eventos

    Requiere autenticación de admin
    No permite eliminar la propia cuenta
    """
    service = UserManagementService()

    try:
        summary = await service.delete_user(
            db=db,
            user_id=user_id,
            current_user_id=current_user.get("user_id")
        )
    except ServiceError as e:
        raise to_http_exception(e)

    return DeleteUserResponse(
        message="Usuario eliminado correctamente",
        user_id=user_id,
        **summary
    )


# ==================== STATS ====================

@router.get("/stats", response_model=DashboardStatsResponse)
async def get_dashboard_stats(
    db: AsyncSession = Depends(get_db),
    current_user: Dict = Depends(get_current_admin)
):
    """
    Obtener estadísticas del dashboard

    Requiere autenticación de admin
    """
    stats_service = StatsService()
    stats = await stats_service.get_dashboard_stats(db=db)

    return DashboardStatsResponse(**stats)


# ==================== EVENTS ====================

@router.get("/events", response_model=AdminEventsListResponse)
async def get_admin_events(
    event_status: Optional[str] = Query(None, description="Filtro de estado: DRAFT, PUBLISHED, CANCELLED, COMPLETED"),
    db: AsyncSession = Depends(get_db),
    current_user: Dict = Depends(get_current_admin)
):
    """
    Listar todos los eventos con organizador e inscritos

    Requiere autenticación de admin
    """
    service = AdminEventsService()

    try:
        events = await service.get_events(db=db, status=event_status)
    except ServiceError as e:
        raise to_http_exception(e)

    return AdminEventsListResponse(
        events=[
            AdminEventResponse(
                id=str(event.id),
                title=event.title,
                start_date=event.start_date,
                status=event.status,
                max_participants=event.max_participants,
                available_spots=event.available_spots,
                inscription_count=event.inscription_count,
                price=float(event.price),
                organizer=UserSummary(
                    id=str(event.organizer.id),
                    name=event.organizer.name,
                    email=event.organizer.email
                ),
                created_at=event.created_at
            )
            for event in events
        ],
        total=len(events)
    )
