"""Modelos Pydantic para administración"""
from pydantic import BaseModel, field_serializer
from typing import Optional, List
from datetime import datetime

from services.event_management.models.event import UserSummary, _serialize_utc


# ==================== USERS ====================

class AdminUserResponse(BaseModel):
    """Usuario con conteo de eventos organizados e inscripciones"""
    id: str
    name: str
    email: str
    role: str
    phone: Optional[str] = None
    created_at: datetime
    organized_events_count: int = 0
    inscriptions_count: int = 0

    class Config:
        from_attributes = True

    @field_serializer('created_at')
    def serialize_datetime(self, dt: datetime, _info) -> Optional[str]:
        return _serialize_utc(dt)


class UsersListResponse(BaseModel):
    """Respuesta con lista de usuarios"""
    users: List[AdminUserResponse]
    total: int


class UpdateUserRoleRequest(BaseModel):
    """Request para cambiar rol de usuario"""
    role: str


class DeleteUserResponse(BaseModel):
    """Respuesta al eliminar usuario y sus datos asociados"""
    message: str
    user_id: str
    deleted_events: int
    deleted_inscriptions: int
    deleted_reviews: int


# ==================== STATS ====================

class DashboardStatsResponse(BaseModel):
    """Estadísticas globales de la plataforma"""
    total_users: int
    total_events: int
    published_events: int
    active_inscriptions: int
    pending_payments: int
    total_revenue: float


# ==================== EVENTS ====================

class AdminEventResponse(BaseModel):
    """Evento en el listado de administración"""
    id: str
    title: str
    start_date: datetime
    status: str
    max_participants: int
    available_spots: int
    inscription_count: int
    price: float
    organizer: UserSummary
    created_at: datetime

    class Config:
        from_attributes = True

    @field_serializer('start_date', 'created_at')
    def serialize_datetime(self, dt: datetime, _info) -> Optional[str]:
        return _serialize_utc(dt)


class AdminEventsListResponse(BaseModel):
    """Respuesta con lista de eventos para admin"""
    events: List[AdminEventResponse]
    total: int
