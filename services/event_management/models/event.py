"""Modelos Pydantic para eventos, categorías y reseñas"""
from pydantic import BaseModel, Field, field_serializer
from typing import Optional, List
from datetime import datetime, timezone


def _serialize_utc(dt: Optional[datetime]) -> Optional[str]:
    """Las fechas se guardan en UTC sin timezone: devolverlas con timezone explícito"""
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.isoformat()


# ==================== CATEGORIES ====================

class CategoryResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None
    event_count: Optional[int] = None  # eventos publicados y públicos


class CategoryCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=80)
    description: Optional[str] = None
    color: Optional[str] = Field(None, max_length=20)
    icon: Optional[str] = Field(None, max_length=40)


# ==================== EVENTS ====================

class UserSummary(BaseModel):
    """Organizador o participante resumido"""
    id: str
    name: str
    email: Optional[str] = None


class EventResponse(BaseModel):
    id: str
    title: str
    description: str
    start_date: datetime
    end_date: datetime
    location: str
    address: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    max_participants: int
    available_spots: int
    inscription_count: int
    price: float
    is_public: bool
    status: str
    image_url: Optional[str] = None
    organizer_id: str
    category_id: str
    category: Optional[CategoryResponse] = None
    organizer: Optional[UserSummary] = None
    created_at: datetime
    updated_at: Optional[datetime] = None

    @field_serializer('start_date', 'end_date', 'created_at', 'updated_at')
    def serialize_datetime(self, dt: Optional[datetime], _info) -> Optional[str]:
        return _serialize_utc(dt)


class EventInscriptionInfo(BaseModel):
    """Inscripción activa mostrada en el detalle del evento"""
    id: str
    status: str
    inscription_date: datetime
    participant: UserSummary

    @field_serializer('inscription_date')
    def serialize_datetime(self, dt: datetime, _info) -> Optional[str]:
        return _serialize_utc(dt)


class ReviewResponse(BaseModel):
    id: str
    event_id: str
    rating: int
    comment: Optional[str] = None
    user: UserSummary
    created_at: datetime

    @field_serializer('created_at')
    def serialize_datetime(self, dt: datetime, _info) -> Optional[str]:
        return _serialize_utc(dt)


class ReviewCreate(BaseModel):
    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = Field(None, max_length=2000)


class EventDetailResponse(EventResponse):
    inscriptions: List[EventInscriptionInfo] = []
    reviews: List[ReviewResponse] = []
    average_rating: float = 0.0
    total_reviews: int = 0
    is_user_registered: bool = False


class EventCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    start_date: datetime
    end_date: datetime
    location: str = Field(..., min_length=1, max_length=255)
    address: Optional[str] = Field(None, max_length=255)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    max_participants: int = Field(..., gt=0)
    price: float = Field(0.0, ge=0)
    is_public: bool = True
    image_url: Optional[str] = None
    category_id: str
    status: Optional[str] = None  # DRAFT o PUBLISHED (default)


class EventUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    location: Optional[str] = Field(None, min_length=1, max_length=255)
    address: Optional[str] = Field(None, max_length=255)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    max_participants: Optional[int] = Field(None, gt=0)
    price: Optional[float] = Field(None, ge=0)
    is_public: Optional[bool] = None
    image_url: Optional[str] = None
    category_id: Optional[str] = None
    status: Optional[str] = None


class DeleteEventResponse(BaseModel):
    message: str
    event_id: str


class DailyCount(BaseModel):
    date: str
    count: int


class EventStatsResponse(BaseModel):
    """Estadísticas de un evento para su organizador"""
    event_id: str
    total_registrations: int
    active_registrations: int
    pending_payments: int
    checked_in_count: int
    total_revenue: float
    average_rating: float
    total_reviews: int
    registrations_by_day: List[DailyCount] = []
