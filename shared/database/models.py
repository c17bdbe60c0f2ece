"""Modelos SQLAlchemy"""
from sqlalchemy import (
    Column, String, Integer, Boolean, DateTime, ForeignKey, Numeric, Text, Float,
    CheckConstraint, UniqueConstraint, Uuid
)
from sqlalchemy.orm import relationship
import uuid

from shared.database.connection import Base
from shared.utils.dates import utcnow


# Roles de usuario
ROLE_ADMIN = "ADMIN"
ROLE_ORGANIZER = "ORGANIZER"
ROLE_PARTICIPANT = "PARTICIPANT"
USER_ROLES = (ROLE_ADMIN, ROLE_ORGANIZER, ROLE_PARTICIPANT)
EVENT_MANAGER_ROLES = (ROLE_ADMIN, ROLE_ORGANIZER)

# Estados de evento
EVENT_DRAFT = "DRAFT"
EVENT_PUBLISHED = "PUBLISHED"
EVENT_CANCELLED = "CANCELLED"
EVENT_COMPLETED = "COMPLETED"
EVENT_STATUSES = (EVENT_DRAFT, EVENT_PUBLISHED, EVENT_CANCELLED, EVENT_COMPLETED)

# Estados de inscripción
INSCRIPTION_ACTIVE = "ACTIVE"
INSCRIPTION_CONFIRMED = "CONFIRMED"  # pago pendiente
INSCRIPTION_CANCELLED = "CANCELLED"
INSCRIPTION_CHECKED_IN = "CHECKED_IN"
# Estados que ocupan un cupo del evento
SEAT_HOLDING_STATUSES = (INSCRIPTION_ACTIVE, INSCRIPTION_CHECKED_IN)
# Estados visibles en "mis inscripciones"
LISTED_STATUSES = (INSCRIPTION_ACTIVE, INSCRIPTION_CONFIRMED, INSCRIPTION_CHECKED_IN)

# Resultado del pago, independiente del estado de la inscripción
PAYMENT_FREE = "FREE"
PAYMENT_PAID = "PAID"
PAYMENT_PENDING = "PENDING"
PAYMENT_UNPAID = "UNPAID"


class User(Base):
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(120), nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    role = Column(String(20), nullable=False, default=ROLE_PARTICIPANT)
    phone = Column(String(30), nullable=True)
    cpf = Column(String(14), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relaciones
    organized_events = relationship("Event", back_populates="organizer")
    inscriptions = relationship("Inscription", back_populates="participant")
    reviews = relationship("EventReview", back_populates="user")


class EventCategory(Base):
    __tablename__ = "event_categories"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(80), unique=True, nullable=False)
    description = Column(Text, nullable=True)
    color = Column(String(20), nullable=True)
    icon = Column(String(40), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    # Relaciones
    events = relationship("Event", back_populates="category")


class Event(Base):
    __tablename__ = "events"
    __table_args__ = (
        CheckConstraint("max_participants > 0", name="ck_events_max_participants_positive"),
        CheckConstraint("available_spots >= 0", name="ck_events_available_spots_non_negative"),
        CheckConstraint("available_spots <= max_participants", name="ck_events_available_spots_le_max"),
        CheckConstraint("price >= 0", name="ck_events_price_non_negative"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    start_date = Column(DateTime, nullable=False, index=True)
    end_date = Column(DateTime, nullable=False)
    location = Column(String(255), nullable=False)
    address = Column(String(255), nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    max_participants = Column(Integer, nullable=False)
    available_spots = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False, default=0)
    is_public = Column(Boolean, nullable=False, default=True)
    status = Column(String(20), nullable=False, default=EVENT_PUBLISHED)
    image_url = Column(String, nullable=True)
    organizer_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    category_id = Column(Uuid, ForeignKey("event_categories.id"), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow, nullable=False)

    # Relaciones
    organizer = relationship("User", back_populates="organized_events")
    category = relationship("EventCategory", back_populates="events")
    inscriptions = relationship("Inscription", back_populates="event")
    reviews = relationship("EventReview", back_populates="event")

    @property
    def inscription_count(self) -> int:
        """Cupos ocupados por inscripciones activas o con check-in"""
        return self.max_participants - self.available_spots


class Inscription(Base):
    __tablename__ = "inscriptions"
    __table_args__ = (
        UniqueConstraint("participant_id", "event_id", name="uq_inscriptions_participant_event"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    participant_id = Column(Uuid, ForeignKey("users.id"), nullable=False, index=True)
    event_id = Column(Uuid, ForeignKey("events.id"), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=INSCRIPTION_ACTIVE)
    paid = Column(Boolean, nullable=False, default=False)
    payment_status = Column(String(20), nullable=False, default=PAYMENT_UNPAID)
    ticket_code = Column(String(64), unique=True, nullable=False, index=True)
    inscription_date = Column(DateTime, default=utcnow, nullable=False)
    checked_in_at = Column(DateTime, nullable=True)

    # Relaciones
    participant = relationship("User", back_populates="inscriptions")
    event = relationship("Event", back_populates="inscriptions")


class EventReview(Base):
    __tablename__ = "event_reviews"
    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_event_reviews_rating_range"),
    )

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    event_id = Column(Uuid, ForeignKey("events.id"), nullable=False, index=True)
    user_id = Column(Uuid, ForeignKey("users.id"), nullable=False)
    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    # Relaciones
    event = relationship("Event", back_populates="reviews")
    user = relationship("User", back_populates="reviews")
