"""Servicio para cálculo de estadísticas del dashboard"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, and_
from typing import Dict

from shared.database.models import (
    User, Event, Inscription,
    EVENT_PUBLISHED, INSCRIPTION_CONFIRMED, SEAT_HOLDING_STATUSES
)


class StatsService:
    """Servicio para operaciones de estadísticas"""

    async def get_dashboard_stats(self, db: AsyncSession) -> Dict:
        """
        Obtener estadísticas globales de la plataforma

        Los ingresos suman el precio del evento por cada inscripción pagada que
        ocupa cupo (ACTIVE o CHECKED_IN), en eventos con precio mayor a cero.

        Args:
            db: Sesión de base de datos

        Returns:
            Dict con estadísticas
        """
        total_users = (await db.execute(select(func.count(User.id)))).scalar() or 0

        total_events = (await db.execute(select(func.count(Event.id)))).scalar() or 0

        stmt_published = select(func.count(Event.id)).where(Event.status == EVENT_PUBLISHED)
        published_events = (await db.execute(stmt_published)).scalar() or 0

        stmt_active = select(func.count(Inscription.id)).where(Inscription.status.in_(SEAT_HOLDING_STATUSES))
        active_inscriptions = (await db.execute(stmt_active)).scalar() or 0

        stmt_pending = select(func.count(Inscription.id)).where(Inscription.status == INSCRIPTION_CONFIRMED)
        pending_payments = (await db.execute(stmt_pending)).scalar() or 0

        # JOIN inscriptions -> events
        stmt_revenue = (
            select(func.sum(Event.price))
            .select_from(Inscription)
            .join(Event, Inscription.event_id == Event.id)
            .where(
                and_(
                    Inscription.status.in_(SEAT_HOLDING_STATUSES),
                    Inscription.paid.is_(True),
                    Event.price > 0
                )
            )
        )
        total_revenue = (await db.execute(stmt_revenue)).scalar() or 0.0

        return {
            "total_users": total_users,
            "total_events": total_events,
            "published_events": published_events,
            "active_inscriptions": active_inscriptions,
            "pending_payments": pending_payments,
            "total_revenue": float(total_revenue),
        }
