"""Servicio para listado de eventos (admin)"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import selectinload
from typing import List, Optional

from shared.database.models import Event, EVENT_STATUSES
from shared.utils.exceptions import ValidationFailed


class AdminEventsService:
    """Servicio para operaciones de eventos para admin"""

    async def get_events(
        self,
        db: AsyncSession,
        status: Optional[str] = None
    ) -> List[Event]:
        """
        Obtener todos los eventos con su organizador, más recientes primero

        Incluye borradores, cancelados y eventos privados.

        Args:
            db: Sesión de base de datos
            status: Filtro opcional por estado del evento

        Returns:
            Lista de eventos
        """
        stmt = select(Event).options(selectinload(Event.organizer))

        if status:
            if status not in EVENT_STATUSES:
                raise ValidationFailed(f"Estado inválido. Debe ser uno de: {', '.join(EVENT_STATUSES)}")
            stmt = stmt.where(Event.status == status)

        stmt = stmt.order_by(Event.created_at.desc())

        result = await db.execute(stmt)
        return list(result.scalars().all())
