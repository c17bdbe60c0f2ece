"""Servicio de categorías de eventos"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, and_
from sqlalchemy.exc import IntegrityError
from typing import List, Tuple, Dict
import logging

from shared.database.models import (
    Event, EventCategory, EVENT_PUBLISHED, ROLE_ADMIN
)
from shared.utils.exceptions import PermissionDenied, StateConflict

logger = logging.getLogger(__name__)


class CategoryService:
    """Servicio para listar y crear categorías"""

    @staticmethod
    async def get_categories(db: AsyncSession) -> List[Tuple[EventCategory, int]]:
        """
        Obtener categorías ordenadas por nombre junto con la cantidad de
        eventos publicados y públicos de cada una
        """
        stmt = (
            select(EventCategory, func.count(Event.id))
            .outerjoin(
                Event,
                and_(
                    Event.category_id == EventCategory.id,
                    Event.status == EVENT_PUBLISHED,
                    Event.is_public.is_(True)
                )
            )
            .group_by(EventCategory.id)
            .order_by(EventCategory.name.asc())
        )
        result = await db.execute(stmt)
        return [(category, count) for category, count in result.all()]

    @staticmethod
    async def create_category(
        db: AsyncSession,
        category_data: dict,
        current_user: Dict
    ) -> EventCategory:
        """
        Crear categoría

        Requiere: rol ADMIN. El nombre es único.
        """
        if current_user.get("role") != ROLE_ADMIN:
            raise PermissionDenied("Se requieren permisos de administrador")

        name = category_data["name"].strip()

        stmt = select(EventCategory).where(EventCategory.name == name)
        existing = (await db.execute(stmt)).scalar_one_or_none()
        if existing:
            raise StateConflict("Ya existe una categoría con ese nombre")

        category = EventCategory(
            name=name,
            description=category_data.get("description"),
            color=category_data.get("color"),
            icon=category_data.get("icon")
        )
        db.add(category)

        try:
            await db.commit()
        except IntegrityError:
            # Otra request creó el mismo nombre entre la verificación y el insert
            await db.rollback()
            raise StateConflict("Ya existe una categoría con ese nombre")

        logger.info(f"Categoría '{name}' creada por {current_user.get('user_id')}")
        return category
