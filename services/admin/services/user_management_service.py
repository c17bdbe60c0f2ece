"""Servicio para gestión de usuarios"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, func, or_
from typing import List, Dict, Optional, Tuple
from uuid import UUID
import logging

from shared.database.models import (
    User, Event, Inscription, EventReview,
    USER_ROLES, SEAT_HOLDING_STATUSES
)
from shared.utils.exceptions import NotFound, StateConflict, ValidationFailed
from shared.utils.ids import parse_id
from services.inscriptions.services.inscription_service import release_seat

logger = logging.getLogger(__name__)


class UserManagementService:
    """Servicio para operaciones con usuarios"""

    async def get_users(self, db: AsyncSession) -> List[Tuple[User, int, int]]:
        """
        Obtener todos los usuarios con sus conteos

        Args:
            db: Sesión de base de datos

        Returns:
            Lista de (usuario, eventos organizados, inscripciones), más recientes primero
        """
        events_count = (
            select(func.count(Event.id))
            .where(Event.organizer_id == User.id)
            .correlate(User)
            .scalar_subquery()
        )
        inscriptions_count = (
            select(func.count(Inscription.id))
            .where(Inscription.participant_id == User.id)
            .correlate(User)
            .scalar_subquery()
        )

        stmt = (
            select(User, events_count, inscriptions_count)
            .order_by(User.created_at.desc())
        )

        result = await db.execute(stmt)
        return [(user, n_events or 0, n_inscriptions or 0) for user, n_events, n_inscriptions in result.all()]

    async def update_user_role(
        self,
        db: AsyncSession,
        user_id: str,
        new_role: str,
        current_user_id: str
    ) -> Optional[User]:
        """
        Actualizar el rol de un usuario

        Args:
            db: Sesión de base de datos
            user_id: ID del usuario a actualizar
            new_role: Nuevo rol
            current_user_id: ID del admin que hace el cambio

        Returns:
            Usuario actualizado

        Raises:
            ValidationFailed: rol inválido
            StateConflict: el admin intenta cambiar su propio rol
            NotFound: usuario inexistente
        """
        if new_role not in USER_ROLES:
            raise ValidationFailed(f"Rol inválido. Debe ser uno de: {', '.join(USER_ROLES)}")

        user_uuid = parse_id(user_id, "Usuario")
        if user_uuid == UUID(current_user_id):
            raise StateConflict("No puedes cambiar tu propio rol")

        user = await db.get(User, user_uuid)
        if not user:
            raise NotFound("Usuario no encontrado")

        previous_role = user.role
        user.role = new_role

        await db.commit()
        await db.refresh(user)

        logger.info(f"Rol de usuario {user.id} cambiado de {previous_role} a {new_role} por {current_user_id}")

        return user

    async def delete_user(
        self,
        db: AsyncSession,
        user_id: str,
        current_user_id: str
    ) -> Dict:
        """
        Eliminar un usuario con todos sus datos en una sola transacción

        Orden: reseñas e inscripciones del usuario (devolviendo cupos en
        eventos ajenos), eventos que organiza con sus inscripciones y reseñas,
        y finalmente el usuario.

        Args:
            db: Sesión de base de datos
            user_id: ID del usuario a eliminar
            current_user_id: ID del admin que elimina

        Returns:
            Dict con cantidades eliminadas
        """
        user_uuid = parse_id(user_id, "Usuario")
        if user_uuid == UUID(current_user_id):
            raise StateConflict("No puedes eliminar tu propia cuenta")

        stmt_user = select(User).where(User.id == user_uuid).with_for_update()
        user = (await db.execute(stmt_user)).scalar_one_or_none()
        if not user:
            raise NotFound("Usuario no encontrado")

        organized_ids = select(Event.id).where(Event.organizer_id == user_uuid)

        try:
            # Cupos ocupados por el usuario en eventos de otros organizadores
            stmt_seats = select(Inscription.event_id).where(
                Inscription.participant_id == user_uuid,
                Inscription.status.in_(SEAT_HOLDING_STATUSES),
                Inscription.event_id.not_in(organized_ids)
            )
            for event_id in (await db.execute(stmt_seats)).scalars().all():
                await release_seat(db, event_id)

            reviews = await db.execute(
                delete(EventReview).where(
                    or_(EventReview.user_id == user_uuid, EventReview.event_id.in_(organized_ids))
                ).execution_options(synchronize_session=False)
            )
            inscriptions = await db.execute(
                delete(Inscription).where(
                    or_(Inscription.participant_id == user_uuid, Inscription.event_id.in_(organized_ids))
                ).execution_options(synchronize_session=False)
            )
            events = await db.execute(
                delete(Event).where(Event.organizer_id == user_uuid).execution_options(synchronize_session=False)
            )
            await db.execute(delete(User).where(User.id == user_uuid))

            await db.commit()
        except Exception as e:
            await db.rollback()
            logger.error(f"Error eliminando usuario {user_id}: {e}", exc_info=True)
            raise

        summary = {
            "deleted_events": events.rowcount,
            "deleted_inscriptions": inscriptions.rowcount,
            "deleted_reviews": reviews.rowcount,
        }
        logger.info(f"Usuario {user_id} eliminado por {current_user_id}: {summary}")

        return summary
