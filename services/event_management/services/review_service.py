"""Servicio de reseñas de eventos"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from sqlalchemy.orm import selectinload
from typing import List, Dict

from shared.database.models import Event, EventReview
from shared.utils.exceptions import NotFound
from shared.utils.ids import parse_id, parse_reference


class ReviewService:
    """Reseñas: solo se agregan, nunca se editan"""

    @staticmethod
    async def get_reviews(db: AsyncSession, event_id: str) -> List[EventReview]:
        event_uuid = parse_id(event_id, "Evento")
        if not await db.get(Event, event_uuid):
            raise NotFound("Evento no encontrado")

        stmt = (
            select(EventReview)
            .options(selectinload(EventReview.user))
            .where(EventReview.event_id == event_uuid)
            .order_by(EventReview.created_at.desc())
        )
        result = await db.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def add_review(
        db: AsyncSession,
        event_id: str,
        rating: int,
        comment: str,
        current_user: Dict
    ) -> EventReview:
        event_uuid = parse_id(event_id, "Evento")
        if not await db.get(Event, event_uuid):
            raise NotFound("Evento no encontrado")

        review = EventReview(
            event_id=event_uuid,
            user_id=parse_reference(current_user["user_id"], "user_id"),
            rating=rating,
            comment=comment
        )
        db.add(review)
        await db.commit()

        stmt = (
            select(EventReview)
            .options(selectinload(EventReview.user))
            .where(EventReview.id == review.id)
            .execution_options(populate_existing=True)
        )
        return (await db.execute(stmt)).scalar_one()
