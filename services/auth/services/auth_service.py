"""Servicio de registro y login"""
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func
from sqlalchemy.exc import IntegrityError
from typing import Dict, Optional
import logging

from shared.auth.jwt_handler import hash_password, verify_password, create_access_token
from shared.database.models import User, ROLE_PARTICIPANT
from shared.utils.exceptions import StateConflict
from shared.utils.ids import parse_reference

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL_MESSAGE = "Ya existe un usuario con ese email"


class AuthService:
    """Registro de participantes y emisión de tokens"""

    @staticmethod
    async def get_user_by_email(db: AsyncSession, email: str) -> Optional[User]:
        stmt = select(User).where(func.lower(User.email) == email.lower())
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def register(db: AsyncSession, user_data: Dict) -> User:
        """Crear un usuario PARTICIPANT. Los roles se cambian desde el panel admin."""
        email = user_data["email"].lower()

        if await AuthService.get_user_by_email(db, email):
            raise StateConflict(DUPLICATE_EMAIL_MESSAGE)

        user = User(
            name=user_data["name"],
            email=email,
            password_hash=hash_password(user_data["password"]),
            role=ROLE_PARTICIPANT,
            phone=user_data.get("phone"),
            cpf=user_data.get("cpf")
        )
        db.add(user)

        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise StateConflict(DUPLICATE_EMAIL_MESSAGE)

        logger.info(f"Usuario {user.id} registrado")
        return user

    @staticmethod
    async def authenticate(db: AsyncSession, email: str, password: str) -> Optional[User]:
        """Usuario si las credenciales son correctas, None si no"""
        user = await AuthService.get_user_by_email(db, email)
        if not user or not verify_password(password, user.password_hash):
            logger.warning(f"Login fallido para {email}")
            return None
        return user

    @staticmethod
    def issue_token(user: User) -> str:
        return create_access_token(data={"sub": str(user.id), "role": user.role})

    @staticmethod
    async def get_user(db: AsyncSession, user_id: str) -> Optional[User]:
        return await db.get(User, parse_reference(user_id, "user_id"))
