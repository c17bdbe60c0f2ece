"""Rutas de autenticación"""
from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Dict

from shared.database.session import get_db
from shared.auth.dependencies import get_current_user
from shared.utils.exceptions import ServiceError, to_http_exception
from shared.utils.rate_limiter import limiter, RATE_LIMITS
from services.auth.models.auth import RegisterRequest, LoginRequest, UserResponse, TokenResponse
from services.auth.services.auth_service import AuthService


router = APIRouter()


def user_response(user) -> UserResponse:
    return UserResponse(
        id=str(user.id),
        name=user.name,
        email=user.email,
        role=user.role,
        phone=user.phone,
        cpf=user.cpf,
        created_at=user.created_at
    )


@router.post("/register", response_model=TokenResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit(RATE_LIMITS["auth"])
async def register(
    request: Request,  # Necesario para rate limiter
    user_data: RegisterRequest,
    db: AsyncSession = Depends(get_db)
):
    """Registrar participante y devolver su token de acceso"""
    try:
        user = await AuthService.register(db, user_data.model_dump())
    except ServiceError as e:
        raise to_http_exception(e)

    return TokenResponse(access_token=AuthService.issue_token(user), user=user_response(user))


@router.post("/login", response_model=TokenResponse)
@limiter.limit(RATE_LIMITS["auth"])
async def login(
    request: Request,  # Necesario para rate limiter
    credentials: LoginRequest,
    db: AsyncSession = Depends(get_db)
):
    """Login con email y contraseña"""
    user = await AuthService.authenticate(db, credentials.email, credentials.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Email o contraseña incorrectos",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return TokenResponse(access_token=AuthService.issue_token(user), user=user_response(user))


@router.get("/me", response_model=UserResponse)
async def read_current_user(
    db: AsyncSession = Depends(get_db),
    current_user: Dict = Depends(get_current_user)
):
    """Datos del usuario autenticado"""
    user = await AuthService.get_user(db, current_user["user_id"])
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Usuario no encontrado")

    return user_response(user)
