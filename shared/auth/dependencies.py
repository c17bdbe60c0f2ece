"""Dependencies de autenticación para FastAPI

El usuario actual se resuelve en cada request a partir del token y se pasa
explícitamente a los servicios como un dict con user_id, email, role y name.
"""
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional, Dict
from uuid import UUID

from shared.auth.jwt_handler import decode_token
from shared.database.models import User, ROLE_ADMIN
from shared.database.session import get_db


security = HTTPBearer(auto_error=False)


async def _resolve_user(db: AsyncSession, token: str) -> Optional[Dict]:
    payload = decode_token(token)
    if payload is None:
        return None

    user_id = payload.get('sub')
    try:
        user_uuid = UUID(str(user_id))
    except ValueError:
        return None

    # El rol se lee de la BD: un cambio de rol aplica sin re-login
    result = await db.execute(select(User).where(User.id == user_uuid))
    user = result.scalar_one_or_none()
    if user is None:
        return None

    return {
        'user_id': str(user.id),
        'email': user.email,
        'role': user.role,
        'name': user.name,
    }


async def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> Dict:
    '''Obtener usuario actual desde token JWT'''
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail='No autenticado',
            headers={'WWW-Authenticate': 'Bearer'},
        )

    current_user = await _resolve_user(db, credentials.credentials)
    if current_user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail='Token inválido o expirado',
            headers={'WWW-Authenticate': 'Bearer'},
        )
    return current_user


async def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: AsyncSession = Depends(get_db)
) -> Optional[Dict]:
    '''Obtener usuario opcional (para endpoints públicos)'''
    if credentials is None:
        return None
    return await _resolve_user(db, credentials.credentials)


async def get_current_admin(
    current_user: Dict = Depends(get_current_user)
) -> Dict:
    '''Verificar que el usuario sea admin'''
    if current_user.get('role') != ROLE_ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail='Se requieren permisos de administrador'
        )
    return current_user
