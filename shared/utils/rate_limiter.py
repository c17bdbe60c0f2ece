"""
Rate limiting usando slowapi.
Las solicitudes autenticadas se limitan por usuario; las anónimas por IP.
"""
from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request, Response
from starlette.responses import JSONResponse
import logging

from shared.auth.jwt_handler import decode_token
from shared.core.config import settings

logger = logging.getLogger(__name__)


def get_real_client_ip(request: Request) -> str:
    """IP del cliente, respetando X-Forwarded-For / X-Real-IP del proxy"""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return request.headers.get("X-Real-IP") or get_remote_address(request)


def get_user_identifier(request: Request) -> str:
    """Clave de rate limiting: `user:<id>` con token válido, si no `ip:<ip>`"""
    auth_header = request.headers.get("Authorization", "")
    if auth_header.startswith("Bearer "):
        payload = decode_token(auth_header[len("Bearer "):])
        if payload and payload.get("sub"):
            return f"user:{payload['sub']}"
    return f"ip:{get_real_client_ip(request)}"


limiter = Limiter(
    key_func=get_user_identifier,
    storage_uri=settings.RATE_LIMIT_STORAGE_URI,
    strategy="fixed-window",
    headers_enabled=False,  # Deshabilitado para compatibilidad con response_model de FastAPI
    enabled=settings.RATE_LIMIT_ENABLED,
)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> Response:
    """Responde 429 con el mismo formato `{"error": ...}` del resto de la API"""
    limit = exc.detail or "desconocido"
    logger.warning(
        f"Rate limit excedido - clave: {get_user_identifier(request)}, "
        f"ruta: {request.url.path}, límite: {limit}"
    )
    return JSONResponse(
        status_code=429,
        content={
            "error": "rate_limit_exceeded",
            "detail": "Demasiadas solicitudes. Espera un momento antes de reintentar.",
            "limit": limit,
        },
        headers={"Retry-After": "60"}
    )


# Límites por tipo de operación
RATE_LIMITS = {
    # Pagos simulados: más restrictivo
    "payment": "10/minute",
    # Login / registro: evitar fuerza bruta
    "auth": "20/minute",
    # Inscripciones y cancelaciones
    "inscription": "30/minute",
    # Check-in en la puerta: muchos escaneos seguidos
    "checkin": "120/minute",
}
