"""API principal - Punto de entrada de la aplicación"""
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy import text
import logging
from contextlib import asynccontextmanager

from shared.core.config import settings
from shared.database import connection
from shared.database.connection import init_db, close_db, create_schema
from shared.utils.rate_limiter import limiter, rate_limit_exceeded_handler
from shared.utils.error_handlers import (
    http_exception_handler,
    validation_exception_handler,
    unhandled_exception_handler
)

# Configurar logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifecycle events de la aplicación"""
    # Startup
    logger.info("Iniciando aplicación...")
    await init_db()
    if settings.DB_AUTO_CREATE:
        await create_schema()
    logger.info("Aplicación iniciada")
    yield
    # Shutdown
    logger.info("Cerrando aplicación...")
    await close_db()
    logger.info("Aplicación cerrada")


# Crear aplicación FastAPI
app = FastAPI(
    title="ColaAi API",
    description="Backend API para descubrir eventos, inscribirse y administrar la plataforma",
    version="1.0.0",
    lifespan=lifespan
)

# En desarrollo, permitir todos los orígenes para facilitar testing
if settings.APP_ENV == "development":
    logger.info("Modo desarrollo: CORS configurado para permitir todos los orígenes")
    allow_origins = ["*"]
    allow_credentials = False  # No se puede usar credentials con allow_origins=["*"]
else:
    allow_origins = settings.cors_origins
    allow_credentials = True
    logger.info(f"CORS origins configurados: {allow_origins}")

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=allow_credentials,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS", "PATCH", "HEAD"],
    allow_headers=["*"],
    max_age=3600,  # Cache preflight requests por 1 hora
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

# Todas las respuestas de error como {"error": ...}
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# Incluir routers de cada servicio
from services.auth.routes.auth import router as auth_router
from services.event_management.routes.events import router as events_router
from services.event_management.routes.categories import router as categories_router
from services.inscriptions.routes.inscriptions import router as inscriptions_router
from services.payments.routes.payments import router as payments_router
from services.ticket_validation.routes.validation import router as validation_router
from services.admin.routes.admin import router as admin_router

app.include_router(auth_router, prefix="/api/v1/auth", tags=["auth"])
app.include_router(events_router, prefix="/api/v1/events", tags=["events"])
app.include_router(categories_router, prefix="/api/v1/categories", tags=["categories"])
app.include_router(inscriptions_router, prefix="/api/v1/inscriptions", tags=["inscriptions"])
app.include_router(payments_router, prefix="/api/v1/payments", tags=["payments"])
app.include_router(validation_router, prefix="/api/v1/tickets", tags=["tickets"])
app.include_router(admin_router, prefix="/api/v1/admin", tags=["admin"])


@app.get("/health")
async def health():
    """Health check endpoint"""
    return {"status": "ok", "service": "colaai-api"}


@app.get("/ready")
async def ready():
    """Ready check endpoint - verifica la conexión a la base de datos"""
    try:
        async with connection.async_session_maker() as session:
            await session.execute(text("SELECT 1"))
        return {"status": "ready", "database": "connected"}
    except Exception as e:
        logger.error(f"Ready check failed: {e}")
        return JSONResponse(status_code=503, content={"status": "not ready", "error": str(e)})


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.APP_DEBUG
    )
