"""Conexión a la base de datos"""
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool
from sqlalchemy import event
from typing import AsyncGenerator, Optional
import logging

from shared.core.config import settings

logger = logging.getLogger(__name__)

# Base para modelos SQLAlchemy
Base = declarative_base()

# Engine y session factory
engine = None
async_session_maker = None


def _normalize_url(database_url: str) -> str:
    """Convertir la URL al driver async correspondiente"""
    if database_url.startswith("postgres://"):
        database_url = database_url.replace("postgres://", "postgresql+asyncpg://", 1)
    elif database_url.startswith("postgresql://"):
        database_url = database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    elif database_url.startswith("postgresql+psycopg://"):
        database_url = database_url.replace("postgresql+psycopg://", "postgresql+asyncpg://", 1)
    elif database_url.startswith("sqlite://"):
        database_url = database_url.replace("sqlite://", "sqlite+aiosqlite://", 1)
    return database_url


async def init_db(database_url: Optional[str] = None):
    """Inicializar conexión a la base de datos"""
    global engine, async_session_maker

    if engine is not None:
        logger.warning("Database engine already initialized, skipping...")
        return

    database_url = _normalize_url(database_url or settings.DATABASE_URL)
    logger.info(f"Initializing database connection to: {database_url.split('@')[1] if '@' in database_url else database_url}")

    engine_kwargs = {"echo": settings.APP_DEBUG}

    if database_url.startswith("sqlite"):
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in database_url or database_url.endswith("://"):
            # Una sola conexión compartida, si no cada sesión vería una base vacía
            engine_kwargs["poolclass"] = StaticPool
    else:
        engine_kwargs.update({
            "pool_pre_ping": True,  # Verificar conexiones antes de usar
            "pool_recycle": 300,
            "pool_timeout": 30,
            "pool_size": settings.DATABASE_POOL_SIZE,
            "max_overflow": settings.DATABASE_MAX_OVERFLOW,
        })
        logger.info(f"Pool config: size={settings.DATABASE_POOL_SIZE}, overflow={settings.DATABASE_MAX_OVERFLOW}")

    engine = create_async_engine(database_url, **engine_kwargs)

    if database_url.startswith("sqlite"):
        # SQLite no valida foreign keys si no se activa por conexión
        @event.listens_for(engine.sync_engine, "connect")
        def _enable_sqlite_fks(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    async_session_maker = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False
    )

    logger.info("Database engine initialized successfully")


async def create_schema():
    """Crear tablas que no existan (desarrollo y tests)"""
    # Registrar los modelos en Base.metadata
    import shared.database.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema ensured")


async def drop_schema():
    """Eliminar todas las tablas"""
    import shared.database.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency para obtener sesión de base de datos"""
    if async_session_maker is None:
        logger.error("Database not initialized! Call init_db() first.")
        raise RuntimeError("Database not initialized. Please check application startup.")

    async with async_session_maker() as session:
        yield session


async def close_db():
    """Cerrar conexiones de la base de datos"""
    global engine, async_session_maker
    if engine:
        await engine.dispose()
        engine = None
        async_session_maker = None
        logger.info("Database connections closed")
