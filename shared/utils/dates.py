"""Utilidades de fechas (UTC sin timezone, como se guarda en la BD)"""
from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Hora actual en UTC sin tzinfo"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_utc_naive(dt: Optional[datetime]) -> Optional[datetime]:
    """Normalizar un datetime recibido a UTC sin tzinfo"""
    if dt is None:
        return None
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    return dt
