"""Conversión de IDs recibidos como string"""
from uuid import UUID

from shared.utils.exceptions import NotFound, ValidationFailed


def parse_id(value, entity: str = "Recurso") -> UUID:
    """ID de ruta: un UUID mal formado equivale a un recurso inexistente"""
    try:
        return UUID(str(value))
    except (ValueError, TypeError):
        raise NotFound(f"{entity} no encontrado")


def parse_reference(value, field: str) -> UUID:
    """ID enviado en body/query: un UUID mal formado es un campo inválido"""
    try:
        return UUID(str(value))
    except (ValueError, TypeError):
        raise ValidationFailed(f"{field} inválido")
