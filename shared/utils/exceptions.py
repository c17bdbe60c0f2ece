"""Errores de negocio lanzados por los servicios

Las rutas los capturan y los convierten en HTTPException con el status
correspondiente. Todos heredan de ValueError.
"""
from fastapi import HTTPException


class ServiceError(ValueError):
    """Error de negocio genérico"""
    status_code = 400


class ValidationFailed(ServiceError):
    """Campos faltantes o inválidos"""
    status_code = 400


class StateConflict(ServiceError):
    """La operación no es posible en el estado actual (evento lleno, ya inscrito, etc.)"""
    status_code = 400


class PaymentDeclined(ServiceError):
    """Pago rechazado por el simulador"""
    status_code = 402


class PermissionDenied(ServiceError):
    """Rol insuficiente o el recurso no pertenece al usuario"""
    status_code = 403


class NotFound(ServiceError):
    """Entidad inexistente"""
    status_code = 404


def to_http_exception(error: ServiceError) -> HTTPException:
    """Convertir un error de servicio en HTTPException"""
    return HTTPException(status_code=error.status_code, detail=str(error))
