"""Errores normalizados del cliente de la API."""

from typing import Any, Optional

from pegasus.core.envio_masivo import WhatsAppDesconectado


class ApiError(Exception):
    """Todo fallo de la API llega al código de los módulos como {message, status, data}."""

    def __init__(self, message: str, status: Optional[int] = None, data: Any = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.data = data

    def to_dict(self):
        return {"message": self.message, "status": self.status, "data": self.data}


class ApiTimeoutError(ApiError):
    def __init__(self, message: str = "Tiempo de espera agotado"):
        super().__init__(message, status=None)


class ApiConnectionError(ApiError):
    pass


class AuthenticationError(ApiError):
    """Token ausente o rechazado (401); dispara el cierre forzado de sesión."""


class ConflictError(ApiError):
    """Regla de negocio violada (409): el mensaje del servidor es el que se muestra."""


class AccesoDenegado(ApiError):
    """El rol de la sesión no permite usar el módulo."""


class ValidationError(Exception):
    """Dato de formulario inválido; se detecta antes de llamar a la API."""

    def __init__(self, message: str, campo: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.campo = campo


class ReporteNoDisponible(Exception):
    def __init__(self, message: str = "No hay datos de reporte para exportar. Genere un reporte primero."):
        super().__init__(message)
        self.message = message


__all__ = [
    "ApiError", "ApiTimeoutError", "ApiConnectionError", "AuthenticationError",
    "ConflictError", "AccesoDenegado", "ValidationError", "ReporteNoDisponible",
    "WhatsAppDesconectado",
]
