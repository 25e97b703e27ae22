from typing import Any, Optional

from pegasus.client.api import ApiClient
from pegasus.client.errores import ApiError, ValidationError
from pegasus.client.notificador import Notificador


class ModuloBase:
    """Dependencias comunes de los módulos: cliente de API y notificador."""

    def __init__(self, api: ApiClient, notificador: Notificador):
        self.api = api
        self.notificador = notificador

    @property
    def sesion(self):
        return self.api.sesion

    def notificar_error(self, error: Exception, defecto: str, titulo: str = "Error") -> str:
        """Muestra el mensaje del servidor si lo hay; si no, el mensaje por defecto."""
        mensaje = defecto
        if isinstance(error, ApiError) and error.message:
            mensaje = error.message
        self.notificador.notificar(titulo, mensaje, "error")
        return mensaje

    def requerido(self, valor: Any, mensaje: str, campo: Optional[str] = None) -> Any:
        """Falla antes de llamar a la API si el campo está vacío."""
        if valor is None or (isinstance(valor, str) and not valor.strip()):
            self.notificador.notificar("Campo Requerido", mensaje, "error")
            raise ValidationError(mensaje, campo)
        return valor.strip() if isinstance(valor, str) else valor
