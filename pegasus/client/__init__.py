# pegasus/client/__init__.py
# Cliente asíncrono de la API: sesión, módulos por funcionalidad y aplicación.

from .errores import (
    ApiError, ApiTimeoutError, ApiConnectionError, AuthenticationError,
    ConflictError, AccesoDenegado, ValidationError, ReporteNoDisponible,
)
from .sesion import SesionContexto
from .api import ApiClient
from .notificador import Notificador, RegistroNotificaciones
from .render import Renderizador, ArchivoExportado
from .generaciones import ContadorGeneraciones
from .shell import AplicacionPegasus
