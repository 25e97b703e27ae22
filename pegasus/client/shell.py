"""
PEGASUS - Aplicación cliente

Abre y cierra la sesión, arma los módulos con la sesión explícita y decide
qué módulos ve cada rol. Un 401 o la falta de token en cualquier petición
cierra la sesión de forma forzada.
"""

import asyncio
import logging
from typing import Dict, List, Optional

import httpx

from pegasus.client.api import ApiClient
from pegasus.client.clientes import ClientesModulo
from pegasus.client.cobros import CobrosModulo
from pegasus.client.configuracion import ConfiguracionModulo, NotificacionesModulo
from pegasus.client.dashboard import DashboardModulo
from pegasus.client.errores import AccesoDenegado, ApiError, AuthenticationError, ValidationError
from pegasus.client.notificador import Notificador, RegistroNotificaciones
from pegasus.client.render import Renderizador
from pegasus.client.reportes import ReportesModulo
from pegasus.client.servicios import ServiciosModulo
from pegasus.client.sesion import SesionContexto
from pegasus.client.usuarios import UsuariosModulo
from pegasus.client.whatsapp import WhatsAppModulo

logger = logging.getLogger(__name__)

MODULOS_GENERALES = ["dashboard", "clientes", "cobros", "servicios", "reportes", "whatsapp", "notificaciones"]
MODULOS_ADMINISTRADOR = ["usuarios", "configuracion"]


class AplicacionPegasus:

    def __init__(self, base_url: Optional[str] = None, notificador: Optional[Notificador] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None,
                 logout_delay: Optional[float] = None):
        self.base_url = base_url
        self.notificador = notificador or RegistroNotificaciones()
        self.transport = transport
        self.logout_delay = logout_delay
        self.renderizador = Renderizador()
        self.sesion: Optional[SesionContexto] = None
        self.api: Optional[ApiClient] = None
        self.modulos: Dict[str, object] = {}

    @property
    def autenticado(self) -> bool:
        return self.sesion is not None

    # --- 1. INICIO DE SESIÓN ---
    async def iniciar_sesion(self, username: str, password: str) -> SesionContexto:
        if not (username or "").strip() or not password:
            mensaje = "Por favor, ingresa usuario y contraseña."
            self.notificador.notificar("Campos Requeridos", mensaje, "error")
            raise ValidationError(mensaje)

        async with ApiClient(base_url=self.base_url, transport=self.transport) as anonimo:
            try:
                respuesta = await anonimo.post("/auth/login", json={"username": username.strip(), "password": password})
            except ApiError as e:
                logger.warning(f"Inicio de sesión fallido para '{username}': {e.message}")
                self.notificador.notificar("Error de Inicio de Sesión", e.message, "error")
                raise

        if self.api is not None:
            await self.cerrar_sesion(silencioso=True)

        self.sesion = SesionContexto.desde_login(respuesta)
        self.api = ApiClient(
            sesion=self.sesion,
            base_url=self.base_url,
            al_expirar=self._sesion_expirada,
            logout_delay=self.logout_delay,
            transport=self.transport,
        )
        self.modulos = self._crear_modulos()
        logger.info(f"Sesión iniciada: {self.sesion.username} ({self.sesion.rol})")
        self.notificador.notificar(f"¡Bienvenido {self.sesion.username}!", "Sesión iniciada correctamente", "success")
        return self.sesion

    def _crear_modulos(self) -> Dict[str, object]:
        api, notificador = self.api, self.notificador
        modulos = {
            "dashboard": DashboardModulo(api, notificador),
            "clientes": ClientesModulo(api, notificador),
            "cobros": CobrosModulo(api, notificador, self.renderizador),
            "servicios": ServiciosModulo(api, notificador),
            "reportes": ReportesModulo(api, notificador, self.renderizador),
            "whatsapp": WhatsAppModulo(api, notificador),
            "notificaciones": NotificacionesModulo(api, notificador),
        }
        if self.sesion.es_admin:
            modulos["usuarios"] = UsuariosModulo(api, notificador)
            modulos["configuracion"] = ConfiguracionModulo(api, notificador)
        return modulos

    # --- 2. CIERRE DE SESIÓN ---
    async def cerrar_sesion(self, silencioso: bool = False) -> None:
        if self.api is not None:
            pendiente = self.api.expiracion_pendiente
            if pendiente is not None and not pendiente.done() and pendiente is not asyncio.current_task():
                pendiente.cancel()
            await self.api.close()
        usuario = self.sesion.username if self.sesion else None
        self.api = None
        self.sesion = None
        self.modulos = {}
        if usuario and not silencioso:
            logger.info(f"Sesión cerrada: {usuario}")
            self.notificador.notificar("Sesión Cerrada", "Has cerrado sesión exitosamente.", "info")

    async def _sesion_expirada(self, motivo: str) -> None:
        logger.warning(f"Cierre de sesión forzado: {motivo}")
        self.notificador.notificar(
            "Sesión Expirada", "Tu sesión ha expirado. Por favor, inicia sesión nuevamente.", "error"
        )
        await self.cerrar_sesion(silencioso=True)

    # --- 3. VISIBILIDAD POR ROL ---
    def modulos_visibles(self) -> List[str]:
        if self.sesion is None:
            return []
        if self.sesion.es_admin:
            return MODULOS_GENERALES + MODULOS_ADMINISTRADOR
        return list(MODULOS_GENERALES)

    def modulo(self, nombre: str):
        if self.sesion is None:
            raise AuthenticationError("No autenticado", status=401)
        if nombre not in self.modulos_visibles():
            self.notificador.notificar("Acceso Denegado", "No tienes permisos para esta sección.", "warning")
            raise AccesoDenegado("No tienes permisos para esta sección.", status=403)
        return self.modulos[nombre]
