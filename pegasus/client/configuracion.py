"""Ajustes generales de la empresa y bitácora de notificaciones enviadas."""

import logging
from typing import Any, Dict, List, Optional

from pegasus.client.api import extraer_lista
from pegasus.client.base import ModuloBase
from pegasus.client.errores import ApiError

logger = logging.getLogger(__name__)


class ConfiguracionModulo(ModuloBase):

    def __init__(self, api, notificador):
        super().__init__(api, notificador)
        self.valores: Dict[str, Optional[str]] = {}

    async def cargar(self) -> Dict[str, Optional[str]]:
        try:
            self.valores = await self.api.get("/settings/")
        except ApiError as e:
            self.notificar_error(e, "No se pudieron cargar las configuraciones.")
            raise
        return self.valores

    async def guardar(self, valores: Dict[str, Any]) -> Dict[str, Optional[str]]:
        # Los campos vacíos del formulario se guardan como nulos
        payload = {clave: (None if valor in ("", None) else str(valor)) for clave, valor in valores.items()}
        try:
            self.valores = await self.api.put("/settings/", json=payload)
        except ApiError as e:
            self.notificar_error(e, "No se pudo guardar la configuración.")
            raise
        logger.info(f"Ajustes guardados: {sorted(payload)}")
        self.notificador.notificar("Configuración Guardada", "Configuración guardada correctamente.", "success")
        return self.valores


class NotificacionesModulo(ModuloBase):

    def __init__(self, api, notificador):
        super().__init__(api, notificador)
        self.notificaciones: List[Dict[str, Any]] = []

    @property
    def no_leidas(self) -> int:
        return sum(1 for n in self.notificaciones if not n.get("leida"))

    async def listar(self, solo_no_leidas: bool = False, limit: int = 50) -> List[Dict[str, Any]]:
        try:
            respuesta = await self.api.get(
                "/notificaciones/", params={"soloNoLeidas": str(solo_no_leidas).lower(), "limit": limit}
            )
        except ApiError as e:
            self.notificar_error(e, "No se pudieron cargar las notificaciones.")
            raise
        self.notificaciones = extraer_lista(respuesta, "notificaciones")
        return self.notificaciones

    async def marcar_leida(self, notificacion_id: int) -> Dict[str, Any]:
        actualizada = await self.api.patch(f"/notificaciones/{notificacion_id}/leida")
        self.notificaciones = [
            actualizada if n.get("id") == notificacion_id else n for n in self.notificaciones
        ]
        return actualizada

    async def marcar_todas_leidas(self) -> int:
        respuesta = await self.api.patch("/notificaciones/marcar-todas-leidas")
        for n in self.notificaciones:
            n["leida"] = True
        self.notificador.notificar("Notificaciones", "Todas las notificaciones marcadas como leídas.", "success")
        return respuesta.get("actualizadas", 0)
