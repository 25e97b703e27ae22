from typing import Any, Dict, List, Optional

from pegasus.client.api import extraer_lista
from pegasus.client.base import ModuloBase
from pegasus.client.errores import ApiError, ConflictError, ValidationError
from pegasus.core.formato import a_decimal


class ServiciosModulo(ModuloBase):
    """Catálogo de servicios."""

    def __init__(self, api, notificador):
        super().__init__(api, notificador)
        self.servicios: List[Dict[str, Any]] = []

    async def listar(self, busqueda: Optional[str] = None) -> List[Dict[str, Any]]:
        try:
            respuesta = await self.api.get("/servicios/", params={"search": busqueda or None})
        except ApiError as e:
            self.notificar_error(e, "No se pudieron cargar los servicios.")
            raise
        self.servicios = extraer_lista(respuesta, "servicios")
        return self.servicios

    async def obtener(self, servicio_id: int) -> Dict[str, Any]:
        return await self.api.get(f"/servicios/{servicio_id}")

    async def estadisticas(self, servicio_id: int) -> Dict[str, Any]:
        try:
            return await self.api.get(f"/servicios/{servicio_id}/estadisticas")
        except ApiError as e:
            self.notificar_error(e, "No se pudieron cargar las estadísticas del servicio.")
            raise

    def validar(self, datos: Dict[str, Any]) -> Dict[str, Any]:
        payload = dict(datos)
        payload["nombre_servicio"] = self.requerido(
            datos.get("nombre_servicio"), "El nombre del servicio es obligatorio.", "nombre_servicio"
        )
        if payload.get("precio_base") not in (None, ""):
            precio = a_decimal(payload["precio_base"])
            if precio is None or precio < 0:
                mensaje = "El precio base debe ser un número mayor o igual a cero."
                self.notificador.notificar("Error", mensaje, "error")
                raise ValidationError(mensaje, "precio_base")
            payload["precio_base"] = float(precio)
        else:
            payload.pop("precio_base", None)
        return payload

    async def guardar(self, datos: Dict[str, Any], servicio_id: Optional[int] = None) -> Dict[str, Any]:
        payload = self.validar(datos)
        try:
            if servicio_id:
                resultado = await self.api.put(f"/servicios/{servicio_id}", json=payload)
                accion = "actualizado"
            else:
                resultado = await self.api.post("/servicios/", json=payload)
                accion = "creado"
        except ApiError as e:
            self.notificar_error(e, "No se pudo guardar el servicio.")
            raise
        self.notificador.notificar(
            "Éxito", f'Servicio "{resultado.get("nombre_servicio")}" {accion} correctamente.', "success"
        )
        return resultado

    async def eliminar(self, servicio_id: int) -> None:
        try:
            await self.api.delete(f"/servicios/{servicio_id}")
        except ConflictError as e:
            self.notificador.notificar(
                "Error al Eliminar",
                e.message or "No se puede eliminar el servicio porque está asociado a cobros.",
                "error",
            )
            raise
        except ApiError as e:
            self.notificar_error(e, "No se pudo eliminar el servicio.", titulo="Error al Eliminar")
            raise
        self.notificador.notificar("Servicio Eliminado", "El servicio ha sido eliminado correctamente.", "success")
