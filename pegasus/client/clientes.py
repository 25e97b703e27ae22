import logging
from typing import Any, Dict, List, Optional

from pegasus.client.api import extraer_lista
from pegasus.client.base import ModuloBase
from pegasus.client.errores import ApiError, ConflictError, ValidationError
from pegasus.client.generaciones import ContadorGeneraciones, Debouncer

logger = logging.getLogger(__name__)

ESTADOS_CLIENTE = ("Activo", "Inactivo", "Pendiente", "Atrasado")


class ClientesModulo(ModuloBase):
    """Listado filtrable, alta, edición y baja de clientes."""

    def __init__(self, api, notificador, espera_busqueda: float = 0.3):
        super().__init__(api, notificador)
        self.generaciones = ContadorGeneraciones()
        self.debouncer = Debouncer(espera_busqueda)
        self.clientes: List[Dict[str, Any]] = []
        self.meta: Dict[str, Any] = {}
        self.filtros: Dict[str, Any] = {}

    # --- 1. LISTAR ---
    async def listar(self, nombre: Optional[str] = None, estado: Optional[str] = None,
                     ruc_dni: Optional[str] = None, page: int = 1, limit: int = 50) -> Optional[List[Dict[str, Any]]]:
        """
        Devuelve la lista aplicada, o None si otra búsqueda más reciente la
        reemplazó mientras esperaba la respuesta.
        """
        generacion = self.generaciones.siguiente()
        params = {
            "nombre": nombre or None,
            "estado": None if estado in (None, "", "all") else estado,
            "ruc_dni": ruc_dni or None,
            "page": page,
            "limit": limit,
        }
        try:
            respuesta = await self.api.get("/clientes/", params=params)
        except ApiError as e:
            if self.generaciones.es_vigente(generacion):
                self.notificar_error(e, "No se pudieron cargar los clientes.")
            raise

        if not self.generaciones.es_vigente(generacion):
            logger.debug(f"Respuesta de clientes descartada (generación {generacion})")
            return None

        self.filtros = {k: v for k, v in params.items() if v is not None}
        self.clientes = extraer_lista(respuesta, "clientes")
        self.meta = respuesta.get("meta", {}) if isinstance(respuesta, dict) else {}
        return self.clientes

    async def buscar(self, texto: str):
        """Búsqueda por nombre mientras se escribe; solo se consulta la última."""
        return await self.debouncer(self.listar, nombre=texto, estado=self.filtros.get("estado"))

    # --- 2. DETALLE ---
    async def obtener(self, cliente_id: int) -> Dict[str, Any]:
        return await self.api.get(f"/clientes/{cliente_id}")

    async def servicios(self, cliente_id: int) -> List[Dict[str, Any]]:
        return extraer_lista(await self.api.get(f"/clientes/{cliente_id}/servicios"), "servicios")

    async def historial(self, cliente_id: int) -> List[Dict[str, Any]]:
        try:
            respuesta = await self.api.get("/cobros/", params={"clienteId": cliente_id})
        except ApiError as e:
            self.notificar_error(e, "No se pudo cargar el historial del cliente.")
            raise
        return extraer_lista(respuesta, "cobros")

    # --- 3. GUARDAR ---
    def validar(self, datos: Dict[str, Any]) -> Dict[str, Any]:
        limpio = {k: (v.strip() if isinstance(v, str) else v) for k, v in datos.items()}
        limpio["nombre_cliente"] = self.requerido(
            datos.get("nombre_cliente"), "El nombre del cliente es obligatorio.", "nombre_cliente"
        )
        limpio["ruc_dni"] = self.requerido(datos.get("ruc_dni"), "El RUC/DNI es obligatorio.", "ruc_dni")
        estado = limpio.get("estado_cliente")
        if estado and estado not in ESTADOS_CLIENTE:
            mensaje = f"Estado de cliente inválido: {estado}"
            self.notificador.notificar("Error", mensaje, "error")
            raise ValidationError(mensaje, "estado_cliente")
        for campo in ("telefono", "correo_electronico", "direccion"):
            if limpio.get(campo) == "":
                limpio[campo] = None
        return limpio

    async def guardar(self, datos: Dict[str, Any], cliente_id: Optional[int] = None) -> Dict[str, Any]:
        payload = self.validar(datos)
        try:
            if cliente_id:
                resultado = await self.api.put(f"/clientes/{cliente_id}", json=payload)
                accion = "actualizado"
            else:
                resultado = await self.api.post("/clientes/", json=payload)
                accion = "creado"
        except ApiError as e:
            self.notificar_error(e, "No se pudo guardar el cliente.")
            raise
        self.notificador.notificar(
            "Éxito", f'Cliente "{resultado.get("nombre_cliente")}" {accion} correctamente.', "success"
        )
        return resultado

    # --- 4. ELIMINAR ---
    async def eliminar(self, cliente_id: int) -> None:
        try:
            await self.api.delete(f"/clientes/{cliente_id}")
        except ConflictError as e:
            self.notificador.notificar(
                "Error al Eliminar",
                e.message or "No se puede eliminar el cliente porque tiene cobros asociados.",
                "error",
            )
            raise
        except ApiError as e:
            self.notificar_error(e, "No se pudo eliminar el cliente.", titulo="Error al Eliminar")
            raise
        self.notificador.notificar("Cliente Eliminado", "Cliente eliminado correctamente.", "success")
