"""Registro y seguimiento de cobros, incluidos los recibos de pago."""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from pegasus.client.api import extraer_lista
from pegasus.client.base import ModuloBase
from pegasus.client.errores import ApiError, ValidationError
from pegasus.client.generaciones import ContadorGeneraciones
from pegasus.client.render import ArchivoExportado, Renderizador
from pegasus.core.fechas import a_fecha
from pegasus.core.formato import a_decimal

logger = logging.getLogger(__name__)

ESTADO_PAGADO = "Pagado"
ESTADO_ANULADO = "Anulado"


class CobrosModulo(ModuloBase):

    def __init__(self, api, notificador, renderizador: Optional[Renderizador] = None):
        super().__init__(api, notificador)
        self.renderizador = renderizador or Renderizador()
        self.generaciones = ContadorGeneraciones()
        self.cobros: List[Dict[str, Any]] = []
        self.total = 0

    # --- 1. LISTAR ---
    async def listar(self, estado: Optional[str] = None, cliente_id: Optional[int] = None,
                     fecha_inicio: Optional[date] = None, fecha_fin: Optional[date] = None,
                     periodo: Optional[str] = None, page: int = 1, limit: int = 100):
        """Aplica el listado solo si ningún filtro posterior lo reemplazó."""
        generacion = self.generaciones.siguiente()
        params = {
            "estado": None if estado in (None, "", "all") else estado,
            "clienteId": cliente_id,
            "fechaInicio": fecha_inicio.isoformat() if fecha_inicio else None,
            "fechaFin": fecha_fin.isoformat() if fecha_fin else None,
            "periodo": periodo or None,
            "page": page,
            "limit": limit,
        }
        try:
            respuesta = await self.api.get("/cobros/", params=params)
        except ApiError as e:
            if self.generaciones.es_vigente(generacion):
                self.notificar_error(e, "No se pudieron cargar los cobros.")
            raise

        if not self.generaciones.es_vigente(generacion):
            logger.debug(f"Respuesta de cobros descartada (generación {generacion})")
            return None

        self.cobros = extraer_lista(respuesta, "cobros")
        self.total = respuesta.get("total", len(self.cobros)) if isinstance(respuesta, dict) else len(self.cobros)
        return self.cobros

    async def obtener(self, cobro_id: int) -> Dict[str, Any]:
        try:
            return await self.api.get(f"/cobros/{cobro_id}")
        except ApiError as e:
            self.notificar_error(e, "No se pudo cargar el detalle del cobro.")
            raise

    # --- 2. GUARDAR ---
    def validar(self, datos: Dict[str, Any]) -> Dict[str, Any]:
        payload = {k: (None if v == "" else v) for k, v in datos.items()}
        monto = a_decimal(payload.get("monto"))
        emision = a_fecha(payload.get("fecha_emision"))
        vencimiento = a_fecha(payload.get("fecha_vencimiento"))

        if not payload.get("cliente_id") or monto is None or emision is None or vencimiento is None:
            mensaje = "Cliente, Monto, Fechas son obligatorios."
            self.notificador.notificar("Campos Requeridos", mensaje, "error")
            raise ValidationError(mensaje)
        if monto <= 0:
            mensaje = "El monto debe ser mayor a cero."
            self.notificador.notificar("Error", mensaje, "error")
            raise ValidationError(mensaje, "monto")
        if vencimiento < emision:
            mensaje = "La fecha de vencimiento no puede ser anterior a la de emisión."
            self.notificador.notificar("Error", mensaje, "error")
            raise ValidationError(mensaje, "fecha_vencimiento")

        payload["monto"] = float(monto)
        payload["fecha_emision"] = emision.isoformat()
        payload["fecha_vencimiento"] = vencimiento.isoformat()
        if payload.get("fecha_pago") is not None:
            pago = a_fecha(payload["fecha_pago"])
            payload["fecha_pago"] = pago.isoformat() if pago else None
        return payload

    async def guardar(self, datos: Dict[str, Any], cobro_id: Optional[int] = None) -> Dict[str, Any]:
        payload = self.validar(datos)
        try:
            if cobro_id:
                resultado = await self.api.put(f"/cobros/{cobro_id}", json=payload)
                accion = "actualizado"
            else:
                resultado = await self.api.post("/cobros/", json=payload)
                accion = "registrado"
        except ApiError as e:
            self.notificar_error(e, "No se pudo guardar el cobro.")
            raise
        self.notificador.notificar("Éxito", f"Cobro ID {resultado.get('id')} {accion} correctamente.", "success")
        return resultado

    # --- 3. CAMBIOS DE ESTADO ---
    async def _cambiar_estado(self, cobro_id: int, cambios: Dict[str, Any], exito: str) -> Dict[str, Any]:
        # El backend decide el estado final; se refleja lo que devuelve
        try:
            resultado = await self.api.put(f"/cobros/{cobro_id}", json=cambios)
        except ApiError as e:
            self.notificar_error(e, "Error al actualizar el cobro.")
            raise
        self.notificador.notificar("Cobro Actualizado", exito, "success")
        return resultado

    async def marcar_pagado(self, cobro_id: int, fecha_pago: Optional[date] = None) -> Dict[str, Any]:
        return await self._cambiar_estado(
            cobro_id,
            {"estado_cobro": ESTADO_PAGADO, "fecha_pago": (fecha_pago or date.today()).isoformat()},
            "Cobro marcado como pagado correctamente.",
        )

    async def anular(self, cobro_id: int) -> Dict[str, Any]:
        return await self._cambiar_estado(
            cobro_id, {"estado_cobro": ESTADO_ANULADO}, "Cobro anulado correctamente."
        )

    # --- 4. ELIMINAR ---
    async def eliminar(self, cobro_id: int) -> None:
        try:
            await self.api.delete(f"/cobros/{cobro_id}")
        except ApiError as e:
            self.notificar_error(e, "No se pudo eliminar el cobro.", titulo="Error al Eliminar")
            raise
        self.notificador.notificar("Cobro Eliminado", "Cobro eliminado correctamente.", "success")

    # --- 5. RECIBO ---
    async def exportar_recibo(self, cobro_id: int, marcar_pagado: bool = False) -> ArchivoExportado:
        """
        Recibo HTML de un cobro pagado. Con marcar_pagado=True un cobro aún
        no pagado se marca primero; si no, se rechaza.
        """
        cobro = await self.obtener(cobro_id)
        if cobro.get("estado_cobro") != ESTADO_PAGADO:
            if not marcar_pagado:
                mensaje = "Este cobro no está marcado como pagado."
                self.notificador.notificar("Error", mensaje, "error")
                raise ValidationError(mensaje, "estado_cobro")
            cobro = await self.marcar_pagado(cobro_id)

        try:
            empresa = await self.api.get("/settings/")
        except ApiError as e:
            logger.warning(f"Recibo {cobro_id} sin datos de empresa: {e.message}")
            empresa = {}

        servicio = (cobro.get("servicio") or {}).get("nombre_servicio") \
            or cobro.get("descripcion_servicio_personalizado") or "No especificado"
        html = self.renderizador.render("recibo.html", {
            "cobro": cobro,
            "cliente": cobro.get("cliente") or {},
            "servicio": servicio,
            "empresa_nombre": empresa.get("empresa_nombre"),
            "empresa_direccion": empresa.get("empresa_direccion"),
            "empresa_telefono": empresa.get("empresa_telefono"),
            "empresa_correo": empresa.get("empresa_correo"),
        })
        self.notificador.notificar("Recibo Descargado", "Recibo descargado correctamente.", "success")
        return ArchivoExportado(nombre=f"recibo-pegasus-{cobro_id}.html", contenido=html)
