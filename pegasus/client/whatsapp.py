"""
Conexión con WhatsApp y envío de recordatorios desde el cliente.

El backend es quien habla con la API de Meta; aquí solo se arman los
mensajes con las plantillas y se ordenan los envíos.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

from pegasus.client.base import ModuloBase
from pegasus.client.errores import ApiError, ValidationError, WhatsAppDesconectado
from pegasus.config import settings
from pegasus.core.envio_masivo import ResumenEnvio, enviar_recordatorios, telefono_de
from pegasus.core.plantillas import mensaje_para_cobro
from pegasus.core.tipos import TipoMensaje

logger = logging.getLogger(__name__)

ESTADO_CONECTADO = "connected"


class WhatsAppModulo(ModuloBase):

    # --- Estado y conexión ---

    async def estado(self) -> Dict[str, Any]:
        try:
            return await self.api.get("/settings/whatsapp/status")
        except ApiError as e:
            self.notificar_error(e, "No se pudo obtener el estado de WhatsApp.")
            raise

    async def esta_conectado(self) -> bool:
        estado = await self.api.get("/settings/whatsapp/status")
        return estado.get("status") == ESTADO_CONECTADO

    async def conectar(self, phone_number_id: str, access_token: str,
                       api_url: Optional[str] = None) -> Dict[str, Any]:
        if not (phone_number_id or "").strip() or not (access_token or "").strip():
            mensaje = "Debe proporcionar Phone Number ID y Access Token"
            self.notificador.notificar("Error", mensaje, "error")
            raise ValidationError(mensaje)

        payload = {"phoneNumberId": phone_number_id.strip(), "accessToken": access_token.strip()}
        if api_url:
            payload["apiUrl"] = api_url
        try:
            respuesta = await self.api.post("/settings/whatsapp/connect", json=payload)
        except ApiError as e:
            self.notificar_error(e, "No se pudo conectar con WhatsApp.", titulo="Error de Conexión")
            raise
        self.notificador.notificar(
            "Conexión Exitosa", respuesta.get("message") or "WhatsApp conectado correctamente.", "success"
        )
        return respuesta

    async def desconectar(self) -> Dict[str, Any]:
        try:
            respuesta = await self.api.post("/settings/whatsapp/disconnect")
        except ApiError as e:
            self.notificar_error(e, "No se pudo desconectar de WhatsApp.")
            raise
        self.notificador.notificar("Desconectado", "WhatsApp desconectado correctamente.", "success")
        return respuesta

    # --- Mensajes individuales ---

    def previsualizar(self, cobro: Dict[str, Any], tipo: TipoMensaje = TipoMensaje.RECORDATORIO) -> str:
        """Texto que se enviaría para el cobro; el operador puede editarlo antes de enviar."""
        return mensaje_para_cobro(cobro, tipo)

    async def enviar_mensaje(self, cliente_id: int, mensaje: str,
                             tipo: TipoMensaje = TipoMensaje.PERSONALIZADO,
                             cobro_id: Optional[int] = None) -> Dict[str, Any]:
        mensaje = self.requerido(mensaje, "El mensaje no puede estar vacío.", "mensaje")
        payload = {"clienteId": cliente_id, "mensaje": mensaje, "tipo": TipoMensaje(tipo).value}
        if cobro_id is not None:
            payload["cobroId"] = cobro_id
        try:
            respuesta = await self.api.post("/settings/whatsapp/notify", json=payload)
        except ApiError as e:
            self.notificar_error(e, "Error al enviar mensaje.")
            raise
        self.notificador.notificar("Mensaje Enviado", "Notificación enviada correctamente.", "success")
        return respuesta

    async def enviar_recordatorio(self, cobro_id: int,
                                  tipo: TipoMensaje = TipoMensaje.RECORDATORIO,
                                  mensaje: Optional[str] = None) -> Optional[Dict[str, Any]]:
        """
        Recordatorio (o recibo) de un cobro. Devuelve None sin enviar nada si
        WhatsApp no está conectado o el cliente no tiene teléfono.
        """
        if not await self.esta_conectado():
            self.notificador.notificar(
                "WhatsApp No Conectado", "Debe conectar WhatsApp antes de enviar mensajes.", "warning"
            )
            return None

        cobro = await self.api.get(f"/cobros/{cobro_id}")
        if telefono_de(cobro) is None:
            self.notificador.notificar(
                "Sin Teléfono", "El cliente no tiene número de teléfono registrado.", "warning"
            )
            return None

        texto = mensaje if mensaje is not None else self.previsualizar(cobro, tipo)
        return await self.enviar_mensaje(cobro["cliente_id"], texto, tipo, cobro_id=cobro["id"])

    # --- Envío masivo ---

    async def _notificar_cobro(self, cobro: Dict[str, Any], mensaje: str):
        return await self.api.post("/settings/whatsapp/notify", json={
            "clienteId": cobro["cliente_id"],
            "cobroId": cobro["id"],
            "mensaje": mensaje,
            "tipo": TipoMensaje.RECORDATORIO.value,
        })

    async def _obtener_cobro(self, cobro_id) -> Dict[str, Any]:
        return await self.api.get(f"/cobros/{cobro_id}")

    async def enviar_recordatorios(self, cobro_ids: Sequence[int]) -> ResumenEnvio:
        """
        Un recordatorio por cobro. Si WhatsApp está desconectado el lote entero
        se cancela antes de procesar ningún cobro.
        """
        ids: List[int] = list(cobro_ids)
        if ids:
            self.notificador.notificar("Procesando", f"Enviando {len(ids)} recordatorios...", "info")
        try:
            resumen = await enviar_recordatorios(
                ids,
                obtener_cobro=self._obtener_cobro,
                verificar_conexion=self.esta_conectado,
                enviar=self._notificar_cobro,
                concurrencia=settings.bulk_send_concurrency,
            )
        except WhatsAppDesconectado as e:
            logger.warning(f"Envío de {len(ids)} recordatorios cancelado: {e.message}")
            self.notificador.notificar("WhatsApp No Conectado", e.message, "warning")
            return ResumenEnvio(abortado=True)
        except ApiError as e:
            # La verificación de conexión falló antes de empezar
            self.notificar_error(e, "Error al enviar recordatorios.")
            return ResumenEnvio(abortado=True)

        if resumen.intentados:
            titulo = "Error" if resumen.clasificacion == "error" else "Recordatorios Enviados"
            self.notificador.notificar(titulo, resumen.mensaje, resumen.clasificacion)
        return resumen
