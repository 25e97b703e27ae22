"""
Envío masivo de recordatorios.

Antes de tocar un solo cobro se verifica que WhatsApp esté conectado; si no
lo está, el lote completo se aborta. Cada cobro se procesa de forma
independiente: un cliente sin teléfono o un error de envío cuentan como
fallo sin detener el resto.
"""

import asyncio
import enum
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence

from pegasus.core.plantillas import mensaje_para_cobro

logger = logging.getLogger(__name__)

ObtenerCobro = Callable[[Any], Awaitable[Dict[str, Any]]]
VerificarConexion = Callable[[], Awaitable[bool]]
EnviarMensaje = Callable[[Dict[str, Any], str], Awaitable[Any]]


class WhatsAppDesconectado(Exception):
    """El gateway de mensajería no está conectado."""

    def __init__(self, message: str = "WhatsApp no está conectado. Conéctelo primero."):
        super().__init__(message)
        self.message = message


class EstadoEnvio(str, enum.Enum):
    ENVIADO = "enviado"
    SIN_TELEFONO = "sin_telefono"
    ERROR = "error"


@dataclass
class ResultadoEnvio:
    cobro_id: Any
    estado: EstadoEnvio
    detalle: Optional[str] = None


@dataclass
class ResumenEnvio:
    intentados: int = 0
    exitosos: int = 0
    fallidos: int = 0
    resultados: List[ResultadoEnvio] = field(default_factory=list)
    abortado: bool = False

    @property
    def clasificacion(self) -> str:
        """success / warning / error para la notificación final."""
        if self.fallidos == 0:
            return "success"
        if self.exitosos == 0:
            return "error"
        return "warning"

    @property
    def mensaje(self) -> str:
        if self.intentados and self.exitosos == 0:
            return "No se pudo enviar ningún recordatorio."
        return f"{self.exitosos} de {self.intentados} recordatorios enviados."


def telefono_de(cobro: Dict[str, Any]) -> Optional[str]:
    telefono = (cobro.get("cliente") or {}).get("telefono")
    if telefono is None or not str(telefono).strip():
        return None
    return str(telefono).strip()


async def procesar_cobro(cobro_id, obtener_cobro: ObtenerCobro, enviar: EnviarMensaje) -> ResultadoEnvio:
    try:
        cobro = await obtener_cobro(cobro_id)
        if telefono_de(cobro) is None:
            logger.warning(f"Cobro {cobro_id}: el cliente no tiene teléfono registrado")
            return ResultadoEnvio(cobro_id, EstadoEnvio.SIN_TELEFONO, "Cliente sin teléfono")
        await enviar(cobro, mensaje_para_cobro(cobro))
    except Exception as e:
        logger.error(f"Cobro {cobro_id}: error al enviar recordatorio: {e}")
        return ResultadoEnvio(cobro_id, EstadoEnvio.ERROR, str(e))
    return ResultadoEnvio(cobro_id, EstadoEnvio.ENVIADO)


async def enviar_recordatorios(
    cobro_ids: Sequence[Any],
    obtener_cobro: ObtenerCobro,
    verificar_conexion: VerificarConexion,
    enviar: EnviarMensaje,
    concurrencia: int = 1,
) -> ResumenEnvio:
    """
    Envía un recordatorio por cada cobro.

    concurrencia=1 procesa en orden estricto; valores mayores usan un pool
    acotado. El conteo final es el mismo en ambos casos.
    """
    if not cobro_ids:
        return ResumenEnvio()

    if not await verificar_conexion():
        logger.warning(f"Envío masivo cancelado: WhatsApp desconectado ({len(cobro_ids)} cobros)")
        raise WhatsAppDesconectado()

    limite = asyncio.Semaphore(max(1, concurrencia))

    async def con_limite(cobro_id):
        async with limite:
            return await procesar_cobro(cobro_id, obtener_cobro, enviar)

    resultados = await asyncio.gather(*(con_limite(cobro_id) for cobro_id in cobro_ids))

    resumen = ResumenEnvio(intentados=len(resultados), resultados=list(resultados))
    for resultado in resultados:
        if resultado.estado == EstadoEnvio.ENVIADO:
            resumen.exitosos += 1
        else:
            resumen.fallidos += 1

    logger.info(f"Envío masivo terminado: {resumen.mensaje} ({resumen.fallidos} fallidos)")
    return resumen
