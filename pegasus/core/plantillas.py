"""
Plantillas de mensajes de WhatsApp.

Los campos que faltan se dejan con su marcador entre corchetes
("[Nombre Cliente]", "[MONTO]", ...) para que el operador los vea antes de
enviar. El resultado es texto plano, sin escapar.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional

from pegasus.core.fechas import FechaEntrada, a_fecha, dias_atraso
from pegasus.core.formato import a_decimal, formatear_fecha, formatear_moneda, texto_dias
from pegasus.core.tipos import TipoMensaje, TipoPlantilla

MARCADOR_CLIENTE = "[Nombre Cliente]"
MARCADOR_MONTO = "[MONTO]"
MARCADOR_SERVICIO = "[Servicio Contratado]"
MARCADOR_FECHA = "[FECHA VENC.]"
MARCADOR_DIAS = "[XX días]"

TEXTO_NO_VENCIDO = "Aún no vence"

PLANTILLAS = {
    TipoPlantilla.RECORDATORIO_PAGO: (
        "Estimado cliente {cliente}, le recordamos amablemente sobre su pago pendiente de "
        "{monto} por {servicio}, con vencimiento el {fecha}. Agradeceremos su pronta gestión. "
        "Atte. Pegasus."
    ),
    TipoPlantilla.RECORDATORIO_ATRASO: (
        "Estimado cliente {cliente}, hemos notado que su pago de {monto} por {servicio} "
        "(vencido el {fecha}) tiene un atraso de {dias}. Le solicitamos regularizarlo a la "
        "brevedad. Contáctenos si necesita ayuda. Atte. Pegasus."
    ),
    TipoPlantilla.RECIBO_PAGO: (
        "Estimado cliente {cliente}, le enviamos su recibo por el pago de {monto} del servicio "
        "de {servicio}. Gracias por su preferencia. Atte. Pegasus."
    ),
    TipoPlantilla.PERSONALIZADO: "",
}


@dataclass
class DatosMensaje:
    cliente: Optional[str] = None
    monto: Any = None
    moneda: Optional[str] = None
    servicio: Optional[str] = None
    fecha_vencimiento: FechaEntrada = None
    texto_libre: Optional[str] = None


def texto_atraso(fecha_vencimiento: FechaEntrada) -> str:
    dias = dias_atraso(fecha_vencimiento)
    if dias is None:
        return MARCADOR_DIAS
    if dias > 0:
        return texto_dias(dias)
    return TEXTO_NO_VENCIDO


def interpolar(tipo: TipoPlantilla, datos: DatosMensaje) -> str:
    """Arma el mensaje del tipo pedido con los datos disponibles."""
    tipo = TipoPlantilla(tipo)
    if tipo == TipoPlantilla.PERSONALIZADO:
        return datos.texto_libre or ""

    monto = MARCADOR_MONTO
    if a_decimal(datos.monto) is not None:
        monto = formatear_moneda(datos.monto, datos.moneda)

    fecha = MARCADOR_FECHA
    if a_fecha(datos.fecha_vencimiento) is not None:
        fecha = formatear_fecha(datos.fecha_vencimiento)

    return PLANTILLAS[tipo].format(
        cliente=datos.cliente or MARCADOR_CLIENTE,
        monto=monto,
        servicio=datos.servicio or MARCADOR_SERVICIO,
        fecha=fecha,
        dias=texto_atraso(datos.fecha_vencimiento),
    )


def plantilla_para_cobro(estado_cobro: Optional[str], tipo: TipoMensaje = TipoMensaje.RECORDATORIO) -> TipoPlantilla:
    if tipo == TipoMensaje.RECIBO:
        return TipoPlantilla.RECIBO_PAGO
    if tipo == TipoMensaje.PERSONALIZADO:
        return TipoPlantilla.PERSONALIZADO
    if estado_cobro == "Atrasado":
        return TipoPlantilla.RECORDATORIO_ATRASO
    return TipoPlantilla.RECORDATORIO_PAGO


def datos_desde_cobro(cobro: Dict[str, Any]) -> DatosMensaje:
    """Arma los datos del mensaje a partir de un cobro tal como lo entrega la API."""
    cliente = cobro.get("cliente") or {}
    servicio = cobro.get("servicio") or {}
    return DatosMensaje(
        cliente=cliente.get("nombre_cliente"),
        monto=cobro.get("monto"),
        moneda=cobro.get("moneda"),
        servicio=servicio.get("nombre_servicio") or cobro.get("descripcion_servicio_personalizado"),
        fecha_vencimiento=cobro.get("fecha_vencimiento"),
    )


def mensaje_para_cobro(cobro: Dict[str, Any], tipo: TipoMensaje = TipoMensaje.RECORDATORIO) -> str:
    return interpolar(plantilla_para_cobro(cobro.get("estado_cobro"), tipo), datos_desde_cobro(cobro))
