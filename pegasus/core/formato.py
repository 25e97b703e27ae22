"""Formateo de montos, fechas, estados y retrasos para vistas y exportaciones."""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Optional, Union

from pegasus.core.fechas import FechaEntrada, a_fecha, dias_atraso, MESES, DIAS_SEMANA
from pegasus.core.tipos import TipoReporte

logger = logging.getLogger(__name__)

SIMBOLOS_MONEDA = {
    "PEN": "S/",
    "USD": "$",
    "EUR": "€",
    "GBP": "£",
}

CLASES_ESTADO_COBRO = {
    "Pagado": "paid",
    "Pendiente": "pending",
    "Atrasado": "overdue",
    "Anulado": "cancelled",
}

CLASES_ESTADO_CLIENTE = {
    "Activo": "active",
    "Inactivo": "inactive",
    "Pendiente": "pending",
    "Atrasado": "overdue",
}

CENTIMOS = Decimal("0.01")

Numero = Union[Decimal, int, float, str, None]


def a_decimal(valor: Numero) -> Optional[Decimal]:
    """Decimal o None si el valor no representa un número finito."""
    if valor is None or isinstance(valor, bool):
        return None
    try:
        numero = Decimal(str(valor).strip())
    except (InvalidOperation, ValueError):
        return None
    if not numero.is_finite():
        return None
    return numero


def redondear(valor: Decimal) -> Decimal:
    return valor.quantize(CENTIMOS, rounding=ROUND_HALF_UP)


def formatear_numero(valor: Numero) -> str:
    """Monto con dos decimales fijos, "0.00" si no es numérico."""
    numero = a_decimal(valor)
    if numero is None:
        return "0.00"
    return f"{redondear(numero):.2f}"


def formatear_moneda(valor: Numero, moneda: Optional[str] = "PEN") -> str:
    numero = a_decimal(valor)
    if numero is None:
        return "0.00"
    moneda = (moneda or "PEN").upper()
    simbolo = SIMBOLOS_MONEDA.get(moneda, moneda)
    return f"{simbolo}{redondear(numero):.2f}"


def formatear_fecha(valor: FechaEntrada, largo: bool = False) -> str:
    if valor is None or valor == "":
        return "-"
    fecha = a_fecha(valor)
    if fecha is None:
        return "Fecha inválida"
    if largo:
        return f"{DIAS_SEMANA[fecha.weekday()]}, {fecha.day} de {MESES[fecha.month - 1].lower()} de {fecha.year}"
    return fecha.strftime("%d/%m/%Y")


def formatear_porcentaje(valor: Optional[float], decimales: int = 1) -> str:
    if valor is None:
        return "-"
    return f"{valor:.{decimales}f}%"


def formatear_variacion(valor: Optional[float]) -> str:
    """Variación con signo explícito: +12.5% / -3.0%."""
    if valor is None:
        return "-"
    signo = "+" if valor > 0 else ""
    return f"{signo}{valor:.1f}%"


def clase_estado_cobro(estado: Optional[str]) -> str:
    return CLASES_ESTADO_COBRO.get(estado or "", "pending")


def clase_estado_cliente(estado: Optional[str]) -> str:
    return CLASES_ESTADO_CLIENTE.get(estado or "", "active")


@dataclass(frozen=True)
class Retraso:
    dias: int
    clase: str
    texto: str


def texto_dias(dias: int) -> str:
    return f"{dias} día{'' if dias == 1 else 's'}"


def calcular_retraso(fecha_vencimiento: FechaEntrada, fecha_pago: FechaEntrada = None) -> Retraso:
    """
    Retraso de un cobro para la columna de la tabla. Si hay fecha de pago se
    mide contra ella, si no contra hoy.
    """
    dias = dias_atraso(fecha_vencimiento, fecha_pago)
    if dias is None:
        return Retraso(0, "", "-")
    if dias > 0:
        return Retraso(dias, "delay-days", texto_dias(dias))
    if dias == 0 and fecha_pago is None:
        return Retraso(0, "due-today", "Hoy")
    return Retraso(0, "", "-")


def nombre_archivo_fecha(fecha: Optional[date] = None) -> str:
    return (fecha or date.today()).isoformat()


def titulo_reporte(tipo) -> str:
    """Título legible de un tipo de reporte; "Reporte" si no se reconoce."""
    try:
        return TipoReporte(tipo).titulo
    except ValueError:
        return "Reporte"
