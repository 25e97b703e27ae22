"""
Utilidades de fechas compartidas por el agregador de vencimientos, el motor
de reportes, las plantillas de WhatsApp y el envío masivo.

Regla única de atraso: ambas fechas se truncan al día calendario y el
resultado es la diferencia en días completos. Con valores normalizados a
medianoche "días transcurridos redondeados hacia arriba" y la diferencia de
fechas coinciden, por eso no hay redondeos en ningún otro lugar.
"""

import enum
import logging
from datetime import date, datetime, timedelta
from typing import Optional, Tuple, Union

from dateutil.relativedelta import relativedelta

logger = logging.getLogger(__name__)

FechaEntrada = Union[date, datetime, str, None]

MESES = [
    "Enero", "Febrero", "Marzo", "Abril", "Mayo", "Junio",
    "Julio", "Agosto", "Septiembre", "Octubre", "Noviembre", "Diciembre",
]
DIAS_SEMANA = ["lunes", "martes", "miércoles", "jueves", "viernes", "sábado", "domingo"]


class Periodo(str, enum.Enum):
    MES_ACTUAL = "current-month"
    MES_ANTERIOR = "previous-month"
    TRIMESTRE = "quarter"
    ANIO = "year"
    ULTIMOS_30 = "last-30-days"
    ULTIMOS_90 = "last-90-days"


NOMBRES_PERIODO = {
    Periodo.MES_ACTUAL: "Mes Actual",
    Periodo.MES_ANTERIOR: "Mes Anterior",
    Periodo.TRIMESTRE: "Trimestre Actual",
    Periodo.ANIO: "Año Actual",
    Periodo.ULTIMOS_30: "Últimos 30 días",
    Periodo.ULTIMOS_90: "Últimos 90 días",
}


def a_fecha(valor: FechaEntrada) -> Optional[date]:
    """
    Convierte date, datetime o texto ISO ("2024-05-01" o "2024-05-01T10:00:00Z")
    a un date. Devuelve None si el valor falta o no se puede interpretar.
    """
    if valor is None or valor == "":
        return None
    if isinstance(valor, datetime):
        return valor.date()
    if isinstance(valor, date):
        return valor
    if isinstance(valor, str):
        try:
            return date.fromisoformat(valor.strip()[:10])
        except ValueError:
            logger.debug(f"Fecha no interpretable: {valor!r}")
            return None
    return None


def hoy() -> date:
    return date.today()


def dias_atraso(fecha_vencimiento: FechaEntrada, referencia: FechaEntrada = None) -> Optional[int]:
    """
    Días completos entre el vencimiento y la referencia (hoy por defecto).
    Positivo = vencido, 0 = vence hoy, negativo = aún no vence.
    None si el vencimiento no es una fecha válida.
    """
    vencimiento = a_fecha(fecha_vencimiento)
    if vencimiento is None:
        return None
    ref = a_fecha(referencia) or hoy()
    return (ref - vencimiento).days


def parse_periodo(valor: Union[str, Periodo, None], default: Periodo = Periodo.MES_ACTUAL) -> Periodo:
    """Periodo desconocido o vacío -> default."""
    if isinstance(valor, Periodo):
        return valor
    try:
        return Periodo(valor)
    except ValueError:
        return default


def rango_periodo(periodo: Union[str, Periodo, None], referencia: Optional[date] = None) -> Tuple[date, date]:
    """Rango [inicio, fin] (ambos inclusive) del periodo relativo a la fecha de referencia."""
    ref = referencia or hoy()
    periodo = parse_periodo(periodo)

    if periodo == Periodo.MES_ANTERIOR:
        inicio = ref.replace(day=1) - relativedelta(months=1)
        fin = ref.replace(day=1) - timedelta(days=1)
    elif periodo == Periodo.TRIMESTRE:
        mes_inicio = 3 * ((ref.month - 1) // 3) + 1
        inicio = ref.replace(month=mes_inicio, day=1)
        fin = inicio + relativedelta(months=3) - timedelta(days=1)
    elif periodo == Periodo.ANIO:
        inicio = ref.replace(month=1, day=1)
        fin = ref.replace(month=12, day=31)
    elif periodo == Periodo.ULTIMOS_30:
        inicio = ref - timedelta(days=30)
        fin = ref
    elif periodo == Periodo.ULTIMOS_90:
        inicio = ref - timedelta(days=90)
        fin = ref
    else:
        inicio = ref.replace(day=1)
        fin = inicio + relativedelta(months=1) - timedelta(days=1)

    return inicio, fin


def rango_anterior(inicio: date, fin: date) -> Tuple[date, date]:
    """Periodo inmediatamente anterior de la misma duración."""
    duracion = (fin - inicio).days + 1
    fin_anterior = inicio - timedelta(days=1)
    return fin_anterior - timedelta(days=duracion - 1), fin_anterior


def nombre_periodo(periodo: Union[str, Periodo, None]) -> str:
    try:
        return NOMBRES_PERIODO[Periodo(periodo)]
    except ValueError:
        return "Periodo Personalizado"


def meses_entre(desde: date, hasta: date) -> int:
    """Meses completos transcurridos entre dos fechas."""
    diferencia = relativedelta(hasta, desde)
    return diferencia.years * 12 + diferencia.months


def nombre_mes(fecha: date) -> str:
    return f"{MESES[fecha.month - 1]} {fecha.year}"
