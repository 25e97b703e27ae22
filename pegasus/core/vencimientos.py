"""
Agregador de vencimientos próximos.

Toma los cobros pendientes y agrupa por día los que vencen entre hoy y
hoy + N días (ambos inclusive). Nunca lanza excepciones por datos
malformados: montos inválidos cuentan como 0 y fechas inválidas excluyen
el cobro.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from pegasus.core.fechas import a_fecha, hoy
from pegasus.core.formato import a_decimal, formatear_numero

logger = logging.getLogger(__name__)

VENTANA_DIAS = 7
ESTADO_PENDIENTE = "Pendiente"


@dataclass
class VencimientoDia:
    """Cobros que vencen un mismo día."""
    fecha: str  # ISO yyyy-mm-dd
    cantidad: int = 0
    monto: Decimal = Decimal("0")
    cobros: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def monto_texto(self) -> str:
        return formatear_numero(self.monto)

    def a_dict(self) -> Dict[str, Any]:
        return {
            "fecha": self.fecha,
            "cantidad": self.cantidad,
            "monto": self.monto_texto,
            "cobros": self.cobros,
        }


@dataclass
class ResumenVencimientos:
    total_vencimientos: int = 0
    monto_total: str = "0.00"
    por_dia: List[VencimientoDia] = field(default_factory=list)

    @classmethod
    def vacio(cls) -> "ResumenVencimientos":
        return cls()

    def a_dict(self) -> Dict[str, Any]:
        return {
            "totalVencimientos": self.total_vencimientos,
            "montoTotal": self.monto_total,
            "porDia": [dia.a_dict() for dia in self.por_dia],
        }


def monto_seguro(cobro: Dict[str, Any]) -> Decimal:
    """Monto del cobro; faltante o inválido -> 0 con advertencia."""
    valor = cobro.get("monto")
    monto = a_decimal(valor)
    if monto is None:
        logger.warning(f"Monto inválido en cobro {cobro.get('id')}: {valor!r}; se toma 0")
        return Decimal("0")
    return monto


def calcular_vencimientos_proximos(
    cobros: Iterable[Dict[str, Any]],
    referencia: Optional[date] = None,
    ventana_dias: int = VENTANA_DIAS,
) -> ResumenVencimientos:
    inicio = referencia or hoy()
    fin = inicio + timedelta(days=ventana_dias)

    en_ventana = []
    for cobro in cobros:
        estado = cobro.get("estado_cobro")
        if estado is not None and estado != ESTADO_PENDIENTE:
            continue
        vencimiento = a_fecha(cobro.get("fecha_vencimiento"))
        if vencimiento is None:
            logger.warning(f"Cobro {cobro.get('id')} sin fecha de vencimiento válida; se excluye")
            continue
        if inicio <= vencimiento <= fin:
            en_ventana.append((vencimiento, cobro))

    if not en_ventana:
        return ResumenVencimientos.vacio()

    en_ventana.sort(key=lambda par: par[0])

    grupos: Dict[date, VencimientoDia] = {}
    total = Decimal("0")
    for vencimiento, cobro in en_ventana:
        dia = grupos.get(vencimiento)
        if dia is None:
            dia = grupos[vencimiento] = VencimientoDia(fecha=vencimiento.isoformat())
        monto = monto_seguro(cobro)
        dia.cantidad += 1
        dia.monto += monto
        dia.cobros.append(cobro)
        total += monto

    return ResumenVencimientos(
        total_vencimientos=len(en_ventana),
        monto_total=formatear_numero(total),
        por_dia=[grupos[d] for d in sorted(grupos)],
    )
