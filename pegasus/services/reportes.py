"""
Pre-agregación de reportes en el backend.

Cada función consulta la base y devuelve el JSON que consume el motor de
reportes del cliente (pegasus.core.reportes). Los montos viajan como float.
"""

import logging
from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Dict, Optional

from dateutil.relativedelta import relativedelta
from sqlalchemy import case, func, desc
from sqlalchemy.orm import Session, joinedload, selectinload

from pegasus.config import settings
from pegasus.core.fechas import Periodo, parse_periodo, rango_periodo, rango_anterior
from pegasus.models import Cliente, Cobro, EstadoCobro, Servicio

logger = logging.getLogger(__name__)

ESTADOS_DEUDA = (EstadoCobro.PENDIENTE, EstadoCobro.ATRASADO)
DIAS_VENCIMIENTO_PROXIMO = 5
DIAS_FLUJO_CAJA = 30


def _float(valor) -> float:
    return float(Decimal(str(valor or 0)))


def _promedio_dias(cobros) -> Optional[float]:
    """Promedio de días entre emisión y pago de los cobros pagados."""
    dias = [
        (c.fecha_pago - c.fecha_emision).days
        for c in cobros
        if c.estado_cobro == EstadoCobro.PAGADO and c.fecha_pago and c.fecha_emision
    ]
    if not dias:
        return None
    return round(sum(dias) / len(dias), 1)


def _cliente_json(cliente: Optional[Cliente]) -> Dict[str, Any]:
    if cliente is None:
        return {}
    return {"id": cliente.id, "nombre_cliente": cliente.nombre_cliente, "telefono": cliente.telefono}


def _totales(db: Session, inicio: date, fin: date) -> Dict[str, Any]:
    filas = db.query(
        Cobro.estado_cobro,
        func.count(Cobro.id).label("cantidad"),
        func.sum(Cobro.monto).label("monto")
    ).filter(
        Cobro.fecha_emision >= inicio,
        Cobro.fecha_emision <= fin
    ).group_by(Cobro.estado_cobro).all()

    conteo = {estado: (0, Decimal("0")) for estado in EstadoCobro}
    for estado, cantidad, monto in filas:
        conteo[estado] = (cantidad, Decimal(str(monto or 0)))

    emitido = sum((m for _, m in conteo.values()), Decimal("0"))
    pendiente = sum((conteo[e][1] for e in ESTADOS_DEUDA), Decimal("0"))
    return {
        "totalCobros": sum(c for c, _ in conteo.values()),
        "cobrosPagados": conteo[EstadoCobro.PAGADO][0],
        "cobrosPendientes": conteo[EstadoCobro.PENDIENTE][0],
        "cobrosAtrasados": conteo[EstadoCobro.ATRASADO][0],
        "cobrosAnulados": conteo[EstadoCobro.ANULADO][0],
        "montoTotalEmitido": _float(emitido),
        "montoTotalPagado": _float(conteo[EstadoCobro.PAGADO][1]),
        "montoTotalPendiente": _float(pendiente),
    }


# --------------------------------------------------------------------------
# 1. RESUMEN DE PAGOS
# --------------------------------------------------------------------------
def resumen_pagos(db: Session, periodo: Optional[str] = None, hoy: Optional[date] = None) -> Dict[str, Any]:
    periodo = parse_periodo(periodo)
    inicio, fin = rango_periodo(periodo, hoy)
    inicio_ant, fin_ant = rango_anterior(inicio, fin)

    top = db.query(
        Servicio.nombre_servicio,
        func.count(Cobro.id).label("cantidad"),
        func.sum(Cobro.monto).label("monto")
    ).join(Cobro, Cobro.servicio_id == Servicio.id).filter(
        Cobro.fecha_emision >= inicio,
        Cobro.fecha_emision <= fin
    ).group_by(Servicio.nombre_servicio).order_by(desc("monto")).limit(5).all()

    pagados = db.query(Cobro).filter(
        Cobro.estado_cobro == EstadoCobro.PAGADO,
        Cobro.fecha_emision >= inicio,
        Cobro.fecha_emision <= fin
    ).all()

    logger.info(f"Resumen de pagos {periodo.value}: {inicio} a {fin}")
    return {
        "periodo": periodo.value,
        "fechaInicio": inicio.isoformat(),
        "fechaFin": fin.isoformat(),
        "moneda": settings.default_currency,
        "actual": _totales(db, inicio, fin),
        "anterior": _totales(db, inicio_ant, fin_ant),
        "topServicios": [
            {"nombre_servicio": t.nombre_servicio, "cantidad": t.cantidad, "monto": _float(t.monto)}
            for t in top
        ],
        "diasPromedioCobro": _promedio_dias(pagados),
    }


# --------------------------------------------------------------------------
# 2. ESTADO DE CLIENTES
# --------------------------------------------------------------------------
def estado_clientes(db: Session, hoy: Optional[date] = None) -> Dict[str, Any]:
    hoy = hoy or date.today()
    clientes = db.query(Cliente).options(selectinload(Cliente.cobros)).order_by(Cliente.nombre_cliente).all()

    filas = []
    for cliente in clientes:
        cobros = cliente.cobros
        por_estado = defaultdict(list)
        for c in cobros:
            por_estado[c.estado_cobro].append(c)

        pagados_con_fecha = [c for c in por_estado[EstadoCobro.PAGADO] if c.fecha_pago]
        deuda = por_estado[EstadoCobro.PENDIENTE] + por_estado[EstadoCobro.ATRASADO]
        filas.append({
            "id": cliente.id,
            "nombre_cliente": cliente.nombre_cliente,
            "estado_cliente": cliente.estado_cliente.value,
            "telefono": cliente.telefono,
            "fecha_registro": cliente.fecha_registro.isoformat() if cliente.fecha_registro else None,
            "totalCobros": len(cobros),
            "cobrosPagados": len(por_estado[EstadoCobro.PAGADO]),
            "cobrosPendientes": len(por_estado[EstadoCobro.PENDIENTE]),
            "cobrosAtrasados": len(por_estado[EstadoCobro.ATRASADO]),
            "montoPendiente": _float(sum((c.monto for c in deuda), Decimal("0"))),
            "montoPagado": _float(sum((c.monto for c in por_estado[EstadoCobro.PAGADO]), Decimal("0"))),
            "diasPromedioPago": _promedio_dias(cobros),
            "pagosConFecha": len(pagados_con_fecha),
            "pagosPuntuales": sum(1 for c in pagados_con_fecha if c.fecha_pago <= c.fecha_vencimiento),
            "vencimientoProximo": any(
                0 <= (c.fecha_vencimiento - hoy).days <= DIAS_VENCIMIENTO_PROXIMO
                for c in por_estado[EstadoCobro.PENDIENTE]
            ),
        })

    return {"moneda": settings.default_currency, "clientes": filas}


# --------------------------------------------------------------------------
# 3. ANÁLISIS DE ATRASOS
# --------------------------------------------------------------------------
def analisis_atrasos(db: Session) -> Dict[str, Any]:
    atrasados = db.query(Cobro).options(
        joinedload(Cobro.cliente), joinedload(Cobro.servicio)
    ).filter(Cobro.estado_cobro == EstadoCobro.ATRASADO).order_by(Cobro.fecha_vencimiento).all()

    return {
        "moneda": settings.default_currency,
        "totalCobros": db.query(func.count(Cobro.id)).scalar() or 0,
        "cobrosAtrasados": [
            {
                "id": c.id,
                "monto": _float(c.monto),
                "moneda": c.moneda,
                "fecha_vencimiento": c.fecha_vencimiento.isoformat(),
                "fecha_pago": c.fecha_pago.isoformat() if c.fecha_pago else None,
                "cliente": _cliente_json(c.cliente),
                "servicio": c.servicio.nombre_servicio if c.servicio else c.descripcion_servicio_personalizado,
            }
            for c in atrasados
        ],
    }


# --------------------------------------------------------------------------
# 4. PROYECCIÓN DE INGRESOS
# --------------------------------------------------------------------------
def proyeccion_ingresos(db: Session, hoy: Optional[date] = None) -> Dict[str, Any]:
    hoy = hoy or date.today()
    pendientes = db.query(Cobro).options(joinedload(Cobro.cliente)).filter(
        Cobro.estado_cobro == EstadoCobro.PENDIENTE,
        Cobro.fecha_vencimiento >= hoy
    ).order_by(Cobro.fecha_vencimiento).all()

    pagado_anual = db.query(func.sum(Cobro.monto)).filter(
        Cobro.estado_cobro == EstadoCobro.PAGADO,
        Cobro.fecha_pago >= hoy.replace(month=1, day=1)
    ).scalar()
    pendiente_total = db.query(func.sum(Cobro.monto)).filter(
        Cobro.estado_cobro.in_(ESTADOS_DEUDA)
    ).scalar()

    historial = db.query(
        Cliente.id,
        Cliente.nombre_cliente,
        func.count(Cobro.id).label("total"),
        func.sum(case((Cobro.estado_cobro == EstadoCobro.PAGADO, 1), else_=0)).label("pagados")
    ).join(Cobro, Cobro.cliente_id == Cliente.id).filter(
        Cobro.estado_cobro != EstadoCobro.ANULADO
    ).group_by(Cliente.id, Cliente.nombre_cliente).all()

    return {
        "moneda": settings.default_currency,
        "cobrosPendientes": [
            {
                "id": c.id,
                "monto": _float(c.monto),
                "fecha_vencimiento": c.fecha_vencimiento.isoformat(),
                "cliente": _cliente_json(c.cliente),
            }
            for c in pendientes
        ],
        "pagadoAnual": _float(pagado_anual),
        "pendienteTotal": _float(pendiente_total),
        "historialClientes": [
            {"id": h.id, "nombre_cliente": h.nombre_cliente, "totalCobros": h.total, "cobrosPagados": int(h.pagados or 0)}
            for h in historial
        ],
    }


# --------------------------------------------------------------------------
# 5. ANÁLISIS DE RENTABILIDAD
# --------------------------------------------------------------------------
def analisis_rentabilidad(db: Session, periodo: Optional[str] = None, hoy: Optional[date] = None) -> Dict[str, Any]:
    periodo = parse_periodo(periodo, default=Periodo.ANIO)
    inicio, fin = rango_periodo(periodo, hoy)

    servicios = db.query(Servicio).order_by(Servicio.nombre_servicio).all()
    filas = []
    for servicio in servicios:
        cobros = db.query(Cobro).filter(
            Cobro.servicio_id == servicio.id,
            Cobro.fecha_emision >= inicio,
            Cobro.fecha_emision <= fin
        ).all()
        pagados = [c for c in cobros if c.estado_cobro == EstadoCobro.PAGADO]
        deuda = [c for c in cobros if c.estado_cobro in ESTADOS_DEUDA]
        facturado = sum((c.monto for c in cobros), Decimal("0"))
        filas.append({
            "id": servicio.id,
            "nombre_servicio": servicio.nombre_servicio,
            "descripcion": servicio.descripcion,
            "precio_base": _float(servicio.precio_base),
            "totalCobros": len(cobros),
            "cobrosPagados": len(pagados),
            "montoFacturado": _float(facturado),
            "montoCobrado": _float(sum((c.monto for c in pagados), Decimal("0"))),
            "montoPendiente": _float(sum((c.monto for c in deuda), Decimal("0"))),
            "precioPromedio": _float(facturado / len(cobros)) if cobros else None,
            "diasPromedioPago": _promedio_dias(pagados),
        })

    logger.info(f"Rentabilidad calculada para {len(filas)} servicios ({periodo.value})")
    return {
        "periodo": periodo.value,
        "fechaInicio": inicio.isoformat(),
        "fechaFin": fin.isoformat(),
        "moneda": settings.default_currency,
        "servicios": filas,
    }


# --------------------------------------------------------------------------
# 6. DASHBOARD
# --------------------------------------------------------------------------
def dashboard(db: Session, hoy: Optional[date] = None) -> Dict[str, Any]:
    hoy = hoy or date.today()
    inicio_mes = hoy.replace(day=1)
    inicio_mes_anterior = inicio_mes - relativedelta(months=1)

    conteo = dict(
        db.query(Cobro.estado_cobro, func.count(Cobro.id)).group_by(Cobro.estado_cobro).all()
    )
    montos = {
        estado: Decimal(str(monto or 0))
        for estado, monto in db.query(Cobro.estado_cobro, func.sum(Cobro.monto)).group_by(Cobro.estado_cobro).all()
    }

    def cobrado_entre(desde: date, hasta: date) -> float:
        return _float(db.query(func.sum(Cobro.monto)).filter(
            Cobro.estado_cobro == EstadoCobro.PAGADO,
            Cobro.fecha_pago >= desde,
            Cobro.fecha_pago < hasta
        ).scalar())

    top_deudores = db.query(
        Cliente.id,
        Cliente.nombre_cliente,
        func.sum(Cobro.monto).label("deuda")
    ).join(Cobro, Cobro.cliente_id == Cliente.id).filter(
        Cobro.estado_cobro.in_(ESTADOS_DEUDA)
    ).group_by(Cliente.id, Cliente.nombre_cliente).order_by(desc("deuda")).limit(5).all()

    recientes = db.query(Cobro).options(joinedload(Cobro.cliente)).order_by(
        Cobro.fecha_emision.desc(), Cobro.id.desc()
    ).limit(5).all()

    cobrado_mes = cobrado_entre(inicio_mes, inicio_mes + relativedelta(months=1))

    desde_flujo = hoy - timedelta(days=DIAS_FLUJO_CAJA)
    flujo = db.query(
        Cobro.fecha_pago,
        func.sum(Cobro.monto).label("monto")
    ).filter(
        Cobro.estado_cobro == EstadoCobro.PAGADO,
        Cobro.fecha_pago >= desde_flujo,
        Cobro.fecha_pago <= hoy
    ).group_by(Cobro.fecha_pago).order_by(Cobro.fecha_pago).all()

    return {
        "moneda": settings.default_currency,
        "totalClientes": db.query(func.count(Cliente.id)).scalar() or 0,
        "clientesActivos": db.query(func.count(Cliente.id)).filter(Cliente.activo == True).scalar() or 0,
        "totalCobros": sum(conteo.values()),
        "cobrosPendientes": conteo.get(EstadoCobro.PENDIENTE, 0),
        "cobrosPagados": conteo.get(EstadoCobro.PAGADO, 0),
        "cobrosAtrasados": conteo.get(EstadoCobro.ATRASADO, 0),
        "montoPendiente": _float(sum((montos.get(e, 0) for e in ESTADOS_DEUDA), Decimal("0"))),
        "montoCobrado": cobrado_mes,
        "montoAtrasado": _float(montos.get(EstadoCobro.ATRASADO)),
        "cobradoMesActual": cobrado_mes,
        "cobradoMesAnterior": cobrado_entre(inicio_mes_anterior, inicio_mes),
        "cobrosRecientes": [
            {
                "id": c.id,
                "monto": _float(c.monto),
                "moneda": c.moneda,
                "estado_cobro": c.estado_cobro.value,
                "fecha_emision": c.fecha_emision.isoformat(),
                "fecha_vencimiento": c.fecha_vencimiento.isoformat(),
                "fecha_pago": c.fecha_pago.isoformat() if c.fecha_pago else None,
                "cliente": _cliente_json(c.cliente),
            }
            for c in recientes
        ],
        "topClientesDeuda": [
            {"id": t.id, "nombre_cliente": t.nombre_cliente, "montoPendiente": _float(t.deuda)}
            for t in top_deudores
        ],
        "flujoCaja": [{"fecha": f.fecha_pago.isoformat(), "monto": _float(f.monto)} for f in flujo],
    }
