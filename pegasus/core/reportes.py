"""
Motor de reportes.

Cada tipo de reporte tiene una transformación pura que recibe el JSON
pre-agregado por el backend y devuelve un modelo de vista ya formateado
(montos con símbolo de moneda, porcentajes como texto, series listas para
graficar). La exportación HTML reutiliza este mismo modelo sin tocarlo.

Las variaciones contra el periodo anterior se omiten (None) cuando el valor
anterior es 0; nunca se producen infinitos ni NaN.
"""

import enum
import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional

from dateutil.relativedelta import relativedelta

from pegasus.core.fechas import a_fecha, dias_atraso, hoy, meses_entre, nombre_mes, nombre_periodo
from pegasus.core.formato import (
    a_decimal, calcular_retraso, clase_estado_cobro, clase_estado_cliente, formatear_fecha, formatear_moneda,
    formatear_porcentaje, formatear_variacion, texto_dias,
)
from pegasus.core.tipos import TipoReporte

logger = logging.getLogger(__name__)

TOP_SERVICIOS = 5
TOP_CONCENTRACION = 5
TOP_CLIENTES_ATRASO = 10
TOP_PROBABILIDAD = 10
MIN_COBROS_HISTORIAL = 3


# ---------------------------------------------------------------------------
# PIEZAS COMUNES DEL MODELO DE VISTA
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Variacion:
    valor: Optional[float]
    texto: str
    tendencia: Optional[str]  # positive / negative / neutral; None si no aplica


@dataclass
class Tarjeta:
    etiqueta: str
    valor: str
    detalle: str = ""
    variacion: Optional[Variacion] = None


@dataclass
class Serie:
    """Datos listos para un gráfico: etiquetas y valores en paralelo."""
    etiquetas: List[str] = field(default_factory=list)
    valores: List[float] = field(default_factory=list)

    def agregar(self, etiqueta: str, valor) -> None:
        self.etiquetas.append(etiqueta)
        self.valores.append(float(valor))


def decimal_o_cero(valor) -> Decimal:
    numero = a_decimal(valor)
    return numero if numero is not None else Decimal("0")


def entero(valor) -> int:
    try:
        return int(valor or 0)
    except (TypeError, ValueError):
        return 0


def porcentaje(parte, total) -> float:
    """parte / total * 100; 0 cuando no hay total."""
    parte = decimal_o_cero(parte)
    total = decimal_o_cero(total)
    if total == 0:
        return 0.0
    return round(float(parte / total * 100), 2)


def calcular_variacion(actual, anterior) -> Optional[float]:
    """
    (actual - anterior) / anterior * 100 conservando el signo.
    None si el anterior falta o es 0.
    """
    previo = a_decimal(anterior)
    if previo is None or previo == 0:
        return None
    presente = decimal_o_cero(actual)
    return round(float((presente - previo) / previo * 100), 2)


def variacion(actual, anterior) -> Variacion:
    valor = calcular_variacion(actual, anterior)
    if valor is None:
        return Variacion(None, "-", None)
    if valor > 0:
        tendencia = "positive"
    elif valor < 0:
        tendencia = "negative"
    else:
        tendencia = "neutral"
    return Variacion(valor, formatear_variacion(valor), tendencia)


def texto_rango(datos: Dict[str, Any]) -> str:
    inicio = datos.get("fechaInicio")
    fin = datos.get("fechaFin")
    if not inicio or not fin:
        return ""
    return f"{formatear_fecha(inicio)} - {formatear_fecha(fin)}"


# ---------------------------------------------------------------------------
# 1. RESUMEN DE PAGOS
# ---------------------------------------------------------------------------

@dataclass
class VistaResumenPagos:
    titulo: str
    periodo: str
    rango: str
    tarjetas: List[Tarjeta]
    porcentaje_pagado: str
    porcentaje_monto_pagado: str
    variaciones: Dict[str, Variacion]
    serie_estados: Serie
    serie_montos: Serie
    top_servicios: List[Dict[str, str]]
    dias_promedio_cobro: str


def resumen_pagos(datos: Dict[str, Any], referencia: Optional[date] = None) -> VistaResumenPagos:
    moneda = datos.get("moneda") or "PEN"
    actual = datos.get("actual") or {}
    anterior = datos.get("anterior") or {}

    total = entero(actual.get("totalCobros"))
    pagados = entero(actual.get("cobrosPagados"))
    emitido = decimal_o_cero(actual.get("montoTotalEmitido"))
    cobrado = decimal_o_cero(actual.get("montoTotalPagado"))
    pendiente = decimal_o_cero(actual.get("montoTotalPendiente"))

    tasa_actual = porcentaje(pagados, total)
    tasa_anterior = (
        porcentaje(anterior.get("cobrosPagados"), anterior.get("totalCobros"))
        if entero(anterior.get("totalCobros")) else None
    )

    variaciones = {
        "totalCobros": variacion(total, anterior.get("totalCobros")),
        "montoEmitido": variacion(emitido, anterior.get("montoTotalEmitido")),
        "montoCobrado": variacion(cobrado, anterior.get("montoTotalPagado")),
        "tasaPago": variacion(tasa_actual, tasa_anterior),
    }

    tarjetas = [
        Tarjeta("Total de Cobros", str(total), variacion=variaciones["totalCobros"]),
        Tarjeta("Monto Emitido", formatear_moneda(emitido, moneda), variacion=variaciones["montoEmitido"]),
        Tarjeta("Monto Cobrado", formatear_moneda(cobrado, moneda),
                detalle=f"{formatear_porcentaje(porcentaje(cobrado, emitido))} del emitido",
                variacion=variaciones["montoCobrado"]),
        Tarjeta("Monto Pendiente", formatear_moneda(pendiente, moneda)),
        Tarjeta("Cobros Pagados", str(pagados), detalle=formatear_porcentaje(tasa_actual),
                variacion=variaciones["tasaPago"]),
    ]

    serie_estados = Serie()
    for etiqueta, clave in (("Pagados", "cobrosPagados"), ("Pendientes", "cobrosPendientes"),
                            ("Atrasados", "cobrosAtrasados"), ("Anulados", "cobrosAnulados")):
        serie_estados.agregar(etiqueta, entero(actual.get(clave)))

    serie_montos = Serie()
    serie_montos.agregar("Cobrado", cobrado)
    serie_montos.agregar("Pendiente", pendiente)

    servicios = sorted(
        datos.get("topServicios") or [],
        key=lambda s: decimal_o_cero(s.get("monto")),
        reverse=True,
    )[:TOP_SERVICIOS]
    top_servicios = [
        {
            "nombre": s.get("nombre_servicio") or "Servicio personalizado",
            "cantidad": str(entero(s.get("cantidad"))),
            "monto": formatear_moneda(s.get("monto"), moneda),
            "porcentaje": formatear_porcentaje(porcentaje(s.get("monto"), emitido)),
        }
        for s in servicios
    ]

    dias = datos.get("diasPromedioCobro")
    return VistaResumenPagos(
        titulo=TipoReporte.RESUMEN_PAGOS.titulo,
        periodo=nombre_periodo(datos.get("periodo")),
        rango=texto_rango(datos),
        tarjetas=tarjetas,
        porcentaje_pagado=formatear_porcentaje(tasa_actual),
        porcentaje_monto_pagado=formatear_porcentaje(porcentaje(cobrado, emitido)),
        variaciones=variaciones,
        serie_estados=serie_estados,
        serie_montos=serie_montos,
        top_servicios=top_servicios,
        dias_promedio_cobro="-" if dias is None else f"{float(dias):.1f} días",
    )


# ---------------------------------------------------------------------------
# 2. ESTADO DE CLIENTES
# ---------------------------------------------------------------------------

def clasificar_puntualidad(pagos_con_fecha: int, pagos_puntuales: int) -> str:
    if pagos_con_fecha <= 0:
        return "Sin historial"
    valor = pagos_puntuales / pagos_con_fecha * 100
    if valor >= 90:
        return "Excelente"
    if valor >= 75:
        return "Buena"
    if valor >= 50:
        return "Regular"
    return "Deficiente"


def clasificar_salud(pendientes: int, atrasados: int, pagados: int) -> str:
    total = pendientes + atrasados + pagados
    if total == 0:
        return "Sin actividad"
    if atrasados == 0:
        return "Óptima"
    valor = atrasados / total * 100
    if valor < 10:
        return "Buena"
    if valor < 30:
        return "Regular"
    return "En riesgo"


def clasificar_antiguedad(fecha_registro, referencia: Optional[date] = None) -> str:
    registro = a_fecha(fecha_registro)
    if registro is None:
        return "Desconocida"
    meses = meses_entre(registro, referencia or hoy())
    if meses < 3:
        return "Nuevo"
    if meses < 12:
        return "Reciente"
    if meses < 24:
        return "Establecido"
    return "Antiguo"


@dataclass
class FilaCliente:
    id: int
    nombre: str
    estado: str
    clase_estado: str
    telefono: str
    cobros_pendientes: int
    cobros_atrasados: int
    cobros_pagados: int
    monto_pendiente: str
    monto_pagado: str
    dias_promedio_pago: str
    vencimiento_proximo: bool
    puntualidad: str
    salud: str
    antiguedad: str


@dataclass
class VistaEstadoClientes:
    titulo: str
    total_clientes: int
    clientes_activos: int
    clientes_con_deuda: int
    clientes_con_atrasos: int
    monto_pendiente_total: str
    serie_estados: Serie
    concentracion_deuda: List[Dict[str, str]]
    clientes: List[FilaCliente]


def estado_clientes(datos: Dict[str, Any], referencia: Optional[date] = None) -> VistaEstadoClientes:
    moneda = datos.get("moneda") or "PEN"
    registros = datos.get("clientes") or []

    filas = []
    deudas = []
    conteo_estados: Dict[str, int] = {}
    for c in registros:
        pendientes = entero(c.get("cobrosPendientes"))
        atrasados = entero(c.get("cobrosAtrasados"))
        pagados = entero(c.get("cobrosPagados"))
        monto_pendiente = decimal_o_cero(c.get("montoPendiente"))
        estado = c.get("estado_cliente") or "Activo"
        conteo_estados[estado] = conteo_estados.get(estado, 0) + 1

        dias_pago = c.get("diasPromedioPago")
        filas.append(FilaCliente(
            id=entero(c.get("id")),
            nombre=c.get("nombre_cliente") or "",
            estado=estado,
            clase_estado=clase_estado_cliente(estado),
            telefono=c.get("telefono") or "No registrado",
            cobros_pendientes=pendientes,
            cobros_atrasados=atrasados,
            cobros_pagados=pagados,
            monto_pendiente=formatear_moneda(monto_pendiente, moneda),
            monto_pagado=formatear_moneda(c.get("montoPagado"), moneda),
            dias_promedio_pago="-" if dias_pago is None else f"{float(dias_pago):.1f}",
            vencimiento_proximo=bool(c.get("vencimientoProximo")),
            puntualidad=clasificar_puntualidad(
                entero(c.get("pagosConFecha", pagados)), entero(c.get("pagosPuntuales"))
            ),
            salud=clasificar_salud(pendientes, atrasados, pagados),
            antiguedad=clasificar_antiguedad(c.get("fecha_registro"), referencia),
        ))
        if monto_pendiente > 0:
            deudas.append((monto_pendiente, c.get("nombre_cliente") or "", entero(c.get("id"))))

    deuda_total = sum((monto for monto, _, _ in deudas), Decimal("0"))
    deudas.sort(key=lambda d: d[0], reverse=True)
    concentracion = [
        {
            "id": str(cliente_id),
            "nombre": nombre,
            "monto": formatear_moneda(monto, moneda),
            "porcentaje": formatear_porcentaje(porcentaje(monto, deuda_total), 2),
        }
        for monto, nombre, cliente_id in deudas[:TOP_CONCENTRACION]
    ]

    serie_estados = Serie()
    for estado in ("Activo", "Pendiente", "Atrasado", "Inactivo"):
        if estado in conteo_estados:
            serie_estados.agregar(estado, conteo_estados[estado])

    return VistaEstadoClientes(
        titulo=TipoReporte.ESTADO_CLIENTES.titulo,
        total_clientes=len(filas),
        clientes_activos=conteo_estados.get("Activo", 0),
        clientes_con_deuda=len(deudas),
        clientes_con_atrasos=sum(1 for f in filas if f.cobros_atrasados > 0),
        monto_pendiente_total=formatear_moneda(deuda_total, moneda),
        serie_estados=serie_estados,
        concentracion_deuda=concentracion,
        clientes=filas,
    )


# ---------------------------------------------------------------------------
# 3. ANÁLISIS DE ATRASOS
# ---------------------------------------------------------------------------

class RangoAtraso(str, enum.Enum):
    """Rangos ordinales de atraso; el límite inferior es inclusivo."""
    MENOS_15 = "<15"
    DE_15_A_30 = "15–30"
    DE_30_A_60 = "30–60"
    MAS_60 = ">60"


def clasificar_atraso(dias: int) -> RangoAtraso:
    if dias < 15:
        return RangoAtraso.MENOS_15
    if dias < 30:
        return RangoAtraso.DE_15_A_30
    if dias < 60:
        return RangoAtraso.DE_30_A_60
    return RangoAtraso.MAS_60


def categoria_riesgo(dias: int) -> str:
    if dias <= 15:
        return "Bajo"
    if dias <= 30:
        return "Medio"
    if dias <= 60:
        return "Alto"
    return "Crítico"


@dataclass
class GrupoAtraso:
    rango: RangoAtraso
    cantidad: int = 0
    monto: Decimal = Decimal("0")
    monto_texto: str = ""
    porcentaje: str = ""


@dataclass
class VistaAnalisisAtrasos:
    titulo: str
    total_atrasados: int
    monto_total_atrasado: str
    indice_morosidad: str
    distribucion: List[GrupoAtraso]
    serie_distribucion: Serie
    serie_montos: Serie
    por_cliente: List[Dict[str, str]]
    detalle: List[Dict[str, Any]]


def analisis_atrasos(datos: Dict[str, Any], referencia: Optional[date] = None) -> VistaAnalisisAtrasos:
    moneda = datos.get("moneda") or "PEN"
    ref = referencia or hoy()
    grupos = {rango: GrupoAtraso(rango) for rango in RangoAtraso}
    por_cliente: Dict[Any, Dict[str, Any]] = {}
    detalle = []
    total_monto = Decimal("0")

    for cobro in datos.get("cobrosAtrasados") or []:
        # Con fecha de pago el atraso se mide contra ella
        dias = dias_atraso(cobro.get("fecha_vencimiento"), cobro.get("fecha_pago") or ref)
        if dias is None:
            logger.warning(f"Cobro atrasado {cobro.get('id')} sin vencimiento válido; se omite")
            continue
        dias = max(dias, 0)
        monto = decimal_o_cero(cobro.get("monto"))
        total_monto += monto

        grupo = grupos[clasificar_atraso(dias)]
        grupo.cantidad += 1
        grupo.monto += monto

        cliente = cobro.get("cliente") or {}
        clave = cliente.get("id")
        acumulado = por_cliente.setdefault(clave, {
            "nombre": cliente.get("nombre_cliente") or "Sin cliente",
            "cantidad": 0,
            "monto": Decimal("0"),
            "dias_max": 0,
        })
        acumulado["cantidad"] += 1
        acumulado["monto"] += monto
        acumulado["dias_max"] = max(acumulado["dias_max"], dias)

        detalle.append({
            "id": cobro.get("id"),
            "cliente": acumulado["nombre"],
            "servicio": cobro.get("servicio") or "Servicio personalizado",
            "monto": formatear_moneda(monto, cobro.get("moneda") or moneda),
            "fecha_vencimiento": formatear_fecha(cobro.get("fecha_vencimiento")),
            "dias": dias,
            "dias_texto": texto_dias(dias),
            "categoria": categoria_riesgo(dias),
        })

    total_atrasados = len(detalle)
    serie_distribucion = Serie()
    serie_montos = Serie()
    for grupo in grupos.values():
        grupo.monto_texto = formatear_moneda(grupo.monto, moneda)
        grupo.porcentaje = formatear_porcentaje(porcentaje(grupo.cantidad, total_atrasados))
        serie_distribucion.agregar(f"{grupo.rango.value} días", grupo.cantidad)
        serie_montos.agregar(f"{grupo.rango.value} días", grupo.monto)

    clientes = sorted(por_cliente.values(), key=lambda c: c["monto"], reverse=True)[:TOP_CLIENTES_ATRASO]
    filas_cliente = [
        {
            "nombre": c["nombre"],
            "cantidad": str(c["cantidad"]),
            "monto": formatear_moneda(c["monto"], moneda),
            "porcentaje": formatear_porcentaje(porcentaje(c["monto"], total_monto)),
            "dias_max": texto_dias(c["dias_max"]),
        }
        for c in clientes
    ]

    detalle.sort(key=lambda d: d["dias"], reverse=True)
    return VistaAnalisisAtrasos(
        titulo=TipoReporte.ANALISIS_ATRASOS.titulo,
        total_atrasados=total_atrasados,
        monto_total_atrasado=formatear_moneda(total_monto, moneda),
        indice_morosidad=formatear_porcentaje(porcentaje(total_atrasados, datos.get("totalCobros")), 2),
        distribucion=list(grupos.values()),
        serie_distribucion=serie_distribucion,
        serie_montos=serie_montos,
        por_cliente=filas_cliente,
        detalle=detalle,
    )


# ---------------------------------------------------------------------------
# 4. PROYECCIÓN DE INGRESOS
# ---------------------------------------------------------------------------

@dataclass
class ProyeccionMes:
    clave: str  # mesActual / mesSiguiente / mesSubsiguiente / posterior
    etiqueta: str
    cantidad: int = 0
    monto: Decimal = Decimal("0")
    monto_texto: str = ""


@dataclass
class VistaProyeccionIngresos:
    titulo: str
    meses: List[ProyeccionMes]
    total_proyectado: str
    indice_rotacion: str
    probabilidad: Dict[str, Any]
    serie_meses: Serie


def nivel_probabilidad(valor: float) -> str:
    if valor >= 80:
        return "alta"
    if valor >= 50:
        return "media"
    return "baja"


def proyeccion_ingresos(datos: Dict[str, Any], referencia: Optional[date] = None) -> VistaProyeccionIngresos:
    moneda = datos.get("moneda") or "PEN"
    ref = referencia or hoy()
    inicio_mes = ref.replace(day=1)
    siguiente = inicio_mes + relativedelta(months=1)
    subsiguiente = inicio_mes + relativedelta(months=2)

    meses = {
        "mesActual": ProyeccionMes("mesActual", nombre_mes(inicio_mes)),
        "mesSiguiente": ProyeccionMes("mesSiguiente", nombre_mes(siguiente)),
        "mesSubsiguiente": ProyeccionMes("mesSubsiguiente", nombre_mes(subsiguiente)),
        "posterior": ProyeccionMes("posterior", "Posterior"),
    }

    total = Decimal("0")
    for cobro in datos.get("cobrosPendientes") or []:
        vencimiento = a_fecha(cobro.get("fecha_vencimiento"))
        if vencimiento is None or vencimiento < ref:
            continue
        if vencimiento < siguiente:
            clave = "mesActual"
        elif vencimiento < subsiguiente:
            clave = "mesSiguiente"
        elif vencimiento < subsiguiente + relativedelta(months=1):
            clave = "mesSubsiguiente"
        else:
            clave = "posterior"
        monto = decimal_o_cero(cobro.get("monto"))
        meses[clave].cantidad += 1
        meses[clave].monto += monto
        total += monto

    serie = Serie()
    for mes in meses.values():
        mes.monto_texto = formatear_moneda(mes.monto, moneda)
        serie.agregar(mes.etiqueta, mes.monto)

    pendiente_total = a_decimal(datos.get("pendienteTotal"))
    if pendiente_total:
        indice_rotacion = f"{decimal_o_cero(datos.get('pagadoAnual')) / pendiente_total:.2f}"
    else:
        indice_rotacion = "-"

    historial = []
    for c in datos.get("historialClientes") or []:
        total_cobros = entero(c.get("totalCobros"))
        if total_cobros < MIN_COBROS_HISTORIAL:
            continue
        valor = porcentaje(c.get("cobrosPagados"), total_cobros)
        historial.append({
            "nombre": c.get("nombre_cliente") or "",
            "totalCobros": total_cobros,
            "cobrosPagados": entero(c.get("cobrosPagados")),
            "valor": valor,
            "probabilidad": formatear_porcentaje(valor, 2),
            "nivel": nivel_probabilidad(valor),
        })
    historial.sort(key=lambda h: h["valor"], reverse=True)

    probabilidad = {
        "clientesConHistorial": len(historial),
        "clientesAlta": sum(1 for h in historial if h["nivel"] == "alta"),
        "clientesMedia": sum(1 for h in historial if h["nivel"] == "media"),
        "clientesBaja": sum(1 for h in historial if h["nivel"] == "baja"),
        "detalle": historial[:TOP_PROBABILIDAD],
    }

    return VistaProyeccionIngresos(
        titulo=TipoReporte.PROYECCION_INGRESOS.titulo,
        meses=list(meses.values()),
        total_proyectado=formatear_moneda(total, moneda),
        indice_rotacion=indice_rotacion,
        probabilidad=probabilidad,
        serie_meses=serie,
    )


# ---------------------------------------------------------------------------
# 5. ANÁLISIS DE RENTABILIDAD
# ---------------------------------------------------------------------------

@dataclass
class FilaServicio:
    id: int
    nombre: str
    precio_base: str
    precio_promedio: str
    desviacion_precio: str
    total_cobros: int
    cobros_pagados: int
    monto_facturado: str
    monto_cobrado: str
    monto_pendiente: str
    tiempo_promedio_pago: str
    tasa_conversion: str


@dataclass
class VistaRentabilidad:
    titulo: str
    periodo: str
    rango: str
    total_servicios: int
    total_facturado: str
    total_cobrado: str
    total_pendiente: str
    porcentaje_cobrado: str
    servicios: List[FilaServicio]
    serie_facturado: Serie


def analisis_rentabilidad(datos: Dict[str, Any], referencia: Optional[date] = None) -> VistaRentabilidad:
    moneda = datos.get("moneda") or "PEN"
    servicios = sorted(
        datos.get("servicios") or [],
        key=lambda s: decimal_o_cero(s.get("montoFacturado")),
        reverse=True,
    )

    filas = []
    serie = Serie()
    total_facturado = total_cobrado = total_pendiente = Decimal("0")
    for s in servicios:
        total = entero(s.get("totalCobros"))
        facturado = decimal_o_cero(s.get("montoFacturado"))
        cobrado = decimal_o_cero(s.get("montoCobrado"))
        pendiente = decimal_o_cero(s.get("montoPendiente"))
        promedio = facturado / total if total else Decimal("0")
        # La desviación contra el precio base usa la misma regla que las variaciones
        desviacion = calcular_variacion(promedio, s.get("precio_base"))
        dias = s.get("diasPromedioPago")

        total_facturado += facturado
        total_cobrado += cobrado
        total_pendiente += pendiente
        serie.agregar(s.get("nombre_servicio") or "", facturado)

        filas.append(FilaServicio(
            id=entero(s.get("id")),
            nombre=s.get("nombre_servicio") or "",
            precio_base=formatear_moneda(decimal_o_cero(s.get("precio_base")), moneda),
            precio_promedio=formatear_moneda(promedio, moneda),
            desviacion_precio=formatear_variacion(desviacion),
            total_cobros=total,
            cobros_pagados=entero(s.get("cobrosPagados")),
            monto_facturado=formatear_moneda(facturado, moneda),
            monto_cobrado=formatear_moneda(cobrado, moneda),
            monto_pendiente=formatear_moneda(pendiente, moneda),
            tiempo_promedio_pago="-" if dias is None else f"{float(dias):.1f} días",
            tasa_conversion=formatear_porcentaje(porcentaje(s.get("cobrosPagados"), total), 2),
        ))

    return VistaRentabilidad(
        titulo=TipoReporte.ANALISIS_RENTABILIDAD.titulo,
        periodo=nombre_periodo(datos.get("periodo")),
        rango=texto_rango(datos),
        total_servicios=len(filas),
        total_facturado=formatear_moneda(total_facturado, moneda),
        total_cobrado=formatear_moneda(total_cobrado, moneda),
        total_pendiente=formatear_moneda(total_pendiente, moneda),
        porcentaje_cobrado=formatear_porcentaje(porcentaje(total_cobrado, total_facturado), 2),
        servicios=filas,
        serie_facturado=serie,
    )


# ---------------------------------------------------------------------------
# DESPACHO
# ---------------------------------------------------------------------------

_TRANSFORMACIONES: Dict[TipoReporte, Callable[..., Any]] = {
    TipoReporte.RESUMEN_PAGOS: resumen_pagos,
    TipoReporte.ESTADO_CLIENTES: estado_clientes,
    TipoReporte.ANALISIS_ATRASOS: analisis_atrasos,
    TipoReporte.PROYECCION_INGRESOS: proyeccion_ingresos,
    TipoReporte.ANALISIS_RENTABILIDAD: analisis_rentabilidad,
}

_faltantes = set(TipoReporte) - set(_TRANSFORMACIONES)
if _faltantes:
    raise RuntimeError(f"Tipos de reporte sin transformación: {sorted(t.value for t in _faltantes)}")


def generar_vista(tipo: TipoReporte, datos: Dict[str, Any], referencia: Optional[date] = None):
    """Aplica la transformación que corresponde al tipo de reporte."""
    tipo = TipoReporte(tipo)
    return _TRANSFORMACIONES[tipo](datos or {}, referencia)


# ---------------------------------------------------------------------------
# DASHBOARD
# ---------------------------------------------------------------------------

@dataclass
class VistaDashboard:
    tarjetas: List[Tarjeta]
    indice_morosidad: str
    variacion_mensual: Variacion
    top_clientes_deuda: List[Dict[str, str]]
    serie_flujo: Serie
    serie_estados: Serie
    cobros_recientes: List[Dict[str, Any]]


def vista_dashboard(datos: Dict[str, Any], recientes: Optional[List[Dict[str, Any]]] = None) -> VistaDashboard:
    moneda = datos.get("moneda") or "PEN"
    total = entero(datos.get("totalCobros"))
    atrasados = entero(datos.get("cobrosAtrasados"))
    cambio = variacion(datos.get("cobradoMesActual"), datos.get("cobradoMesAnterior"))

    tarjetas = [
        Tarjeta("Clientes Activos", str(entero(datos.get("clientesActivos"))),
                detalle=f"de {entero(datos.get('totalClientes'))} registrados"),
        Tarjeta("Monto Pendiente", formatear_moneda(datos.get("montoPendiente"), moneda),
                detalle=f"{entero(datos.get('cobrosPendientes'))} cobros"),
        Tarjeta("Monto Cobrado", formatear_moneda(datos.get("montoCobrado"), moneda),
                detalle="este mes", variacion=cambio),
        Tarjeta("Cobros Atrasados", str(atrasados),
                detalle=formatear_moneda(datos.get("montoAtrasado"), moneda)),
    ]

    serie_flujo = Serie()
    for punto in datos.get("flujoCaja") or []:
        serie_flujo.agregar(formatear_fecha(punto.get("fecha")), decimal_o_cero(punto.get("monto")))

    serie_estados = Serie()
    serie_estados.agregar("Pagados", entero(datos.get("cobrosPagados")))
    serie_estados.agregar("Pendientes", entero(datos.get("cobrosPendientes")))
    serie_estados.agregar("Atrasados", atrasados)

    top = [
        {"nombre": c.get("nombre_cliente") or "", "monto": formatear_moneda(c.get("montoPendiente"), moneda)}
        for c in (datos.get("topClientesDeuda") or [])[:TOP_CONCENTRACION]
    ]

    filas = []
    if recientes is None:
        recientes = datos.get("cobrosRecientes")
    for cobro in recientes or []:
        retraso = calcular_retraso(cobro.get("fecha_vencimiento"), cobro.get("fecha_pago"))
        filas.append({
            "id": cobro.get("id"),
            "cliente": (cobro.get("cliente") or {}).get("nombre_cliente", ""),
            "monto": formatear_moneda(cobro.get("monto"), cobro.get("moneda") or moneda),
            "vencimiento": formatear_fecha(cobro.get("fecha_vencimiento")),
            "estado": cobro.get("estado_cobro") or "Pendiente",
            "clase_estado": clase_estado_cobro(cobro.get("estado_cobro")),
            "retraso": retraso.texto,
            "clase_retraso": retraso.clase,
        })

    return VistaDashboard(
        tarjetas=tarjetas,
        indice_morosidad=formatear_porcentaje(porcentaje(atrasados, total), 2),
        variacion_mensual=cambio,
        top_clientes_deuda=top,
        serie_flujo=serie_flujo,
        serie_estados=serie_estados,
        cobros_recientes=filas,
    )
