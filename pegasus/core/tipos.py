"""Variantes cerradas que reemplazan los selectores por texto."""

import enum


class TipoReporte(str, enum.Enum):
    RESUMEN_PAGOS = "payment-summary"
    ESTADO_CLIENTES = "client-status"
    ANALISIS_ATRASOS = "delay-analysis"
    PROYECCION_INGRESOS = "revenue-forecast"
    ANALISIS_RENTABILIDAD = "profitability-analysis"

    @property
    def endpoint(self) -> str:
        return ENDPOINTS_REPORTE[self]

    @property
    def titulo(self) -> str:
        return TITULOS_REPORTE[self]

    @property
    def usa_periodo(self) -> bool:
        return self in (TipoReporte.RESUMEN_PAGOS, TipoReporte.ANALISIS_RENTABILIDAD)


ENDPOINTS_REPORTE = {
    TipoReporte.RESUMEN_PAGOS: "/reportes/resumen-pagos",
    TipoReporte.ESTADO_CLIENTES: "/reportes/estado-clientes",
    TipoReporte.ANALISIS_ATRASOS: "/reportes/analisis-atrasos",
    TipoReporte.PROYECCION_INGRESOS: "/reportes/proyeccion-ingresos",
    TipoReporte.ANALISIS_RENTABILIDAD: "/reportes/analisis-rentabilidad",
}

TITULOS_REPORTE = {
    TipoReporte.RESUMEN_PAGOS: "Resumen de Pagos",
    TipoReporte.ESTADO_CLIENTES: "Estado de Clientes",
    TipoReporte.ANALISIS_ATRASOS: "Análisis de Atrasos",
    TipoReporte.PROYECCION_INGRESOS: "Proyección de Ingresos",
    TipoReporte.ANALISIS_RENTABILIDAD: "Análisis de Rentabilidad",
}


class TipoPlantilla(str, enum.Enum):
    RECORDATORIO_PAGO = "payment-reminder"
    RECORDATORIO_ATRASO = "overdue-reminder"
    RECIBO_PAGO = "payment-receipt"
    PERSONALIZADO = "custom"


class TipoMensaje(str, enum.Enum):
    """Motivo del mensaje, tal como lo registra el backend."""
    RECORDATORIO = "recordatorio"
    RECIBO = "recibo"
    PERSONALIZADO = "personalizado"


ROL_ADMINISTRADOR = "Administrador"
ROL_USUARIO = "Usuario"
ROLES = (ROL_ADMINISTRADOR, ROL_USUARIO)
