"""
Generación y exportación de reportes.

Generar un reporte es una acción explícita del usuario: si falla se avisa y
se propaga el error, y el último reporte generado no cambia. La exportación
usa el modelo de vista tal cual quedó en la última generación exitosa.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Dict, Optional, Union

from pegasus.client.base import ModuloBase
from pegasus.client.errores import ApiError, ReporteNoDisponible
from pegasus.client.render import ArchivoExportado, Renderizador
from pegasus.core.fechas import Periodo, parse_periodo
from pegasus.core.formato import nombre_archivo_fecha
from pegasus.core.reportes import generar_vista
from pegasus.core.tipos import TipoReporte

logger = logging.getLogger(__name__)


@dataclass
class ReporteGenerado:
    tipo: TipoReporte
    datos: Dict[str, Any]
    vista: Any
    periodo: Optional[Periodo] = None
    generado: datetime = field(default_factory=datetime.now)


class ReportesModulo(ModuloBase):

    def __init__(self, api, notificador, renderizador: Optional[Renderizador] = None,
                 referencia: Optional[date] = None):
        super().__init__(api, notificador)
        self.renderizador = renderizador or Renderizador()
        self.referencia = referencia
        self.ultimo_reporte: Optional[ReporteGenerado] = None

    @property
    def exportacion_habilitada(self) -> bool:
        return self.ultimo_reporte is not None

    async def generar(self, tipo: Union[TipoReporte, str],
                      periodo: Union[Periodo, str, None] = None) -> ReporteGenerado:
        tipo = TipoReporte(tipo)
        params = None
        periodo_usado = None
        if tipo.usa_periodo:
            periodo_usado = parse_periodo(periodo)
            params = {"periodo": periodo_usado.value}

        try:
            datos = await self.api.get(tipo.endpoint, params=params)
        except ApiError as e:
            logger.error(f"Error generando reporte {tipo.value}: {e.message}")
            self.notificar_error(e, "No se pudo generar el reporte.")
            raise

        try:
            vista = generar_vista(tipo, datos, self.referencia)
        except (ValueError, TypeError, AttributeError, ArithmeticError) as e:
            logger.error(f"Datos inválidos para el reporte {tipo.value}: {e}")
            self.notificar_error(e, "Los datos recibidos para el reporte no son válidos.")
            raise

        reporte = ReporteGenerado(tipo=tipo, datos=datos, vista=vista, periodo=periodo_usado)
        self.ultimo_reporte = reporte
        logger.info(f"Reporte generado: {tipo.titulo}")
        return reporte

    def exportar(self) -> ArchivoExportado:
        reporte = self.ultimo_reporte
        if reporte is None:
            error = ReporteNoDisponible()
            self.notificador.notificar("Error", error.message, "error")
            raise error

        html = self.renderizador.render("reporte.html", {
            "tipo": reporte.tipo.value,
            "titulo": reporte.tipo.titulo,
            "vista": reporte.vista,
            "generado": reporte.generado,
        })
        nombre = f"reporte_pegasus_{reporte.tipo.value}_{nombre_archivo_fecha()}.html"
        self.notificador.notificar("Reporte Exportado", f"Se generó el archivo {nombre}.", "success")
        return ArchivoExportado(nombre=nombre, contenido=html)
