"""
Panel principal.

Los indicadores generales y los cobros recientes son obligatorios: si fallan
se notifica y se propaga el error. Los vencimientos próximos son accesorios:
un fallo se convierte en un resumen en cero y solo se avisa.
"""

import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Dict, List, Optional

from pegasus.client.api import extraer_lista
from pegasus.client.base import ModuloBase
from pegasus.client.errores import ApiError
from pegasus.config import settings
from pegasus.core.fechas import hoy
from pegasus.core.reportes import VistaDashboard, vista_dashboard
from pegasus.core.vencimientos import ResumenVencimientos, calcular_vencimientos_proximos

logger = logging.getLogger(__name__)

COBROS_RECIENTES = 5
PAGINA_VENCIMIENTOS = 500


@dataclass
class DatosDashboard:
    vista: VistaDashboard
    vencimientos: ResumenVencimientos


class DashboardModulo(ModuloBase):

    def __init__(self, api, notificador, referencia: Optional[date] = None):
        super().__init__(api, notificador)
        self.referencia = referencia
        self.datos: Optional[DatosDashboard] = None

    async def cargar(self) -> DatosDashboard:
        try:
            general = await self.api.get("/reportes/dashboard")
            recientes = await self.api.get("/cobros/", params={"limit": COBROS_RECIENTES})
        except ApiError as e:
            logger.error(f"Error cargando datos del dashboard: {e.message}")
            self.notificador.notificar("Error", "No se pudieron cargar datos del dashboard.", "error")
            raise

        vencimientos = await self.vencimientos_proximos()
        self.datos = DatosDashboard(
            vista=vista_dashboard(general, extraer_lista(recientes, "cobros")[:COBROS_RECIENTES]),
            vencimientos=vencimientos,
        )
        return self.datos

    async def _pendientes_en_ventana(self, inicio: date, fin: date) -> List[Dict[str, Any]]:
        """Todas las páginas de cobros pendientes que vencen en [inicio, fin]."""
        cobros: List[Dict[str, Any]] = []
        pagina = 1
        while True:
            respuesta = await self.api.get("/cobros/", params={
                "estado": "Pendiente",
                "vencimientoDesde": inicio.isoformat(),
                "vencimientoHasta": fin.isoformat(),
                "page": pagina,
                "limit": PAGINA_VENCIMIENTOS,
            })
            lote = extraer_lista(respuesta, "cobros")
            cobros.extend(lote)
            total = respuesta.get("total") if isinstance(respuesta, dict) else None
            if len(lote) < PAGINA_VENCIMIENTOS or (total is not None and len(cobros) >= total):
                return cobros
            pagina += 1

    async def vencimientos_proximos(self) -> ResumenVencimientos:
        inicio = self.referencia or hoy()
        fin = inicio + timedelta(days=settings.dues_window_days)
        try:
            pendientes = await self._pendientes_en_ventana(inicio, fin)
        except ApiError as e:
            logger.error(f"Error al calcular vencimientos próximos: {e.message}")
            self.notificador.notificar(
                "Vencimientos", "No se pudieron cargar los vencimientos próximos.", "warning"
            )
            return ResumenVencimientos.vacio()
        return calcular_vencimientos_proximos(
            pendientes,
            referencia=inicio,
            ventana_dias=settings.dues_window_days,
        )
