"""
Renderizado de HTML para los archivos exportados (reportes y recibos).

Los modelos de vista llegan ya formateados desde pegasus.core; las
plantillas solo los presentan.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping

from jinja2 import Environment, PackageLoader, select_autoescape

from pegasus.core.formato import formatear_fecha, formatear_moneda

EMPRESA = "PEGASUS S.A.C."


class Renderizador:
    """render(plantilla, modelo) -> HTML."""

    def __init__(self, env: Environment = None):
        self.env = env or Environment(
            loader=PackageLoader("pegasus", "templates"),
            autoescape=select_autoescape(["html"]),
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["moneda"] = formatear_moneda
        self.env.filters["fecha"] = formatear_fecha
        self.env.globals["empresa"] = EMPRESA

    def render(self, plantilla: str, modelo: Mapping[str, Any]) -> str:
        contexto = {"anio": datetime.now().year, "generado": datetime.now()}
        contexto.update(modelo)
        return self.env.get_template(plantilla).render(contexto)


@dataclass(frozen=True)
class ArchivoExportado:
    """Archivo generado en el cliente para descarga; no se guarda en el servidor."""
    nombre: str
    contenido: str
    tipo_mime: str = "text/html"
