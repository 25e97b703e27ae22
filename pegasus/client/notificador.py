"""Notificaciones al usuario (el equivalente a los toasts de la interfaz)."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Protocol

logger = logging.getLogger(__name__)

NIVELES = {
    "success": logging.INFO,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class Notificador(Protocol):
    def notificar(self, titulo: str, mensaje: str, tipo: str = "info") -> None:
        ...


@dataclass
class Aviso:
    titulo: str
    mensaje: str
    tipo: str
    fecha: datetime = field(default_factory=datetime.now)


class RegistroNotificaciones:
    """Registra los avisos en el log y los conserva en memoria."""

    def __init__(self):
        self.historial: List[Aviso] = []

    def notificar(self, titulo: str, mensaje: str, tipo: str = "info") -> None:
        aviso = Aviso(titulo, mensaje, tipo)
        self.historial.append(aviso)
        logger.log(NIVELES.get(tipo, logging.INFO), f"[{tipo}] {titulo}: {mensaje}")

    @property
    def ultimo(self) -> Optional[Aviso]:
        return self.historial[-1] if self.historial else None

    def de_tipo(self, tipo: str) -> List[Aviso]:
        return [a for a in self.historial if a.tipo == tipo]

    def limpiar(self) -> None:
        self.historial.clear()
