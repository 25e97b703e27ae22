from typing import Dict, Optional

from sqlalchemy.orm import Session
from pegasus.models import Configuracion

# Fragmentos que marcan una clave como sensible
CLAVES_SENSIBLES = ("token", "password", "secret", "key")


def es_clave_sensible(clave: str) -> bool:
    clave = clave.lower()
    return any(fragmento in clave for fragmento in CLAVES_SENSIBLES)


def get_valor(db: Session, clave: str, default: Optional[str] = None) -> Optional[str]:
    registro = db.get(Configuracion, clave)
    if registro is None or registro.valor is None:
        return default
    return registro.valor


def set_valor(db: Session, clave: str, valor: Optional[str], descripcion: Optional[str] = None):
    """Inserta o actualiza una clave. No hace commit."""
    registro = db.get(Configuracion, clave)
    if registro is None:
        registro = Configuracion(clave=clave, valor=valor, descripcion=descripcion)
        db.add(registro)
    else:
        registro.valor = valor
        if descripcion is not None:
            registro.descripcion = descripcion
    return registro


def get_publicas(db: Session) -> Dict[str, Optional[str]]:
    """Todas las claves no sensibles."""
    registros = db.query(Configuracion).order_by(Configuracion.clave).all()
    return {r.clave: r.valor for r in registros if not es_clave_sensible(r.clave)}
