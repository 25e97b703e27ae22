# pegasus/routers/reportes.py
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from pegasus.database import get_db
from pegasus.models import Usuario
from pegasus.security import get_current_user
from pegasus.services import reportes as servicio_reportes

router = APIRouter()


@router.get("/dashboard")
def get_dashboard(
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(get_current_user)
):
    """Indicadores generales para el tablero principal."""
    return servicio_reportes.dashboard(db)


@router.get("/resumen-pagos")
def get_resumen_pagos(
    periodo: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(get_current_user)
):
    """Totales por estado del periodo y del periodo anterior de igual duración."""
    return servicio_reportes.resumen_pagos(db, periodo)


@router.get("/estado-clientes")
def get_estado_clientes(
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(get_current_user)
):
    return servicio_reportes.estado_clientes(db)


@router.get("/analisis-atrasos")
def get_analisis_atrasos(
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(get_current_user)
):
    return servicio_reportes.analisis_atrasos(db)


@router.get("/proyeccion-ingresos")
def get_proyeccion_ingresos(
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(get_current_user)
):
    return servicio_reportes.proyeccion_ingresos(db)


@router.get("/analisis-rentabilidad")
def get_analisis_rentabilidad(
    periodo: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(get_current_user)
):
    return servicio_reportes.analisis_rentabilidad(db, periodo)
