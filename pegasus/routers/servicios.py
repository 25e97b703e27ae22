import logging
from decimal import Decimal
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy import func
from sqlalchemy.orm import Session

from pegasus.database import get_db
from pegasus.models import Cobro, EstadoCobro, Servicio, Usuario
from pegasus.schemas.servicios import ServicioCreate, ServicioRead, ServicioUpdate, EstadisticasServicio
from pegasus.security import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_servicio_or_404(db: Session, servicio_id: int) -> Servicio:
    servicio = db.query(Servicio).filter(Servicio.id == servicio_id).first()
    if not servicio:
        raise HTTPException(status_code=404, detail="Servicio no encontrado")
    return servicio


def _validar_nombre_unico(db: Session, nombre: str, excluir_id: Optional[int] = None):
    query = db.query(Servicio).filter(func.lower(Servicio.nombre_servicio) == nombre.lower())
    if excluir_id is not None:
        query = query.filter(Servicio.id != excluir_id)
    if query.first():
        raise HTTPException(status_code=409, detail=f"Ya existe un servicio con el nombre {nombre}.")


# --- 1. LISTAR SERVICIOS ---
@router.get("/", response_model=List[ServicioRead])
def get_servicios(
    search: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(get_current_user)
):
    query = db.query(Servicio)
    if search:
        query = query.filter(Servicio.nombre_servicio.ilike(f"%{search}%"))
    return query.order_by(Servicio.nombre_servicio).all()


# --- 2. DETALLE ---
@router.get("/{servicio_id}", response_model=ServicioRead)
def get_servicio(
    servicio_id: int,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(get_current_user)
):
    return _get_servicio_or_404(db, servicio_id)


# --- 3. CREAR ---
@router.post("/", response_model=ServicioRead, status_code=201)
def create_servicio(
    servicio_in: ServicioCreate,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(get_current_user)
):
    _validar_nombre_unico(db, servicio_in.nombre_servicio)

    nuevo = Servicio(**servicio_in.dict())
    db.add(nuevo)
    db.commit()
    db.refresh(nuevo)
    logger.info(f"Servicio creado: {nuevo.nombre_servicio}")
    return nuevo


# --- 4. ACTUALIZAR ---
@router.put("/{servicio_id}", response_model=ServicioRead)
def update_servicio(
    servicio_id: int,
    servicio_in: ServicioUpdate,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(get_current_user)
):
    servicio = _get_servicio_or_404(db, servicio_id)

    update_data = servicio_in.dict(exclude_unset=True)
    if update_data.get("nombre_servicio"):
        _validar_nombre_unico(db, update_data["nombre_servicio"], excluir_id=servicio_id)

    for field, value in update_data.items():
        if hasattr(servicio, field):
            setattr(servicio, field, value)

    db.commit()
    db.refresh(servicio)
    return servicio


# --- 5. ELIMINAR ---
@router.delete("/{servicio_id}", status_code=204)
def delete_servicio(
    servicio_id: int,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(get_current_user)
):
    servicio = _get_servicio_or_404(db, servicio_id)

    total_cobros = db.query(Cobro).filter(Cobro.servicio_id == servicio_id).count()
    if total_cobros > 0:
        raise HTTPException(
            status_code=409,
            detail=f"No se puede eliminar el servicio porque está asociado a {total_cobros} cobro(s)."
        )

    db.delete(servicio)
    db.commit()
    return Response(status_code=204)


# --- 6. ESTADÍSTICAS ---
@router.get("/{servicio_id}/estadisticas", response_model=EstadisticasServicio)
def get_estadisticas_servicio(
    servicio_id: int,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(get_current_user)
):
    """Conteos y montos de los cobros emitidos para el servicio."""
    servicio = _get_servicio_or_404(db, servicio_id)
    cobros = db.query(Cobro).filter(Cobro.servicio_id == servicio_id).all()

    def monto(estados) -> Decimal:
        return sum((c.monto for c in cobros if c.estado_cobro in estados), Decimal("0"))

    monto_total = sum((c.monto for c in cobros), Decimal("0"))
    monto_pagado = monto((EstadoCobro.PAGADO,))

    return {
        "servicio": servicio,
        "totalCobros": len(cobros),
        "cobrosPagados": sum(1 for c in cobros if c.estado_cobro == EstadoCobro.PAGADO),
        "cobrosPendientes": sum(1 for c in cobros if c.estado_cobro == EstadoCobro.PENDIENTE),
        "cobrosAtrasados": sum(1 for c in cobros if c.estado_cobro == EstadoCobro.ATRASADO),
        "clientesUnicos": len({c.cliente_id for c in cobros}),
        "montoTotal": monto_total,
        "montoPagado": monto_pagado,
        "montoPendiente": monto((EstadoCobro.PENDIENTE, EstadoCobro.ATRASADO)),
        "porcentajeCobrado": round(float(monto_pagado / monto_total * 100), 2) if monto_total else 0.0,
    }
