# pegasus/routers/cobros.py
import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy import desc
from sqlalchemy.orm import Session, joinedload

from pegasus.core.fechas import rango_periodo
from pegasus.database import get_db
from pegasus.models import Cliente, Cobro, EstadoCobro, Servicio, Usuario
from pegasus.schemas.cobros import CobroCreate, CobroRead, CobroUpdate, CobrosListado
from pegasus.security import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_cobro_or_404(db: Session, cobro_id: int) -> Cobro:
    cobro = db.query(Cobro).options(
        joinedload(Cobro.cliente), joinedload(Cobro.servicio)
    ).filter(Cobro.id == cobro_id).first()
    if not cobro:
        raise HTTPException(status_code=404, detail="Cobro no encontrado")
    return cobro


def _validar_referencias(db: Session, cliente_id: Optional[int], servicio_id: Optional[int]):
    if cliente_id is not None and not db.get(Cliente, cliente_id):
        raise HTTPException(status_code=404, detail="Cliente no encontrado")
    if servicio_id is not None and not db.get(Servicio, servicio_id):
        raise HTTPException(status_code=404, detail="Servicio no encontrado")

# --------------------------------------------------------------------------
# 1. LISTAR COBROS
# --------------------------------------------------------------------------
@router.get("/", response_model=CobrosListado)
def get_cobros(
    estado: Optional[EstadoCobro] = None,
    clienteId: Optional[int] = None,
    fechaInicio: Optional[date] = None,
    fechaFin: Optional[date] = None,
    periodo: Optional[str] = None,
    vencimientoDesde: Optional[date] = None,
    vencimientoHasta: Optional[date] = None,
    page: int = 1,
    limit: int = 100,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(get_current_user)
):
    query = db.query(Cobro).options(joinedload(Cobro.cliente), joinedload(Cobro.servicio))

    if estado:
        query = query.filter(Cobro.estado_cobro == estado)
    if clienteId:
        query = query.filter(Cobro.cliente_id == clienteId)
    if periodo:
        fechaInicio, fechaFin = rango_periodo(periodo)
    if fechaInicio:
        query = query.filter(Cobro.fecha_emision >= fechaInicio)
    if fechaFin:
        query = query.filter(Cobro.fecha_emision <= fechaFin)
    if vencimientoDesde:
        query = query.filter(Cobro.fecha_vencimiento >= vencimientoDesde)
    if vencimientoHasta:
        query = query.filter(Cobro.fecha_vencimiento <= vencimientoHasta)

    total = query.count()
    page = max(page, 1)
    limit = max(min(limit, 500), 1)
    cobros = query.order_by(desc(Cobro.fecha_vencimiento), desc(Cobro.id))\
        .offset((page - 1) * limit)\
        .limit(limit)\
        .all()
    return {"cobros": cobros, "total": total}

# --------------------------------------------------------------------------
# 2. DETALLE
# --------------------------------------------------------------------------
@router.get("/{cobro_id}", response_model=CobroRead)
def get_cobro(
    cobro_id: int,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(get_current_user)
):
    return _get_cobro_or_404(db, cobro_id)

# --------------------------------------------------------------------------
# 3. REGISTRAR COBRO
# --------------------------------------------------------------------------
@router.post("/", response_model=CobroRead, status_code=201)
def create_cobro(
    cobro_in: CobroCreate,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(get_current_user)
):
    if (cobro_in.cliente_id is None or cobro_in.monto is None
            or cobro_in.fecha_emision is None or cobro_in.fecha_vencimiento is None):
        raise HTTPException(status_code=400, detail="Faltan datos requeridos (cliente, monto, fechas).")

    if cobro_in.monto <= 0:
        raise HTTPException(status_code=400, detail="El monto debe ser mayor a cero.")
    if cobro_in.fecha_vencimiento < cobro_in.fecha_emision:
        raise HTTPException(status_code=400, detail="La fecha de vencimiento no puede ser anterior a la de emisión.")

    _validar_referencias(db, cobro_in.cliente_id, cobro_in.servicio_id)

    nuevo = Cobro(**cobro_in.dict())
    if nuevo.estado_cobro == EstadoCobro.PAGADO and not nuevo.fecha_pago:
        nuevo.fecha_pago = date.today()

    db.add(nuevo)
    db.commit()
    logger.info(f"Cobro {nuevo.id} registrado para cliente {nuevo.cliente_id} por {nuevo.moneda} {nuevo.monto}")
    return _get_cobro_or_404(db, nuevo.id)

# --------------------------------------------------------------------------
# 4. ACTUALIZAR (incluye marcar como pagado)
# --------------------------------------------------------------------------
@router.put("/{cobro_id}", response_model=CobroRead)
def update_cobro(
    cobro_id: int,
    cobro_in: CobroUpdate,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(get_current_user)
):
    cobro = _get_cobro_or_404(db, cobro_id)
    update_data = cobro_in.dict(exclude_unset=True)
    _validar_referencias(db, update_data.get("cliente_id"), update_data.get("servicio_id"))

    for field, value in update_data.items():
        if hasattr(cobro, field):
            setattr(cobro, field, value)

    if cobro.fecha_vencimiento < cobro.fecha_emision:
        raise HTTPException(status_code=400, detail="La fecha de vencimiento no puede ser anterior a la de emisión.")

    # Pasar a Pagado sin fecha de pago -> hoy
    if cobro.estado_cobro == EstadoCobro.PAGADO and not cobro.fecha_pago:
        cobro.fecha_pago = date.today()

    db.commit()
    logger.info(f"Cobro {cobro_id} actualizado ({cobro.estado_cobro.value}) por {current_user.nombre_usuario}")
    return _get_cobro_or_404(db, cobro_id)

# --------------------------------------------------------------------------
# 5. ELIMINAR
# --------------------------------------------------------------------------
@router.delete("/{cobro_id}", status_code=204)
def delete_cobro(
    cobro_id: int,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(get_current_user)
):
    cobro = _get_cobro_or_404(db, cobro_id)
    db.delete(cobro)
    db.commit()
    return Response(status_code=204)
