# pegasus/routers/clientes.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from pegasus.database import get_db
from pegasus.models import Cliente, Cobro, EstadoCliente, Servicio, Usuario
from pegasus.schemas.clientes import ClienteCreate, ClienteRead, ClienteUpdate, ClientesPaginados
from pegasus.schemas.servicios import ServicioRead
from pegasus.security import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_cliente_or_404(db: Session, cliente_id: int) -> Cliente:
    cliente = db.query(Cliente).filter(Cliente.id == cliente_id).first()
    if not cliente:
        raise HTTPException(status_code=404, detail="Cliente no encontrado")
    return cliente


def _validar_ruc_unico(db: Session, ruc_dni: str, excluir_id: Optional[int] = None):
    query = db.query(Cliente).filter(Cliente.ruc_dni == ruc_dni)
    if excluir_id is not None:
        query = query.filter(Cliente.id != excluir_id)
    if query.first():
        raise HTTPException(status_code=409, detail=f"Ya existe un cliente con el RUC/DNI {ruc_dni}.")

# --------------------------------------------------------------------------
# 1. LISTAR CLIENTES
# --------------------------------------------------------------------------
@router.get("/", response_model=ClientesPaginados)
def get_clientes(
    nombre: Optional[str] = None,
    estado: Optional[str] = None,
    ruc_dni: Optional[str] = None,
    page: int = 1,
    limit: int = 50,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(get_current_user)
):
    query = db.query(Cliente)
    total_count = query.count()

    if nombre:
        # Búsqueda insensible a mayúsculas
        query = query.filter(Cliente.nombre_cliente.ilike(f"%{nombre}%"))
    if ruc_dni:
        query = query.filter(Cliente.ruc_dni.ilike(f"%{ruc_dni}%"))
    if estado and estado != "all":
        try:
            query = query.filter(Cliente.estado_cliente == EstadoCliente(estado))
        except ValueError:
            raise HTTPException(status_code=400, detail=f"Estado de cliente inválido: {estado}")

    filtered_count = query.count()
    page = max(page, 1)
    limit = max(min(limit, 500), 1)
    clientes = query.order_by(Cliente.nombre_cliente).offset((page - 1) * limit).limit(limit).all()

    return {
        "clientes": clientes,
        "meta": {"totalCount": total_count, "filteredCount": filtered_count, "page": page, "limit": limit},
    }

# --------------------------------------------------------------------------
# 2. OBTENER DETALLE (INDIVIDUAL)
# --------------------------------------------------------------------------
@router.get("/{cliente_id}", response_model=ClienteRead)
def get_cliente(
    cliente_id: int,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(get_current_user)
):
    return _get_cliente_or_404(db, cliente_id)

# --------------------------------------------------------------------------
# 3. CREAR CLIENTE
# --------------------------------------------------------------------------
@router.post("/", response_model=ClienteRead, status_code=201)
def create_cliente(
    cliente_in: ClienteCreate,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(get_current_user)
):
    _validar_ruc_unico(db, cliente_in.ruc_dni)

    nuevo = Cliente(**cliente_in.dict())
    db.add(nuevo)
    db.commit()
    db.refresh(nuevo)
    logger.info(f"Cliente creado: {nuevo.nombre_cliente} ({nuevo.ruc_dni}) por {current_user.nombre_usuario}")
    return nuevo

# --------------------------------------------------------------------------
# 4. ACTUALIZAR CLIENTE (PUT)
# --------------------------------------------------------------------------
@router.put("/{cliente_id}", response_model=ClienteRead)
def update_cliente(
    cliente_id: int,
    cliente_in: ClienteUpdate,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(get_current_user)
):
    cliente = _get_cliente_or_404(db, cliente_id)

    update_data = cliente_in.dict(exclude_unset=True)
    if update_data.get("ruc_dni"):
        _validar_ruc_unico(db, update_data["ruc_dni"], excluir_id=cliente_id)

    # Actualizamos campos dinámicamente
    for field, value in update_data.items():
        if hasattr(cliente, field):
            setattr(cliente, field, value)

    db.commit()
    db.refresh(cliente)
    return cliente

# --------------------------------------------------------------------------
# 5. ELIMINAR
# --------------------------------------------------------------------------
@router.delete("/{cliente_id}", status_code=204)
def delete_cliente(
    cliente_id: int,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(get_current_user)
):
    cliente = _get_cliente_or_404(db, cliente_id)

    # No eliminar si tiene cobros asociados
    total_cobros = db.query(Cobro).filter(Cobro.cliente_id == cliente_id).count()
    if total_cobros > 0:
        raise HTTPException(
            status_code=409,
            detail=f"No se puede eliminar el cliente porque tiene {total_cobros} cobros asociados."
        )

    db.delete(cliente)
    db.commit()
    logger.info(f"Cliente {cliente_id} eliminado por {current_user.nombre_usuario}")
    return Response(status_code=204)

# --------------------------------------------------------------------------
# 6. SERVICIOS CONTRATADOS
# --------------------------------------------------------------------------
@router.get("/{cliente_id}/servicios", response_model=List[ServicioRead])
def get_servicios_cliente(
    cliente_id: int,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(get_current_user)
):
    """Servicios distintos que se le han facturado al cliente."""
    _get_cliente_or_404(db, cliente_id)
    return db.query(Servicio).join(Cobro, Cobro.servicio_id == Servicio.id)\
        .filter(Cobro.cliente_id == cliente_id)\
        .distinct()\
        .order_by(Servicio.nombre_servicio)\
        .all()
