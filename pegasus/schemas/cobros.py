from pydantic import BaseModel
from typing import Optional, List
from decimal import Decimal
from datetime import date, datetime

from pegasus.models import EstadoCobro
from pegasus.schemas.clientes import ClienteResumen
from pegasus.schemas.servicios import ServicioResumen


class CobroBase(BaseModel):
    servicio_id: Optional[int] = None
    descripcion_servicio_personalizado: Optional[str] = None
    moneda: str = "PEN"
    estado_cobro: EstadoCobro = EstadoCobro.PENDIENTE
    fecha_pago: Optional[date] = None
    metodo_pago: Optional[str] = None
    numero_referencia: Optional[str] = None
    notas: Optional[str] = None


# Los obligatorios se validan en el router para responder 400 con mensaje claro
class CobroCreate(CobroBase):
    cliente_id: Optional[int] = None
    monto: Optional[Decimal] = None
    fecha_emision: Optional[date] = None
    fecha_vencimiento: Optional[date] = None


class CobroUpdate(BaseModel):
    cliente_id: Optional[int] = None
    servicio_id: Optional[int] = None
    descripcion_servicio_personalizado: Optional[str] = None
    monto: Optional[Decimal] = None
    moneda: Optional[str] = None
    fecha_emision: Optional[date] = None
    fecha_vencimiento: Optional[date] = None
    fecha_pago: Optional[date] = None
    estado_cobro: Optional[EstadoCobro] = None
    metodo_pago: Optional[str] = None
    numero_referencia: Optional[str] = None
    notas: Optional[str] = None


class CobroRead(CobroBase):
    id: int
    cliente_id: int
    monto: Decimal
    fecha_emision: date
    fecha_vencimiento: date
    fecha_creacion: Optional[datetime] = None

    cliente: Optional[ClienteResumen] = None
    servicio: Optional[ServicioResumen] = None

    class Config:
        from_attributes = True


class CobrosListado(BaseModel):
    cobros: List[CobroRead]
    total: int
