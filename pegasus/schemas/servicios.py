from pydantic import BaseModel, Field
from typing import Optional
from decimal import Decimal
from datetime import datetime


class ServicioBase(BaseModel):
    nombre_servicio: str
    descripcion: Optional[str] = None
    precio_base: Decimal = Field(default=Decimal("0.00"), ge=0)
    activo: bool = True


class ServicioCreate(ServicioBase):
    pass


class ServicioUpdate(BaseModel):
    nombre_servicio: Optional[str] = None
    descripcion: Optional[str] = None
    precio_base: Optional[Decimal] = Field(default=None, ge=0)
    activo: Optional[bool] = None


class ServicioRead(ServicioBase):
    id: int
    fecha_creacion: Optional[datetime] = None

    class Config:
        from_attributes = True


class ServicioResumen(BaseModel):
    id: int
    nombre_servicio: str

    class Config:
        from_attributes = True


class EstadisticasServicio(BaseModel):
    servicio: ServicioRead
    totalCobros: int
    cobrosPagados: int
    cobrosPendientes: int
    cobrosAtrasados: int
    clientesUnicos: int
    montoTotal: Decimal
    montoPagado: Decimal
    montoPendiente: Decimal
    porcentajeCobrado: float
