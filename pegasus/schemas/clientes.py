from pydantic import BaseModel, EmailStr
from typing import Optional, List
from datetime import datetime

from pegasus.models import EstadoCliente

# --- CLASES BASE ---

class ClienteBase(BaseModel):
    nombre_cliente: str
    ruc_dni: str                       # RUC (11 dígitos) o DNI (8 dígitos)
    telefono: Optional[str] = None     # Necesario para recordatorios por WhatsApp
    correo_electronico: Optional[EmailStr] = None
    direccion: Optional[str] = None
    estado_cliente: EstadoCliente = EstadoCliente.ACTIVO
    activo: bool = True

# --- CREACIÓN ---
class ClienteCreate(ClienteBase):
    pass

# --- ACTUALIZACIÓN ---
class ClienteUpdate(BaseModel):
    nombre_cliente: Optional[str] = None
    ruc_dni: Optional[str] = None
    telefono: Optional[str] = None
    correo_electronico: Optional[EmailStr] = None
    direccion: Optional[str] = None
    estado_cliente: Optional[EstadoCliente] = None
    activo: Optional[bool] = None

# --- LECTURA (RESPONSE) ---
class ClienteRead(ClienteBase):
    id: int
    correo_electronico: Optional[str] = None
    fecha_registro: Optional[datetime] = None

    class Config:
        from_attributes = True

# Versión reducida que viaja embebida en cada cobro
class ClienteResumen(BaseModel):
    id: int
    nombre_cliente: str
    ruc_dni: Optional[str] = None
    telefono: Optional[str] = None

    class Config:
        from_attributes = True


class MetaListado(BaseModel):
    totalCount: int
    filteredCount: int
    page: int
    limit: int


class ClientesPaginados(BaseModel):
    clientes: List[ClienteRead]
    meta: MetaListado
