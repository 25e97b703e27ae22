from pydantic import BaseModel, EmailStr, Field
from typing import Optional
from datetime import datetime


class UsuarioBase(BaseModel):
    nombre_usuario: str
    correo_electronico: EmailStr
    nombre_completo: Optional[str] = None
    activo: bool = True


class UsuarioCreate(UsuarioBase):
    contrasena: str
    rol: str = "Usuario"


class UsuarioUpdate(BaseModel):
    nombre_usuario: Optional[str] = None
    correo_electronico: Optional[EmailStr] = None
    nombre_completo: Optional[str] = None
    rol: Optional[str] = None


class UsuarioRead(UsuarioBase):
    id: int
    correo_electronico: str
    # El modelo expone el rol como propiedad calculada
    rol: str = Field(validation_alias="nombre_rol")
    fecha_creacion: Optional[datetime] = None
    ultimo_acceso: Optional[datetime] = None

    class Config:
        from_attributes = True


class UsuarioEstado(BaseModel):
    activo: Optional[bool] = None


class CambioContrasena(BaseModel):
    nuevaContrasena: Optional[str] = None
