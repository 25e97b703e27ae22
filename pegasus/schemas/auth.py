from pydantic import BaseModel
from typing import Optional


class LoginRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class UsuarioSesion(BaseModel):
    id: int
    username: str
    nombre_completo: Optional[str] = None
    rol: str


class LoginResponse(BaseModel):
    message: str
    token: str
    usuario: UsuarioSesion


class VerificacionResponse(BaseModel):
    valid: bool
    usuario: UsuarioSesion
