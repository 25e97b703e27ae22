import logging
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from pegasus.database import get_db
from pegasus.models import Usuario
from pegasus.security import verify_password, create_access_token, get_current_user, ACCESS_TOKEN_EXPIRE_MINUTES
from pegasus.schemas.auth import LoginRequest, LoginResponse, VerificacionResponse
from pegasus.crud.usuarios import get_user_by_username

logger = logging.getLogger(__name__)

router = APIRouter()


def _usuario_sesion(user: Usuario) -> dict:
    return {
        "id": user.id,
        "username": user.nombre_usuario,
        "nombre_completo": user.nombre_completo,
        "rol": user.nombre_rol,
    }


# --- 1. INICIO DE SESIÓN ---
@router.post("/login", response_model=LoginResponse)
def login(credenciales: LoginRequest, db: Session = Depends(get_db)):
    if not credenciales.username or not credenciales.password:
        raise HTTPException(status_code=400, detail="Por favor, ingresa usuario y contraseña.")

    # 1. Buscar usuario y verificar contraseña
    user = get_user_by_username(db, username=credenciales.username)
    if not user or not verify_password(credenciales.password, user.contrasena_hash):
        logger.warning(f"Intento de login fallido para '{credenciales.username}'")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Credenciales incorrectas.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    # 2. Cuenta desactivada
    if not user.activo:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="La cuenta de usuario está inactiva.",
        )

    # 3. Generar Token
    access_token = create_access_token(
        data={"sub": user.nombre_usuario, "rol": user.nombre_rol},
        expires_delta=timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)
    )

    user.ultimo_acceso = datetime.now(timezone.utc)
    db.commit()

    logger.info(f"Inicio de sesión: {user.nombre_usuario} ({user.nombre_rol})")
    return {
        "message": "Inicio de sesión exitoso.",
        "token": access_token,
        "usuario": _usuario_sesion(user),
    }


# --- 2. VERIFICAR TOKEN ---
@router.get("/verificar", response_model=VerificacionResponse)
def verificar_token(current_user: Usuario = Depends(get_current_user)):
    return {"valid": True, "usuario": _usuario_sesion(current_user)}
