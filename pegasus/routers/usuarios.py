import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from pegasus.database import get_db
from pegasus.models import Usuario
from pegasus.schemas.usuarios import UsuarioCreate, UsuarioRead, UsuarioUpdate, UsuarioEstado, CambioContrasena
from pegasus.security import require_admin, get_password_hash
from pegasus.crud.usuarios import get_rol, is_last_active_admin

logger = logging.getLogger(__name__)

router = APIRouter()

LONGITUD_MINIMA_CONTRASENA = 6


def _get_usuario_or_404(db: Session, usuario_id: int) -> Usuario:
    user = db.query(Usuario).filter(Usuario.id == usuario_id).first()
    if not user:
        raise HTTPException(status_code=404, detail="Usuario no encontrado")
    return user


def _validar_unicos(db: Session, nombre_usuario=None, correo=None, excluir_id=None):
    if nombre_usuario:
        query = db.query(Usuario).filter(Usuario.nombre_usuario == nombre_usuario)
        if excluir_id is not None:
            query = query.filter(Usuario.id != excluir_id)
        if query.first():
            raise HTTPException(status_code=409, detail=f"El nombre de usuario '{nombre_usuario}' ya existe.")
    if correo:
        query = db.query(Usuario).filter(Usuario.correo_electronico == correo)
        if excluir_id is not None:
            query = query.filter(Usuario.id != excluir_id)
        if query.first():
            raise HTTPException(status_code=409, detail=f"El correo electrónico '{correo}' ya está registrado.")


def _validar_contrasena(contrasena):
    if not contrasena or len(contrasena) < LONGITUD_MINIMA_CONTRASENA:
        raise HTTPException(
            status_code=400,
            detail=f"La contraseña debe tener al menos {LONGITUD_MINIMA_CONTRASENA} caracteres."
        )


def _get_rol_or_400(db: Session, nombre_rol: str):
    rol = get_rol(db, nombre_rol)
    if not rol:
        raise HTTPException(status_code=400, detail=f"Rol inválido: {nombre_rol}")
    return rol

# --- 1. LEER TODOS (READ) ---
@router.get("/", response_model=List[UsuarioRead])
def read_usuarios(
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(require_admin)
):
    return db.query(Usuario).order_by(Usuario.nombre_usuario).all()

# --- 2. LEER POR ID ---
@router.get("/{usuario_id}", response_model=UsuarioRead)
def read_usuario(
    usuario_id: int,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(require_admin)
):
    return _get_usuario_or_404(db, usuario_id)

# --- 3. CREAR USUARIO (CREATE) ---
@router.post("/", response_model=UsuarioRead, status_code=201)
def create_usuario(
    user_in: UsuarioCreate,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(require_admin)
):
    _validar_contrasena(user_in.contrasena)
    _validar_unicos(db, user_in.nombre_usuario, user_in.correo_electronico)
    rol = _get_rol_or_400(db, user_in.rol)

    nuevo = Usuario(
        nombre_usuario=user_in.nombre_usuario,
        correo_electronico=user_in.correo_electronico,
        nombre_completo=user_in.nombre_completo,
        contrasena_hash=get_password_hash(user_in.contrasena),
        rol_id=rol.id,
        activo=user_in.activo,
    )
    db.add(nuevo)
    db.commit()
    db.refresh(nuevo)
    logger.info(f"Usuario creado: {nuevo.nombre_usuario} ({rol.nombre_rol}) por {current_user.nombre_usuario}")
    return nuevo

# --- 4. ACTUALIZAR USUARIO (UPDATE) ---
@router.put("/{usuario_id}", response_model=UsuarioRead)
def update_usuario(
    usuario_id: int,
    user_in: UsuarioUpdate,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(require_admin)
):
    user_db = _get_usuario_or_404(db, usuario_id)
    update_data = user_in.dict(exclude_unset=True)
    _validar_unicos(db, update_data.get("nombre_usuario"), update_data.get("correo_electronico"), usuario_id)

    # Cambio de rol: no dejar el sistema sin administradores
    if "rol" in update_data:
        nombre_rol = update_data.pop("rol")
        if nombre_rol:
            rol = _get_rol_or_400(db, nombre_rol)
            if rol.id != user_db.rol_id and is_last_active_admin(db, user_db):
                raise HTTPException(
                    status_code=status.HTTP_403_FORBIDDEN,
                    detail="No se puede cambiar el rol del último administrador activo."
                )
            user_db.rol = rol

    for field, value in update_data.items():
        if value is not None and hasattr(user_db, field):
            setattr(user_db, field, value)

    db.commit()
    db.refresh(user_db)
    return user_db

# --- 5. ACTIVAR / DESACTIVAR ---
@router.patch("/{usuario_id}/estado", response_model=UsuarioRead)
def update_estado_usuario(
    usuario_id: int,
    estado_in: UsuarioEstado,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(require_admin)
):
    if estado_in.activo is None:
        raise HTTPException(status_code=400, detail="Se requiere el campo 'activo' (true/false).")

    user_db = _get_usuario_or_404(db, usuario_id)
    if not estado_in.activo and is_last_active_admin(db, user_db):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="No se puede desactivar al último administrador activo."
        )

    user_db.activo = estado_in.activo
    db.commit()
    db.refresh(user_db)
    logger.info(f"Usuario {user_db.nombre_usuario} {'activado' if user_db.activo else 'desactivado'}")
    return user_db

# --- 6. CAMBIO DE CONTRASEÑA ---
@router.patch("/{usuario_id}/contrasena")
def update_contrasena_usuario(
    usuario_id: int,
    cambio: CambioContrasena,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(require_admin)
):
    _validar_contrasena(cambio.nuevaContrasena)
    user_db = _get_usuario_or_404(db, usuario_id)

    user_db.contrasena_hash = get_password_hash(cambio.nuevaContrasena)
    db.commit()
    logger.info(f"Contraseña de {user_db.nombre_usuario} actualizada por {current_user.nombre_usuario}")
    return {"message": "Contraseña actualizada correctamente."}

# --- 7. ELIMINAR ---
@router.delete("/{usuario_id}", status_code=204)
def delete_usuario(
    usuario_id: int,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(require_admin)
):
    user_db = _get_usuario_or_404(db, usuario_id)

    if user_db.id == current_user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="No puede eliminar su propia cuenta.")
    if is_last_active_admin(db, user_db):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="No se puede eliminar al último administrador activo."
        )

    db.delete(user_db)
    db.commit()
    logger.info(f"Usuario {usuario_id} eliminado por {current_user.nombre_usuario}")
    return Response(status_code=204)
