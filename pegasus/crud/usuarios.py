from typing import Optional

from sqlalchemy.orm import Session
from pegasus.models import Usuario, Rol, ROL_ADMINISTRADOR


def get_user_by_username(db: Session, username: str):
    """Busca un usuario (activo o no) por su nombre de usuario."""
    return db.query(Usuario).filter(Usuario.nombre_usuario == username).first()


def get_rol(db: Session, nombre_rol: str) -> Optional[Rol]:
    return db.query(Rol).filter(Rol.nombre_rol == nombre_rol).first()


def count_active_admins(db: Session) -> int:
    """Cuántos administradores activos quedan."""
    return db.query(Usuario).join(Rol).filter(
        Rol.nombre_rol == ROL_ADMINISTRADOR,
        Usuario.activo == True
    ).count()


def is_last_active_admin(db: Session, usuario: Usuario) -> bool:
    return usuario.es_admin and usuario.activo and count_active_admins(db) <= 1
