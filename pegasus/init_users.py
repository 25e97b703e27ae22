"""
Crea las tablas, los roles y el primer administrador.

Uso: python -m pegasus.init_users [usuario] [contraseña]
"""

import logging
import sys

from pegasus.database import SessionLocal, engine, Base
from pegasus.security import get_password_hash
from pegasus.models import Rol, Usuario, ROL_ADMINISTRADOR, ROL_USUARIO

logger = logging.getLogger(__name__)

ROLES = {
    ROL_ADMINISTRADOR: "Acceso total, incluida la administración de usuarios y ajustes",
    ROL_USUARIO: "Gestión de clientes, cobros y reportes",
}


def init_users(username: str = "admin", password: str = "admin123"):
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()

    try:
        # 1. Roles
        for nombre, descripcion in ROLES.items():
            if not db.query(Rol).filter_by(nombre_rol=nombre).first():
                logger.info(f"Creando rol {nombre}...")
                db.add(Rol(nombre_rol=nombre, descripcion=descripcion))
        db.commit()

        # 2. Administrador inicial
        if not db.query(Usuario).filter_by(nombre_usuario=username).first():
            rol_admin = db.query(Rol).filter_by(nombre_rol=ROL_ADMINISTRADOR).first()
            logger.info(f"Creando administrador {username}...")
            db.add(Usuario(
                nombre_usuario=username,
                correo_electronico=f"{username}@pegasus.local",
                nombre_completo="Administrador del Sistema",
                contrasena_hash=get_password_hash(password),
                rol_id=rol_admin.id,
                activo=True,
            ))
            db.commit()
        logger.info("Base de datos inicializada.")
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    init_users(*sys.argv[1:3])
