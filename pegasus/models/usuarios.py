from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from pegasus.core.tipos import ROL_ADMINISTRADOR, ROL_USUARIO
from pegasus.database import Base


class Rol(Base):
    __tablename__ = "roles"
    __table_args__ = {'extend_existing': True}

    id = Column(Integer, primary_key=True, index=True)
    nombre_rol = Column(String(50), unique=True, nullable=False)
    descripcion = Column(String, nullable=True)

    usuarios = relationship("Usuario", back_populates="rol")


class Usuario(Base):
    __tablename__ = "usuarios"
    __table_args__ = {'extend_existing': True}

    id = Column(Integer, primary_key=True, index=True)
    nombre_usuario = Column(String(50), unique=True, index=True, nullable=False)
    correo_electronico = Column(String(100), unique=True, nullable=False)
    contrasena_hash = Column(String, nullable=False)
    nombre_completo = Column(String(100), nullable=True)

    rol_id = Column(Integer, ForeignKey("roles.id"), nullable=False)
    activo = Column(Boolean, default=True)

    fecha_creacion = Column(DateTime(timezone=True), server_default=func.now())
    ultimo_acceso = Column(DateTime(timezone=True), nullable=True)

    rol = relationship("Rol", back_populates="usuarios", lazy="joined")

    @property
    def nombre_rol(self) -> str:
        return self.rol.nombre_rol if self.rol else ROL_USUARIO

    @property
    def es_admin(self) -> bool:
        return self.nombre_rol == ROL_ADMINISTRADOR
