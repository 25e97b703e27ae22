import enum
from sqlalchemy import Column, Integer, String, Boolean, Enum, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from pegasus.database import Base


class EstadoCliente(str, enum.Enum):
    ACTIVO = "Activo"
    INACTIVO = "Inactivo"
    PENDIENTE = "Pendiente"
    ATRASADO = "Atrasado"


class Cliente(Base):
    __tablename__ = "clientes"
    __table_args__ = {'extend_existing': True}

    id = Column(Integer, primary_key=True, index=True)
    nombre_cliente = Column(String(150), index=True, nullable=False)
    ruc_dni = Column(String(20), unique=True, index=True, nullable=False)  # RUC o DNI

    telefono = Column(String(20), nullable=True)
    correo_electronico = Column(String(100), nullable=True)
    direccion = Column(String, nullable=True)

    estado_cliente = Column(Enum(EstadoCliente), default=EstadoCliente.ACTIVO, nullable=False)
    # Bandera independiente del estado comercial
    activo = Column(Boolean, default=True)

    fecha_registro = Column(DateTime(timezone=True), server_default=func.now())
    ultima_modificacion = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    cobros = relationship("Cobro", back_populates="cliente")
