from sqlalchemy import Column, Integer, String, Boolean, Numeric, DateTime
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from pegasus.database import Base


class Servicio(Base):
    __tablename__ = "servicios"
    __table_args__ = {'extend_existing': True}

    id = Column(Integer, primary_key=True, index=True)
    nombre_servicio = Column(String(100), unique=True, index=True, nullable=False)
    descripcion = Column(String, nullable=True)
    precio_base = Column(Numeric(10, 2), default=0.00)
    activo = Column(Boolean, default=True)

    fecha_creacion = Column(DateTime(timezone=True), server_default=func.now())

    cobros = relationship("Cobro", back_populates="servicio")
