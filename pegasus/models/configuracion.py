from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, DateTime, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from pegasus.database import Base


class Configuracion(Base):
    """Almacén clave/valor de ajustes del sistema y credenciales de WhatsApp."""
    __tablename__ = "configuracion"
    __table_args__ = {'extend_existing': True}

    clave = Column(String(100), primary_key=True)
    valor = Column(Text, nullable=True)
    descripcion = Column(String, nullable=True)


class Notificacion(Base):
    """Bitácora de mensajes enviados por WhatsApp."""
    __tablename__ = "notificaciones"
    __table_args__ = {'extend_existing': True}

    id = Column(Integer, primary_key=True, index=True)
    cliente_id = Column(Integer, ForeignKey("clientes.id"), nullable=False)
    cobro_id = Column(Integer, ForeignKey("cobros.id"), nullable=True)

    tipo = Column(String(30), default="recordatorio")
    telefono = Column(String(20), nullable=False)
    mensaje = Column(Text, nullable=False)
    message_id = Column(String, nullable=True)  # ID devuelto por WhatsApp

    leida = Column(Boolean, default=False)
    fecha_envio = Column(DateTime(timezone=True), server_default=func.now())

    cliente = relationship("Cliente")
