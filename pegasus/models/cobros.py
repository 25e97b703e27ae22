import enum
from sqlalchemy import Column, Integer, String, Numeric, ForeignKey, Enum, Date, DateTime, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from pegasus.database import Base


class EstadoCobro(str, enum.Enum):
    PENDIENTE = "Pendiente"
    PAGADO = "Pagado"
    ATRASADO = "Atrasado"
    ANULADO = "Anulado"


class Cobro(Base):
    """
    Cargo facturado a un cliente.
    El estado lo decide el backend; el cliente solo solicita transiciones.
    """
    __tablename__ = "cobros"
    __table_args__ = {'extend_existing': True}

    id = Column(Integer, primary_key=True, index=True)
    cliente_id = Column(Integer, ForeignKey("clientes.id"), nullable=False, index=True)
    servicio_id = Column(Integer, ForeignKey("servicios.id"), nullable=True)
    descripcion_servicio_personalizado = Column(String, nullable=True)

    monto = Column(Numeric(10, 2), nullable=False)
    moneda = Column(String(3), default="PEN", nullable=False)

    fecha_emision = Column(Date, nullable=False)
    fecha_vencimiento = Column(Date, nullable=False, index=True)
    fecha_pago = Column(Date, nullable=True)

    estado_cobro = Column(Enum(EstadoCobro), default=EstadoCobro.PENDIENTE, nullable=False, index=True)
    metodo_pago = Column(String(50), nullable=True)
    numero_referencia = Column(String(100), nullable=True)
    notas = Column(Text, nullable=True)

    fecha_creacion = Column(DateTime(timezone=True), server_default=func.now())
    ultima_modificacion = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    cliente = relationship("Cliente", back_populates="cobros")
    servicio = relationship("Servicio", back_populates="cobros")
