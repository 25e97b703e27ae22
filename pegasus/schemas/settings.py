from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class WhatsAppConnect(BaseModel):
    phoneNumberId: str
    accessToken: str
    apiUrl: Optional[str] = None


class WhatsAppNotify(BaseModel):
    clienteId: int
    mensaje: str
    tipo: str = "recordatorio"
    cobroId: Optional[int] = None


class WhatsAppStatus(BaseModel):
    status: str
    number: Optional[str] = None
    lastConnection: Optional[str] = None
    phoneId: Optional[str] = None
    apiUrl: Optional[str] = None
    message: str


class NotificacionRead(BaseModel):
    id: int
    cliente_id: int
    cobro_id: Optional[int] = None
    tipo: str
    telefono: str
    mensaje: str
    message_id: Optional[str] = None
    leida: bool
    fecha_envio: Optional[datetime] = None

    class Config:
        from_attributes = True
