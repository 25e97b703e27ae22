import logging
from typing import Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from pegasus.crud import configuracion as config_crud
from pegasus.database import get_db
from pegasus.models import Cliente, Cobro, Notificacion, Usuario
from pegasus.schemas.settings import WhatsAppConnect, WhatsAppNotify, WhatsAppStatus
from pegasus.security import get_current_user, require_admin
from pegasus.services.whatsapp import WhatsAppGateway, WhatsAppError

logger = logging.getLogger(__name__)

router = APIRouter()


# --- 1. AJUSTES GENERALES ---
@router.get("/", response_model=Dict[str, Optional[str]])
def get_settings(
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(get_current_user)
):
    """Ajustes públicos; las claves sensibles nunca se devuelven."""
    return config_crud.get_publicas(db)


@router.put("/", response_model=Dict[str, Optional[str]])
def update_settings(
    valores: Dict[str, Optional[str]],
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(require_admin)
):
    sensibles = [clave for clave in valores if config_crud.es_clave_sensible(clave)]
    if sensibles:
        raise HTTPException(
            status_code=400,
            detail=f"No se pueden modificar claves protegidas desde esta ruta: {', '.join(sorted(sensibles))}"
        )

    for clave, valor in valores.items():
        config_crud.set_valor(db, clave, valor)
    db.commit()
    logger.info(f"Ajustes actualizados por {current_user.nombre_usuario}: {sorted(valores)}")
    return config_crud.get_publicas(db)


# --- 2. WHATSAPP ---
@router.get("/whatsapp/status", response_model=WhatsAppStatus)
def whatsapp_status(
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(get_current_user)
):
    return WhatsAppGateway(db).estado()


@router.post("/whatsapp/connect", response_model=WhatsAppStatus)
def whatsapp_connect(
    datos: WhatsAppConnect,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(require_admin)
):
    try:
        return WhatsAppGateway(db).conectar(datos.phoneNumberId, datos.accessToken, datos.apiUrl)
    except WhatsAppError as e:
        raise HTTPException(status_code=502, detail=e.message)


@router.post("/whatsapp/disconnect", response_model=WhatsAppStatus)
def whatsapp_disconnect(
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(require_admin)
):
    return WhatsAppGateway(db).desconectar()


@router.post("/whatsapp/notify")
def whatsapp_notify(
    datos: WhatsAppNotify,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(get_current_user)
):
    """Envía un mensaje a un cliente y lo registra en la bitácora de notificaciones."""
    gateway = WhatsAppGateway(db)
    if not gateway.esta_conectado():
        raise HTTPException(status_code=400, detail="WhatsApp no está conectado.")

    cliente = db.get(Cliente, datos.clienteId)
    if not cliente:
        raise HTTPException(status_code=404, detail="Cliente no encontrado")
    if not cliente.telefono:
        raise HTTPException(status_code=400, detail="El cliente no tiene un número de teléfono registrado.")
    if datos.cobroId is not None and not db.get(Cobro, datos.cobroId):
        raise HTTPException(status_code=404, detail="Cobro no encontrado")
    if not datos.mensaje.strip():
        raise HTTPException(status_code=400, detail="El mensaje no puede estar vacío.")

    try:
        message_id = gateway.enviar_mensaje(cliente.telefono, datos.mensaje)
    except WhatsAppError as e:
        raise HTTPException(status_code=502, detail=f"No se pudo enviar el mensaje: {e.message}")

    notificacion = Notificacion(
        cliente_id=cliente.id,
        cobro_id=datos.cobroId,
        tipo=datos.tipo,
        telefono=cliente.telefono,
        mensaje=datos.mensaje,
        message_id=message_id,
    )
    db.add(notificacion)
    db.commit()
    db.refresh(notificacion)

    logger.info(f"Notificación {notificacion.id} ({datos.tipo}) enviada a cliente {cliente.id} por {current_user.nombre_usuario}")
    return {
        "success": True,
        "message": "Mensaje enviado correctamente.",
        "messageId": message_id,
        "notificacionId": notificacion.id,
    }
