from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import desc
from sqlalchemy.orm import Session

from pegasus.database import get_db
from pegasus.models import Notificacion, Usuario
from pegasus.schemas.settings import NotificacionRead
from pegasus.security import get_current_user

router = APIRouter()


@router.get("/", response_model=List[NotificacionRead])
def get_notificaciones(
    soloNoLeidas: bool = False,
    limit: int = 50,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(get_current_user)
):
    query = db.query(Notificacion)
    if soloNoLeidas:
        query = query.filter(Notificacion.leida == False)
    # No leídas primero, luego las más recientes
    return query.order_by(Notificacion.leida, desc(Notificacion.fecha_envio), desc(Notificacion.id)).limit(limit).all()


# Declarada antes de /{notificacion_id} para que no la capture el parámetro
@router.patch("/marcar-todas-leidas")
def marcar_todas_leidas(
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(get_current_user)
):
    actualizadas = db.query(Notificacion).filter(Notificacion.leida == False)\
        .update({Notificacion.leida: True}, synchronize_session=False)
    db.commit()
    return {"message": "Notificaciones marcadas como leídas.", "actualizadas": actualizadas}


@router.patch("/{notificacion_id}/leida", response_model=NotificacionRead)
def marcar_leida(
    notificacion_id: int,
    db: Session = Depends(get_db),
    current_user: Usuario = Depends(get_current_user)
):
    notificacion = db.get(Notificacion, notificacion_id)
    if not notificacion:
        raise HTTPException(status_code=404, detail="Notificación no encontrada")
    notificacion.leida = True
    db.commit()
    db.refresh(notificacion)
    return notificacion
