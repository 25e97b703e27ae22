"""
PEGASUS - Gateway de WhatsApp Business

Integración con la Cloud API de WhatsApp (Graph API de Meta).

Endpoints usados:
- GET  {apiUrl}/{phoneNumberId}?fields=verified_name,quality_rating,display_phone_number
- POST {apiUrl}/{phoneNumberId}/messages

Las credenciales y el estado de la conexión se guardan en la tabla
configuracion; el token nunca sale por la API pública de ajustes.
"""

import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, Optional

import httpx
from sqlalchemy.orm import Session

from pegasus.config import settings
from pegasus.crud import configuracion as config_crud

logger = logging.getLogger(__name__)

CLAVE_PHONE_ID = "whatsapp_phone_id"
CLAVE_TOKEN = "whatsapp_access_token"
CLAVE_API_URL = "whatsapp_api_url"
CLAVE_ESTADO = "whatsapp_status"
CLAVE_NUMERO = "whatsapp_number"
CLAVE_ULTIMA_CONEXION = "whatsapp_last_connection"
CLAVE_MENSAJE = "whatsapp_message"

ESTADO_CONECTADO = "connected"
ESTADO_DESCONECTADO = "disconnected"
ESTADO_ERROR = "error"


class WhatsAppError(Exception):
    """Fallo al hablar con la API de WhatsApp."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def normalizar_telefono(telefono: str, codigo_pais: str = settings.whatsapp_country_code) -> str:
    """Deja solo dígitos y antepone el código de país si falta."""
    digitos = re.sub(r"\D", "", telefono or "")
    if not digitos:
        return ""
    if not digitos.startswith(codigo_pais):
        digitos = f"{codigo_pais}{digitos}"
    return digitos


class WhatsAppGateway:
    """Conexión y envío de mensajes de texto por WhatsApp."""

    REQUEST_TIMEOUT = settings.whatsapp_timeout

    def __init__(self, db: Session):
        self.db = db

    # --- Credenciales ---

    @property
    def phone_id(self) -> Optional[str]:
        return config_crud.get_valor(self.db, CLAVE_PHONE_ID)

    @property
    def api_url(self) -> str:
        return config_crud.get_valor(self.db, CLAVE_API_URL, settings.whatsapp_api_url)

    def _get_headers(self, token: Optional[str] = None) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {token or config_crud.get_valor(self.db, CLAVE_TOKEN, '')}",
            "Content-Type": "application/json",
        }

    def _guardar_estado(self, estado: str, mensaje: str):
        config_crud.set_valor(self.db, CLAVE_ESTADO, estado, "Estado de la conexión con WhatsApp")
        config_crud.set_valor(self.db, CLAVE_MENSAJE, mensaje)

    # --- Estado ---

    def estado(self) -> Dict[str, Any]:
        estado = config_crud.get_valor(self.db, CLAVE_ESTADO, ESTADO_DESCONECTADO)
        return {
            "status": estado,
            "number": config_crud.get_valor(self.db, CLAVE_NUMERO),
            "lastConnection": config_crud.get_valor(self.db, CLAVE_ULTIMA_CONEXION),
            "phoneId": self.phone_id,
            "apiUrl": self.api_url,
            "message": config_crud.get_valor(
                self.db, CLAVE_MENSAJE,
                "WhatsApp conectado" if estado == ESTADO_CONECTADO else "WhatsApp no está conectado"
            ),
        }

    def esta_conectado(self) -> bool:
        return config_crud.get_valor(self.db, CLAVE_ESTADO) == ESTADO_CONECTADO

    # --- Conexión ---

    def conectar(self, phone_id: str, access_token: str, api_url: Optional[str] = None) -> Dict[str, Any]:
        """
        Verifica las credenciales contra la Graph API y las guarda.
        Si la verificación falla deja el estado en "error" y lanza WhatsAppError.
        """
        api_url = (api_url or settings.whatsapp_api_url).rstrip("/")
        url = f"{api_url}/{phone_id}"
        params = {"fields": "verified_name,quality_rating,display_phone_number"}

        try:
            with httpx.Client(timeout=self.REQUEST_TIMEOUT) as client:
                response = client.get(url, headers=self._get_headers(access_token), params=params)
        except httpx.TimeoutException:
            self._fallo_conexion("La API de WhatsApp no respondió a tiempo")
        except httpx.RequestError as e:
            self._fallo_conexion(f"Error de red al conectar con WhatsApp: {e}")

        if response.status_code != 200:
            self._fallo_conexion(self._mensaje_error(response), response.status_code)

        datos = response.json()
        numero = datos.get("display_phone_number") or datos.get("verified_name") or phone_id
        config_crud.set_valor(self.db, CLAVE_PHONE_ID, phone_id, "ID del número de WhatsApp Business")
        config_crud.set_valor(self.db, CLAVE_API_URL, api_url, "URL base de la Graph API")
        config_crud.set_valor(self.db, CLAVE_TOKEN, access_token, "Token de acceso de WhatsApp")
        config_crud.set_valor(self.db, CLAVE_NUMERO, numero)
        config_crud.set_valor(self.db, CLAVE_ULTIMA_CONEXION, datetime.now(timezone.utc).isoformat())
        self._guardar_estado(ESTADO_CONECTADO, f"Conectado como {datos.get('verified_name') or numero}")
        self.db.commit()

        logger.info(f"WhatsApp conectado: phone_id={phone_id}, calidad={datos.get('quality_rating')}")
        return self.estado()

    def _fallo_conexion(self, mensaje: str, status_code: Optional[int] = None):
        self._guardar_estado(ESTADO_ERROR, mensaje)
        self.db.commit()
        logger.error(f"No se pudo conectar WhatsApp: {mensaje}")
        raise WhatsAppError(mensaje, status_code)

    def desconectar(self) -> Dict[str, Any]:
        config_crud.set_valor(self.db, CLAVE_TOKEN, None)
        self._guardar_estado(ESTADO_DESCONECTADO, "WhatsApp desconectado")
        self.db.commit()
        logger.info("WhatsApp desconectado")
        return self.estado()

    # --- Envío ---

    def enviar_mensaje(self, telefono: str, mensaje: str) -> Optional[str]:
        """Envía un mensaje de texto y devuelve el ID asignado por WhatsApp."""
        destino = normalizar_telefono(telefono)
        if not destino:
            raise WhatsAppError("Número de teléfono inválido")

        payload = {
            "messaging_product": "whatsapp",
            "recipient_type": "individual",
            "to": destino,
            "type": "text",
            "text": {"body": mensaje},
        }
        url = f"{self.api_url.rstrip('/')}/{self.phone_id}/messages"

        try:
            with httpx.Client(timeout=self.REQUEST_TIMEOUT) as client:
                response = client.post(url, headers=self._get_headers(), json=payload)
        except httpx.TimeoutException:
            raise WhatsAppError("La API de WhatsApp no respondió a tiempo")
        except httpx.RequestError as e:
            raise WhatsAppError(f"Error de red al enviar el mensaje: {e}")

        if response.status_code >= 400:
            mensaje_error = self._mensaje_error(response)
            logger.error(f"WhatsApp rechazó el mensaje a {destino}: {mensaje_error}")
            raise WhatsAppError(mensaje_error, response.status_code)

        mensajes = response.json().get("messages") or [{}]
        message_id = mensajes[0].get("id")
        logger.info(f"Mensaje de WhatsApp enviado a {destino} (id={message_id})")
        return message_id

    @staticmethod
    def _mensaje_error(response: httpx.Response) -> str:
        try:
            error = response.json().get("error") or {}
        except ValueError:
            error = {}
        return error.get("message") or f"Error {response.status_code} de la API de WhatsApp"
