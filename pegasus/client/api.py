"""
PEGASUS - Cliente de la API REST

Envuelve httpx.AsyncClient:
- agrega el token Bearer de la sesión (excepto en /auth/login);
- normaliza cualquier fallo en ApiError {message, status, data};
- ante un 401 o la falta de token programa el cierre forzado de sesión;
- aplica un tiempo máximo por petición y reporta el agotamiento aparte.

No reintenta nada.
"""

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, Optional, Union

import httpx

from pegasus.config import settings
from pegasus.client.errores import (
    ApiError, ApiTimeoutError, ApiConnectionError, AuthenticationError, ConflictError,
)
from pegasus.client.sesion import SesionContexto

logger = logging.getLogger(__name__)

RUTA_LOGIN = "/auth/login"

AlExpirar = Callable[[str], Union[None, Awaitable[None]]]


def extraer_lista(respuesta: Any, clave: str) -> list:
    """Las rutas de listado pueden responder una lista o {clave: [...]}."""
    if isinstance(respuesta, list):
        return respuesta
    if isinstance(respuesta, dict):
        valor = respuesta.get(clave)
        if isinstance(valor, list):
            return valor
    return []


def mensaje_de_error(data: Any, response: httpx.Response) -> str:
    if isinstance(data, dict):
        mensaje = data.get("message") or data.get("detail")
        if isinstance(mensaje, list):
            # Errores de validación de FastAPI: [{"loc": ..., "msg": ...}, ...]
            mensaje = "; ".join(str(e.get("msg", e)) if isinstance(e, dict) else str(e) for e in mensaje)
        if mensaje:
            return str(mensaje)
    return f"Error {response.status_code}: {response.reason_phrase}"


class ApiClient:
    """Cliente asíncrono de la API de PEGASUS para una sesión."""

    def __init__(
        self,
        sesion: Optional[SesionContexto] = None,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        al_expirar: Optional[AlExpirar] = None,
        logout_delay: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.sesion = sesion
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.api_timeout
        self.al_expirar = al_expirar
        self.logout_delay = logout_delay if logout_delay is not None else settings.logout_delay
        self.expiracion_pendiente: Optional[asyncio.Task] = None
        self._client = httpx.AsyncClient(base_url=self.base_url, timeout=self.timeout, transport=transport)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.close()

    async def close(self):
        await self._client.aclose()

    # --- Cierre forzado de sesión ---

    def _programar_expiracion(self, mensaje: str):
        if self.al_expirar is None:
            return
        if self.expiracion_pendiente is not None and not self.expiracion_pendiente.done():
            return
        self.expiracion_pendiente = asyncio.ensure_future(self._expirar_luego(mensaje))

    async def _expirar_luego(self, mensaje: str):
        await asyncio.sleep(self.logout_delay)
        resultado = self.al_expirar(mensaje)
        if inspect.isawaitable(resultado):
            await resultado

    # --- Peticiones ---

    def _get_headers(self, endpoint: str) -> Dict[str, str]:
        headers = {"Content-Type": "application/json", "Accept": "application/json"}
        if endpoint.startswith(RUTA_LOGIN):
            return headers
        if self.sesion is None:
            logger.warning(f"Petición a {endpoint} sin sesión activa")
            self._programar_expiracion("No autenticado")
            raise AuthenticationError("No autenticado", status=401)
        headers["Authorization"] = f"Bearer {self.sesion.token}"
        return headers

    async def request(self, method: str, endpoint: str, json: Any = None,
                      params: Optional[Dict[str, Any]] = None) -> Any:
        headers = self._get_headers(endpoint)
        if params:
            params = {k: v for k, v in params.items() if v is not None}

        try:
            response = await self._client.request(method, endpoint, json=json, params=params, headers=headers)
        except httpx.TimeoutException:
            logger.error(f"{method} {endpoint}: tiempo de espera agotado ({self.timeout}s)")
            raise ApiTimeoutError()
        except httpx.RequestError as e:
            logger.error(f"{method} {endpoint}: error de red: {e}")
            raise ApiConnectionError(f"No se pudo conectar con el servidor: {e}")

        if response.status_code == 204:
            return {"success": True, "message": "Operación completada con éxito"}

        data = self._leer_cuerpo(response)

        if response.is_success:
            return data

        mensaje = mensaje_de_error(data, response)
        if response.status_code == 401 and not endpoint.startswith(RUTA_LOGIN):
            logger.warning(f"{method} {endpoint}: sesión expirada o token inválido")
            self._programar_expiracion("Sesión expirada")
            raise AuthenticationError("Sesión expirada", status=401, data=data)
        if response.status_code == 409:
            raise ConflictError(mensaje, status=409, data=data)

        logger.error(f"{method} {endpoint}: {response.status_code} {mensaje}")
        raise ApiError(mensaje, status=response.status_code, data=data)

    @staticmethod
    def _leer_cuerpo(response: httpx.Response) -> Any:
        tipo = response.headers.get("content-type", "")
        if "application/json" in tipo:
            try:
                return response.json()
            except ValueError:
                if not response.is_success:
                    return {"message": response.text} if response.text else {}
                logger.error(f"Respuesta JSON inválida ({response.status_code}): {response.text[:200]!r}")
                raise ApiError("Respuesta inválida del servidor", status=response.status_code, data=response.text)
        if response.is_success:
            return {"success": True, "data": response.text}
        return {"message": response.text} if response.text else {}

    async def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        return await self.request("GET", endpoint, params=params)

    async def post(self, endpoint: str, json: Any = None) -> Any:
        return await self.request("POST", endpoint, json=json)

    async def put(self, endpoint: str, json: Any = None) -> Any:
        return await self.request("PUT", endpoint, json=json)

    async def patch(self, endpoint: str, json: Any = None) -> Any:
        return await self.request("PATCH", endpoint, json=json)

    async def delete(self, endpoint: str) -> Any:
        return await self.request("DELETE", endpoint)
