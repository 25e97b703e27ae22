from typing import Any, Dict, List, Optional

from pegasus.client.api import extraer_lista
from pegasus.client.base import ModuloBase
from pegasus.client.errores import ApiError, ValidationError
from pegasus.core.tipos import ROLES, ROL_USUARIO

LONGITUD_MINIMA_CONTRASENA = 6


class UsuariosModulo(ModuloBase):
    """Administración de usuarios; solo la ven los administradores."""

    def __init__(self, api, notificador):
        super().__init__(api, notificador)
        self.usuarios: List[Dict[str, Any]] = []

    def _invalido(self, mensaje: str, campo: str):
        self.notificador.notificar("Error", mensaje, "error")
        raise ValidationError(mensaje, campo)

    async def listar(self) -> List[Dict[str, Any]]:
        try:
            respuesta = await self.api.get("/usuarios/")
        except ApiError as e:
            self.notificar_error(e, "No se pudieron cargar los usuarios.")
            raise
        self.usuarios = extraer_lista(respuesta, "usuarios")
        return self.usuarios

    async def obtener(self, usuario_id: int) -> Dict[str, Any]:
        return await self.api.get(f"/usuarios/{usuario_id}")

    def validar(self, datos: Dict[str, Any], nuevo: bool) -> Dict[str, Any]:
        payload = dict(datos)
        payload["nombre_usuario"] = self.requerido(
            datos.get("nombre_usuario"), "El nombre de usuario es obligatorio.", "nombre_usuario"
        )
        payload["correo_electronico"] = self.requerido(
            datos.get("correo_electronico"), "El correo electrónico es obligatorio.", "correo_electronico"
        )
        rol = payload.get("rol") or ROL_USUARIO
        if rol not in ROLES:
            self._invalido(f"Rol inválido: {rol}", "rol")
        payload["rol"] = rol

        if nuevo:
            self.validar_contrasena(datos.get("contrasena"), datos.get("confirmar_contrasena"))
        else:
            payload.pop("contrasena", None)
        payload.pop("confirmar_contrasena", None)
        return payload

    def validar_contrasena(self, contrasena: Optional[str], confirmacion: Optional[str] = None) -> str:
        if not contrasena or len(contrasena) < LONGITUD_MINIMA_CONTRASENA:
            self._invalido(
                f"La contraseña debe tener al menos {LONGITUD_MINIMA_CONTRASENA} caracteres.", "contrasena"
            )
        if confirmacion is not None and confirmacion != contrasena:
            self._invalido("Las contraseñas no coinciden.", "confirmar_contrasena")
        return contrasena

    async def guardar(self, datos: Dict[str, Any], usuario_id: Optional[int] = None) -> Dict[str, Any]:
        payload = self.validar(datos, nuevo=usuario_id is None)
        try:
            if usuario_id:
                resultado = await self.api.put(f"/usuarios/{usuario_id}", json=payload)
                accion = "actualizado"
            else:
                resultado = await self.api.post("/usuarios/", json=payload)
                accion = "creado"
        except ApiError as e:
            self.notificar_error(e, "No se pudo guardar el usuario.")
            raise
        self.notificador.notificar(
            "Éxito", f'Usuario "{resultado.get("nombre_usuario")}" {accion} correctamente.', "success"
        )
        return resultado

    async def cambiar_contrasena(self, usuario_id: int, nueva: str, confirmacion: Optional[str] = None):
        self.validar_contrasena(nueva, confirmacion)
        try:
            respuesta = await self.api.patch(f"/usuarios/{usuario_id}/contrasena", json={"nuevaContrasena": nueva})
        except ApiError as e:
            self.notificar_error(e, "Error al cambiar contraseña.")
            raise
        self.notificador.notificar("Éxito", "Contraseña cambiada correctamente.", "success")
        return respuesta

    async def cambiar_estado(self, usuario_id: int, activo: bool) -> Dict[str, Any]:
        try:
            resultado = await self.api.patch(f"/usuarios/{usuario_id}/estado", json={"activo": activo})
        except ApiError as e:
            self.notificar_error(e, "No se pudo cambiar el estado.")
            raise
        self.notificador.notificar(
            "Estado Cambiado", f"Usuario {'activado' if activo else 'desactivado'} correctamente.", "success"
        )
        return resultado

    async def eliminar(self, usuario_id: int) -> None:
        try:
            await self.api.delete(f"/usuarios/{usuario_id}")
        except ApiError as e:
            self.notificar_error(e, "No se pudo eliminar el usuario.", titulo="Error al Eliminar")
            raise
        self.notificador.notificar("Usuario Eliminado", "Usuario eliminado correctamente.", "success")
