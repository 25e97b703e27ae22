from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pegasus.core.tipos import ROL_ADMINISTRADOR


@dataclass(frozen=True)
class SesionContexto:
    """
    Sesión del usuario autenticado. Se crea al iniciar sesión y se descarta al
    cerrarla; el token no cambia durante su vida.
    """
    token: str
    username: str
    rol: str
    usuario_id: Optional[int] = None
    nombre_completo: Optional[str] = None
    iniciada: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def es_admin(self) -> bool:
        return self.rol == ROL_ADMINISTRADOR

    @classmethod
    def desde_login(cls, respuesta: Dict[str, Any]) -> "SesionContexto":
        usuario = respuesta.get("usuario") or {}
        return cls(
            token=respuesta["token"],
            username=usuario.get("username", ""),
            rol=usuario.get("rol", ""),
            usuario_id=usuario.get("id"),
            nombre_completo=usuario.get("nombre_completo"),
        )

    def __repr__(self) -> str:
        return f"SesionContexto(username={self.username!r}, rol={self.rol!r})"
