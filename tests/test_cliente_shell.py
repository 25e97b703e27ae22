"""
Tests de la aplicación cliente: inicio y cierre de sesión, visibilidad de
módulos por rol y cierre forzado ante un 401.
"""

import httpx
import pytest
import pytest_asyncio

from pegasus.client.clientes import ClientesModulo
from pegasus.client.errores import AccesoDenegado, ApiError, AuthenticationError, ValidationError
from pegasus.client.shell import AplicacionPegasus, MODULOS_ADMINISTRADOR

API_BASE = "http://pegasus.test/api/v1"


def respuesta_login(username, rol, usuario_id=1):
    return httpx.Response(200, json={
        "token": f"token-{username}",
        "usuario": {"id": usuario_id, "username": username, "rol": rol, "nombre_completo": None},
    })


# =============================================================================
# FIXTURES
# =============================================================================

@pytest_asyncio.fixture
async def aplicacion(notificador, api_mock):
    app = AplicacionPegasus(base_url=API_BASE, notificador=notificador, logout_delay=0)
    yield app
    await app.cerrar_sesion(silencioso=True)


# =============================================================================
# INICIO DE SESIÓN
# =============================================================================

class TestInicioSesion:

    @pytest.mark.asyncio
    async def test_administrador_ve_todo(self, aplicacion, api_mock, notificador):
        api_mock.post("/auth/login").mock(return_value=respuesta_login("admin", "Administrador"))

        sesion = await aplicacion.iniciar_sesion("admin", "admin123")

        assert sesion.es_admin
        assert aplicacion.autenticado
        for nombre in MODULOS_ADMINISTRADOR:
            assert nombre in aplicacion.modulos_visibles()
            assert nombre in aplicacion.modulos
        assert isinstance(aplicacion.modulo("clientes"), ClientesModulo)
        assert notificador.ultimo.titulo == "¡Bienvenido admin!"

    @pytest.mark.asyncio
    async def test_usuario_sin_modulos_de_administracion(self, aplicacion, api_mock, notificador):
        api_mock.post("/auth/login").mock(return_value=respuesta_login("operador", "Usuario", 2))

        await aplicacion.iniciar_sesion("operador", "operador123")

        assert "usuarios" not in aplicacion.modulos_visibles()
        assert "configuracion" not in aplicacion.modulos
        with pytest.raises(AccesoDenegado) as exc:
            aplicacion.modulo("usuarios")
        assert exc.value.status == 403
        assert notificador.ultimo.titulo == "Acceso Denegado"
        assert notificador.ultimo.tipo == "warning"

    @pytest.mark.asyncio
    async def test_token_de_la_sesion(self, aplicacion, api_mock):
        api_mock.post("/auth/login").mock(return_value=respuesta_login("admin", "Administrador"))
        ruta = api_mock.get("/servicios/").mock(return_value=httpx.Response(200, json=[]))

        await aplicacion.iniciar_sesion("admin", "admin123")
        await aplicacion.modulo("servicios").listar()

        assert ruta.calls.last.request.headers["Authorization"] == "Bearer token-admin"

    @pytest.mark.asyncio
    async def test_credenciales_incorrectas(self, aplicacion, api_mock, notificador):
        api_mock.post("/auth/login").mock(
            return_value=httpx.Response(401, json={"detail": "Usuario o contraseña incorrectos."})
        )

        with pytest.raises(ApiError) as exc:
            await aplicacion.iniciar_sesion("admin", "equivocada")

        assert exc.value.message == "Usuario o contraseña incorrectos."
        assert not aplicacion.autenticado
        assert notificador.ultimo.titulo == "Error de Inicio de Sesión"

    @pytest.mark.asyncio
    async def test_campos_vacios(self, aplicacion, api_mock, notificador):
        ruta = api_mock.post("/auth/login")

        with pytest.raises(ValidationError):
            await aplicacion.iniciar_sesion("  ", "")

        assert not ruta.called
        assert notificador.ultimo.mensaje == "Por favor, ingresa usuario y contraseña."

    def test_sin_sesion(self, notificador):
        app = AplicacionPegasus(base_url=API_BASE, notificador=notificador)
        assert app.modulos_visibles() == []
        with pytest.raises(AuthenticationError):
            app.modulo("dashboard")


# =============================================================================
# CIERRE DE SESIÓN
# =============================================================================

class TestCierreSesion:

    @pytest.mark.asyncio
    async def test_cierre_manual(self, aplicacion, api_mock, notificador):
        api_mock.post("/auth/login").mock(return_value=respuesta_login("admin", "Administrador"))
        await aplicacion.iniciar_sesion("admin", "admin123")

        await aplicacion.cerrar_sesion()

        assert not aplicacion.autenticado
        assert aplicacion.modulos == {}
        assert notificador.ultimo.titulo == "Sesión Cerrada"
        with pytest.raises(AuthenticationError):
            aplicacion.modulo("dashboard")

    @pytest.mark.asyncio
    async def test_401_fuerza_cierre(self, aplicacion, api_mock, notificador):
        api_mock.post("/auth/login").mock(return_value=respuesta_login("admin", "Administrador"))
        api_mock.get("/clientes/").mock(return_value=httpx.Response(401, json={"detail": "Token expirado"}))
        await aplicacion.iniciar_sesion("admin", "admin123")

        with pytest.raises(AuthenticationError):
            await aplicacion.modulo("clientes").listar()
        await aplicacion.api.expiracion_pendiente

        assert not aplicacion.autenticado
        assert aplicacion.api is None
        assert [a.titulo for a in notificador.historial].count("Sesión Expirada") == 1
        assert "Sesión Cerrada" not in [a.titulo for a in notificador.historial]

    @pytest.mark.asyncio
    async def test_nuevo_inicio_reemplaza_sesion(self, aplicacion, api_mock):
        api_mock.post("/auth/login").mock(side_effect=[
            respuesta_login("admin", "Administrador"),
            respuesta_login("operador", "Usuario", 2),
        ])

        await aplicacion.iniciar_sesion("admin", "admin123")
        primera_api = aplicacion.api
        await aplicacion.iniciar_sesion("operador", "operador123")

        assert aplicacion.api is not primera_api
        assert aplicacion.sesion.username == "operador"
        assert "usuarios" not in aplicacion.modulos
