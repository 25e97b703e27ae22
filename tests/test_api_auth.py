"""
Tests de autenticación: login, verificación de token y control de roles.
"""

from datetime import timedelta

from pegasus.security import create_access_token
from pegasus.config import settings

API = settings.api_prefix


class TestLogin:
    """POST /auth/login"""

    def test_login_exitoso(self, client, admin):
        response = client.post(f"{API}/auth/login", json={"username": "admin", "password": "admin123"})
        assert response.status_code == 200
        data = response.json()
        assert data["token"]
        assert data["usuario"]["username"] == "admin"
        assert data["usuario"]["rol"] == "Administrador"

    def test_campos_vacios(self, client, admin):
        response = client.post(f"{API}/auth/login", json={"username": "", "password": ""})
        assert response.status_code == 400
        assert response.json()["detail"] == "Por favor, ingresa usuario y contraseña."

    def test_contrasena_incorrecta(self, client, admin):
        response = client.post(f"{API}/auth/login", json={"username": "admin", "password": "otra"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Credenciales incorrectas."

    def test_usuario_inexistente(self, client, admin):
        response = client.post(f"{API}/auth/login", json={"username": "nadie", "password": "admin123"})
        assert response.status_code == 401

    def test_cuenta_inactiva(self, client, nuevo_usuario):
        nuevo_usuario("inactivo", "clave123", activo=False)
        response = client.post(f"{API}/auth/login", json={"username": "inactivo", "password": "clave123"})
        assert response.status_code == 401
        assert response.json()["detail"] == "La cuenta de usuario está inactiva."


class TestToken:
    """GET /auth/verificar y rutas protegidas."""

    def test_verificar(self, client, user_headers):
        response = client.get(f"{API}/auth/verificar", headers=user_headers)
        assert response.status_code == 200
        assert response.json()["usuario"]["rol"] == "Usuario"

    def test_sin_token(self, client, admin):
        response = client.get(f"{API}/clientes/")
        assert response.status_code == 401

    def test_token_expirado(self, client, admin):
        token = create_access_token({"sub": "admin"}, expires_delta=timedelta(minutes=-5))
        response = client.get(f"{API}/clientes/", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Credenciales no válidas"

    def test_token_de_usuario_desactivado(self, client, db, operador, user_headers):
        operador.activo = False
        db.commit()
        response = client.get(f"{API}/auth/verificar", headers=user_headers)
        assert response.status_code == 401

    def test_ruta_de_administrador_rechaza_usuario(self, client, user_headers):
        response = client.get(f"{API}/usuarios/", headers=user_headers)
        assert response.status_code == 403
        assert response.json()["detail"] == "Acceso denegado. Se requiere rol de Administrador."


class TestEstado:

    def test_status_publico(self, client):
        response = client.get(f"{API}/status")
        assert response.status_code == 200

    def test_ruta_inexistente(self, client):
        response = client.get(f"{API}/no-existe")
        assert response.status_code == 404
        assert "detail" in response.json()
