"""
PEGASUS - Test Configuration

Fixtures de base de datos en memoria, cliente HTTP del backend y mocks
de la API para el cliente asíncrono.
"""

import os

# Antes de importar pegasus: la app nunca debe tocar pegasus.db durante las pruebas
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SECRET_KEY", "clave-de-pruebas")
os.environ.setdefault("LOGOUT_DELAY", "0")

from datetime import date, timedelta
from decimal import Decimal
from typing import Generator

import pytest
import pytest_asyncio
import respx
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from pegasus.client.api import ApiClient
from pegasus.client.notificador import RegistroNotificaciones
from pegasus.client.sesion import SesionContexto
from pegasus.config import settings
from pegasus.database import Base, get_db
from pegasus.main import app
from pegasus.models import (
    Cliente, Cobro, EstadoCobro, Rol, Servicio, Usuario, ROL_ADMINISTRADOR, ROL_USUARIO,
)
from pegasus.security import create_access_token, get_password_hash

API = settings.api_prefix
API_BASE = "http://pegasus.test/api/v1"


# =============================================================================
# BACKEND
# =============================================================================

@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db(engine) -> Generator[Session, None, None]:
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def roles(db):
    admin = Rol(nombre_rol=ROL_ADMINISTRADOR, descripcion="Acceso total")
    usuario = Rol(nombre_rol=ROL_USUARIO, descripcion="Operación diaria")
    db.add_all([admin, usuario])
    db.commit()
    return {ROL_ADMINISTRADOR: admin, ROL_USUARIO: usuario}


def crear_usuario(db, rol, nombre="admin", contrasena="admin123", activo=True):
    usuario = Usuario(
        nombre_usuario=nombre,
        correo_electronico=f"{nombre}@pegasus.local",
        nombre_completo=nombre.title(),
        contrasena_hash=get_password_hash(contrasena),
        rol_id=rol.id,
        activo=activo,
    )
    db.add(usuario)
    db.commit()
    db.refresh(usuario)
    return usuario


@pytest.fixture
def admin(db, roles):
    return crear_usuario(db, roles[ROL_ADMINISTRADOR], "admin", "admin123")


@pytest.fixture
def operador(db, roles):
    return crear_usuario(db, roles[ROL_USUARIO], "operador", "operador123")


def encabezados(usuario):
    token = create_access_token({"sub": usuario.nombre_usuario, "rol": usuario.nombre_rol})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(admin):
    return encabezados(admin)


@pytest.fixture
def user_headers(operador):
    return encabezados(operador)


@pytest.fixture
def client(engine, db) -> Generator[TestClient, None, None]:
    """TestClient con get_db apuntando a la base en memoria."""
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        session = TestingSessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def cliente(db):
    registro = Cliente(
        nombre_cliente="Comercial Andina SAC",
        ruc_dni="20123456789",
        telefono="987654321",
        correo_electronico="pagos@andina.pe",
        direccion="Av. Arequipa 123, Lima",
    )
    db.add(registro)
    db.commit()
    db.refresh(registro)
    return registro


@pytest.fixture
def servicio(db):
    registro = Servicio(nombre_servicio="Hosting Anual", descripcion="Plan básico", precio_base=Decimal("150.00"))
    db.add(registro)
    db.commit()
    db.refresh(registro)
    return registro


def crear_cobro(db, cliente, servicio=None, monto="150.00", estado=EstadoCobro.PENDIENTE,
                emision=None, vencimiento=None, pago=None):
    hoy = date.today()
    cobro = Cobro(
        cliente_id=cliente.id,
        servicio_id=servicio.id if servicio else None,
        descripcion_servicio_personalizado=None if servicio else "Soporte técnico",
        monto=Decimal(monto),
        moneda="PEN",
        fecha_emision=emision or hoy - timedelta(days=10),
        fecha_vencimiento=vencimiento or hoy + timedelta(days=5),
        fecha_pago=pago,
        estado_cobro=estado,
    )
    db.add(cobro)
    db.commit()
    db.refresh(cobro)
    return cobro


# =============================================================================
# CLIENTE ASÍNCRONO
# =============================================================================

@pytest.fixture
def notificador():
    return RegistroNotificaciones()


@pytest.fixture
def sesion_admin():
    return SesionContexto(token="token-admin", username="admin", rol=ROL_ADMINISTRADOR, usuario_id=1)


@pytest.fixture
def sesion_usuario():
    return SesionContexto(token="token-usuario", username="operador", rol=ROL_USUARIO, usuario_id=2)


@pytest.fixture
def api_mock():
    """Mock de la API REST con respx; las rutas no registradas fallan."""
    with respx.mock(base_url=API_BASE, assert_all_called=False) as router:
        yield router


@pytest_asyncio.fixture
async def api(sesion_admin, api_mock):
    cliente_api = ApiClient(sesion=sesion_admin, base_url=API_BASE, timeout=5, logout_delay=0)
    yield cliente_api
    await cliente_api.close()


def cobro_json(id=1, estado="Pendiente", vencimiento=None, monto="150.00", telefono="987654321", **extra):
    """Cobro tal como lo devuelve GET /cobros/{id}."""
    datos = {
        "id": id,
        "cliente_id": 10 + id,
        "servicio_id": 1,
        "descripcion_servicio_personalizado": None,
        "monto": monto,
        "moneda": "PEN",
        "fecha_emision": (date.today() - timedelta(days=30)).isoformat(),
        "fecha_vencimiento": (vencimiento or date.today() + timedelta(days=3)).isoformat(),
        "fecha_pago": None,
        "estado_cobro": estado,
        "metodo_pago": None,
        "numero_referencia": None,
        "notas": None,
        "cliente": {"id": 10 + id, "nombre_cliente": f"Cliente {id}", "ruc_dni": "20123456789", "telefono": telefono},
        "servicio": {"id": 1, "nombre_servicio": "Hosting Anual", "precio_base": "150.00"},
    }
    datos.update(extra)
    return datos


# =============================================================================
# FÁBRICAS
# =============================================================================

@pytest.fixture
def nuevo_usuario(db, roles):
    def _crear(nombre, contrasena="clave123", rol=ROL_USUARIO, activo=True):
        return crear_usuario(db, roles[rol], nombre, contrasena, activo)
    return _crear


@pytest.fixture
def nuevo_cobro(db):
    def _crear(cliente, servicio=None, **kwargs):
        return crear_cobro(db, cliente, servicio, **kwargs)
    return _crear


@pytest.fixture
def cobro_api():
    return cobro_json


@pytest.fixture
def token_de():
    return encabezados
