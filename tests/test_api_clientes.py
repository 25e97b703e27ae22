"""
Tests de la API de clientes y servicios.
"""

from pegasus.config import settings
from pegasus.models import EstadoCobro

API = settings.api_prefix


def datos_cliente(**extra):
    datos = {
        "nombre_cliente": "Textiles Lima EIRL",
        "ruc_dni": "20600000001",
        "telefono": "999888777",
        "correo_electronico": "cobranzas@textileslima.pe",
    }
    datos.update(extra)
    return datos


# =============================================================================
# CLIENTES
# =============================================================================

class TestClientes:
    """CRUD de /clientes"""

    def test_crear_y_obtener(self, client, user_headers):
        response = client.post(f"{API}/clientes/", json=datos_cliente(), headers=user_headers)
        assert response.status_code == 201
        creado = response.json()
        assert creado["estado_cliente"] == "Activo"

        response = client.get(f"{API}/clientes/{creado['id']}", headers=user_headers)
        assert response.status_code == 200
        assert response.json()["ruc_dni"] == "20600000001"

    def test_ruc_duplicado(self, client, user_headers, cliente):
        response = client.post(f"{API}/clientes/", json=datos_cliente(ruc_dni=cliente.ruc_dni), headers=user_headers)
        assert response.status_code == 409
        assert response.json()["detail"] == f"Ya existe un cliente con el RUC/DNI {cliente.ruc_dni}."

    def test_listar_con_filtros_y_meta(self, client, user_headers, cliente):
        client.post(f"{API}/clientes/", json=datos_cliente(), headers=user_headers)
        client.post(
            f"{API}/clientes/",
            json=datos_cliente(ruc_dni="10456789", nombre_cliente="Juan Pérez", estado_cliente="Inactivo"),
            headers=user_headers,
        )

        response = client.get(f"{API}/clientes/", params={"nombre": "lima"}, headers=user_headers)
        data = response.json()
        assert [c["nombre_cliente"] for c in data["clientes"]] == ["Textiles Lima EIRL"]
        assert data["meta"]["totalCount"] == 3
        assert data["meta"]["filteredCount"] == 1

        response = client.get(f"{API}/clientes/", params={"estado": "Inactivo"}, headers=user_headers)
        assert response.json()["meta"]["filteredCount"] == 1

        response = client.get(f"{API}/clientes/", params={"estado": "all", "limit": 2}, headers=user_headers)
        assert len(response.json()["clientes"]) == 2

    def test_estado_invalido(self, client, user_headers):
        response = client.get(f"{API}/clientes/", params={"estado": "Moroso"}, headers=user_headers)
        assert response.status_code == 400

    def test_actualizar(self, client, user_headers, cliente):
        response = client.put(
            f"{API}/clientes/{cliente.id}", json={"telefono": "911222333"}, headers=user_headers
        )
        assert response.status_code == 200
        assert response.json()["telefono"] == "911222333"
        assert response.json()["nombre_cliente"] == cliente.nombre_cliente

    def test_no_encontrado(self, client, user_headers):
        response = client.get(f"{API}/clientes/999", headers=user_headers)
        assert response.status_code == 404
        assert response.json()["detail"] == "Cliente no encontrado"

    def test_eliminar_con_cobros(self, client, user_headers, cliente, nuevo_cobro):
        nuevo_cobro(cliente)
        nuevo_cobro(cliente)
        response = client.delete(f"{API}/clientes/{cliente.id}", headers=user_headers)
        assert response.status_code == 409
        assert response.json()["detail"] == "No se puede eliminar el cliente porque tiene 2 cobros asociados."

    def test_eliminar(self, client, user_headers, cliente):
        response = client.delete(f"{API}/clientes/{cliente.id}", headers=user_headers)
        assert response.status_code == 204
        assert client.get(f"{API}/clientes/{cliente.id}", headers=user_headers).status_code == 404

    def test_servicios_contratados(self, client, user_headers, cliente, servicio, nuevo_cobro):
        nuevo_cobro(cliente, servicio)
        nuevo_cobro(cliente, servicio)
        nuevo_cobro(cliente)
        response = client.get(f"{API}/clientes/{cliente.id}/servicios", headers=user_headers)
        assert [s["nombre_servicio"] for s in response.json()] == ["Hosting Anual"]


# =============================================================================
# SERVICIOS
# =============================================================================

class TestServicios:
    """CRUD de /servicios y estadísticas."""

    def test_crear_y_buscar(self, client, user_headers):
        response = client.post(
            f"{API}/servicios/", json={"nombre_servicio": "Dominio .pe", "precio_base": 90}, headers=user_headers
        )
        assert response.status_code == 201
        response = client.get(f"{API}/servicios/", params={"search": "domin"}, headers=user_headers)
        assert [s["nombre_servicio"] for s in response.json()] == ["Dominio .pe"]

    def test_nombre_duplicado_sin_distinguir_mayusculas(self, client, user_headers, servicio):
        response = client.post(
            f"{API}/servicios/", json={"nombre_servicio": "hosting anual"}, headers=user_headers
        )
        assert response.status_code == 409
        assert response.json()["detail"] == "Ya existe un servicio con el nombre hosting anual."

    def test_precio_negativo(self, client, user_headers):
        response = client.post(
            f"{API}/servicios/", json={"nombre_servicio": "Gratis", "precio_base": -1}, headers=user_headers
        )
        assert response.status_code == 422

    def test_eliminar_con_cobros(self, client, user_headers, cliente, servicio, nuevo_cobro):
        nuevo_cobro(cliente, servicio)
        response = client.delete(f"{API}/servicios/{servicio.id}", headers=user_headers)
        assert response.status_code == 409
        assert response.json()["detail"] == "No se puede eliminar el servicio porque está asociado a 1 cobro(s)."

    def test_eliminar(self, client, user_headers, servicio):
        assert client.delete(f"{API}/servicios/{servicio.id}", headers=user_headers).status_code == 204

    def test_estadisticas(self, client, user_headers, cliente, servicio, nuevo_cobro):
        nuevo_cobro(cliente, servicio, monto="100.00", estado=EstadoCobro.PAGADO)
        nuevo_cobro(cliente, servicio, monto="100.00", estado=EstadoCobro.PENDIENTE)
        nuevo_cobro(cliente, servicio, monto="200.00", estado=EstadoCobro.ATRASADO)
        response = client.get(f"{API}/servicios/{servicio.id}/estadisticas", headers=user_headers)
        assert response.status_code == 200
        data = response.json()
        assert data["totalCobros"] == 3
        assert data["cobrosPagados"] == 1
        assert data["cobrosAtrasados"] == 1
        assert data["clientesUnicos"] == 1
        assert float(data["montoPendiente"]) == 300.0
        assert data["porcentajeCobrado"] == 25.0
