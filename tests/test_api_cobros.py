"""
Tests de la API de cobros.
"""

from datetime import date, timedelta

import pytest

from pegasus.config import settings
from pegasus.models import EstadoCobro

API = settings.api_prefix


@pytest.fixture
def payload(cliente, servicio):
    hoy = date.today()
    return {
        "cliente_id": cliente.id,
        "servicio_id": servicio.id,
        "monto": 150.5,
        "fecha_emision": hoy.isoformat(),
        "fecha_vencimiento": (hoy + timedelta(days=15)).isoformat(),
    }


class TestRegistrarCobro:
    """POST /cobros"""

    def test_registrar(self, client, user_headers, payload):
        response = client.post(f"{API}/cobros/", json=payload, headers=user_headers)
        assert response.status_code == 201
        data = response.json()
        assert data["estado_cobro"] == "Pendiente"
        assert data["moneda"] == "PEN"
        assert data["cliente"]["nombre_cliente"] == "Comercial Andina SAC"
        assert data["servicio"]["nombre_servicio"] == "Hosting Anual"
        assert data["fecha_pago"] is None

    @pytest.mark.parametrize("campo", ["cliente_id", "monto", "fecha_emision", "fecha_vencimiento"])
    def test_faltan_datos(self, client, user_headers, payload, campo):
        payload.pop(campo)
        response = client.post(f"{API}/cobros/", json=payload, headers=user_headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "Faltan datos requeridos (cliente, monto, fechas)."

    @pytest.mark.parametrize("monto", [0, -10])
    def test_monto_no_positivo(self, client, user_headers, payload, monto):
        payload["monto"] = monto
        response = client.post(f"{API}/cobros/", json=payload, headers=user_headers)
        assert response.status_code == 400
        assert response.json()["detail"] == "El monto debe ser mayor a cero."

    def test_vencimiento_anterior_a_emision(self, client, user_headers, payload):
        payload["fecha_vencimiento"] = (date.today() - timedelta(days=1)).isoformat()
        response = client.post(f"{API}/cobros/", json=payload, headers=user_headers)
        assert response.status_code == 400

    def test_cliente_inexistente(self, client, user_headers, payload):
        payload["cliente_id"] = 999
        response = client.post(f"{API}/cobros/", json=payload, headers=user_headers)
        assert response.status_code == 404
        assert response.json()["detail"] == "Cliente no encontrado"

    def test_registrar_pagado_fija_fecha_de_pago(self, client, user_headers, payload):
        payload["estado_cobro"] = "Pagado"
        response = client.post(f"{API}/cobros/", json=payload, headers=user_headers)
        assert response.json()["fecha_pago"] == date.today().isoformat()

    def test_servicio_personalizado(self, client, user_headers, payload):
        payload.pop("servicio_id")
        payload["descripcion_servicio_personalizado"] = "Migración de correo"
        response = client.post(f"{API}/cobros/", json=payload, headers=user_headers)
        assert response.status_code == 201
        assert response.json()["servicio"] is None


class TestListarCobros:
    """GET /cobros"""

    def test_filtros(self, client, user_headers, cliente, servicio, nuevo_cobro):
        nuevo_cobro(cliente, servicio, estado=EstadoCobro.PENDIENTE)
        nuevo_cobro(cliente, servicio, estado=EstadoCobro.PAGADO, pago=date.today())
        nuevo_cobro(cliente, servicio, estado=EstadoCobro.ATRASADO,
                    emision=date.today() - timedelta(days=400), vencimiento=date.today() - timedelta(days=370))

        response = client.get(f"{API}/cobros/", headers=user_headers)
        assert response.json()["total"] == 3

        response = client.get(f"{API}/cobros/", params={"estado": "Pendiente"}, headers=user_headers)
        assert [c["estado_cobro"] for c in response.json()["cobros"]] == ["Pendiente"]

        response = client.get(f"{API}/cobros/", params={"periodo": "last-90-days"}, headers=user_headers)
        assert response.json()["total"] == 2

        response = client.get(f"{API}/cobros/", params={"clienteId": cliente.id, "limit": 1}, headers=user_headers)
        data = response.json()
        assert data["total"] == 3
        assert len(data["cobros"]) == 1

    def test_filtro_por_vencimiento(self, client, user_headers, cliente, nuevo_cobro):
        hoy = date.today()
        nuevo_cobro(cliente, vencimiento=hoy)
        nuevo_cobro(cliente, vencimiento=hoy + timedelta(days=7))
        nuevo_cobro(cliente, vencimiento=hoy + timedelta(days=8))
        nuevo_cobro(cliente, emision=hoy - timedelta(days=20), vencimiento=hoy - timedelta(days=1))

        response = client.get(f"{API}/cobros/", params={
            "vencimientoDesde": hoy.isoformat(),
            "vencimientoHasta": (hoy + timedelta(days=7)).isoformat(),
        }, headers=user_headers)

        data = response.json()
        assert data["total"] == 2
        assert sorted(c["fecha_vencimiento"] for c in data["cobros"]) == [
            hoy.isoformat(), (hoy + timedelta(days=7)).isoformat(),
        ]

    def test_estado_invalido(self, client, user_headers):
        response = client.get(f"{API}/cobros/", params={"estado": "Vencido"}, headers=user_headers)
        assert response.status_code == 422


class TestActualizarCobro:
    """PUT y DELETE /cobros/{id}"""

    def test_marcar_pagado_sin_fecha(self, client, user_headers, cliente, nuevo_cobro):
        cobro = nuevo_cobro(cliente)
        response = client.put(f"{API}/cobros/{cobro.id}", json={"estado_cobro": "Pagado"}, headers=user_headers)
        assert response.status_code == 200
        assert response.json()["estado_cobro"] == "Pagado"
        assert response.json()["fecha_pago"] == date.today().isoformat()

    def test_marcar_pagado_con_fecha(self, client, user_headers, cliente, nuevo_cobro):
        cobro = nuevo_cobro(cliente)
        fecha = (date.today() - timedelta(days=2)).isoformat()
        response = client.put(
            f"{API}/cobros/{cobro.id}", json={"estado_cobro": "Pagado", "fecha_pago": fecha}, headers=user_headers
        )
        assert response.json()["fecha_pago"] == fecha

    def test_fechas_inconsistentes(self, client, user_headers, cliente, nuevo_cobro):
        cobro = nuevo_cobro(cliente)
        response = client.put(
            f"{API}/cobros/{cobro.id}",
            json={"fecha_vencimiento": (cobro.fecha_emision - timedelta(days=1)).isoformat()},
            headers=user_headers,
        )
        assert response.status_code == 400

    def test_eliminar(self, client, user_headers, cliente, nuevo_cobro):
        cobro = nuevo_cobro(cliente)
        assert client.delete(f"{API}/cobros/{cobro.id}", headers=user_headers).status_code == 204
        response = client.get(f"{API}/cobros/{cobro.id}", headers=user_headers)
        assert response.status_code == 404
        assert response.json()["detail"] == "Cobro no encontrado"
