"""
Tests del envío masivo de recordatorios.
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from pegasus.core.envio_masivo import (
    EstadoEnvio, ResumenEnvio, WhatsAppDesconectado, enviar_recordatorios,
)


def cobro_con_telefono(cobro_id, telefono="987654321"):
    return {
        "id": cobro_id,
        "estado_cobro": "Pendiente",
        "monto": "100",
        "fecha_vencimiento": "2026-12-01",
        "cliente": {"nombre_cliente": f"Cliente {cobro_id}", "telefono": telefono},
    }


# =============================================================================
# FIXTURES
# =============================================================================

@pytest.fixture
def obtener_cobro():
    async def _obtener(cobro_id):
        return cobro_con_telefono(cobro_id, telefono=None if cobro_id == 2 else "987654321")
    return _obtener


@pytest.fixture
def conectado():
    return AsyncMock(return_value=True)


class TestEnvioMasivo:
    """Verificación previa, conteo y clasificación."""

    @pytest.mark.asyncio
    async def test_lista_vacia_no_verifica_conexion(self, obtener_cobro, conectado):
        enviar = AsyncMock()
        resumen = await enviar_recordatorios([], obtener_cobro, conectado, enviar)
        assert resumen == ResumenEnvio()
        conectado.assert_not_called()
        enviar.assert_not_called()

    @pytest.mark.asyncio
    async def test_desconectado_aborta_sin_intentar(self, obtener_cobro):
        obtener = AsyncMock(side_effect=obtener_cobro)
        enviar = AsyncMock()
        with pytest.raises(WhatsAppDesconectado):
            await enviar_recordatorios([1, 2, 3], obtener, AsyncMock(return_value=False), enviar)
        obtener.assert_not_called()
        enviar.assert_not_called()

    @pytest.mark.asyncio
    async def test_sin_telefono_cuenta_como_fallo(self, obtener_cobro, conectado):
        enviar = AsyncMock(return_value={"success": True})
        resumen = await enviar_recordatorios([1, 2, 3], obtener_cobro, conectado, enviar)
        assert resumen.intentados == 3
        assert resumen.exitosos == 2
        assert resumen.fallidos == 1
        assert resumen.resultados[1].estado == EstadoEnvio.SIN_TELEFONO
        assert resumen.clasificacion == "warning"
        assert resumen.mensaje == "2 de 3 recordatorios enviados."
        assert enviar.await_count == 2

    @pytest.mark.asyncio
    async def test_error_de_envio_no_detiene_el_lote(self, obtener_cobro, conectado):
        enviar = AsyncMock(side_effect=[RuntimeError("timeout"), {"success": True}])
        resumen = await enviar_recordatorios([1, 3], obtener_cobro, conectado, enviar)
        assert resumen.resultados[0].estado == EstadoEnvio.ERROR
        assert resumen.resultados[0].detalle == "timeout"
        assert resumen.exitosos == 1

    @pytest.mark.asyncio
    async def test_todos_fallan_clasifica_error(self, conectado):
        obtener = AsyncMock(side_effect=lambda cobro_id: cobro_con_telefono(cobro_id, telefono=" "))
        resumen = await enviar_recordatorios([1, 2], obtener, conectado, AsyncMock())
        assert resumen.clasificacion == "error"
        assert resumen.mensaje == "No se pudo enviar ningún recordatorio."

    @pytest.mark.asyncio
    async def test_todos_exitosos_clasifica_success(self, obtener_cobro, conectado):
        resumen = await enviar_recordatorios([1, 3, 4], obtener_cobro, conectado, AsyncMock())
        assert resumen.clasificacion == "success"

    @pytest.mark.asyncio
    async def test_concurrencia_uno_respeta_el_orden(self, obtener_cobro, conectado):
        enviados = []

        async def enviar(cobro, mensaje):
            await asyncio.sleep(0.01 if cobro["id"] == 1 else 0)
            enviados.append(cobro["id"])

        await enviar_recordatorios([1, 3, 4], obtener_cobro, conectado, enviar, concurrencia=1)
        assert enviados == [1, 3, 4]

    @pytest.mark.asyncio
    async def test_concurrencia_mayor_mismo_conteo(self, obtener_cobro, conectado):
        resumen = await enviar_recordatorios(
            list(range(1, 11)), obtener_cobro, conectado, AsyncMock(), concurrencia=4
        )
        assert resumen.intentados == 10
        assert resumen.fallidos == 1
