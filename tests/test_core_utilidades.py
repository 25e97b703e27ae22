"""
Tests de utilidades de fechas, formato y plantillas de mensajes.
"""

from datetime import date, datetime, timedelta
from decimal import Decimal

import pytest

from pegasus.core.fechas import (
    Periodo, a_fecha, dias_atraso, meses_entre, nombre_periodo, parse_periodo, rango_anterior, rango_periodo,
)
from pegasus.core.formato import (
    a_decimal, calcular_retraso, formatear_fecha, formatear_moneda, formatear_numero, formatear_variacion,
    nombre_archivo_fecha, titulo_reporte,
)
from pegasus.core.plantillas import (
    MARCADOR_CLIENTE, MARCADOR_FECHA, MARCADOR_MONTO, TEXTO_NO_VENCIDO, DatosMensaje, interpolar,
    mensaje_para_cobro, plantilla_para_cobro,
)
from pegasus.core.tipos import TipoMensaje, TipoPlantilla


# =============================================================================
# FECHAS
# =============================================================================

class TestFechas:
    """Conversión de fechas y regla de días de atraso."""

    def test_a_fecha_acepta_varios_formatos(self):
        assert a_fecha("2026-05-01") == date(2026, 5, 1)
        assert a_fecha("2026-05-01T22:30:00Z") == date(2026, 5, 1)
        assert a_fecha(datetime(2026, 5, 1, 23, 59)) == date(2026, 5, 1)
        assert a_fecha("") is None
        assert a_fecha("no-es-fecha") is None

    def test_dias_atraso_trunca_la_hora(self):
        referencia = date(2026, 10, 18)
        assert dias_atraso("2026-10-10T23:59:00", referencia) == 8
        assert dias_atraso(date(2026, 10, 18), referencia) == 0
        assert dias_atraso("2026-10-20", referencia) == -2
        assert dias_atraso(None, referencia) is None

    def test_periodo_desconocido_usa_mes_actual(self):
        assert parse_periodo(None) == Periodo.MES_ACTUAL
        assert parse_periodo("semestre") == Periodo.MES_ACTUAL
        assert parse_periodo("quarter") == Periodo.TRIMESTRE

    @pytest.mark.parametrize("periodo,esperado", [
        ("current-month", (date(2026, 3, 1), date(2026, 3, 31))),
        ("previous-month", (date(2026, 2, 1), date(2026, 2, 28))),
        ("quarter", (date(2026, 1, 1), date(2026, 3, 31))),
        ("year", (date(2026, 1, 1), date(2026, 12, 31))),
        ("last-30-days", (date(2026, 2, 13), date(2026, 3, 15))),
    ])
    def test_rango_periodo(self, periodo, esperado):
        assert rango_periodo(periodo, date(2026, 3, 15)) == esperado

    def test_rango_anterior_misma_duracion(self):
        assert rango_anterior(date(2026, 4, 1), date(2026, 4, 30)) == (date(2026, 3, 2), date(2026, 3, 31))

    def test_nombre_periodo_y_meses(self):
        assert nombre_periodo("year") == "Año Actual"
        assert nombre_periodo("otro") == "Periodo Personalizado"
        assert meses_entre(date(2025, 1, 15), date(2026, 3, 20)) == 14


# =============================================================================
# FORMATO
# =============================================================================

class TestFormato:
    """Montos, fechas y retrasos para las vistas."""

    def test_montos(self):
        assert a_decimal("abc") is None
        assert a_decimal(True) is None
        assert a_decimal("NaN") is None
        assert formatear_numero("10.005") == "10.01"
        assert formatear_numero(None) == "0.00"
        assert formatear_moneda(Decimal("1500"), "PEN") == "S/1500.00"
        assert formatear_moneda(20, "USD") == "$20.00"
        assert formatear_moneda(20, "CLP") == "CLP20.00"

    def test_fechas(self):
        assert formatear_fecha(date(2026, 10, 5)) == "05/10/2026"
        assert formatear_fecha("2026-10-05", largo=True) == "lunes, 5 de octubre de 2026"
        assert formatear_fecha(None) == "-"
        assert formatear_fecha("x") == "Fecha inválida"
        assert nombre_archivo_fecha(date(2026, 1, 9)) == "2026-01-09"

    def test_variacion_con_signo(self):
        assert formatear_variacion(12.5) == "+12.5%"
        assert formatear_variacion(-3) == "-3.0%"
        assert formatear_variacion(None) == "-"

    def test_retraso(self):
        hoy = date.today()
        assert calcular_retraso(hoy - timedelta(days=1)).texto == "1 día"
        assert calcular_retraso(hoy - timedelta(days=4)).dias == 4
        assert calcular_retraso(hoy).texto == "Hoy"
        assert calcular_retraso(hoy - timedelta(days=5), hoy - timedelta(days=5)).texto == "-"

    def test_titulo_reporte(self):
        assert titulo_reporte("delay-analysis") == "Análisis de Atrasos"
        assert titulo_reporte("desconocido") == "Reporte"


# =============================================================================
# PLANTILLAS
# =============================================================================

class TestPlantillas:
    """Mensajes de WhatsApp con marcadores para datos faltantes."""

    def test_recordatorio_completo(self):
        datos = DatosMensaje(
            cliente="Comercial Andina SAC", monto="150", moneda="PEN",
            servicio="Hosting Anual", fecha_vencimiento="2026-11-30",
        )
        texto = interpolar(TipoPlantilla.RECORDATORIO_PAGO, datos)
        assert "Comercial Andina SAC" in texto
        assert "S/150.00" in texto
        assert "30/11/2026" in texto

    def test_campos_faltantes_quedan_como_marcador(self):
        texto = interpolar(TipoPlantilla.RECORDATORIO_PAGO, DatosMensaje(monto="no-numero"))
        assert MARCADOR_MONTO in texto
        assert MARCADOR_CLIENTE in texto
        assert MARCADOR_FECHA in texto

    def test_atraso_cuenta_dias(self):
        vencimiento = (date.today() - timedelta(days=12)).isoformat()
        texto = interpolar(TipoPlantilla.RECORDATORIO_ATRASO, DatosMensaje(fecha_vencimiento=vencimiento))
        assert "12 días" in texto

    def test_atraso_aun_no_vencido(self):
        vencimiento = (date.today() + timedelta(days=3)).isoformat()
        texto = interpolar(TipoPlantilla.RECORDATORIO_ATRASO, DatosMensaje(fecha_vencimiento=vencimiento))
        assert TEXTO_NO_VENCIDO in texto

    def test_personalizado_devuelve_texto_libre(self):
        assert interpolar(TipoPlantilla.PERSONALIZADO, DatosMensaje(texto_libre="Hola")) == "Hola"
        assert interpolar(TipoPlantilla.PERSONALIZADO, DatosMensaje()) == ""

    def test_plantilla_segun_estado(self):
        assert plantilla_para_cobro("Atrasado") == TipoPlantilla.RECORDATORIO_ATRASO
        assert plantilla_para_cobro("Pendiente") == TipoPlantilla.RECORDATORIO_PAGO
        assert plantilla_para_cobro("Pagado", TipoMensaje.RECIBO) == TipoPlantilla.RECIBO_PAGO

    def test_mensaje_desde_cobro_usa_descripcion_personalizada(self):
        cobro = {
            "estado_cobro": "Pendiente",
            "monto": "80.00",
            "moneda": "USD",
            "fecha_vencimiento": "2026-12-01",
            "descripcion_servicio_personalizado": "Soporte técnico",
            "cliente": {"nombre_cliente": "Textiles Lima"},
        }
        texto = mensaje_para_cobro(cobro)
        assert "Soporte técnico" in texto
        assert "$80.00" in texto
