# pegasus/core/__init__.py
# Lógica pura: fechas, formato, vencimientos, reportes, plantillas y envío masivo.

from .tipos import TipoReporte, TipoPlantilla, TipoMensaje
from .fechas import Periodo, a_fecha, dias_atraso
from .vencimientos import calcular_vencimientos_proximos, ResumenVencimientos
from .reportes import generar_vista, calcular_variacion, clasificar_atraso, RangoAtraso
from .plantillas import interpolar, DatosMensaje
from .envio_masivo import enviar_recordatorios, ResumenEnvio, WhatsAppDesconectado
