import asyncio
import logging

logger = logging.getLogger(__name__)


class ContadorGeneraciones:
    """
    Número de generación por vista filtrable. Una respuesta solo se aplica si
    su generación sigue siendo la última pedida.
    """

    def __init__(self):
        self._actual = 0

    def siguiente(self) -> int:
        self._actual += 1
        return self._actual

    def es_vigente(self, generacion: int) -> bool:
        return generacion == self._actual

    @property
    def actual(self) -> int:
        return self._actual


class Debouncer:
    """Ejecuta la función solo si no llegó otra llamada durante la espera."""

    def __init__(self, espera: float = 0.3):
        self.espera = espera
        self._generaciones = ContadorGeneraciones()

    async def __call__(self, funcion, *args, **kwargs):
        generacion = self._generaciones.siguiente()
        await asyncio.sleep(self.espera)
        if not self._generaciones.es_vigente(generacion):
            logger.debug(f"Llamada {generacion} reemplazada por una más reciente")
            return None
        return await funcion(*args, **kwargs)
