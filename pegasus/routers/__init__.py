# pegasus/routers/__init__.py

# Esto expone los módulos para que "from pegasus.routers import clientes" funcione
from . import auth
from . import clientes
from . import cobros
from . import servicios
from . import usuarios
from . import settings
from . import notificaciones
from . import reportes
