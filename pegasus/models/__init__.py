# pegasus/models/__init__.py

# 1. Base de datos (Origen de la clase declarativa)
from pegasus.database import Base

# 2. Usuarios y Roles
from .usuarios import Usuario, Rol, ROL_ADMINISTRADOR, ROL_USUARIO

# 3. Catálogo y Clientes
from .servicios import Servicio
from .clientes import Cliente, EstadoCliente

# 4. Cobros
from .cobros import Cobro, EstadoCobro

# 5. Configuración y bitácora de notificaciones
from .configuracion import Configuracion, Notificacion
