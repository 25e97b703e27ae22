import logging
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from pegasus.config import settings
from pegasus.database import engine
from pegasus.models import Base
from pegasus.routers import (
    auth, clientes, cobros, servicios, usuarios,
    settings as settings_router, notificaciones, reportes
)

# 1. LOGGING
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# 2. CREACIÓN AUTOMÁTICA DE TABLAS
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title=settings.app_name,
    description=settings.app_description,
    version=settings.app_version,
    debug=settings.debug
)

# 3. CONFIGURACIÓN DE CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 4. REGISTRO DE ROUTERS (API)
API = settings.api_prefix
app.include_router(auth.router, prefix=f"{API}/auth", tags=["🔑 Autenticación"])
app.include_router(clientes.router, prefix=f"{API}/clientes", tags=["👥 Clientes"])
app.include_router(cobros.router, prefix=f"{API}/cobros", tags=["💰 Cobros"])
app.include_router(servicios.router, prefix=f"{API}/servicios", tags=["📦 Servicios"])
app.include_router(usuarios.router, prefix=f"{API}/usuarios", tags=["👤 Usuarios"])
app.include_router(settings_router.router, prefix=f"{API}/settings", tags=["⚙️ Configuración & WhatsApp"])
app.include_router(notificaciones.router, prefix=f"{API}/notificaciones", tags=["🔔 Notificaciones"])
app.include_router(reportes.router, prefix=f"{API}/reportes", tags=["📊 Reportes"])


# --- 5. ESTADO DEL SERVICIO ---
@app.get(f"{API}/status", tags=["🩺 Estado"])
async def api_status():
    return {
        "status": "ok",
        "app": settings.app_name,
        "version": settings.app_version,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# --- 6. MANEJO DE ERRORES ---
@app.exception_handler(404)
async def not_found_exception_handler(request: Request, exc):
    # Las rutas de la API conservan el mensaje del router ("Cliente no encontrado", ...)
    detail = getattr(exc, "detail", None) or "Recurso no encontrado"
    if not request.url.path.startswith(API):
        detail = "Recurso no encontrado"
    return JSONResponse(status_code=404, content={"detail": detail})


logger.info(f"{settings.app_name} {settings.app_version} listo en {API}")
