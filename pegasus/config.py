"""
PEGASUS - Configuración

Todas las opciones se leen de variables de entorno o del archivo .env.
Los valores por defecto permiten levantar el sistema en desarrollo sin
configurar nada.
"""

from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Opciones de la aplicación (backend y cliente)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # ===========================================
    # APLICACIÓN
    # ===========================================
    app_name: str = "PEGASUS"
    app_description: str = "Sistema de gestión de cobros, clientes y recordatorios"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"
    api_prefix: str = "/api/v1"
    cors_origins: List[str] = ["*"]

    # ===========================================
    # BASE DE DATOS
    # ===========================================
    database_url: str = "sqlite:///./pegasus.db"

    # ===========================================
    # JWT
    # ===========================================
    secret_key: str = "pegasus_secret_key_change_me_in_prod"
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 12  # 12 horas

    # ===========================================
    # NEGOCIO
    # ===========================================
    default_currency: str = "PEN"
    dues_window_days: int = 7

    # ===========================================
    # WHATSAPP BUSINESS (Graph API)
    # ===========================================
    whatsapp_api_url: str = "https://graph.facebook.com/v17.0"
    whatsapp_country_code: str = "51"
    whatsapp_timeout: float = 30.0

    # ===========================================
    # CLIENTE (consumidor de la API)
    # ===========================================
    api_base_url: str = "http://localhost:3001/api/v1"
    api_timeout: float = 60.0
    logout_delay: float = 2.0
    bulk_send_concurrency: int = 1

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


@lru_cache()
def get_settings() -> Settings:
    """Instancia cacheada de la configuración."""
    return Settings()


settings = get_settings()
