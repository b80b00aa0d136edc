# app/config.py
"""
Configuración de la aplicación basada en pydantic-settings.

Los valores se leen de variables de entorno (o de un archivo .env) y se
exponen mediante `get_settings()`, que cachea una única instancia por proceso.
"""
from functools import lru_cache
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Núcleo de la aplicación
    app_name: str = Field(default="API Solicitudes de Landing Pages", validation_alias="APP_NAME")
    debug: bool = Field(default=False, validation_alias="DEBUG")

    # Base de datos
    database_url: str = Field(default="sqlite:///./solicitudes.db", validation_alias="DATABASE_URL")
    db_echo_sql: bool = Field(default=False, validation_alias="DB_ECHO_SQL")

    # Almacenamiento de adjuntos (disco local)
    storage_dir: str = Field(default="./storage", validation_alias="STORAGE_DIR")

    # Cabecera que inyecta el gateway de autenticación con el id del usuario
    auth_header: str = Field(default="X-Usuario-Id", validation_alias="AUTH_HEADER")

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", validation_alias="LOG_LEVEL"
    )
    log_format: Literal["plain", "json"] = Field(default="plain", validation_alias="LOG_FORMAT")

    # CORS
    cors_origins: str = Field(default="*", validation_alias="CORS_ORIGINS")

    # Paginación y reportes
    solicitudes_por_pagina: int = Field(default=10, ge=1, validation_alias="SOLICITUDES_POR_PAGINA")
    usuarios_por_pagina: int = Field(default=15, ge=1, validation_alias="USUARIOS_POR_PAGINA")
    ultimas_solicitudes: int = Field(default=5, ge=1, validation_alias="ULTIMAS_SOLICITUDES")

    # Límites de adjuntos (en MB)
    max_pdf_mb: int = Field(default=10, ge=1, validation_alias="MAX_PDF_MB")
    max_logo_mb: int = Field(default=5, ge=1, validation_alias="MAX_LOGO_MB")

    @property
    def cors_origins_list(self) -> List[str]:
        return [origen.strip() for origen in self.cors_origins.split(",") if origen.strip()]


@lru_cache
def get_settings() -> Settings:
    """Devuelve la configuración global (una instancia por proceso)."""
    return Settings()
