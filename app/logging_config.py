# app/logging_config.py
"""
Configuración centralizada de logging.
Soporta formato plain (desarrollo) y json (producción).
"""
import logging.config
from typing import Literal


def setup_logging(
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO",
    fmt: Literal["plain", "json"] = "plain",
) -> None:
    """
    Configura el logger raíz con un único handler de consola.

    Args:
        level: Nivel de logging.
        fmt: "plain" para texto legible, "json" para una línea JSON por evento.
    """
    formatters = {
        "default": {
            "format": "%(asctime)s %(levelname)s [%(name)s]: %(message)s",
        },
        "json": {
            "()": "pythonjsonlogger.json.JsonFormatter",
            "format": "%(asctime)s %(name)s %(levelname)s %(message)s",
        },
    }

    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "json" if fmt == "json" else "default",
            "stream": "ext://sys.stdout",
        }
    }

    logging.config.dictConfig({
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": formatters,
        "handlers": handlers,
        "root": {
            "handlers": ["console"],
            "level": level.upper(),
        },
    })


__all__ = ["setup_logging"]
