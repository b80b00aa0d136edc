# app/core/errors.py
"""
Errores de dominio de la API de solicitudes.

Los servicios lanzan estas excepciones; `register_exception_handlers` las
traduce a respuestas HTTP con un cuerpo uniforme:

    {"detail": "<mensaje>", "code": "<tipo>"}

y, para los errores de validación, un mapa `errores` por campo.
"""
import logging
from dataclasses import dataclass, asdict
from typing import Dict, List, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)


# Códigos de error por campo expuestos al cliente
CAMPO_REQUERIDO = "campo_requerido"
VALOR_INVALIDO = "valor_invalido"
ARCHIVO_MUY_GRANDE = "archivo_muy_grande"
TIPO_ARCHIVO_INVALIDO = "tipo_archivo_invalido"


@dataclass(frozen=True)
class ErrorCampo:
    campo: str
    codigo: str
    mensaje: str


class SolicitudesError(Exception):
    """Base de todos los errores de dominio."""
    status_code = status.HTTP_400_BAD_REQUEST
    code = "error"
    default_detail = "Error en la solicitud"

    def __init__(self, detail: Optional[str] = None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)

    def to_body(self) -> dict:
        return {"detail": self.detail, "code": self.code}


class ValidationFailed(SolicitudesError):
    """Datos de entrada inválidos; se reporta campo por campo."""
    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "validation_error"
    default_detail = "Los datos enviados no son válidos."

    def __init__(self, errores: List[ErrorCampo], detail: Optional[str] = None):
        self.errores = list(errores)
        super().__init__(detail)

    def por_campo(self) -> Dict[str, List[dict]]:
        agrupados: Dict[str, List[dict]] = {}
        for error in self.errores:
            datos = asdict(error)
            agrupados.setdefault(datos.pop("campo"), []).append(datos)
        return agrupados

    def to_body(self) -> dict:
        body = super().to_body()
        body["errores"] = self.por_campo()
        return body


class Unauthenticated(SolicitudesError):
    status_code = status.HTTP_401_UNAUTHORIZED
    code = "unauthenticated"
    default_detail = "Autenticación requerida."


class Forbidden(SolicitudesError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"
    default_detail = "No tienes permisos para realizar esta acción."


class NotFound(SolicitudesError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"
    default_detail = "Recurso no encontrado."


class DomainConflict(SolicitudesError):
    status_code = status.HTTP_409_CONFLICT
    code = "domain_conflict"
    default_detail = "La operación entra en conflicto con el estado actual del recurso."


class CompletedRecordProtected(DomainConflict):
    code = "completed_record_protected"
    default_detail = "No se pueden eliminar solicitudes completadas."


class StorageFailure(SolicitudesError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "storage_failure"
    default_detail = "Error al guardar el archivo adjunto."


async def _handle_domain_error(request: Request, exc: SolicitudesError) -> JSONResponse:
    if isinstance(exc, Forbidden):
        logger.warning("Acceso denegado en %s %s: %s", request.method, request.url.path, exc.detail)
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthenticated) else None
    return JSONResponse(status_code=exc.status_code, content=exc.to_body(), headers=headers)


async def _handle_database_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    # La sesión ya se revirtió en el repositorio; aquí solo se traduce
    logger.error("Error de base de datos en %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Error interno al acceder a la base de datos.", "code": "database_error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(SolicitudesError, _handle_domain_error)
    app.add_exception_handler(SQLAlchemyError, _handle_database_error)
