# app/core/validation.py
"""
Validación de entradas de solicitudes.

- Los campos de texto y enums se validan con los esquemas Pydantic; sus errores
  se traducen a la taxonomía de la API (campo_requerido, valor_invalido).
- Los adjuntos (PDF y logo) se validan por tamaño, extensión y tipo MIME
  (archivo_muy_grande, tipo_archivo_invalido).

Todos los errores de una misma petición se reúnen en un único ValidationFailed.
"""
import os
from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from app.config import get_settings
from app.core.errors import (
    ARCHIVO_MUY_GRANDE,
    CAMPO_REQUERIDO,
    TIPO_ARCHIVO_INVALIDO,
    VALOR_INVALIDO,
    ErrorCampo,
    ValidationFailed,
)

MB = 1024 * 1024

SchemaT = TypeVar("SchemaT", bound=BaseModel)

# Mensajes por campo y código; si falta alguno se usa el genérico del código
MENSAJES: Dict[str, Dict[str, str]] = {
    "nombre_cliente": {CAMPO_REQUERIDO: "El nombre del cliente es obligatorio."},
    "nombre_landing": {CAMPO_REQUERIDO: "El nombre de la landing page es obligatorio."},
    "nombre_producto": {CAMPO_REQUERIDO: "El nombre del producto es obligatorio."},
    "estado": {
        CAMPO_REQUERIDO: "El estado es obligatorio.",
        VALOR_INVALIDO: "El estado seleccionado no es válido.",
    },
    "prioridad": {
        CAMPO_REQUERIDO: "La prioridad es obligatoria.",
        VALOR_INVALIDO: "La prioridad seleccionada no es válida.",
    },
    "archivo_pdf": {
        TIPO_ARCHIVO_INVALIDO: "El archivo debe ser un PDF.",
        ARCHIVO_MUY_GRANDE: "El archivo PDF no puede superar los {max_mb}MB.",
    },
    "logo": {
        TIPO_ARCHIVO_INVALIDO: "El logo debe ser JPG, JPEG, PNG o SVG.",
        ARCHIVO_MUY_GRANDE: "El logo no puede superar los {max_mb}MB.",
    },
}

MENSAJES_GENERICOS = {
    CAMPO_REQUERIDO: "El campo {campo} es obligatorio.",
    VALOR_INVALIDO: "El valor del campo {campo} no es válido.",
    TIPO_ARCHIVO_INVALIDO: "El tipo de archivo de {campo} no es válido.",
    ARCHIVO_MUY_GRANDE: "El archivo de {campo} supera el tamaño máximo permitido.",
}

# Tipos de error de Pydantic que equivalen a "falta el campo"
_TIPOS_REQUERIDO = {"missing", "string_too_short"}


def mensaje(campo: str, codigo: str, **extra) -> str:
    plantilla = MENSAJES.get(campo, {}).get(codigo) or MENSAJES_GENERICOS[codigo]
    return plantilla.format(campo=campo, **extra)


def error_campo(campo: str, codigo: str, **extra) -> ErrorCampo:
    return ErrorCampo(campo=campo, codigo=codigo, mensaje=mensaje(campo, codigo, **extra))


def traducir_errores(exc: ValidationError) -> List[ErrorCampo]:
    """Convierte los errores de Pydantic en errores por campo de la API."""
    errores = []
    for error in exc.errors():
        campo = str(error["loc"][0]) if error.get("loc") else "__all__"
        codigo = CAMPO_REQUERIDO if error["type"] in _TIPOS_REQUERIDO else VALOR_INVALIDO
        errores.append(error_campo(campo, codigo))
    return errores


def validar_esquema(schema: Type[SchemaT], datos: dict, errores: List[ErrorCampo]) -> Optional[SchemaT]:
    """
    Valida `datos` contra `schema`. Los valores None se tratan como ausentes.
    Los errores se agregan a `errores` y en ese caso se devuelve None.
    """
    presentes = {clave: valor for clave, valor in datos.items() if valor is not None}
    try:
        return schema.model_validate(presentes)
    except ValidationError as exc:
        errores.extend(traducir_errores(exc))
        return None


@dataclass(frozen=True)
class AdjuntoEntrante:
    """Archivo recibido en la petición, ya leído en memoria."""
    nombre: str
    content_type: Optional[str]
    contenido: bytes

    @property
    def extension(self) -> str:
        return os.path.splitext(self.nombre)[1].lstrip(".").lower()

    @property
    def tamano(self) -> int:
        return len(self.contenido)


@dataclass(frozen=True)
class ReglaAdjunto:
    campo: str
    carpeta: str
    max_mb: int
    extensiones: FrozenSet[str]
    mimes: FrozenSet[str]

    @property
    def max_bytes(self) -> int:
        return self.max_mb * MB


def reglas_adjuntos() -> Dict[str, ReglaAdjunto]:
    settings = get_settings()
    return {
        "archivo_pdf": ReglaAdjunto(
            campo="archivo_pdf",
            carpeta="solicitudes/pdfs",
            max_mb=settings.max_pdf_mb,
            extensiones=frozenset({"pdf"}),
            mimes=frozenset({"application/pdf"}),
        ),
        "logo": ReglaAdjunto(
            campo="logo",
            carpeta="solicitudes/logos",
            max_mb=settings.max_logo_mb,
            extensiones=frozenset({"jpg", "jpeg", "png", "svg"}),
            mimes=frozenset({"image/jpeg", "image/png", "image/svg+xml"}),
        ),
    }


def validar_adjunto(regla: ReglaAdjunto, adjunto: AdjuntoEntrante) -> List[ErrorCampo]:
    errores = []
    # El content type puede venir con parámetros ("image/svg+xml; charset=utf-8")
    mime = (adjunto.content_type or "").split(";")[0].strip().lower()
    if adjunto.extension not in regla.extensiones or mime not in regla.mimes:
        errores.append(error_campo(regla.campo, TIPO_ARCHIVO_INVALIDO))
    if adjunto.tamano > regla.max_bytes:
        errores.append(error_campo(regla.campo, ARCHIVO_MUY_GRANDE, max_mb=regla.max_mb))
    return errores


def validar_adjuntos(adjuntos: Dict[str, Optional[AdjuntoEntrante]], errores: List[ErrorCampo]) -> None:
    reglas = reglas_adjuntos()
    for campo, adjunto in adjuntos.items():
        if adjunto is not None:
            errores.extend(validar_adjunto(reglas[campo], adjunto))


def lanzar_si_hay_errores(errores: List[ErrorCampo]) -> None:
    if errores:
        raise ValidationFailed(errores)
