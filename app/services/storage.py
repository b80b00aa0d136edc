# app/services/storage.py
"""
Almacenamiento de adjuntos (PDFs y logos).

Las solicitudes guardan solo la ruta relativa del archivo
(p. ej. "solicitudes/pdfs/3f2a....pdf"); el contenido vive en el store.
"""
import logging
import os
import uuid
from abc import ABC, abstractmethod
from pathlib import Path

from app.config import get_settings
from app.core.errors import StorageFailure

logger = logging.getLogger(__name__)


class AttachmentStore(ABC):
    """Interfaz del almacenamiento de adjuntos."""

    @abstractmethod
    def put(self, carpeta: str, nombre_original: str, contenido: bytes) -> str:
        """Guarda el contenido y devuelve la ruta asignada. Lanza StorageFailure si falla."""

    @abstractmethod
    def delete(self, ruta: str) -> None:
        """Elimina el archivo. Lanza StorageFailure si falla; no falla si ya no existe."""

    @abstractmethod
    def exists(self, ruta: str) -> bool:
        ...

    @abstractmethod
    def resolve(self, ruta: str) -> str:
        """Ubicación concreta del archivo (ruta absoluta, URL, etc.)."""

    def delete_quietly(self, ruta: str) -> bool:
        """
        Borrado de mejor esfuerzo: registra el fallo y sigue.
        Devuelve True si el archivo se eliminó.
        """
        try:
            self.delete(ruta)
            return True
        except StorageFailure as e:
            logger.warning("No se pudo eliminar el adjunto %s: %s", ruta, e.detail)
            return False


class LocalAttachmentStore(AttachmentStore):
    """Adjuntos en un directorio del disco local."""

    def __init__(self, base_dir: str):
        self.base_dir = Path(base_dir).resolve()

    def _path(self, ruta: str) -> Path:
        path = (self.base_dir / ruta).resolve()
        # La ruta no puede salir del directorio base
        if path != self.base_dir and self.base_dir not in path.parents:
            raise StorageFailure(f"Ruta de adjunto inválida: {ruta}")
        return path

    def put(self, carpeta: str, nombre_original: str, contenido: bytes) -> str:
        extension = os.path.splitext(nombre_original)[1].lower()
        ruta = f"{carpeta.strip('/')}/{uuid.uuid4().hex}{extension}"
        path = self._path(ruta)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(contenido)
        except OSError as e:
            logger.error("Error al guardar el adjunto %s: %s", ruta, e)
            raise StorageFailure(f"No se pudo guardar el archivo {nombre_original}.") from e
        logger.info("Adjunto guardado en %s (%d bytes)", ruta, len(contenido))
        return ruta

    def delete(self, ruta: str) -> None:
        path = self._path(ruta)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageFailure(f"No se pudo eliminar el archivo {ruta}.") from e
        logger.info("Adjunto eliminado: %s", ruta)

    def exists(self, ruta: str) -> bool:
        return self._path(ruta).is_file()

    def resolve(self, ruta: str) -> str:
        return str(self._path(ruta))


def get_attachment_store() -> AttachmentStore:
    """Dependencia de FastAPI con el store configurado."""
    return LocalAttachmentStore(get_settings().storage_dir)
