# app/services/solicitudes.py
"""
Ciclo de vida de las solicitudes.

Reglas principales:
- Quien crea la solicitud queda como dueño; el dueño enviado por el cliente se ignora.
- La edición de contenido (nombres, prioridad, adjuntos) la hacen el dueño,
  admin o super-admin, y nunca cambia el estado.
- El estado solo lo cambia el super-admin, con una acción separada, y puede
  pasar de cualquier valor a cualquier otro.
- Una solicitud completada no se puede eliminar, sin importar el rol.
- Los adjuntos nuevos se suben antes de tocar la base; los anteriores se
  eliminan (mejor esfuerzo) una vez confirmada la fila, para que ninguna fila
  apunte a un archivo inexistente.
"""
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.config import Settings, get_settings
from app.core.errors import VALOR_INVALIDO, CompletedRecordProtected, ErrorCampo, StorageFailure
from app.core.permissions import Accion, Principal, alcance_listado, exigir
from app.core.validation import (
    AdjuntoEntrante,
    error_campo,
    lanzar_si_hay_errores,
    reglas_adjuntos,
    validar_adjuntos,
    validar_esquema,
)
from app.database import utcnow
from app.models.solicitud import EstadoSolicitud, PrioridadSolicitud, Solicitud
from app.repositories.pagination import Pagina
from app.repositories.solicitud_repository import SolicitudRepository
from app.schemas.solicitud import SolicitudCreate, SolicitudEstadoUpdate, SolicitudUpdate
from app.services.storage import AttachmentStore

logger = logging.getLogger(__name__)

CAMPOS_ADJUNTOS = ("archivo_pdf", "logo")


@dataclass
class ResultadoListado:
    pagina: Pagina[Solicitud]
    estado: Optional[EstadoSolicitud]
    prioridad: Optional[PrioridadSolicitud]


def _parse_filtro(campo: str, valor: Optional[str], enum_cls, errores: List[ErrorCampo]):
    # Filtro ausente o vacío = sin restricción
    if valor is None or valor == "":
        return None
    try:
        return enum_cls(valor)
    except ValueError:
        errores.append(error_campo(campo, VALOR_INVALIDO))
        return None


class SolicitudService:
    def __init__(self, db: Session, store: AttachmentStore, settings: Optional[Settings] = None):
        self.repo = SolicitudRepository(db)
        self.store = store
        self.settings = settings or get_settings()

    # Lectura

    def listar(
        self,
        principal: Principal,
        estado: Optional[str] = None,
        prioridad: Optional[str] = None,
        page: int = 1,
    ) -> ResultadoListado:
        exigir(principal, Accion.LISTAR_SOLICITUDES)

        errores: List[ErrorCampo] = []
        filtro_estado = _parse_filtro("estado", estado, EstadoSolicitud, errores)
        filtro_prioridad = _parse_filtro("prioridad", prioridad, PrioridadSolicitud, errores)
        lanzar_si_hay_errores(errores)

        pagina = self.repo.list(
            alcance_listado(principal),
            estado=filtro_estado,
            prioridad=filtro_prioridad,
            page=page,
            per_page=self.settings.solicitudes_por_pagina,
        )
        return ResultadoListado(pagina=pagina, estado=filtro_estado, prioridad=filtro_prioridad)

    def obtener(self, principal: Principal, solicitud_id: int) -> Solicitud:
        solicitud = self.repo.get(solicitud_id)
        exigir(principal, Accion.VER_SOLICITUD, owner_id=solicitud.user_id)
        return solicitud

    # Escritura

    def crear(
        self,
        principal: Principal,
        datos: dict,
        archivo_pdf: Optional[AdjuntoEntrante] = None,
        logo: Optional[AdjuntoEntrante] = None,
    ) -> Solicitud:
        exigir(principal, Accion.CREAR_SOLICITUD)

        adjuntos = {"archivo_pdf": archivo_pdf, "logo": logo}
        errores: List[ErrorCampo] = []
        esquema = validar_esquema(SolicitudCreate, datos, errores)
        validar_adjuntos(adjuntos, errores)
        lanzar_si_hay_errores(errores)

        campos = esquema.model_dump()
        campos["user_id"] = principal.id
        campos["fecha_creacion"] = utcnow()

        subidos = self._subir_adjuntos(adjuntos)
        campos.update(subidos)
        try:
            solicitud = self.repo.create(campos)
        except SQLAlchemyError:
            self._descartar(subidos.values())
            raise

        logger.info(
            "Solicitud %s creada por usuario %s (estado=%s, prioridad=%s)",
            solicitud.id, principal.id, solicitud.estado.value, solicitud.prioridad.value,
        )
        return solicitud

    def actualizar(
        self,
        principal: Principal,
        solicitud_id: int,
        datos: dict,
        archivo_pdf: Optional[AdjuntoEntrante] = None,
        logo: Optional[AdjuntoEntrante] = None,
    ) -> Solicitud:
        solicitud = self.repo.get(solicitud_id)
        exigir(principal, Accion.EDITAR_SOLICITUD, owner_id=solicitud.user_id)

        adjuntos = {"archivo_pdf": archivo_pdf, "logo": logo}
        errores: List[ErrorCampo] = []
        esquema = validar_esquema(SolicitudUpdate, datos, errores)
        validar_adjuntos(adjuntos, errores)
        lanzar_si_hay_errores(errores)

        # Solo lo que vino en la petición; 'estado' no forma parte del esquema
        cambios = esquema.model_dump(exclude_unset=True)

        # Si falla la subida se aborta antes de escribir en la base
        subidos = self._subir_adjuntos(adjuntos)
        anteriores = [getattr(solicitud, campo) for campo in subidos if getattr(solicitud, campo)]
        cambios.update(subidos)

        try:
            solicitud = self.repo.update(solicitud, cambios)
        except SQLAlchemyError:
            self._descartar(subidos.values())
            raise

        # Cada slot es independiente: solo se borra el archivo del slot reemplazado
        self._descartar(anteriores)

        logger.info(
            "Solicitud %s actualizada por usuario %s (campos=%s)",
            solicitud.id, principal.id, sorted(cambios),
        )
        return solicitud

    def actualizar_estado(self, principal: Principal, solicitud_id: int, datos: dict) -> Solicitud:
        exigir(principal, Accion.CAMBIAR_ESTADO)
        solicitud = self.repo.get(solicitud_id)

        errores: List[ErrorCampo] = []
        esquema = validar_esquema(SolicitudEstadoUpdate, datos, errores)
        lanzar_si_hay_errores(errores)

        estado_anterior = solicitud.estado
        solicitud = self.repo.update(solicitud, {"estado": esquema.estado})
        logger.info(
            "Estado de solicitud %s cambiado de %s a %s por usuario %s",
            solicitud.id, estado_anterior.value, solicitud.estado.value, principal.id,
        )
        return solicitud

    def eliminar(self, principal: Principal, solicitud_id: int) -> None:
        solicitud = self.repo.get(solicitud_id)

        # Las completadas no se eliminan nunca, cualquiera sea el rol
        if solicitud.is_completada():
            logger.warning(
                "Usuario %s intentó eliminar la solicitud completada %s", principal.id, solicitud.id
            )
            raise CompletedRecordProtected()

        exigir(principal, Accion.ELIMINAR_SOLICITUD, owner_id=solicitud.user_id)

        adjuntos = [getattr(solicitud, campo) for campo in CAMPOS_ADJUNTOS if getattr(solicitud, campo)]
        self.repo.delete(solicitud)
        self._descartar(adjuntos)
        logger.info("Solicitud %s eliminada por usuario %s", solicitud_id, principal.id)

    # Adjuntos

    def _subir_adjuntos(self, adjuntos: Dict[str, Optional[AdjuntoEntrante]]) -> Dict[str, str]:
        """
        Sube los adjuntos presentes y devuelve {campo: ruta}.
        Si alguno falla, elimina los ya subidos en esta misma llamada y relanza.
        """
        reglas = reglas_adjuntos()
        subidos: Dict[str, str] = {}
        for campo, adjunto in adjuntos.items():
            if adjunto is None:
                continue
            try:
                subidos[campo] = self.store.put(reglas[campo].carpeta, adjunto.nombre, adjunto.contenido)
            except StorageFailure:
                self._descartar(subidos.values())
                raise
        return subidos

    def _descartar(self, rutas) -> None:
        for ruta in rutas:
            self.store.delete_quietly(ruta)
