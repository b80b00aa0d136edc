# app/repositories/solicitud_repository.py
"""
Acceso a datos de solicitudes.

Cada escritura es una transacción propia: commit si todo va bien, rollback
ante cualquier SQLAlchemyError (que se registra y se vuelve a lanzar), de modo
que un fallo nunca deja una solicitud a medio escribir.
"""
import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import NotFound
from app.core.permissions import Alcance
from app.models.solicitud import EstadoSolicitud, PrioridadSolicitud, Solicitud
from app.repositories.pagination import Pagina, paginar

logger = logging.getLogger(__name__)

# Campos que se pueden modificar después de crear la solicitud.
# id, user_id y fecha_creacion quedan fuera: si llegan se ignoran.
CAMPOS_MUTABLES = frozenset({
    "nombre_cliente",
    "nombre_landing",
    "nombre_producto",
    "prioridad",
    "archivo_pdf",
    "logo",
    "estado",
})

# Orden canónico: más recientes primero, empate por id descendente
ORDEN_RECIENTES = (Solicitud.fecha_creacion.desc(), Solicitud.id.desc())


class SolicitudRepository:
    def __init__(self, db: Session):
        self.db = db

    @contextmanager
    def _transaccion(self, operacion: str):
        try:
            yield
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Error de base de datos al %s una solicitud: %s", operacion, e)
            raise

    def create(self, campos: dict) -> Solicitud:
        solicitud = Solicitud(**campos)
        with self._transaccion("crear"):
            self.db.add(solicitud)
        self.db.refresh(solicitud)
        return solicitud

    def get(self, solicitud_id: int) -> Solicitud:
        solicitud = self.db.get(Solicitud, solicitud_id)
        if solicitud is None:
            raise NotFound("Solicitud no encontrada")
        return solicitud

    def list(
        self,
        alcance: Alcance,
        estado: Optional[EstadoSolicitud] = None,
        prioridad: Optional[PrioridadSolicitud] = None,
        page: int = 1,
        per_page: int = 10,
    ) -> Pagina[Solicitud]:
        query = self.db.query(Solicitud)

        if not alcance.todas:
            query = query.filter(Solicitud.user_id == alcance.user_id)
        if estado is not None:
            query = query.filter(Solicitud.estado == estado)
        if prioridad is not None:
            query = query.filter(Solicitud.prioridad == prioridad)

        return paginar(query.order_by(*ORDEN_RECIENTES), page, per_page)

    def update(self, solicitud: Solicitud, cambios: dict) -> Solicitud:
        ignorados = set(cambios) - CAMPOS_MUTABLES
        if ignorados:
            logger.debug("Campos no modificables ignorados en solicitud %s: %s", solicitud.id, sorted(ignorados))

        with self._transaccion("actualizar"):
            for clave, valor in cambios.items():
                if clave in CAMPOS_MUTABLES:
                    setattr(solicitud, clave, valor)
        self.db.refresh(solicitud)
        return solicitud

    def delete(self, solicitud: Solicitud) -> None:
        with self._transaccion("eliminar"):
            self.db.delete(solicitud)

    # Consultas de solo lectura para el dashboard

    def count(self) -> int:
        return self.db.query(func.count(Solicitud.id)).scalar() or 0

    def contar_por(self, columna, valores: Iterable) -> Dict[str, int]:
        """Cantidad por cada valor de `columna`; los valores sin filas cuentan 0."""
        filas = self.db.query(columna, func.count(Solicitud.id)).group_by(columna).all()
        conteo = {valor.value: 0 for valor in valores}
        for valor, cantidad in filas:
            conteo[valor.value] = cantidad
        return conteo

    def contar_creadas_entre(self, desde: datetime, hasta: datetime) -> int:
        """Solicitudes con fecha_creacion en [desde, hasta)."""
        return (
            self.db.query(func.count(Solicitud.id))
            .filter(Solicitud.fecha_creacion >= desde, Solicitud.fecha_creacion < hasta)
            .scalar()
            or 0
        )

    def ultimas(self, n: int) -> List[Solicitud]:
        return self.db.query(Solicitud).order_by(*ORDEN_RECIENTES).limit(n).all()
