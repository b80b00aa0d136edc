# app/services/dashboard.py
"""
Estadísticas del dashboard.

Se calculan sobre todas las solicitudes, sin filtrar por el rol de quien
consulta (a diferencia del listado), y se recalculan en cada petición.
"""
from datetime import datetime
from typing import Optional

from dateutil.relativedelta import relativedelta
from sqlalchemy.orm import Session

from app.config import Settings, get_settings
from app.core.permissions import Accion, Principal, exigir
from app.database import utcnow
from app.models.solicitud import EstadoSolicitud, PrioridadSolicitud, Solicitud
from app.repositories.solicitud_repository import SolicitudRepository
from app.schemas.dashboard import DashboardStats, SolicitudReciente


def porcentaje_completado(completadas: int, total: int) -> float:
    """Porcentaje con un decimal; 0 si no hay solicitudes."""
    if total == 0:
        return 0.0
    return round(completadas / total * 100, 1)


def rango_mes(referencia: datetime):
    """Inicio del mes de `referencia` y el inicio del mes siguiente."""
    inicio = referencia.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    return inicio, inicio + relativedelta(months=1)


class DashboardService:
    def __init__(self, db: Session, settings: Optional[Settings] = None):
        self.repo = SolicitudRepository(db)
        self.settings = settings or get_settings()

    def estadisticas(self, principal: Principal, ahora: Optional[datetime] = None) -> DashboardStats:
        exigir(principal, Accion.VER_DASHBOARD)
        ahora = ahora or utcnow()

        total = self.repo.count()
        por_estado = self.repo.contar_por(Solicitud.estado, EstadoSolicitud)
        por_prioridad = self.repo.contar_por(Solicitud.prioridad, PrioridadSolicitud)

        inicio_mes, inicio_mes_siguiente = rango_mes(ahora)
        este_mes = self.repo.contar_creadas_entre(inicio_mes, inicio_mes_siguiente)

        ultimas = [
            SolicitudReciente.model_validate(solicitud)
            for solicitud in self.repo.ultimas(self.settings.ultimas_solicitudes)
        ]

        return DashboardStats(
            total=total,
            por_estado=por_estado,
            por_prioridad=por_prioridad,
            este_mes=este_mes,
            porcentaje_completado=porcentaje_completado(
                por_estado[EstadoSolicitud.COMPLETADA.value], total
            ),
            ultimas=ultimas,
        )
