from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from app.database import get_db
from app.core.auth import get_current_principal
from app.core.permissions import Principal
from app.schemas.dashboard import DashboardStats
from app.services.dashboard import DashboardService

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])


@router.get("", response_model=DashboardStats, summary="Estadísticas generales de solicitudes")
def get_dashboard(
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """
    Totales por estado y prioridad, solicitudes del mes, porcentaje completado
    y las 5 más recientes. Siempre sobre todas las solicitudes del sistema.
    """
    return DashboardService(db).estadisticas(principal)
