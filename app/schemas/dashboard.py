from pydantic import BaseModel, Field
from typing import Dict, List, Optional
from datetime import datetime
from app.models.solicitud import EstadoSolicitud, PrioridadSolicitud

class SolicitudReciente(BaseModel):
    id: int
    nombre_cliente: str
    nombre_landing: str
    nombre_producto: str
    estado: EstadoSolicitud
    prioridad: PrioridadSolicitud
    fecha_creacion: datetime
    user_id: int
    nombre_usuario: Optional[str] = None

    class Config:
        from_attributes = True

class DashboardStats(BaseModel):
    """Estadísticas globales del dashboard (no dependen del rol de quien consulta)."""
    total: int = Field(..., description="Total de solicitudes.")
    por_estado: Dict[str, int] = Field(..., description="Cantidad por cada estado.")
    por_prioridad: Dict[str, int] = Field(..., description="Cantidad por cada prioridad.")
    este_mes: int = Field(..., description="Solicitudes creadas en el mes calendario actual.")
    porcentaje_completado: float = Field(..., description="Completadas / total * 100, con un decimal.")
    ultimas: List[SolicitudReciente] = Field(default_factory=list)
