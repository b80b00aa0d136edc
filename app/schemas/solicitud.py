from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime
from app.models.solicitud import EstadoSolicitud, PrioridadSolicitud # Importa los Enums reales del modelo

class SolicitudBase(BaseModel):
    nombre_cliente: str = Field(..., min_length=1, max_length=255, description="Nombre del cliente que pide la landing page.")
    nombre_landing: str = Field(..., min_length=1, max_length=255, description="Nombre de la landing page.")
    nombre_producto: str = Field(..., min_length=1, max_length=255, description="Producto que se promociona.")
    prioridad: PrioridadSolicitud = Field(..., description="Prioridad de la solicitud.")

    class Config:
        str_strip_whitespace = True # "   " cuenta como vacío

class SolicitudCreate(SolicitudBase):
    """Esquema para la creación de una nueva solicitud. El dueño nunca viene del cliente."""
    estado: EstadoSolicitud = Field(EstadoSolicitud.PENDIENTE, description="Estado inicial, 'pendiente' si no se indica.")

class SolicitudUpdate(BaseModel):
    """
    Esquema para la actualización del contenido de una solicitud; todos los campos son opcionales.
    No incluye 'estado': el estado solo cambia por la acción dedicada del super-admin.
    Campos desconocidos (estado, user_id, fecha_creacion...) se ignoran.
    """
    nombre_cliente: Optional[str] = Field(None, min_length=1, max_length=255)
    nombre_landing: Optional[str] = Field(None, min_length=1, max_length=255)
    nombre_producto: Optional[str] = Field(None, min_length=1, max_length=255)
    prioridad: Optional[PrioridadSolicitud] = Field(None)

    class Config:
        str_strip_whitespace = True

class SolicitudEstadoUpdate(BaseModel):
    """Cambio de estado (solo super-admin)."""
    estado: EstadoSolicitud = Field(..., description="Nuevo estado de la solicitud.")

class SolicitudEstadoIn(BaseModel):
    """Cuerpo crudo del PATCH de estado; la validación del valor la hace el servicio."""
    estado: Optional[str] = None

class SolicitudOut(BaseModel):
    """Esquema de salida de una solicitud."""
    id: int = Field(..., description="Identificador único de la solicitud.")
    nombre_cliente: str
    nombre_landing: str
    nombre_producto: str
    estado: EstadoSolicitud
    prioridad: PrioridadSolicitud
    fecha_creacion: datetime = Field(..., description="Fecha de creación de la solicitud.")
    archivo_pdf: Optional[str] = Field(None, description="Ruta del PDF en el almacenamiento de adjuntos.")
    logo: Optional[str] = Field(None, description="Ruta del logo en el almacenamiento de adjuntos.")
    user_id: int = Field(..., description="Usuario que creó la solicitud.")
    nombre_usuario: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

class PaginaMeta(BaseModel):
    current_page: int
    last_page: int
    total: int
    per_page: int
    from_: Optional[int] = Field(None, serialization_alias="from")
    to: Optional[int] = None

class FiltrosAplicados(BaseModel):
    estado: Optional[EstadoSolicitud] = None
    prioridad: Optional[PrioridadSolicitud] = None

class OpcionesSolicitud(BaseModel):
    """Valores válidos de los enums, para armar filtros y formularios en el cliente."""
    estados: List[str] = Field(default_factory=EstadoSolicitud.valores)
    prioridades: List[str] = Field(default_factory=PrioridadSolicitud.valores)

class SolicitudesPaginadas(OpcionesSolicitud):
    data: List[SolicitudOut] = Field(default_factory=list)
    meta: PaginaMeta
    filtros: FiltrosAplicados
