from fastapi import APIRouter, Depends, File, Form, Query, UploadFile, status
from sqlalchemy.orm import Session
from typing import Optional
from app.database import get_db
from app.core.auth import get_current_principal
from app.core.permissions import Principal
from app.core.validation import AdjuntoEntrante
from app.schemas import solicitud as schemas_solicitud
from app.services.solicitudes import SolicitudService
from app.services.storage import AttachmentStore, get_attachment_store

router = APIRouter(prefix="/solicitudes", tags=["Solicitudes"])


def get_solicitud_service(
    db: Session = Depends(get_db),
    store: AttachmentStore = Depends(get_attachment_store),
) -> SolicitudService:
    return SolicitudService(db, store)


def _leer_adjunto(upload: Optional[UploadFile]) -> Optional[AdjuntoEntrante]:
    # Un input de archivo vacío llega sin nombre: se trata como "sin archivo"
    if upload is None or not upload.filename:
        return None
    return AdjuntoEntrante(
        nombre=upload.filename,
        content_type=upload.content_type,
        contenido=upload.file.read(),
    )


# Listar solicitudes con filtros y paginación
@router.get("/", response_model=schemas_solicitud.SolicitudesPaginadas, summary="Listar solicitudes con filtros y paginación")
def list_solicitudes(
    estado: Optional[str] = Query(None),
    prioridad: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    principal: Principal = Depends(get_current_principal),
    service: SolicitudService = Depends(get_solicitud_service),
):
    """
    Un usuario 'user' solo ve sus propias solicitudes; admin y super-admin ven todas.
    Orden: más recientes primero. 10 por página.
    """
    resultado = service.listar(principal, estado=estado, prioridad=prioridad, page=page)
    pagina = resultado.pagina
    return schemas_solicitud.SolicitudesPaginadas(
        data=[schemas_solicitud.SolicitudOut.model_validate(s) for s in pagina.items],
        meta=schemas_solicitud.PaginaMeta(**pagina.meta()),
        filtros=schemas_solicitud.FiltrosAplicados(estado=resultado.estado, prioridad=resultado.prioridad),
    )


# Valores de estado y prioridad para armar formularios y filtros
@router.get("/opciones", response_model=schemas_solicitud.OpcionesSolicitud, summary="Valores válidos de estado y prioridad")
def get_opciones(principal: Principal = Depends(get_current_principal)):
    return schemas_solicitud.OpcionesSolicitud()


@router.post("/", response_model=schemas_solicitud.SolicitudOut, status_code=status.HTTP_201_CREATED, summary="Crear una nueva solicitud")
def create_solicitud(
    nombre_cliente: Optional[str] = Form(None),
    nombre_landing: Optional[str] = Form(None),
    nombre_producto: Optional[str] = Form(None),
    prioridad: Optional[str] = Form(None),
    estado: Optional[str] = Form(None),
    archivo_pdf: Optional[UploadFile] = File(None),
    logo: Optional[UploadFile] = File(None),
    principal: Principal = Depends(get_current_principal),
    service: SolicitudService = Depends(get_solicitud_service),
):
    """
    Crea una solicitud a nombre del usuario autenticado.
    Acepta un PDF (hasta 10MB) y un logo JPG/PNG/SVG (hasta 5MB) opcionales.
    """
    datos = {
        "nombre_cliente": nombre_cliente,
        "nombre_landing": nombre_landing,
        "nombre_producto": nombre_producto,
        "prioridad": prioridad,
        "estado": estado,
    }
    return service.crear(principal, datos, archivo_pdf=_leer_adjunto(archivo_pdf), logo=_leer_adjunto(logo))


# Obtener una solicitud por ID
@router.get("/{id}", response_model=schemas_solicitud.SolicitudOut, summary="Obtener una solicitud por ID")
def get_solicitud(
    id: int,
    principal: Principal = Depends(get_current_principal),
    service: SolicitudService = Depends(get_solicitud_service),
):
    return service.obtener(principal, id)


# Actualizar el contenido de una solicitud (el estado se ignora)
@router.put("/{id}", response_model=schemas_solicitud.SolicitudOut, summary="Actualizar una solicitud por ID")
def update_solicitud(
    id: int,
    nombre_cliente: Optional[str] = Form(None),
    nombre_landing: Optional[str] = Form(None),
    nombre_producto: Optional[str] = Form(None),
    prioridad: Optional[str] = Form(None),
    archivo_pdf: Optional[UploadFile] = File(None),
    logo: Optional[UploadFile] = File(None),
    principal: Principal = Depends(get_current_principal),
    service: SolicitudService = Depends(get_solicitud_service),
):
    datos = {
        "nombre_cliente": nombre_cliente,
        "nombre_landing": nombre_landing,
        "nombre_producto": nombre_producto,
        "prioridad": prioridad,
    }
    return service.actualizar(principal, id, datos, archivo_pdf=_leer_adjunto(archivo_pdf), logo=_leer_adjunto(logo))


# Cambiar solo el estado (super-admin)
@router.patch("/{id}/estado", response_model=schemas_solicitud.SolicitudOut, summary="Actualizar el estado de una solicitud")
def update_solicitud_estado(
    id: int,
    payload: schemas_solicitud.SolicitudEstadoIn,
    principal: Principal = Depends(get_current_principal),
    service: SolicitudService = Depends(get_solicitud_service),
):
    return service.actualizar_estado(principal, id, payload.model_dump())


# Eliminar solicitud
@router.delete("/{id}", status_code=status.HTTP_204_NO_CONTENT, summary="Eliminar una solicitud por ID")
def delete_solicitud(
    id: int,
    principal: Principal = Depends(get_current_principal),
    service: SolicitudService = Depends(get_solicitud_service),
):
    # Regla de negocio: las solicitudes completadas no se pueden eliminar
    service.eliminar(principal, id)
