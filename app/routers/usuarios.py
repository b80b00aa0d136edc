from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from app.database import get_db
from app.core.auth import get_current_principal
from app.core.permissions import Principal
from app.schemas.solicitud import PaginaMeta
from app.schemas.usuario import CredencialReseteada, UsuarioOut, UsuariosPaginados
from app.services.usuarios import UsuarioService

router = APIRouter(prefix="/usuarios", tags=["Usuarios"])


# Listar usuarios (solo super-admin), 15 por página
@router.get("/", response_model=UsuariosPaginados, summary="Listar usuarios")
def list_usuarios(
    page: int = Query(1, ge=1),
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    pagina = UsuarioService(db).listar(principal, page=page)
    return UsuariosPaginados(
        data=[UsuarioOut.model_validate(u) for u in pagina.items],
        meta=PaginaMeta(**pagina.meta()),
    )


# Resetear la credencial de otro usuario (solo super-admin)
@router.patch("/{id}/reset-credencial", response_model=CredencialReseteada, summary="Resetear la credencial de un usuario")
def reset_credencial(
    id: int,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
):
    """
    Genera una credencial temporal aleatoria y obliga al usuario a cambiarla.
    La credencial temporal solo se devuelve en esta respuesta.
    """
    return UsuarioService(db).resetear_credencial(principal, id)
