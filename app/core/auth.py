# app/core/auth.py
"""
Resolución del usuario autenticado.

La sesión y el login los maneja el gateway de autenticación que está delante
de la API; este inyecta el id del usuario en una cabecera (X-Usuario-Id por
defecto, configurable con AUTH_HEADER). Aquí solo se lee esa cabecera y se
cargan los roles del usuario.
"""
import logging

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from app.config import get_settings
from app.core.errors import Unauthenticated
from app.core.permissions import Principal
from app.database import get_db
from app.repositories.usuario_repository import UsuarioRepository

logger = logging.getLogger(__name__)


def get_current_principal(request: Request, db: Session = Depends(get_db)) -> Principal:
    header = get_settings().auth_header
    valor = request.headers.get(header)
    if not valor:
        raise Unauthenticated()

    try:
        usuario_id = int(valor)
    except ValueError:
        logger.warning("Cabecera %s con valor no numérico", header)
        raise Unauthenticated("Identificador de usuario inválido.")

    usuario = UsuarioRepository(db).find(usuario_id)
    if usuario is None:
        logger.warning("Usuario %s de la cabecera %s no existe", usuario_id, header)
        raise Unauthenticated("Usuario no reconocido.")

    return Principal.desde_usuario(usuario)
