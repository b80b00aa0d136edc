# app/services/usuarios.py
import logging
from typing import Optional

from sqlalchemy.orm import Session

from app.config import Settings, get_settings
from app.core.errors import Forbidden
from app.core.permissions import Accion, Principal, exigir
from app.core.security import generate_one_time_token, hash_credential
from app.models.usuario import Usuario
from app.repositories.pagination import Pagina
from app.repositories.usuario_repository import UsuarioRepository
from app.schemas.usuario import CredencialReseteada

logger = logging.getLogger(__name__)


class UsuarioService:
    """Gestión de usuarios (solo super-admin)."""

    def __init__(self, db: Session, settings: Optional[Settings] = None):
        self.repo = UsuarioRepository(db)
        self.settings = settings or get_settings()

    def listar(self, principal: Principal, page: int = 1) -> Pagina[Usuario]:
        exigir(principal, Accion.GESTIONAR_USUARIOS)
        return self.repo.list(page=page, per_page=self.settings.usuarios_por_pagina)

    def resetear_credencial(self, principal: Principal, usuario_id: int) -> CredencialReseteada:
        """
        Genera una credencial temporal aleatoria para otro usuario.

        Solo se guarda el hash y se marca al usuario para que la cambie en su
        próximo ingreso; el valor en claro solo aparece en la respuesta.
        """
        # El rol se revisa antes de buscar al usuario para no revelar qué ids existen
        exigir(principal, Accion.GESTIONAR_USUARIOS)
        usuario = self.repo.get(usuario_id)
        try:
            exigir(principal, Accion.RESETEAR_CREDENCIAL, target_id=usuario.id)
        except Forbidden:
            logger.warning("Usuario %s intentó resetear su propia credencial", principal.id)
            raise

        temporal = generate_one_time_token()
        self.repo.set_credencial(usuario, hash_credential(temporal), debe_cambiar=True)
        logger.info("Credencial del usuario %s reseteada por %s", usuario.id, principal.id)

        return CredencialReseteada(
            usuario_id=usuario.id,
            credencial_temporal=temporal,
            debe_cambiar_credencial=True,
            mensaje=f"Credencial de {usuario.nombre} reseteada. Deberá cambiarla en su próximo ingreso.",
        )
