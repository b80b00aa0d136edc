# app/repositories/usuario_repository.py
import logging
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.errors import NotFound
from app.models.usuario import Usuario
from app.repositories.pagination import Pagina, paginar

logger = logging.getLogger(__name__)


class UsuarioRepository:
    """Lectura de usuarios; lo único que se escribe es el hash de la credencial."""

    def __init__(self, db: Session):
        self.db = db

    def find(self, usuario_id: int) -> Optional[Usuario]:
        return self.db.get(Usuario, usuario_id)

    def get(self, usuario_id: int) -> Usuario:
        usuario = self.find(usuario_id)
        if usuario is None:
            raise NotFound("Usuario no encontrado")
        return usuario

    def list(self, page: int = 1, per_page: int = 15) -> Pagina[Usuario]:
        query = self.db.query(Usuario).order_by(Usuario.created_at.desc(), Usuario.id.desc())
        return paginar(query, page, per_page)

    def set_credencial(self, usuario: Usuario, credencial_hash: str, debe_cambiar: bool = True) -> Usuario:
        try:
            usuario.credencial_hash = credencial_hash
            usuario.debe_cambiar_credencial = debe_cambiar
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("Error de base de datos al guardar la credencial del usuario %s: %s", usuario.id, e)
            raise
        self.db.refresh(usuario)
        return usuario
