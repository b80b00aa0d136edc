# app/models/usuario.py
from sqlalchemy import Boolean, Column, Integer, String, DateTime, Enum, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from app.database import Base, utcnow
import enum


# Conjunto cerrado de roles; no hay jerarquía más allá de lo que decide la política
class Rol(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"
    SUPER_ADMIN = "super-admin"


class Usuario(Base):
    __tablename__ = "usuarios"
    id = Column(Integer, primary_key=True, index=True)
    nombre = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)
    credencial_hash = Column(String(255), nullable=True)
    # Tras un reseteo el usuario debe cambiar la credencial en su próximo ingreso
    debe_cambiar_credencial = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    roles_asignados = relationship(
        "UsuarioRol", cascade="all, delete-orphan", lazy="selectin"
    )

    @property
    def roles(self):
        """Roles del usuario; sin roles guardados se considera 'user'."""
        roles = {asignado.rol for asignado in self.roles_asignados}
        return frozenset(roles) if roles else frozenset({Rol.USER})


class UsuarioRol(Base):
    __tablename__ = "usuario_roles"
    __table_args__ = (UniqueConstraint("usuario_id", "rol", name="uq_usuario_rol"),)
    id = Column(Integer, primary_key=True)
    usuario_id = Column(Integer, ForeignKey("usuarios.id", ondelete="CASCADE"), nullable=False, index=True)
    rol = Column(
        Enum(Rol, name="rol_usuario", values_callable=lambda e: [m.value for m in e], validate_strings=True),
        nullable=False,
    )
