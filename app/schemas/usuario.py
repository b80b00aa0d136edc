from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import List
from datetime import datetime
from app.models.usuario import Rol
from app.schemas.solicitud import PaginaMeta

class UsuarioCreate(BaseModel):
    """Alta de un usuario (carga de datos de demostración)."""
    nombre: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    rol: Rol = Rol.USER

class UsuarioOut(BaseModel):
    """Usuario tal como se muestra en la gestión de usuarios (sin credenciales)."""
    id: int
    nombre: str
    email: str # Sin validar: se muestra tal como está guardado
    roles: List[Rol] = Field(default_factory=list)
    debe_cambiar_credencial: bool = False
    created_at: datetime

    @field_validator("roles", mode="before")
    @classmethod
    def ordenar_roles(cls, v):
        # El modelo expone los roles como frozenset; se devuelven en orden estable
        return sorted(v, key=lambda rol: Rol(rol).value) if v else []

    class Config:
        from_attributes = True

class UsuariosPaginados(BaseModel):
    data: List[UsuarioOut] = Field(default_factory=list)
    meta: PaginaMeta

class CredencialReseteada(BaseModel):
    """
    Resultado de un reseteo de credencial. La credencial temporal solo se
    devuelve en esta respuesta; en la base queda únicamente su hash.
    """
    usuario_id: int
    credencial_temporal: str
    debe_cambiar_credencial: bool = True
    mensaje: str
