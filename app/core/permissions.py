# app/core/permissions.py
"""
Política de control de acceso.

Funciones puras: reciben el principal (usuario autenticado con sus roles),
la acción y, cuando aplica, el recurso, y deciden si se permite. No consultan
la base de datos ni registran nada.

| Acción               | Regla                                                  |
|----------------------|--------------------------------------------------------|
| LISTAR_SOLICITUDES   | todos; 'user' solo ve las propias                      |
| VER_SOLICITUD        | dueño, admin o super-admin                             |
| CREAR_SOLICITUD      | cualquier usuario autenticado                          |
| EDITAR_SOLICITUD     | dueño, admin o super-admin                             |
| CAMBIAR_ESTADO       | solo super-admin                                       |
| ELIMINAR_SOLICITUD   | admin o super-admin                                    |
| VER_DASHBOARD        | cualquier usuario autenticado                          |
| GESTIONAR_USUARIOS   | solo super-admin                                       |
| RESETEAR_CREDENCIAL  | solo super-admin y nunca sobre sí mismo                |
"""
import enum
from dataclasses import dataclass
from typing import FrozenSet, Optional

from app.core.errors import Forbidden
from app.models.usuario import Rol


ROLES_ADMINISTRATIVOS = frozenset({Rol.ADMIN, Rol.SUPER_ADMIN})


class Accion(str, enum.Enum):
    LISTAR_SOLICITUDES = "listar_solicitudes"
    VER_SOLICITUD = "ver_solicitud"
    CREAR_SOLICITUD = "crear_solicitud"
    EDITAR_SOLICITUD = "editar_solicitud"
    CAMBIAR_ESTADO = "cambiar_estado"
    ELIMINAR_SOLICITUD = "eliminar_solicitud"
    VER_DASHBOARD = "ver_dashboard"
    GESTIONAR_USUARIOS = "gestionar_usuarios"
    RESETEAR_CREDENCIAL = "resetear_credencial"


@dataclass(frozen=True)
class Principal:
    """Usuario autenticado tal como lo entrega el proveedor de identidad."""
    id: int
    nombre: str
    roles: FrozenSet[Rol]

    @classmethod
    def desde_usuario(cls, usuario) -> "Principal":
        return cls(id=usuario.id, nombre=usuario.nombre, roles=frozenset(usuario.roles))

    def tiene_rol(self, rol: Rol) -> bool:
        return rol in self.roles

    @property
    def es_administrativo(self) -> bool:
        return bool(self.roles & ROLES_ADMINISTRATIVOS)

    @property
    def es_super_admin(self) -> bool:
        return Rol.SUPER_ADMIN in self.roles


@dataclass(frozen=True)
class Decision:
    permitido: bool
    motivo: str = ""


@dataclass(frozen=True)
class Alcance:
    """Qué solicitudes puede listar un principal: todas o solo las propias."""
    todas: bool
    user_id: Optional[int] = None

    @classmethod
    def global_(cls) -> "Alcance":
        return cls(todas=True)

    @classmethod
    def propias(cls, user_id: int) -> "Alcance":
        return cls(todas=False, user_id=user_id)


PERMITIDO = Decision(True)


def _denegar(motivo: str) -> Decision:
    return Decision(False, motivo)


def _es_dueno_o_administrativo(principal: Principal, owner_id: Optional[int]) -> bool:
    return principal.es_administrativo or (owner_id is not None and owner_id == principal.id)


def autorizar(
    principal: Principal,
    accion: Accion,
    owner_id: Optional[int] = None,
    target_id: Optional[int] = None,
) -> Decision:
    """
    Decide si `principal` puede ejecutar `accion`.

    Args:
        principal: usuario autenticado.
        accion: acción solicitada.
        owner_id: dueño de la solicitud afectada (acciones sobre una solicitud).
        target_id: usuario afectado (reseteo de credencial).
    """
    if accion in (Accion.LISTAR_SOLICITUDES, Accion.CREAR_SOLICITUD, Accion.VER_DASHBOARD):
        return PERMITIDO

    if accion == Accion.VER_SOLICITUD:
        if _es_dueno_o_administrativo(principal, owner_id):
            return PERMITIDO
        return _denegar("No tienes permisos para ver esta solicitud.")

    if accion == Accion.EDITAR_SOLICITUD:
        if _es_dueno_o_administrativo(principal, owner_id):
            return PERMITIDO
        return _denegar("No tienes permisos para editar esta solicitud.")

    if accion == Accion.CAMBIAR_ESTADO:
        if principal.es_super_admin:
            return PERMITIDO
        return _denegar("Solo el super-admin puede actualizar estados.")

    if accion == Accion.ELIMINAR_SOLICITUD:
        if principal.es_administrativo:
            return PERMITIDO
        return _denegar("No tienes permisos para eliminar solicitudes.")

    if accion == Accion.GESTIONAR_USUARIOS:
        if principal.es_super_admin:
            return PERMITIDO
        return _denegar("Solo el super-admin puede gestionar usuarios.")

    if accion == Accion.RESETEAR_CREDENCIAL:
        if not principal.es_super_admin:
            return _denegar("Solo el super-admin puede resetear credenciales.")
        if target_id is not None and target_id == principal.id:
            return _denegar("No puedes resetear tu propia credencial desde aquí.")
        return PERMITIDO

    # Una acción sin regla es un error de programación, nunca un permiso implícito
    raise ValueError(f"Acción sin regla de autorización: {accion!r}")


def exigir(
    principal: Principal,
    accion: Accion,
    owner_id: Optional[int] = None,
    target_id: Optional[int] = None,
) -> None:
    """Igual que `autorizar`, pero lanza `Forbidden` si la acción se deniega."""
    decision = autorizar(principal, accion, owner_id=owner_id, target_id=target_id)
    if not decision.permitido:
        raise Forbidden(decision.motivo)


def alcance_listado(principal: Principal) -> Alcance:
    if principal.es_administrativo:
        return Alcance.global_()
    return Alcance.propias(principal.id)
