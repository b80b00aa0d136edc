import pytest

from app.core.errors import Forbidden
from app.core.permissions import Accion, Principal, alcance_listado, autorizar, exigir
from app.models.usuario import Rol

USER = Principal(id=1, nombre="User", roles=frozenset({Rol.USER}))
OTRO = Principal(id=2, nombre="Otro", roles=frozenset({Rol.USER}))
ADMIN = Principal(id=3, nombre="Admin", roles=frozenset({Rol.ADMIN}))
SUPER = Principal(id=4, nombre="Super", roles=frozenset({Rol.SUPER_ADMIN}))


@pytest.mark.parametrize("principal", [USER, ADMIN, SUPER])
def test_cualquier_usuario_puede_crear_listar_y_ver_dashboard(principal):
    for accion in (Accion.CREAR_SOLICITUD, Accion.LISTAR_SOLICITUDES, Accion.VER_DASHBOARD):
        assert autorizar(principal, accion).permitido


def test_alcance_del_listado_depende_del_rol():
    assert alcance_listado(USER).todas is False
    assert alcance_listado(USER).user_id == USER.id
    assert alcance_listado(ADMIN).todas is True
    assert alcance_listado(SUPER).todas is True


def test_editar_solo_dueno_o_administrativos():
    assert autorizar(USER, Accion.EDITAR_SOLICITUD, owner_id=USER.id).permitido
    assert not autorizar(OTRO, Accion.EDITAR_SOLICITUD, owner_id=USER.id).permitido
    assert autorizar(ADMIN, Accion.EDITAR_SOLICITUD, owner_id=USER.id).permitido
    assert autorizar(SUPER, Accion.EDITAR_SOLICITUD, owner_id=USER.id).permitido


def test_ver_solicitud_ajena_denegado_para_user():
    decision = autorizar(OTRO, Accion.VER_SOLICITUD, owner_id=USER.id)
    assert not decision.permitido
    assert decision.motivo


@pytest.mark.parametrize("principal, permitido", [(USER, False), (ADMIN, False), (SUPER, True)])
def test_cambiar_estado_exclusivo_de_super_admin(principal, permitido):
    assert autorizar(principal, Accion.CAMBIAR_ESTADO).permitido is permitido


@pytest.mark.parametrize("principal, permitido", [(USER, False), (ADMIN, True), (SUPER, True)])
def test_eliminar_solo_administrativos(principal, permitido):
    # Ni siendo dueño un 'user' puede eliminar
    assert autorizar(principal, Accion.ELIMINAR_SOLICITUD, owner_id=principal.id).permitido is permitido


@pytest.mark.parametrize("principal, permitido", [(USER, False), (ADMIN, False), (SUPER, True)])
def test_gestion_de_usuarios_exclusiva_de_super_admin(principal, permitido):
    assert autorizar(principal, Accion.GESTIONAR_USUARIOS).permitido is permitido


def test_reseteo_de_credencial():
    assert autorizar(SUPER, Accion.RESETEAR_CREDENCIAL, target_id=USER.id).permitido
    assert not autorizar(ADMIN, Accion.RESETEAR_CREDENCIAL, target_id=USER.id).permitido
    propia = autorizar(SUPER, Accion.RESETEAR_CREDENCIAL, target_id=SUPER.id)
    assert not propia.permitido
    assert "propia" in propia.motivo


def test_roles_combinados():
    multi = Principal(id=9, nombre="Multi", roles=frozenset({Rol.USER, Rol.ADMIN}))
    assert multi.es_administrativo
    assert not multi.es_super_admin
    assert autorizar(multi, Accion.ELIMINAR_SOLICITUD).permitido


def test_exigir_lanza_forbidden_con_motivo():
    with pytest.raises(Forbidden) as exc_info:
        exigir(ADMIN, Accion.CAMBIAR_ESTADO)
    assert exc_info.value.detail == "Solo el super-admin puede actualizar estados."
    assert exc_info.value.status_code == 403


def test_accion_desconocida_no_se_permite():
    with pytest.raises(ValueError):
        autorizar(SUPER, "accion_inventada")
