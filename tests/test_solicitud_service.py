import pytest
from sqlalchemy.exc import SQLAlchemyError

from app.core.errors import (
    ARCHIVO_MUY_GRANDE,
    CAMPO_REQUERIDO,
    TIPO_ARCHIVO_INVALIDO,
    VALOR_INVALIDO,
    CompletedRecordProtected,
    DomainConflict,
    Forbidden,
    NotFound,
    StorageFailure,
    ValidationFailed,
)
from app.models.solicitud import EstadoSolicitud, PrioridadSolicitud, Solicitud
from app.services.solicitudes import SolicitudService
from helpers import PDF_BYTES, pdf, png, principal_de

DATOS_VALIDOS = {
    "nombre_cliente": "Test Client",
    "nombre_landing": "Test Landing",
    "nombre_producto": "Test Product",
    "prioridad": "alta",
}


@pytest.fixture
def service(db, store):
    return SolicitudService(db, store)


def codigos(exc_info, campo):
    return [e.codigo for e in exc_info.value.errores if e.campo == campo]


# Creación

def test_crear_sin_adjuntos_fuerza_dueno_y_estado_por_defecto(service, user, otro_user):
    datos = dict(DATOS_VALIDOS, user_id=otro_user.id)

    solicitud = service.crear(principal_de(user), datos)

    assert solicitud.id is not None
    assert solicitud.user_id == user.id
    assert solicitud.estado == EstadoSolicitud.PENDIENTE
    assert solicitud.prioridad == PrioridadSolicitud.ALTA
    assert solicitud.fecha_creacion is not None
    assert solicitud.archivo_pdf is None and solicitud.logo is None


def test_crear_con_estado_explicito(service, user):
    solicitud = service.crear(principal_de(user), dict(DATOS_VALIDOS, estado="en_programación"))
    assert solicitud.estado == EstadoSolicitud.EN_PROGRAMACION


def test_crear_con_adjuntos_guarda_rutas_resolubles(service, store, user):
    solicitud = service.crear(principal_de(user), DATOS_VALIDOS, archivo_pdf=pdf(), logo=png())

    assert solicitud.archivo_pdf.startswith("solicitudes/pdfs/")
    assert solicitud.logo.startswith("solicitudes/logos/")
    assert store.exists(solicitud.archivo_pdf)
    assert store.exists(solicitud.logo)
    with open(store.resolve(solicitud.archivo_pdf), "rb") as f:
        assert f.read() == PDF_BYTES


def test_crear_reporta_todos_los_errores_por_campo(service, user, db):
    datos = {"nombre_cliente": "  ", "prioridad": "urgente", "estado": "archivada"}

    with pytest.raises(ValidationFailed) as exc_info:
        service.crear(principal_de(user), datos)

    assert codigos(exc_info, "nombre_cliente") == [CAMPO_REQUERIDO]
    assert codigos(exc_info, "nombre_landing") == [CAMPO_REQUERIDO]
    assert codigos(exc_info, "nombre_producto") == [CAMPO_REQUERIDO]
    assert codigos(exc_info, "prioridad") == [VALOR_INVALIDO]
    assert codigos(exc_info, "estado") == [VALOR_INVALIDO]
    assert db.query(Solicitud).count() == 0


def test_crear_rechaza_adjuntos_invalidos_sin_subir_nada(service, store, user, db):
    pdf_grande = pdf(contenido=b"0" * (10 * 1024 * 1024 + 1))
    logo_gif = png(nombre="logo.gif", content_type="image/gif")

    with pytest.raises(ValidationFailed) as exc_info:
        service.crear(principal_de(user), DATOS_VALIDOS, archivo_pdf=pdf_grande, logo=logo_gif)

    assert codigos(exc_info, "archivo_pdf") == [ARCHIVO_MUY_GRANDE]
    assert codigos(exc_info, "logo") == [TIPO_ARCHIVO_INVALIDO]
    assert db.query(Solicitud).count() == 0
    assert not store.base_dir.exists() or not any(store.base_dir.rglob("*.*"))


def test_crear_con_fallo_de_almacenamiento_no_escribe_fila(service, store, user, db, monkeypatch):
    def falla(*args, **kwargs):
        raise StorageFailure("disco lleno")

    monkeypatch.setattr(store, "put", falla)

    with pytest.raises(StorageFailure):
        service.crear(principal_de(user), DATOS_VALIDOS, archivo_pdf=pdf())

    assert db.query(Solicitud).count() == 0


def test_crear_con_fallo_de_base_elimina_adjuntos_subidos(service, store, user, monkeypatch):
    subidas = []
    put_original = store.put

    def put_registrando(*args, **kwargs):
        ruta = put_original(*args, **kwargs)
        subidas.append(ruta)
        return ruta

    def create_falla(campos):
        raise SQLAlchemyError("sin conexión")

    monkeypatch.setattr(store, "put", put_registrando)
    monkeypatch.setattr(service.repo, "create", create_falla)

    with pytest.raises(SQLAlchemyError):
        service.crear(principal_de(user), DATOS_VALIDOS, archivo_pdf=pdf())

    assert len(subidas) == 1
    assert not store.exists(subidas[0])


# Lectura

def test_listar_user_solo_ve_las_propias(service, user, otro_user, crear_solicitud):
    propia = crear_solicitud(user)
    crear_solicitud(otro_user)

    resultado = service.listar(principal_de(user))

    assert [s.id for s in resultado.pagina.items] == [propia.id]


@pytest.mark.parametrize("rol_fixture", ["admin", "super_admin"])
def test_listar_administrativos_ven_todas(request, service, user, otro_user, crear_solicitud, rol_fixture):
    crear_solicitud(user)
    crear_solicitud(otro_user)
    principal = principal_de(request.getfixturevalue(rol_fixture))

    assert service.listar(principal).pagina.total == 2


def test_listar_filtro_vacio_no_restringe_y_filtro_invalido_falla(service, admin, user, crear_solicitud):
    crear_solicitud(user, estado=EstadoSolicitud.COMPLETADA)
    crear_solicitud(user)

    resultado = service.listar(principal_de(admin), estado="", prioridad="")
    assert resultado.pagina.total == 2
    assert resultado.estado is None

    with pytest.raises(ValidationFailed) as exc_info:
        service.listar(principal_de(admin), estado="cerrada")
    assert codigos(exc_info, "estado") == [VALOR_INVALIDO]


def test_obtener_ajena_es_forbidden(service, user, otro_user, crear_solicitud):
    solicitud = crear_solicitud(otro_user)
    with pytest.raises(Forbidden):
        service.obtener(principal_de(user), solicitud.id)


def test_obtener_inexistente_es_not_found(service, admin):
    with pytest.raises(NotFound):
        service.obtener(principal_de(admin), 404)


# Actualización de contenido

def test_dueno_actualiza_contenido_y_el_estado_se_ignora(service, user, crear_solicitud):
    solicitud = crear_solicitud(user, estado=EstadoSolicitud.PENDIENTE)

    actualizada = service.actualizar(
        principal_de(user), solicitud.id, {"nombre_cliente": "Updated Client", "estado": "completada"}
    )

    assert actualizada.nombre_cliente == "Updated Client"
    assert actualizada.estado == EstadoSolicitud.PENDIENTE


def test_admin_actualiza_solicitud_ajena(service, admin, user, crear_solicitud):
    solicitud = crear_solicitud(user)
    actualizada = service.actualizar(principal_de(admin), solicitud.id, {"prioridad": "baja"})
    assert actualizada.prioridad == PrioridadSolicitud.BAJA


def test_user_no_puede_actualizar_solicitud_ajena(service, db, user, otro_user, crear_solicitud):
    solicitud = crear_solicitud(otro_user, nombre_cliente="Original")

    with pytest.raises(Forbidden):
        service.actualizar(principal_de(user), solicitud.id, {"nombre_cliente": "Hacked Client"})

    db.expire_all()
    assert db.get(Solicitud, solicitud.id).nombre_cliente == "Original"


def test_actualizar_valida_campos_presentes(service, user, crear_solicitud):
    solicitud = crear_solicitud(user)
    with pytest.raises(ValidationFailed) as exc_info:
        service.actualizar(principal_de(user), solicitud.id, {"nombre_landing": "", "prioridad": "maxima"})
    assert codigos(exc_info, "nombre_landing") == [CAMPO_REQUERIDO]
    assert codigos(exc_info, "prioridad") == [VALOR_INVALIDO]


def test_reemplazar_adjunto_borra_el_anterior_y_no_toca_el_otro_slot(service, store, user):
    creada = service.crear(principal_de(user), DATOS_VALIDOS, archivo_pdf=pdf(), logo=png())
    pdf_anterior, logo_anterior = creada.archivo_pdf, creada.logo

    actualizada = service.actualizar(principal_de(user), creada.id, {}, archivo_pdf=pdf(nombre="nuevo.pdf"))

    assert actualizada.archivo_pdf != pdf_anterior
    assert store.exists(actualizada.archivo_pdf)
    assert not store.exists(pdf_anterior)
    assert actualizada.logo == logo_anterior
    assert store.exists(logo_anterior)


def test_actualizar_con_fallo_de_subida_no_modifica_nada(service, store, db, user, monkeypatch):
    creada = service.crear(principal_de(user), DATOS_VALIDOS, archivo_pdf=pdf())
    pdf_anterior = creada.archivo_pdf

    def falla(*args, **kwargs):
        raise StorageFailure("bucket no disponible")

    monkeypatch.setattr(store, "put", falla)

    with pytest.raises(StorageFailure):
        service.actualizar(principal_de(user), creada.id, {"nombre_cliente": "Otro"}, archivo_pdf=pdf())

    db.expire_all()
    recargada = db.get(Solicitud, creada.id)
    assert recargada.nombre_cliente == "Test Client"
    assert recargada.archivo_pdf == pdf_anterior
    assert store.exists(pdf_anterior)


def test_fallo_al_borrar_adjunto_anterior_no_bloquea_la_actualizacion(service, store, user, monkeypatch, caplog):
    creada = service.crear(principal_de(user), DATOS_VALIDOS, logo=png())
    # Misma instancia ORM que devolverá actualizar: se guarda la ruta antes
    logo_anterior = creada.logo

    def falla(ruta):
        raise StorageFailure("permiso denegado")

    monkeypatch.setattr(store, "delete", falla)

    actualizada = service.actualizar(principal_de(user), creada.id, {}, logo=png(nombre="nuevo.png"))

    assert actualizada.logo != logo_anterior
    assert store.exists(actualizada.logo)
    assert store.exists(logo_anterior)
    assert "No se pudo eliminar el adjunto" in caplog.text


# Cambio de estado

def test_super_admin_cambia_estado_a_cualquier_valor(service, super_admin, user, crear_solicitud):
    solicitud = crear_solicitud(user, estado=EstadoSolicitud.COMPLETADA)
    principal = principal_de(super_admin)

    # Grafo sin restricciones: de completada se puede volver a pendiente
    assert service.actualizar_estado(principal, solicitud.id, {"estado": "pendiente"}).estado == EstadoSolicitud.PENDIENTE
    assert service.actualizar_estado(principal, solicitud.id, {"estado": "en_diseño"}).estado == EstadoSolicitud.EN_DISENO


@pytest.mark.parametrize("rol_fixture", ["user", "admin"])
def test_solo_super_admin_cambia_estado(request, service, db, user, crear_solicitud, rol_fixture):
    solicitud = crear_solicitud(user, estado=EstadoSolicitud.PENDIENTE)
    principal = principal_de(request.getfixturevalue(rol_fixture))

    with pytest.raises(Forbidden):
        service.actualizar_estado(principal, solicitud.id, {"estado": "completada"})

    db.expire_all()
    assert db.get(Solicitud, solicitud.id).estado == EstadoSolicitud.PENDIENTE


def test_cambio_de_estado_invalido(service, super_admin, user, crear_solicitud):
    solicitud = crear_solicitud(user)
    with pytest.raises(ValidationFailed) as exc_info:
        service.actualizar_estado(principal_de(super_admin), solicitud.id, {"estado": "archivada"})
    assert codigos(exc_info, "estado") == [VALOR_INVALIDO]

    with pytest.raises(ValidationFailed) as exc_info:
        service.actualizar_estado(principal_de(super_admin), solicitud.id, {"estado": None})
    assert codigos(exc_info, "estado") == [CAMPO_REQUERIDO]


# Eliminación

@pytest.mark.parametrize("rol_fixture", ["user", "admin", "super_admin"])
def test_completadas_no_se_eliminan_con_ningun_rol(request, service, db, user, crear_solicitud, rol_fixture):
    solicitud = crear_solicitud(user, estado=EstadoSolicitud.COMPLETADA)
    principal = principal_de(request.getfixturevalue(rol_fixture))

    with pytest.raises(DomainConflict) as exc_info:
        service.eliminar(principal, solicitud.id)

    assert isinstance(exc_info.value, CompletedRecordProtected)
    assert db.query(Solicitud).count() == 1


def test_user_no_puede_eliminar_ni_sus_propias(service, db, user, crear_solicitud):
    solicitud = crear_solicitud(user)
    with pytest.raises(Forbidden):
        service.eliminar(principal_de(user), solicitud.id)
    assert db.query(Solicitud).count() == 1


def test_admin_elimina_y_se_borran_los_adjuntos(service, store, db, admin, user):
    creada = service.crear(principal_de(user), DATOS_VALIDOS, archivo_pdf=pdf(), logo=png())
    rutas = (creada.archivo_pdf, creada.logo)

    service.eliminar(principal_de(admin), creada.id)

    assert db.query(Solicitud).count() == 0
    assert not any(store.exists(ruta) for ruta in rutas)


def test_fallo_al_borrar_adjuntos_no_bloquea_la_eliminacion(service, store, db, admin, user, monkeypatch):
    creada = service.crear(principal_de(user), DATOS_VALIDOS, archivo_pdf=pdf())

    def falla(ruta):
        raise StorageFailure("timeout")

    monkeypatch.setattr(store, "delete", falla)

    service.eliminar(principal_de(admin), creada.id)

    assert db.query(Solicitud).count() == 0


def test_eliminar_inexistente(service, admin):
    with pytest.raises(NotFound):
        service.eliminar(principal_de(admin), 777)
