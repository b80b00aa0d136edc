# tests/conftest.py
"""
Config global de tests.

- Base SQLite en memoria (una sola conexión compartida) recreada en cada test.
- Adjuntos en un directorio temporal por test.
- Fábricas de usuarios y solicitudes.
"""
import os

# Debe configurarse antes de importar la app (los settings se cachean)
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from itertools import count

import pytest
from fastapi.testclient import TestClient

from app.database import Base, SessionLocal, engine, utcnow
from app.main import app as fastapi_app
from app.models.solicitud import EstadoSolicitud, PrioridadSolicitud, Solicitud
from app.models.usuario import Rol, Usuario, UsuarioRol
from app.services.storage import LocalAttachmentStore, get_attachment_store

_secuencia = count(1)


@pytest.fixture(autouse=True)
def reset_db():
    """Esquema limpio en cada test."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def store(tmp_path):
    return LocalAttachmentStore(str(tmp_path / "storage"))


@pytest.fixture
def client(store):
    fastapi_app.dependency_overrides[get_attachment_store] = lambda: store
    try:
        yield TestClient(fastapi_app)
    finally:
        fastapi_app.dependency_overrides.clear()


@pytest.fixture
def crear_usuario(db):
    """Fábrica: crear_usuario(Rol.ADMIN, nombre="...") -> Usuario."""
    def _crear(*roles, nombre=None, email=None):
        n = next(_secuencia)
        usuario = Usuario(
            nombre=nombre or f"Usuario {n}",
            email=email or f"usuario{n}@requestly.com",
        )
        for rol in roles:
            usuario.roles_asignados.append(UsuarioRol(rol=rol))
        db.add(usuario)
        db.commit()
        db.refresh(usuario)
        return usuario
    return _crear


@pytest.fixture
def crear_solicitud(db):
    """Fábrica: crear_solicitud(usuario, estado=..., fecha_creacion=...) -> Solicitud."""
    def _crear(usuario, **campos):
        n = next(_secuencia)
        datos = {
            "nombre_cliente": f"Cliente {n}",
            "nombre_landing": f"Landing {n}",
            "nombre_producto": f"Producto {n}",
            "estado": EstadoSolicitud.PENDIENTE,
            "prioridad": PrioridadSolicitud.MEDIA,
            "fecha_creacion": utcnow(),
            "user_id": usuario.id,
        }
        datos.update(campos)
        solicitud = Solicitud(**datos)
        db.add(solicitud)
        db.commit()
        db.refresh(solicitud)
        return solicitud
    return _crear


@pytest.fixture
def user(crear_usuario):
    return crear_usuario(Rol.USER, nombre="Regular User")


@pytest.fixture
def otro_user(crear_usuario):
    return crear_usuario(Rol.USER, nombre="Otro User")


@pytest.fixture
def admin(crear_usuario):
    return crear_usuario(Rol.ADMIN, nombre="Admin User")


@pytest.fixture
def super_admin(crear_usuario):
    return crear_usuario(Rol.SUPER_ADMIN, nombre="Super Admin User")

