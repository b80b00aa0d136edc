# app/seed.py
"""
Carga datos de demostración: un usuario por rol y algunas solicitudes.

    python -m app.seed

Las credenciales se generan al azar y se muestran una sola vez.
"""
import logging
import random
from datetime import timedelta

from sqlalchemy.orm import Session

from app.config import get_settings
from app.core.security import generate_one_time_token, hash_credential
from app.database import Base, SessionLocal, engine, utcnow
from app.logging_config import setup_logging
from app.models.solicitud import EstadoSolicitud, PrioridadSolicitud, Solicitud
from app.models.usuario import Rol, Usuario, UsuarioRol
from app.schemas.usuario import UsuarioCreate

logger = logging.getLogger(__name__)

USUARIOS_DEMO = [
    ("Super Admin User", "superadmin@requestly.com", Rol.SUPER_ADMIN),
    ("Admin User", "admin@requestly.com", Rol.ADMIN),
    ("Regular User", "user@requestly.com", Rol.USER),
]

# (email del dueño, cantidad, estado fijo o None para uno al azar)
SOLICITUDES_DEMO = [
    ("admin@requestly.com", 5, None),
    ("superadmin@requestly.com", 3, None),
    ("user@requestly.com", 8, None),
    ("admin@requestly.com", 3, EstadoSolicitud.COMPLETADA),
    ("user@requestly.com", 2, EstadoSolicitud.COMPLETADA),
]

CLIENTES = ["Acme", "Globex", "Initech", "Umbrella", "Hooli", "Stark Industries"]
PRODUCTOS = ["Curso online", "Suscripción", "App móvil", "Webinar", "Ebook"]


def get_or_create_usuario(db: Session, datos: UsuarioCreate):
    """Devuelve (usuario, credencial); la credencial es None si el usuario ya existía."""
    usuario = db.query(Usuario).filter(Usuario.email == datos.email).first()
    if usuario is not None:
        return usuario, None
    credencial = generate_one_time_token()
    usuario = Usuario(nombre=datos.nombre, email=datos.email, credencial_hash=hash_credential(credencial))
    usuario.roles_asignados.append(UsuarioRol(rol=datos.rol))
    db.add(usuario)
    db.flush()
    return usuario, credencial


def solicitud_demo(usuario: Usuario, estado=None) -> Solicitud:
    cliente = random.choice(CLIENTES)
    producto = random.choice(PRODUCTOS)
    return Solicitud(
        nombre_cliente=cliente,
        nombre_landing=f"{cliente} {producto} Landing Page",
        nombre_producto=f"{producto} Product",
        estado=estado or random.choice(list(EstadoSolicitud)),
        prioridad=random.choice(list(PrioridadSolicitud)),
        fecha_creacion=utcnow() - timedelta(days=random.randint(0, 30), minutes=random.randint(0, 1440)),
        user_id=usuario.id,
    )


def seed(db: Session) -> dict:
    """
    Crea los usuarios de demostración que falten y las solicitudes de los
    usuarios recién creados. Devuelve {email: credencial} de los nuevos.
    """
    credenciales = {}
    usuarios = {}
    for nombre, email, rol in USUARIOS_DEMO:
        usuario, credencial = get_or_create_usuario(db, UsuarioCreate(nombre=nombre, email=email, rol=rol))
        usuarios[email] = usuario
        if credencial:
            credenciales[email] = credencial

    for email, cantidad, estado in SOLICITUDES_DEMO:
        # Un usuario que ya existía ya tiene sus solicitudes de demostración
        if email not in credenciales:
            continue
        for _ in range(cantidad):
            db.add(solicitud_demo(usuarios[email], estado))

    db.commit()
    return credenciales


def main() -> None:
    settings = get_settings()
    setup_logging(level=settings.log_level, fmt=settings.log_format)
    Base.metadata.create_all(bind=engine)

    db = SessionLocal()
    try:
        credenciales = seed(db)
    finally:
        db.close()

    logger.info("Datos de demostración cargados")
    for email, credencial in credenciales.items():
        print(f"{email} / {credencial}")


if __name__ == "__main__":
    main()
