# app/database.py
from datetime import datetime, timezone

from sqlalchemy import create_engine, event
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from app.config import get_settings

settings = get_settings()


def _engine_kwargs(url: str) -> dict:
    # SQLite necesita compartir la conexión entre hilos del servidor;
    # en memoria además debe ser una única conexión para no perder el esquema
    if not url.startswith("sqlite"):
        return {"pool_pre_ping": True}
    kwargs = {"connect_args": {"check_same_thread": False}}
    if url in ("sqlite://", "sqlite:///:memory:"):
        kwargs["poolclass"] = StaticPool
    return kwargs


engine = create_engine(settings.database_url, echo=settings.db_echo_sql, **_engine_kwargs(settings.database_url))

if settings.database_url.startswith("sqlite"):
    # SQLite no aplica ON DELETE CASCADE si no se activan las foreign keys
    @event.listens_for(engine, "connect")
    def _activar_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def utcnow() -> datetime:
    """Fecha y hora actual en UTC, sin tzinfo (así se guarda en la base)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# Dependencia de FastAPI: una sesión por request, siempre cerrada al final
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
