from fastapi import FastAPI
from app.config import get_settings
from app.core.errors import register_exception_handlers
from app.database import Base, engine
from app.logging_config import setup_logging
from app.models import solicitud, usuario # Registra los modelos en Base.metadata
from app.routers import dashboard, solicitudes, usuarios
from fastapi.middleware.cors import CORSMiddleware

settings = get_settings()
setup_logging(level=settings.log_level, fmt=settings.log_format)

Base.metadata.create_all(bind=engine)

app = FastAPI(title=settings.app_name, debug=settings.debug)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(solicitudes.router, prefix="/api", tags=["Solicitudes"])
app.include_router(dashboard.router, prefix="/api", tags=["Dashboard"])
app.include_router(usuarios.router, prefix="/api", tags=["Usuarios"])


@app.get("/health", tags=["Health"])
def health():
    return {"status": "ok"}
