# app/models/solicitud.py
from sqlalchemy import Column, Integer, String, DateTime, Enum, ForeignKey
from sqlalchemy.orm import relationship
from app.database import Base, utcnow # Importa la Base de tu archivo database.py
from app.models.usuario import Usuario
import enum

# Definición del Enum para los estados de la Solicitud.
# El flujo habitual es pendiente -> en_diseño -> en_programación -> completada,
# pero cualquier estado puede fijarse desde cualquier otro.
class EstadoSolicitud(str, enum.Enum):
    PENDIENTE = "pendiente"
    EN_DISENO = "en_diseño"
    EN_PROGRAMACION = "en_programación"
    COMPLETADA = "completada"

    @classmethod
    def valores(cls):
        return [estado.value for estado in cls]


# Prioridad puramente descriptiva, sirve para filtrar y para el dashboard
class PrioridadSolicitud(str, enum.Enum):
    ALTA = "alta"
    MEDIA = "media"
    BAJA = "baja"

    @classmethod
    def valores(cls):
        return [prioridad.value for prioridad in cls]


def _enum_values(enum_cls):
    # Guarda en la base el valor ("en_diseño") y no el nombre del miembro ("EN_DISENO")
    return [miembro.value for miembro in enum_cls]


# Modelo ORM para la tabla 'solicitudes'
class Solicitud(Base):
    __tablename__ = "solicitudes"
    id = Column(Integer, primary_key=True, index=True)
    nombre_cliente = Column(String(255), nullable=False)
    nombre_landing = Column(String(255), nullable=False)
    nombre_producto = Column(String(255), nullable=False)
    estado = Column(
        Enum(EstadoSolicitud, name="estado_solicitud", values_callable=_enum_values, validate_strings=True),
        nullable=False,
        default=EstadoSolicitud.PENDIENTE,
    )
    prioridad = Column(
        Enum(PrioridadSolicitud, name="prioridad_solicitud", values_callable=_enum_values, validate_strings=True),
        nullable=False,
    )
    fecha_creacion = Column(DateTime, nullable=False, default=utcnow, index=True) # Se fija una sola vez al crear
    archivo_pdf = Column(String(512), nullable=True) # Ruta dentro del almacenamiento de adjuntos
    logo = Column(String(512), nullable=True)
    # Si se elimina el usuario se eliminan sus solicitudes (ON DELETE CASCADE)
    user_id = Column(Integer, ForeignKey("usuarios.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow) # Actualiza en cada modificación

    # Relación en un solo sentido: el usuario no tiene una colección de solicitudes,
    # "solicitudes de un usuario" es una consulta filtrando por user_id.
    usuario = relationship(Usuario, lazy="joined")

    @property
    def nombre_usuario(self):
        return self.usuario.nombre if self.usuario is not None else None

    def is_completada(self) -> bool:
        return self.estado == EstadoSolicitud.COMPLETADA
