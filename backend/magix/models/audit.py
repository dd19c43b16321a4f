# models/audit.py
import enum
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import relationship

from magix.models.base import Base


class AuditEntity(str, enum.Enum):
    USER = "User"
    REGISTRO = "Registro"
    ARTICULO = "Articulo"
    RESERVA = "Reserva"


class AuditLog(Base):
    """Bitácora de altas, cambios, bajas, importaciones y cierres de sesión."""

    __tablename__ = "audit_log"
    __table_args__ = (Index("ix_audit_log_entity", "entity", "entity_id"),)

    id = Column(Integer, primary_key=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    action = Column(String(100), nullable=False)  # REGISTRO_CREATE, RESERVA_DELETE, LOGOUT...
    entity = Column(String(100), nullable=False)  # valor de AuditEntity
    entity_id = Column(Integer, nullable=True)    # None en importaciones masivas
    summary = Column(String(500), nullable=False)
    ip = Column(String(50), nullable=True)
    ua = Column(String(255), nullable=True)
    hash = Column(String(64), nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    user = relationship("User")
