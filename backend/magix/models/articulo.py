# models/articulo.py
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from magix.models.base import Base


class Articulo(Base):
    __tablename__ = "articulos"
    __table_args__ = (UniqueConstraint("user_id", "codigo_articulo", name="uq_articulo_codigo"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    codigo_articulo = Column(String(60), nullable=False)
    grupo = Column(String(120), nullable=False)
    subgrupo = Column(String(120), nullable=False)
    descripcion = Column(String(500), nullable=False)
    en_stock = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    # borrar el artículo elimina sus reservas
    reservas = relationship("Reserva", back_populates="articulo", cascade="all, delete-orphan")
