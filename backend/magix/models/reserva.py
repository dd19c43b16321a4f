# models/reserva.py
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from magix.models.base import Base


class Reserva(Base):
    __tablename__ = "reservas"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    articulo_id = Column(Integer, ForeignKey("articulos.id", ondelete="CASCADE"), nullable=False, index=True)
    evento_key = Column(String(400), nullable=False, index=True)  # fecha|salon|compania
    cantidad_reservada = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    articulo = relationship("Articulo", back_populates="reservas")
