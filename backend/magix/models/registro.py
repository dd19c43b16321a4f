# models/registro.py
import enum
from datetime import datetime
from decimal import Decimal

from sqlalchemy import Column, Date, DateTime, Enum, ForeignKey, Integer, Numeric, String

from magix.models.base import Base

# topes de las columnas numéricas: valor Numeric(14,2), cantidad Numeric(12,2), total Numeric(18,4)
VALOR_MAX = Decimal("999999999999.99")
CANTIDAD_MAX = Decimal("9999999999.99")
TOTAL_MAX = Decimal("99999999999999.9999")
CENTAVOS = Decimal("0.01")


class TipoRegistro(str, enum.Enum):
    VENTA = "Venta"
    SUBARRIENDO = "SubArriendo"
    ESTANDAR = "Estándar"
    ADICIONAL = "Adicional"


class Registro(Base):
    """Ítem facturable de un evento (fecha + salón + compañía)."""

    __tablename__ = "registros"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    fecha = Column(Date, nullable=False, index=True)
    beo = Column(String(60), nullable=False, default="")
    salon = Column(String(120), nullable=False)
    compania = Column(String(160), nullable=False)
    item = Column(String(250), nullable=False)
    tipo = Column(
        Enum(TipoRegistro, name="tipo_registro", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=TipoRegistro.VENTA,
    )
    valor = Column(Numeric(14, 2), nullable=False, default=0)
    cantidad = Column(Numeric(12, 2), nullable=False, default=1)
    # valor * cantidad exacto: dos decimales por dos decimales dan cuatro
    total = Column(Numeric(18, 4), nullable=False, default=0)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
