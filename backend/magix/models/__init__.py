# models/__init__.py
from .base import Base

from .user import User, UserRole, SesionRevocada
from .audit import AuditEntity, AuditLog
from .registro import Registro, TipoRegistro
from .articulo import Articulo
from .reserva import Reserva

__all__ = [
    "Base",
    "User", "UserRole", "SesionRevocada",
    "AuditEntity", "AuditLog",
    "Registro", "TipoRegistro",
    "Articulo",
    "Reserva",
]
