from datetime import date
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel


class KpisRead(BaseModel):
    total_facturado: Decimal
    promedio_valor: Decimal
    companias_unicas: int
    salones_unicos: int
    variacion_mensual: Optional[float]


class GrupoRead(BaseModel):
    nombre: str
    total: Decimal
    cantidad: int


class ResumenAnalytics(BaseModel):
    desde: date
    hasta: date
    total_general: Decimal
    kpis: Optional[KpisRead]
    temporal: List[GrupoRead]
    por_compania: List[GrupoRead]
    por_salon: List[GrupoRead]
    pareto: List[GrupoRead]


class AgrupadoRead(BaseModel):
    campo: str
    grupos: List[GrupoRead]
