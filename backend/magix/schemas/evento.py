from datetime import date
from decimal import Decimal
from typing import List

from pydantic import BaseModel

from magix.schemas.registro import RegistroRead


class EventoResumen(BaseModel):
    key: str
    fecha: date
    salon: str
    compania: str
    beo: str
    cantidad_items: int
    total: Decimal
    iva: Decimal
    total_con_iva: Decimal


class ReservaEventoRead(BaseModel):
    reserva_id: int
    articulo_id: int
    codigo_articulo: str
    descripcion: str
    cantidad_reservada: int


class EventoDetalle(EventoResumen):
    items: List[RegistroRead]
    reservas: List[ReservaEventoRead]


class EventoPagina(BaseModel):
    eventos: List[EventoResumen]
    pagina: int
    por_pagina: int
    total_eventos: int
    total_paginas: int
