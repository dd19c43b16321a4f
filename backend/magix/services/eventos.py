# services/eventos.py
"""
Vista derivada de eventos.

Un evento no se persiste: es la agrupación de registros que comparten
fecha, salón y compañía. Todo lo de este módulo opera sobre objetos ya
cargados (ORM o cualquier objeto con los mismos atributos).
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Optional

SEPARADOR = "|"
POR_PAGINA = 10

CAMPOS_ORDEN = ("fecha", "salon", "compania", "beo", "total", "items")


def _as_decimal(x) -> Decimal:
    if x is None: return Decimal(0)
    if isinstance(x, Decimal): return x
    return Decimal(str(x))


def _fecha_iso(fecha) -> str:
    if isinstance(fecha, date):
        return fecha.isoformat()
    return str(fecha)


def evento_key(fecha, salon: str, compania: str) -> str:
    return SEPARADOR.join((_fecha_iso(fecha), salon, compania))


def parse_evento_key(key: str) -> tuple[date, str, str]:
    partes = (key or "").split(SEPARADOR)
    if len(partes) != 3:
        raise ValueError(f"Clave de evento inválida: {key!r}")
    fecha_txt, salon, compania = partes
    try:
        fecha = date.fromisoformat(fecha_txt)
    except ValueError as exc:
        raise ValueError(f"Fecha inválida en clave de evento: {fecha_txt!r}") from exc
    if not salon.strip() or not compania.strip():
        raise ValueError(f"Clave de evento incompleta: {key!r}")
    return fecha, salon, compania


# ===================== Estructuras de salida =====================

@dataclass
class Evento:
    key: str
    fecha: date
    salon: str
    compania: str
    beo: str = ""
    items: list = field(default_factory=list)
    total: Decimal = Decimal(0)
    iva_rate: Decimal = Decimal("0.19")

    @property
    def cantidad_items(self) -> int:
        return len(self.items)

    @property
    def iva(self) -> Decimal:
        return (self.total * self.iva_rate).quantize(Decimal("0.01"))

    @property
    def total_con_iva(self) -> Decimal:
        return self.total + self.iva


@dataclass
class ReservaEvento:
    reserva_id: int
    articulo_id: int
    codigo_articulo: str
    descripcion: str
    cantidad_reservada: int


@dataclass
class Pagina:
    eventos: List[Evento]
    pagina: int
    por_pagina: int
    total_eventos: int
    total_paginas: int


# ===================== Agrupación =====================

def agrupar_eventos(registros: Iterable, iva_rate=Decimal("0.19")) -> List[Evento]:
    """
    Agrupa registros por fecha|salon|compania.
    - total = suma de los totales de sus ítems
    - beo se toma del primer ítem del grupo
    - orden: fecha descendente (los empates mantienen el orden de llegada)
    """
    rate = _as_decimal(iva_rate)
    por_clave: dict[str, Evento] = {}
    for r in registros:
        key = evento_key(r.fecha, r.salon, r.compania)
        ev = por_clave.get(key)
        if ev is None:
            ev = Evento(
                key=key,
                fecha=r.fecha,
                salon=r.salon,
                compania=r.compania,
                beo=(r.beo or ""),
                iva_rate=rate,
            )
            por_clave[key] = ev
        ev.items.append(r)
        ev.total += _as_decimal(r.total)

    return sorted(por_clave.values(), key=lambda e: _fecha_iso(e.fecha), reverse=True)


def filtrar_eventos(
    eventos: Iterable[Evento],
    desde: Optional[date] = None,
    hasta: Optional[date] = None,
    texto: Optional[str] = None,
) -> List[Evento]:
    out = list(eventos)
    if desde:
        out = [e for e in out if _fecha_iso(e.fecha) >= desde.isoformat()]
    if hasta:
        out = [e for e in out if _fecha_iso(e.fecha) <= hasta.isoformat()]
    needle = (texto or "").strip().lower()
    if needle:
        def _coincide(e: Evento) -> bool:
            valores = [e.salon, e.compania, e.beo] + [getattr(i, "item", "") for i in e.items]
            return any(needle in str(v or "").lower() for v in valores)
        out = [e for e in out if _coincide(e)]
    return out


def ordenar_eventos(eventos: Iterable[Evento], campo: str = "fecha", descendente: bool = True) -> List[Evento]:
    if campo not in CAMPOS_ORDEN:
        raise ValueError(f"Campo de orden inválido: {campo}")

    def _valor(e: Evento):
        if campo == "items":
            return e.cantidad_items
        if campo == "fecha":
            return _fecha_iso(e.fecha)
        if campo == "total":
            return e.total
        return getattr(e, campo) or ""

    return sorted(eventos, key=_valor, reverse=descendente)


def paginar(eventos: List[Evento], pagina: int = 1, por_pagina: int = POR_PAGINA) -> Pagina:
    if por_pagina <= 0:
        raise ValueError("por_pagina debe ser mayor a 0")
    total = len(eventos)
    total_paginas = math.ceil(total / por_pagina)
    pagina = max(1, min(pagina, total_paginas)) if total_paginas else 1
    inicio = (pagina - 1) * por_pagina
    return Pagina(
        eventos=eventos[inicio:inicio + por_pagina],
        pagina=pagina,
        por_pagina=por_pagina,
        total_eventos=total,
        total_paginas=total_paginas,
    )


def enriquecer_evento(evento: Evento, articulos: Iterable, reservas: Iterable) -> List[ReservaEvento]:
    """Inventario reservado para el evento; reservas de artículos inexistentes se descartan."""
    por_id = {a.id: a for a in articulos}
    out: List[ReservaEvento] = []
    for r in reservas:
        if r.evento_key != evento.key:
            continue
        art = por_id.get(r.articulo_id)
        if art is None:
            continue
        out.append(ReservaEvento(
            reserva_id=r.id,
            articulo_id=art.id,
            codigo_articulo=art.codigo_articulo,
            descripcion=art.descripcion,
            cantidad_reservada=int(r.cantidad_reservada),
        ))
    return out
