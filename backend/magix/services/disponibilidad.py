# services/disponibilidad.py
from dataclasses import dataclass
from typing import Iterable, List, Optional

from fastapi import HTTPException, status


@dataclass
class StockArticulo:
    articulo: object
    reservado: int
    disponible: int


def stock_disponible(articulo, reservas: Iterable, excluir_reserva_id: Optional[int] = None) -> int:
    """
    en_stock menos lo reservado por OTRAS reservas del mismo artículo.
    Al editar una reserva se pasa su id para no descontarla dos veces.
    """
    reservado = sum(
        int(r.cantidad_reservada)
        for r in reservas
        if r.articulo_id == articulo.id and (excluir_reserva_id is None or r.id != excluir_reserva_id)
    )
    return int(articulo.en_stock or 0) - reservado


def validar_reserva(articulo, reservas: Iterable, cantidad: int, excluir_reserva_id: Optional[int] = None) -> int:
    if articulo is None or cantidad is None or cantidad <= 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Por favor selecciona un artículo y una cantidad válida.",
        )
    disponible = stock_disponible(articulo, reservas, excluir_reserva_id)
    if cantidad > disponible:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"La cantidad ({cantidad}) excede el stock disponible ({disponible}).",
        )
    return disponible


def resumen_inventario(articulos: Iterable, reservas: Iterable) -> List[StockArticulo]:
    reservas = list(reservas)
    por_articulo: dict[int, int] = {}
    for r in reservas:
        por_articulo[r.articulo_id] = por_articulo.get(r.articulo_id, 0) + int(r.cantidad_reservada)

    out: List[StockArticulo] = []
    for a in articulos:
        reservado = por_articulo.get(a.id, 0)
        # puede quedar negativo si se bajó el stock después de reservar
        out.append(StockArticulo(articulo=a, reservado=reservado, disponible=int(a.en_stock or 0) - reservado))
    return out
