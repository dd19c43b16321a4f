from datetime import date
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from magix.api.deps import get_current_active_user, get_db
from magix.core.config import settings
from magix.models.articulo import Articulo
from magix.models.registro import Registro
from magix.models.reserva import Reserva
from magix.schemas.evento import EventoDetalle, EventoPagina, EventoResumen, ReservaEventoRead
from magix.schemas.registro import RegistroRead
from magix.services.eventos import (
    CAMPOS_ORDEN,
    POR_PAGINA,
    Evento,
    agrupar_eventos,
    enriquecer_evento,
    filtrar_eventos,
    ordenar_eventos,
    paginar,
    parse_evento_key,
)

router = APIRouter(prefix="/eventos", tags=["eventos"])


def _iva_rate() -> Decimal:
    return Decimal(str(settings.iva_rate))


def _resumen(evento: Evento) -> EventoResumen:
    return EventoResumen(
        key=evento.key,
        fecha=evento.fecha,
        salon=evento.salon,
        compania=evento.compania,
        beo=evento.beo,
        cantidad_items=evento.cantidad_items,
        total=evento.total,
        iva=evento.iva,
        total_con_iva=evento.total_con_iva,
    )


@router.get("", response_model=EventoPagina)
def list_eventos(
    desde: Optional[date] = None,
    hasta: Optional[date] = None,
    q: Optional[str] = None,
    orden: str = "fecha",
    descendente: bool = True,
    pagina: int = Query(default=1, ge=1),
    por_pagina: int = Query(default=POR_PAGINA, ge=1, le=100),
    db: Session = Depends(get_db),
    current_user=Depends(get_current_active_user),
):
    if orden not in CAMPOS_ORDEN:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Campo de orden inválido: {orden}")
    registros = (
        db.query(Registro)
        .filter(Registro.user_id == current_user.id)
        .order_by(Registro.fecha.desc(), Registro.id.asc())
        .all()
    )
    eventos = agrupar_eventos(registros, iva_rate=_iva_rate())
    eventos = filtrar_eventos(eventos, desde, hasta, q)
    eventos = ordenar_eventos(eventos, orden, descendente)
    page = paginar(eventos, pagina, por_pagina)
    return EventoPagina(
        eventos=[_resumen(e) for e in page.eventos],
        pagina=page.pagina,
        por_pagina=page.por_pagina,
        total_eventos=page.total_eventos,
        total_paginas=page.total_paginas,
    )


def cargar_evento(db: Session, user_id: int, key: str) -> Evento:
    try:
        fecha, salon, compania = parse_evento_key(key)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    registros = (
        db.query(Registro)
        .filter(
            Registro.user_id == user_id,
            Registro.fecha == fecha,
            Registro.salon == salon,
            Registro.compania == compania,
        )
        .order_by(Registro.id.asc())
        .all()
    )
    if not registros:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Evento no encontrado")
    return agrupar_eventos(registros, iva_rate=_iva_rate())[0]


@router.get("/detalle", response_model=EventoDetalle)
def get_evento(
    key: str,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_active_user),
):
    evento = cargar_evento(db, current_user.id, key)
    reservas = (
        db.query(Reserva)
        .filter(Reserva.user_id == current_user.id, Reserva.evento_key == evento.key)
        .order_by(Reserva.id.asc())
        .all()
    )
    articulos = db.query(Articulo).filter(Articulo.user_id == current_user.id).all()
    inventario = enriquecer_evento(evento, articulos, reservas)
    return EventoDetalle(
        **_resumen(evento).model_dump(),
        items=[RegistroRead.model_validate(r) for r in evento.items],
        reservas=[ReservaEventoRead(**vars(r)) for r in inventario],
    )
