from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from magix.api.deps import client_info, get_current_active_user, get_db
from magix.api.routes.articulos import get_articulo_or_404
from magix.api.routes.eventos import cargar_evento
from magix.models.articulo import Articulo
from magix.models.audit import AuditEntity
from magix.models.reserva import Reserva
from magix.schemas.reserva import ReservaCreate, ReservaRead, ReservaUpdate
from magix.services.audit import record_audit
from magix.services.disponibilidad import validar_reserva

router = APIRouter(prefix="/reservas", tags=["reservas"])


def get_reserva_or_404(db: Session, reserva_id: int, user_id: int) -> Reserva:
    reserva = db.get(Reserva, reserva_id)
    if not reserva or reserva.user_id != user_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Reserva no encontrada")
    return reserva


def _reservas_de(db: Session, articulo: Articulo) -> list[Reserva]:
    return db.query(Reserva).filter(Reserva.articulo_id == articulo.id).all()


@router.get("", response_model=list[ReservaRead])
def list_reservas(
    evento_key: Optional[str] = None,
    articulo_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_active_user),
):
    query = db.query(Reserva).filter(Reserva.user_id == current_user.id)
    if evento_key:
        query = query.filter(Reserva.evento_key == evento_key)
    if articulo_id:
        query = query.filter(Reserva.articulo_id == articulo_id)
    return query.order_by(Reserva.id.asc()).all()


@router.post("", response_model=ReservaRead, status_code=status.HTTP_201_CREATED)
def create_reserva(
    payload: ReservaCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_active_user),
):
    evento = cargar_evento(db, current_user.id, payload.evento_key)
    articulo = get_articulo_or_404(db, payload.articulo_id, current_user.id)
    validar_reserva(articulo, _reservas_de(db, articulo), payload.cantidad_reservada)

    reserva = Reserva(
        user_id=current_user.id,
        articulo_id=articulo.id,
        evento_key=evento.key,
        cantidad_reservada=payload.cantidad_reservada,
    )
    db.add(reserva)
    db.flush()
    record_audit(
        db,
        user_id=current_user.id,
        action="RESERVA_CREATE",
        entity=AuditEntity.RESERVA,
        entity_id=reserva.id,
        summary={"articulo_id": articulo.id, "evento_key": evento.key, "cantidad": payload.cantidad_reservada},
        **client_info(request),
    )
    db.commit()
    db.refresh(reserva)
    return reserva


@router.put("/{reserva_id}", response_model=ReservaRead)
def update_reserva(
    reserva_id: int,
    payload: ReservaUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_active_user),
):
    reserva = get_reserva_or_404(db, reserva_id, current_user.id)
    articulo = get_articulo_or_404(db, reserva.articulo_id, current_user.id)
    # la propia reserva no cuenta contra el stock
    validar_reserva(articulo, _reservas_de(db, articulo), payload.cantidad_reservada, excluir_reserva_id=reserva.id)

    anterior = reserva.cantidad_reservada
    reserva.cantidad_reservada = payload.cantidad_reservada
    record_audit(
        db,
        user_id=current_user.id,
        action="RESERVA_UPDATE",
        entity=AuditEntity.RESERVA,
        entity_id=reserva.id,
        summary={"anterior": anterior, "cantidad": payload.cantidad_reservada},
        **client_info(request),
    )
    db.commit()
    db.refresh(reserva)
    return reserva


@router.delete("/{reserva_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_reserva(
    reserva_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_active_user),
) -> None:
    reserva = get_reserva_or_404(db, reserva_id, current_user.id)
    record_audit(
        db,
        user_id=current_user.id,
        action="RESERVA_DELETE",
        entity=AuditEntity.RESERVA,
        entity_id=reserva.id,
        summary={"articulo_id": reserva.articulo_id, "evento_key": reserva.evento_key},
        **client_info(request),
    )
    db.delete(reserva)
    db.commit()
