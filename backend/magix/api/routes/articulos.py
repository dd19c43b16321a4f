from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from magix.api.deps import client_info, get_current_active_user, get_db
from magix.models.articulo import Articulo
from magix.models.audit import AuditEntity
from magix.models.reserva import Reserva
from magix.schemas.articulo import (
    ArticuloCreate,
    ArticuloRead,
    ArticuloStock,
    ArticuloUpdate,
    DisponibilidadRead,
)
from magix.services.audit import record_audit
from magix.services.disponibilidad import resumen_inventario, stock_disponible

router = APIRouter(prefix="/articulos", tags=["articulos"])


def get_articulo_or_404(db: Session, articulo_id: int, user_id: int) -> Articulo:
    articulo = db.get(Articulo, articulo_id)
    if not articulo or articulo.user_id != user_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Artículo no encontrado")
    return articulo


def _check_codigo(db: Session, user_id: int, codigo: str, articulo_id: Optional[int] = None) -> None:
    query = db.query(Articulo).filter(Articulo.user_id == user_id, Articulo.codigo_articulo == codigo)
    if articulo_id is not None:
        query = query.filter(Articulo.id != articulo_id)
    if query.first():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Código de artículo duplicado")


@router.get("", response_model=list[ArticuloStock])
def list_articulos(db: Session = Depends(get_db), current_user=Depends(get_current_active_user)):
    articulos = (
        db.query(Articulo)
        .filter(Articulo.user_id == current_user.id)
        .order_by(Articulo.grupo, Articulo.subgrupo, Articulo.codigo_articulo)
        .all()
    )
    reservas = db.query(Reserva).filter(Reserva.user_id == current_user.id).all()
    return [
        ArticuloStock(
            **ArticuloRead.model_validate(s.articulo).model_dump(),
            reservado=s.reservado,
            disponible=s.disponible,
        )
        for s in resumen_inventario(articulos, reservas)
    ]


@router.post("", response_model=ArticuloRead, status_code=status.HTTP_201_CREATED)
def create_articulo(
    payload: ArticuloCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_active_user),
):
    _check_codigo(db, current_user.id, payload.codigo_articulo)
    articulo = Articulo(user_id=current_user.id, **payload.model_dump())
    db.add(articulo)
    db.flush()
    record_audit(
        db,
        user_id=current_user.id,
        action="ARTICULO_CREATE",
        entity=AuditEntity.ARTICULO,
        entity_id=articulo.id,
        summary=payload.model_dump(),
        **client_info(request),
    )
    db.commit()
    db.refresh(articulo)
    return articulo


@router.put("/{articulo_id}", response_model=ArticuloRead)
def update_articulo(
    articulo_id: int,
    payload: ArticuloUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_active_user),
):
    articulo = get_articulo_or_404(db, articulo_id, current_user.id)
    _check_codigo(db, current_user.id, payload.codigo_articulo, articulo.id)
    for campo, valor in payload.model_dump().items():
        setattr(articulo, campo, valor)
    record_audit(
        db,
        user_id=current_user.id,
        action="ARTICULO_UPDATE",
        entity=AuditEntity.ARTICULO,
        entity_id=articulo.id,
        summary=payload.model_dump(),
        **client_info(request),
    )
    db.commit()
    db.refresh(articulo)
    return articulo


@router.delete("/{articulo_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_articulo(
    articulo_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_active_user),
) -> None:
    articulo = get_articulo_or_404(db, articulo_id, current_user.id)
    record_audit(
        db,
        user_id=current_user.id,
        action="ARTICULO_DELETE",
        entity=AuditEntity.ARTICULO,
        entity_id=articulo.id,
        summary={"codigo_articulo": articulo.codigo_articulo, "reservas": len(articulo.reservas)},
        **client_info(request),
    )
    # las reservas caen por cascade
    db.delete(articulo)
    db.commit()


@router.get("/{articulo_id}/disponibilidad", response_model=DisponibilidadRead)
def get_disponibilidad(
    articulo_id: int,
    excluir_reserva_id: Optional[int] = None,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_active_user),
):
    articulo = get_articulo_or_404(db, articulo_id, current_user.id)
    reservas = db.query(Reserva).filter(Reserva.articulo_id == articulo.id).all()
    disponible = stock_disponible(articulo, reservas, excluir_reserva_id)
    return DisponibilidadRead(
        articulo_id=articulo.id,
        en_stock=articulo.en_stock,
        reservado=articulo.en_stock - disponible,
        disponible=disponible,
    )
