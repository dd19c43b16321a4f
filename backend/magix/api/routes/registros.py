from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from magix.api.deps import client_info, get_current_active_user, get_db
from magix.models.audit import AuditEntity
from magix.models.registro import Registro
from magix.schemas.registro import RegistroCreate, RegistroRead, RegistroUpdate
from magix.services.audit import record_audit

router = APIRouter(prefix="/registros", tags=["registros"])


def registros_query(
    db: Session,
    user_id: int,
    desde: Optional[date] = None,
    hasta: Optional[date] = None,
    q: Optional[str] = None,
):
    query = db.query(Registro).filter(Registro.user_id == user_id)
    if desde:
        query = query.filter(Registro.fecha >= desde)
    if hasta:
        query = query.filter(Registro.fecha <= hasta)
    if q and q.strip():
        like = f"%{q.strip()}%"
        query = query.filter(
            or_(
                Registro.salon.ilike(like),
                Registro.compania.ilike(like),
                Registro.item.ilike(like),
                Registro.beo.ilike(like),
            )
        )
    return query


def get_registro_or_404(db: Session, registro_id: int, user_id: int) -> Registro:
    registro = db.get(Registro, registro_id)
    if not registro or registro.user_id != user_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Registro no encontrado")
    return registro


def _resumen(registro: Registro) -> dict:
    return {
        "fecha": registro.fecha,
        "salon": registro.salon,
        "compania": registro.compania,
        "item": registro.item,
        "total": registro.total,
    }


@router.get("", response_model=list[RegistroRead])
def list_registros(
    desde: Optional[date] = None,
    hasta: Optional[date] = None,
    q: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_active_user),
):
    return (
        registros_query(db, current_user.id, desde, hasta, q)
        .order_by(Registro.fecha.desc(), Registro.id.desc())
        .all()
    )


@router.post("", response_model=RegistroRead, status_code=status.HTTP_201_CREATED)
def create_registro(
    payload: RegistroCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_active_user),
):
    registro = Registro(
        user_id=current_user.id,
        **payload.model_dump(),
        total=payload.valor * payload.cantidad,
    )
    db.add(registro)
    db.flush()
    record_audit(
        db,
        user_id=current_user.id,
        action="REGISTRO_CREATE",
        entity=AuditEntity.REGISTRO,
        entity_id=registro.id,
        summary=_resumen(registro),
        **client_info(request),
    )
    db.commit()
    db.refresh(registro)
    return registro


@router.put("/{registro_id}", response_model=RegistroRead)
def update_registro(
    registro_id: int,
    payload: RegistroUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_active_user),
):
    registro = get_registro_or_404(db, registro_id, current_user.id)
    for campo, valor in payload.model_dump().items():
        setattr(registro, campo, valor)
    registro.total = payload.valor * payload.cantidad
    record_audit(
        db,
        user_id=current_user.id,
        action="REGISTRO_UPDATE",
        entity=AuditEntity.REGISTRO,
        entity_id=registro.id,
        summary=_resumen(registro),
        **client_info(request),
    )
    db.commit()
    db.refresh(registro)
    return registro


@router.delete("/{registro_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_registro(
    registro_id: int,
    request: Request,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_active_user),
) -> None:
    registro = get_registro_or_404(db, registro_id, current_user.id)
    record_audit(
        db,
        user_id=current_user.id,
        action="REGISTRO_DELETE",
        entity=AuditEntity.REGISTRO,
        entity_id=registro.id,
        summary=_resumen(registro),
        **client_info(request),
    )
    db.delete(registro)
    db.commit()
