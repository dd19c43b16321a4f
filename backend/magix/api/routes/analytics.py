from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from magix.api.deps import get_current_active_user, get_db
from magix.models.registro import Registro
from magix.schemas.analytics import AgrupadoRead, GrupoRead, KpisRead, ResumenAnalytics
from magix.services import analytics, graficos

router = APIRouter(prefix="/analytics", tags=["analytics"])


def _registros_en_rango(db: Session, user_id: int, desde: Optional[date], hasta: Optional[date]):
    # sin rango explícito se usa el año en curso
    inicio, fin = analytics.rango_anio_actual()
    desde = desde or inicio
    hasta = hasta or fin
    if desde > hasta:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Rango de fechas inválido")
    registros = (
        db.query(Registro)
        .filter(Registro.user_id == user_id, Registro.fecha >= desde, Registro.fecha <= hasta)
        .order_by(Registro.fecha.asc(), Registro.id.asc())
        .all()
    )
    return desde, hasta, registros


def _grupos(grupos) -> list[GrupoRead]:
    return [GrupoRead(nombre=g.nombre, total=g.total, cantidad=g.cantidad) for g in grupos]


@router.get("/resumen", response_model=ResumenAnalytics)
def get_resumen(
    desde: Optional[date] = None,
    hasta: Optional[date] = None,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_active_user),
):
    desde, hasta, registros = _registros_en_rango(db, current_user.id, desde, hasta)
    todos = db.query(Registro).filter(Registro.user_id == current_user.id).all()
    kpis = analytics.calcular_kpis(registros)
    return ResumenAnalytics(
        desde=desde,
        hasta=hasta,
        total_general=analytics.total_general(todos),
        kpis=KpisRead(**vars(kpis)) if kpis else None,
        temporal=_grupos(analytics.serie_temporal(registros)),
        por_compania=_grupos(analytics.agrupar_por(registros, "compania")),
        por_salon=_grupos(analytics.agrupar_por(registros, "salon")),
        pareto=_grupos(analytics.items_pareto(registros)),
    )


@router.get("/agrupado", response_model=AgrupadoRead)
def get_agrupado(
    campo: str,
    desde: Optional[date] = None,
    hasta: Optional[date] = None,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_active_user),
):
    if campo not in analytics.CAMPOS_GRUPO:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"Campo de agrupación inválido: {campo}")
    _desde, _hasta, registros = _registros_en_rango(db, current_user.id, desde, hasta)
    return AgrupadoRead(campo=campo, grupos=_grupos(analytics.agrupar_por(registros, campo)))


@router.get("/graficos/{tipo}.png")
def get_grafico(
    tipo: str,
    desde: Optional[date] = None,
    hasta: Optional[date] = None,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_active_user),
):
    if tipo not in graficos.TIPOS:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Gráfico no encontrado")
    _desde, _hasta, registros = _registros_en_rango(db, current_user.id, desde, hasta)

    if tipo == "temporal":
        fig = graficos.fig_temporal(analytics.serie_temporal(registros))
    elif tipo == "compania":
        fig = graficos.fig_compania(analytics.agrupar_por(registros, "compania"))
    elif tipo == "salon":
        fig = graficos.fig_salon(analytics.agrupar_por(registros, "salon"))
    else:
        fig = graficos.fig_pareto(analytics.items_pareto(registros))
    return Response(content=graficos.figura_png(fig), media_type="image/png")
