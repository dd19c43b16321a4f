from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, Request, Response, UploadFile, status
from sqlalchemy.orm import Session

from magix.api.deps import client_info, get_current_active_user, get_db
from magix.api.routes.registros import registros_query
from magix.core.config import settings
from magix.models.audit import AuditEntity
from magix.models.registro import Registro
from magix.schemas.importacion import FilaOmitidaRead, ImportacionResultado
from magix.services.audit import record_audit
from magix.services.exportacion import exportar_registros, exportar_resumen_mensual, nombre_archivo
from magix.services.importacion import parse_planilla

router = APIRouter(prefix="/archivos", tags=["archivos"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def read_file(file: UploadFile) -> bytes:
    content = file.file.read()
    file.file.close()
    if not content:
        raise HTTPException(status_code=400, detail="Archivo inválido")
    if len(content) > settings.import_max_bytes:
        raise HTTPException(status_code=400, detail="Archivo demasiado grande")
    return content


def _xlsx(content: bytes, filename: str) -> Response:
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/importar", response_model=ImportacionResultado, status_code=status.HTTP_201_CREATED)
def importar(
    request: Request,
    archivo: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_user=Depends(get_current_active_user),
):
    content = read_file(archivo)
    filename = archivo.filename or ""
    try:
        resultado = parse_planilla(content, filename)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    if not resultado.registros:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="El archivo está vacío o no tiene el formato correcto.",
        )

    db.add_all(Registro(user_id=current_user.id, **fila) for fila in resultado.registros)
    record_audit(
        db,
        user_id=current_user.id,
        action="REGISTROS_IMPORT",
        entity=AuditEntity.REGISTRO,
        entity_id=None,
        summary={
            "archivo": filename,
            "insertados": len(resultado.registros),
            "omitidas": len(resultado.omitidas),
        },
        **client_info(request),
    )
    db.commit()
    return ImportacionResultado(
        message=f"{len(resultado.registros)} registros importados exitosamente",
        insertados=len(resultado.registros),
        omitidas=[FilaOmitidaRead(fila=o.fila, motivo=o.motivo) for o in resultado.omitidas],
    )


@router.get("/exportar")
def exportar(
    desde: Optional[date] = None,
    hasta: Optional[date] = None,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_active_user),
):
    registros = (
        registros_query(db, current_user.id, desde, hasta)
        .order_by(Registro.fecha.desc(), Registro.id.desc())
        .all()
    )
    return _xlsx(exportar_registros(registros), nombre_archivo("registros"))


@router.get("/exportar-resumen")
def exportar_resumen(
    desde: Optional[date] = None,
    hasta: Optional[date] = None,
    db: Session = Depends(get_db),
    current_user=Depends(get_current_active_user),
):
    registros = registros_query(db, current_user.id, desde, hasta).all()
    return _xlsx(exportar_resumen_mensual(registros), nombre_archivo("resumen_mensual"))
