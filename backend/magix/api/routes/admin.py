from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from magix.api.deps import get_db, require_role
from magix.models.audit import AuditLog
from magix.models.user import UserRole
from magix.schemas.audit import AuditFiltro, AuditLogRead

router = APIRouter(prefix="/admin", tags=["admin"])


@router.get("/auditoria", response_model=list[AuditLogRead])
def list_audit(
    filtro: AuditFiltro = Depends(),
    db: Session = Depends(get_db),
    current_user=Depends(require_role(UserRole.ADMIN)),
):
    query = db.query(AuditLog)
    if filtro.user_id:
        query = query.filter(AuditLog.user_id == filtro.user_id)
    if filtro.action:
        query = query.filter(AuditLog.action == filtro.action)
    if filtro.entity:
        query = query.filter(AuditLog.entity == filtro.entity.value)
    if filtro.start:
        query = query.filter(AuditLog.created_at >= filtro.start)
    if filtro.end:
        query = query.filter(AuditLog.created_at <= filtro.end)
    return query.order_by(AuditLog.created_at.desc(), AuditLog.id.desc()).limit(200).all()
